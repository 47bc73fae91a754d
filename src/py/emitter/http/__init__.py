from .model import (
	HTTPBody,
	HTTPHeaders,
	HTTPRequest,
	HTTPResponse,
	HTTPResponseLine,
	BodyCapabilities,
	BytesBody,
	CallbackBody,
	FileBody,
	GeneratorBody,
	headername,
)  # NOQA: F401
from .range import (
	ContentRange,
	KnownLength,
	UnknownLength,
	UNKNOWN_LENGTH,
	parseContentRange,
	formatContentRange,
)  # NOQA: F401
from .status import HTTP_STATUS  # NOQA: F401

# EOF
