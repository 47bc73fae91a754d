from .http.model import (
	HTTPBody,
	HTTPHeaders,
	HTTPRequest,
	HTTPResponse,
	BytesBody,
	CallbackBody,
	FileBody,
	GeneratorBody,
)  # NOQA: F401
from .http.range import ContentRange, parseContentRange  # NOQA: F401
from .copier import copyAll, copyRange  # NOQA: F401
from .transport import Transport, MemoryTransport, StreamTransport  # NOQA: F401
from .emitters import (
	Emitter,
	BufferedEmitter,
	StreamEmitter,
	EmitterStack,
)  # NOQA: F401
from .errors import (
	EmitterError,
	HeadersAlreadySent,
	OutputAlreadySent,
	InvalidEmitter,
	BodyStalled,
	ContractViolation,
)  # NOQA: F401
from .runner import RequestHandler, RequestHandlerRunner, errorResponse  # NOQA: F401


# EOF
