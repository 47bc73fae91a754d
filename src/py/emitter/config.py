from os import getenv
from .utils.io import DEFAULT_ENCODING  # NOQA: F401

# Maximum number of bytes read from a body on each iteration of the
# streaming emitter.
MAX_BUFFER_LENGTH: int = int(getenv("EMITTER_MAX_BUFFER_LENGTH", 8192))

# Number of consecutive empty reads tolerated from a body that does not
# report EOF, 0 disables the check.
MAX_EMPTY_READS: int = int(getenv("EMITTER_MAX_EMPTY_READS", 1024))

PROTOCOL: str = getenv("EMITTER_PROTOCOL", "HTTP/1.1")

# When enabled, error responses include the exception message
DEBUG: bool = getenv("EMITTER_DEBUG", "0") == "1"

LOG_LEVEL: str = getenv("EMITTER_LOG_LEVEL", "Info")

# EOF
