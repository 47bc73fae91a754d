import sys
from pathlib import Path

from .emitters import StreamEmitter
from .http.model import HTTPResponse
from .http.range import parseContentRange
from .transport import StreamTransport
from .utils.logging import error, info

USAGE: str = "Usage: emitter FILE [CONTENT-RANGE]"


def main(args: list[str] | None = None) -> int:
	"""Emits the given file as a raw HTTP response on the standard output,
	restricted to the given `Content-Range` when given."""
	args = sys.argv[1:] if args is None else args
	if not args or len(args) > 2:
		sys.stderr.write(f"{USAGE}\n")
		return 1
	path = Path(args[0])
	if not path.is_file():
		error("File not found", 404, Path=str(path))
		return 1
	content_range = parseContentRange(args[1]) if len(args) == 2 else None
	if len(args) == 2 and content_range is None:
		error("Invalid Content-Range", 400, Value=args[1])
		return 1
	response = HTTPResponse.Create(path)
	if content_range is not None:
		response.setStatus(206 if content_range.isBytes else 200)
		response.setHeader("Content-Range", str(content_range))
		# The length of the emitted slice is only known once emitted
		response.setHeader("Content-Length", None)
	info("Emitting file", Path=str(path), Range=response.getHeaderLine("Content-Range"))
	with response.body:
		StreamEmitter(StreamTransport(sys.stdout.buffer)).emit(response)
	return 0


if __name__ == "__main__":
	sys.exit(main())

# EOF
