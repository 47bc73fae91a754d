"""
Static File Server Example

This serves the files of the current directory using the standard library's
`http.server`, emitting each response with a `StreamEmitter` writing to the
request handler's `wfile`. Features shown:
- Request handler runner, with a request factory and an error response
- Streaming emission in bounded chunks
- Byte ranges, when the client sends a simple `Range: bytes=N-M` header

Usage:
    python fileserver.py [PORT]

Test with:
    curl -i http://localhost:8000/README.md
    curl -i -H 'Range: bytes=0-99' http://localhost:8000/README.md
"""

import re
import sys
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from urllib.parse import unquote, urlparse

from emitter import (
	HTTPRequest,
	HTTPResponse,
	RequestHandler,
	RequestHandlerRunner,
	StreamEmitter,
	StreamTransport,
)
from emitter.utils.logging import info

RE_RANGE = re.compile(r"bytes=(\d+)-(\d+)")
ROOT: Path = Path(".").absolute()


class StaticFiles(RequestHandler):
	def handle(self, request: HTTPRequest) -> HTTPResponse:
		path = (ROOT / request.path.lstrip("/")).absolute()
		if not path.is_file() or ROOT not in path.parents:
			return request.notFound()
		response = HTTPResponse.Create(path)
		size = int(response.getHeaderLine("Content-Length"))
		match = RE_RANGE.fullmatch(request.header("Range") or "")
		if match:
			first, last = int(match.group(1)), min(int(match.group(2)), size - 1)
			response.setStatus(206)
			response.setHeader("Content-Range", f"bytes {first}-{last}/{size}")
			response.setHeader("Content-Length", max(0, last - first + 1))
		return response


class Handler(BaseHTTPRequestHandler):
	def createRequest(self) -> HTTPRequest:
		url = urlparse(self.path)
		if ".." in url.path.split("/"):
			raise ValueError(f"Invalid path: {url.path}")
		return HTTPRequest(
			self.command,
			unquote(url.path),
			headers=list(self.headers.items()),
		)

	def do_GET(self) -> None:
		RequestHandlerRunner(
			StaticFiles(),
			StreamEmitter(StreamTransport(self.wfile)),
			self.createRequest,
		).run()


if __name__ == "__main__":
	port = int(sys.argv[1]) if len(sys.argv) > 1 else 8000
	info("Serving files from current working directory", Root=str(ROOT), Port=port)
	HTTPServer(("", port), Handler).serve_forever()

# EOF
