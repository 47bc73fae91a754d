from __future__ import annotations

import inspect
import os
from abc import ABC, abstractmethod
from io import SEEK_END, SEEK_SET, BytesIO, UnsupportedOperation
from pathlib import Path
from typing import (
	Any,
	BinaryIO,
	Callable,
	Iterable,
	Iterator,
	NamedTuple,
	TypeAlias,
)

from mypy_extensions import mypyc_attr

from ..config import PROTOCOL
from ..utils.files import contentType as guessContentType
from ..utils.io import DEFAULT_ENCODING, asBytes, asHeaderValue
from .status import HTTP_STATUS

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


def headername(name: str, *, headers: dict[str, str] = {}) -> str:
	"""Normalizes the header name as `Kebab-Case`."""
	if name in headers:
		return headers[name]
	key: str = name.lower()
	if key in headers:
		return headers[key]
	else:
		normalized: str = "-".join(_.capitalize() for _ in name.split("-"))
		headers[key] = normalized
		return normalized


# -----------------------------------------------------------------------------
#
# HEADERS
#
# -----------------------------------------------------------------------------

THeaderValue: TypeAlias = str | int | float | bytes


class HTTPHeaders:
	"""An ordered multi-map of header names to values. Names are compared
	case-insensitively and both the order of names and the order of the
	values of each name are preserved."""

	__slots__ = ["_names", "_values"]

	@staticmethod
	def From(headers: THeaders | None) -> "HTTPHeaders":
		if isinstance(headers, HTTPHeaders):
			return headers.copy()
		res = HTTPHeaders()
		if headers is None:
			return res
		items = headers.items() if isinstance(headers, dict) else headers
		for name, value in items:
			if isinstance(value, list):
				for v in value:
					res.add(name, v)
			else:
				res.add(name, value)
		return res

	def __init__(self) -> None:
		self._names: dict[str, str] = {}
		self._values: dict[str, list[str]] = {}

	def has(self, name: str) -> bool:
		return name.lower() in self._values

	def get(self, name: str) -> list[str]:
		"""Returns the values for the given header, an empty list when absent"""
		return list(self._values.get(name.lower(), ()))

	def line(self, name: str) -> str:
		"""Returns the values of the given header joined by commas."""
		return ", ".join(self._values.get(name.lower(), ()))

	def set(
		self, name: str, value: THeaderValue | list[THeaderValue]
	) -> "HTTPHeaders":
		"""Replaces any existing value for the given header."""
		self.remove(name)
		for v in value if isinstance(value, list) else [value]:
			self.add(name, v)
		return self

	def add(self, name: str, value: THeaderValue) -> "HTTPHeaders":
		"""Appends a value to the given header."""
		key: str = name.lower()
		if key not in self._values:
			self._names[key] = headername(name)
			self._values[key] = []
		self._values[key].append(asHeaderValue(value))
		return self

	def remove(self, name: str) -> "HTTPHeaders":
		key: str = name.lower()
		if key in self._values:
			del self._names[key]
			del self._values[key]
		return self

	def items(self) -> Iterator[tuple[str, list[str]]]:
		"""Iterates on `(name, values)` in insertion order."""
		for key, name in self._names.items():
			yield name, list(self._values[key])

	def copy(self) -> "HTTPHeaders":
		res = HTTPHeaders()
		res._names = dict(self._names)
		res._values = {k: list(v) for k, v in self._values.items()}
		return res

	def __contains__(self, name: object) -> bool:
		return isinstance(name, str) and self.has(name)

	def __iter__(self) -> Iterator[str]:
		return iter(list(self._names.values()))

	def __len__(self) -> int:
		return len(self._names)

	def __eq__(self, other: object) -> bool:
		return isinstance(other, HTTPHeaders) and list(self.items()) == list(
			other.items()
		)

	def __repr__(self) -> str:
		return f"HTTPHeaders({dict(self.items())})"


THeaders: TypeAlias = (
	HTTPHeaders
	| dict[str, THeaderValue | list[THeaderValue]]
	| Iterable[tuple[str, THeaderValue]]
)


# -----------------------------------------------------------------------------
#
# DATA MODEL
#
# -----------------------------------------------------------------------------


class HTTPResponseLine(NamedTuple):
	"""Represents a response status line"""

	protocol: str
	status: int
	message: str

	def __str__(self) -> str:
		return (
			f"{self.protocol} {self.status} {self.message}"
			if self.message
			else f"{self.protocol} {self.status}"
		)


class BodyCapabilities(NamedTuple):
	"""The capabilities of a body, which determine how it can be copied."""

	seekable: bool
	readable: bool


# -----------------------------------------------------------------------------
#
# BODY
#
# -----------------------------------------------------------------------------


@mypyc_attr(allow_interpreted_subclasses=True)
class HTTPBody(ABC):
	"""The abstract byte stream backing a message. A body is *seekable*
	and/or *readable*: a readable body can be consumed in bounded chunks
	with `read`, while other bodies can only be rendered as a whole."""

	__slots__: list[str] = []

	@abstractmethod
	def isSeekable(self) -> bool: ...

	@abstractmethod
	def isReadable(self) -> bool: ...

	@property
	def capabilities(self) -> BodyCapabilities:
		return BodyCapabilities(self.isSeekable(), self.isReadable())

	@abstractmethod
	def read(self, size: int) -> bytes:
		"""Reads at most `size` bytes from the current position."""
		...

	@abstractmethod
	def eof(self) -> bool: ...

	@abstractmethod
	def seek(self, offset: int, whence: int = SEEK_SET) -> None: ...

	def rewind(self) -> None:
		self.seek(0)

	@abstractmethod
	def tell(self) -> int: ...

	def getSize(self) -> int | None:
		return None

	@abstractmethod
	def getContents(self) -> bytes:
		"""Returns the remaining contents, from the current position."""
		...

	@abstractmethod
	def render(self) -> bytes:
		"""Returns the full contents of the body at once."""
		...

	def close(self) -> None:
		pass

	def __enter__(self) -> "HTTPBody":
		return self

	def __exit__(self, *args: Any) -> None:
		self.close()

	def __bytes__(self) -> bytes:
		return self.render()

	def __str__(self) -> str:
		return self.render().decode(DEFAULT_ENCODING, "replace")


class FileBody(HTTPBody):
	"""A body backed by a binary file object. The capabilities are the ones
	of the underlying file."""

	__slots__ = ["file", "_size", "_eof"]

	@staticmethod
	def Open(path: Path | str) -> "FileBody":
		return FileBody(open(path, "rb"))

	def __init__(self, file: BinaryIO, size: int | None = None):
		self.file: BinaryIO = file
		self._size: int | None = size
		self._eof: bool = False

	def isSeekable(self) -> bool:
		return not self.file.closed and self.file.seekable()

	def isReadable(self) -> bool:
		return not self.file.closed and self.file.readable()

	def read(self, size: int) -> bytes:
		data: bytes = self.file.read(size)
		if not data and size > 0:
			self._eof = True
		return data

	def eof(self) -> bool:
		if self._eof:
			return True
		elif self.isSeekable():
			size = self.getSize()
			return size is not None and self.file.tell() >= size
		else:
			return False

	def seek(self, offset: int, whence: int = SEEK_SET) -> None:
		self.file.seek(offset, whence)
		self._eof = False

	def tell(self) -> int:
		return self.file.tell()

	def getSize(self) -> int | None:
		if self._size is None and self.isSeekable():
			# NOTE: A file that grows while it is being emitted is not
			# supported.
			position = self.file.tell()
			self._size = self.file.seek(0, SEEK_END)
			self.file.seek(position)
		return self._size

	def getContents(self) -> bytes:
		data: bytes = self.file.read()
		self._eof = True
		return data

	def render(self) -> bytes:
		if self.isSeekable():
			self.file.seek(0)
		return self.getContents()

	def close(self) -> None:
		self.file.close()

	def __repr__(self) -> str:
		return f"FileBody({getattr(self.file, 'name', self.file)!r})"


class BytesBody(FileBody):
	"""An in-memory body, both seekable and readable."""

	__slots__: list[str] = []

	def __init__(self, data: bytes | str = b""):
		payload: bytes = asBytes(data)
		super().__init__(BytesIO(payload), len(payload))

	def __repr__(self) -> str:
		return f"BytesBody({self.getSize()} bytes)"


class CallbackBody(HTTPBody):
	"""A body whose contents are produced by a callback, at once. It is
	neither seekable nor readable, and can only be rendered once."""

	__slots__ = ["callback"]

	def __init__(self, callback: Callable[[], str | bytes]):
		self.callback: Callable[[], str | bytes] | None = callback

	def isSeekable(self) -> bool:
		return False

	def isReadable(self) -> bool:
		return False

	def read(self, size: int) -> bytes:
		raise UnsupportedOperation("Callback body is not readable")

	def eof(self) -> bool:
		return self.callback is None

	def seek(self, offset: int, whence: int = SEEK_SET) -> None:
		raise UnsupportedOperation("Callback body is not seekable")

	def rewind(self) -> None:
		raise UnsupportedOperation("Callback body cannot be rewound")

	def tell(self) -> int:
		raise UnsupportedOperation("Callback body has no position")

	def getContents(self) -> bytes:
		callback = self.callback
		if callback is None:
			return b""
		self.callback = None
		return asBytes(callback())

	def render(self) -> bytes:
		return self.getContents()

	def close(self) -> None:
		self.callback = None


class GeneratorBody(HTTPBody):
	"""A readable but not seekable body that pulls its chunks from an
	iterable, keeping at most one pending chunk in memory."""

	__slots__ = ["stream", "pending", "position", "exhausted"]

	def __init__(self, stream: Iterable[str | bytes]):
		self.stream: Iterator[str | bytes] = iter(stream)
		self.pending: bytes = b""
		self.position: int = 0
		self.exhausted: bool = False

	def isSeekable(self) -> bool:
		return False

	def isReadable(self) -> bool:
		return True

	def _pull(self) -> bool:
		"""Ensures there is a pending chunk, returns `False` once the stream
		is exhausted."""
		while not self.pending and not self.exhausted:
			try:
				self.pending = asBytes(next(self.stream))
			except StopIteration:
				self.exhausted = True
		return bool(self.pending)

	def read(self, size: int) -> bytes:
		if size <= 0 or not self._pull():
			return b""
		chunk, self.pending = self.pending[:size], self.pending[size:]
		self.position += len(chunk)
		return chunk

	def eof(self) -> bool:
		return not self._pull()

	def seek(self, offset: int, whence: int = SEEK_SET) -> None:
		raise UnsupportedOperation("Generator body is not seekable")

	def rewind(self) -> None:
		raise UnsupportedOperation("Generator body cannot be rewound")

	def tell(self) -> int:
		return self.position

	def getContents(self) -> bytes:
		res = bytearray()
		while self._pull():
			res += self.pending
			self.position += len(self.pending)
			self.pending = b""
		return bytes(res)

	def render(self) -> bytes:
		return self.getContents()

	def close(self) -> None:
		close = getattr(self.stream, "close", None)
		if close:
			close()
		self.exhausted = True
		self.pending = b""


# -----------------------------------------------------------------------------
#
# REQUESTS
#
# -----------------------------------------------------------------------------


class HTTPRequest:
	"""Represents an HTTP request, which also acts as a factory for
	responses."""

	__slots__ = ["method", "path", "query", "protocol", "headers", "body"]

	def __init__(
		self,
		method: str,
		path: str,
		query: dict[str, str] | None = None,
		headers: THeaders | None = None,
		body: HTTPBody | None = None,
		protocol: str = PROTOCOL,
	):
		self.method: str = method
		self.path: str = path
		self.query: dict[str, str] | None = query
		self.protocol: str = protocol
		self.headers: HTTPHeaders = HTTPHeaders.From(headers)
		self.body: HTTPBody | None = body

	def header(self, name: str) -> str | None:
		values = self.headers.get(name)
		return values[0] if values else None

	def respond(
		self,
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		status: int = 200,
		headers: THeaders | None = None,
		message: str | None = None,
	) -> "HTTPResponse":
		return HTTPResponse.Create(
			content=content,
			contentType=contentType,
			contentLength=contentLength,
			status=status,
			headers=headers,
			message=message,
			protocol=self.protocol,
		)

	def error(
		self,
		status: int,
		content: str | None = None,
		contentType: str = "text/plain",
	) -> "HTTPResponse":
		message = HTTP_STATUS.get(status, "Server Error")
		return self.respond(
			content=message if content is None else content,
			contentType=contentType,
			status=status,
			message=message,
		)

	def notFound(self, content: str = "Not Found") -> "HTTPResponse":
		return self.error(404, content)

	def __str__(self) -> str:
		return f"Request({self.method} {self.path}{f'?{self.query}' if self.query else ''} {self.headers})"


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class HTTPResponse:
	"""An HTTP response, made of a status, headers and exactly one body."""

	__slots__ = ["protocol", "status", "message", "headers", "body"]

	@staticmethod
	def Create(
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		headers: THeaders | None = None,
		status: int = 200,
		message: str | None = None,
		protocol: str = PROTOCOL,
	) -> "HTTPResponse":
		"""Factory method to create HTTP response objects."""
		body: HTTPBody
		if content is None:
			body = BytesBody()
		elif isinstance(content, HTTPBody):
			body = content
		elif isinstance(content, str) or isinstance(content, bytes):
			body = BytesBody(content)
		elif isinstance(content, Path):
			body = FileBody.Open(content)
			contentType = contentType or guessContentType(content)
			contentLength = os.path.getsize(content)
		elif hasattr(content, "read"):
			body = FileBody(content)
		elif inspect.isgenerator(content) or isinstance(content, Iterator):
			body = GeneratorBody(content)
		else:
			raise ValueError(f"Unsupported content {type(content)}:{content}")
		if contentLength is None and content is not None:
			contentLength = body.getSize()
		res_headers = HTTPHeaders.From(headers)
		if contentType is not None:
			res_headers.set("Content-Type", contentType)
		if contentLength is not None and not res_headers.has("Content-Length"):
			res_headers.set("Content-Length", contentLength)
		return HTTPResponse(
			protocol=protocol,
			status=status,
			message=message,
			headers=res_headers,
			body=body,
		)

	def __init__(
		self,
		protocol: str = PROTOCOL,
		status: int = 200,
		message: str | None = None,
		headers: THeaders | None = None,
		body: HTTPBody | None = None,
	):
		self.protocol: str = protocol
		self.status: int = status
		self.message: str | None = message
		self.headers: HTTPHeaders = HTTPHeaders.From(headers)
		self.body: HTTPBody = BytesBody() if body is None else body

	@property
	def reason(self) -> str:
		"""The reason phrase, derived from the status when not given."""
		return (
			self.message if self.message is not None else HTTP_STATUS.get(self.status, "")
		)

	@property
	def responseLine(self) -> HTTPResponseLine:
		return HTTPResponseLine(self.protocol, self.status, self.reason)

	def hasHeader(self, name: str) -> bool:
		return self.headers.has(name)

	def getHeader(self, name: str) -> list[str]:
		return self.headers.get(name)

	def getHeaderLine(self, name: str) -> str:
		return self.headers.line(name)

	def setHeader(
		self, name: str, value: THeaderValue | list[THeaderValue] | None
	) -> "HTTPResponse":
		if value is None:
			self.headers.remove(name)
		else:
			self.headers.set(name, value)
		return self

	def addHeader(self, name: str, value: THeaderValue) -> "HTTPResponse":
		self.headers.add(name, value)
		return self

	def setStatus(self, status: int, message: str | None = None) -> "HTTPResponse":
		self.status = status
		self.message = message
		return self

	def close(self) -> None:
		self.body.close()

	def __str__(self) -> str:
		return f"Response({self.protocol} {self.status} {self.reason} {self.headers} {self.body!r})"


# EOF
