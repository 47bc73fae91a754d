import os
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import NamedTuple, Protocol

from mypy_extensions import mypyc_attr

from .config import PROTOCOL
from .errors import HeadersAlreadySent
from .http.model import HTTPResponseLine, headername
from .http.status import HTTP_STATUS
from .utils.io import EOL

# --
# ## Transports
#
# A transport is the header sink and the output sink of a single HTTP
# exchange. Header lines and the status line are buffered until the head
# is committed, which happens on `flush()`. Once committed, the head can't
# be changed anymore and the transport reports its headers as sent.

PACKAGE_PATH: str = os.path.dirname(os.path.abspath(__file__))


def origin(offset: int = 1) -> str | None:
	"""Returns the `file:line` of the first caller outside of this package."""
	frame = sys._getframe(offset)
	while frame is not None:
		path = frame.f_code.co_filename
		if not os.path.abspath(path).startswith(PACKAGE_PATH + os.sep):
			return f"{path}:{frame.f_lineno}"
		frame = frame.f_back
	return None


def assertHeaderText(*values: str) -> None:
	"""Ensures the given head fields can be written as a single latin-1
	line, as a line break would let a value inject headers."""
	for value in values:
		if "\r" in value or "\n" in value:
			raise ValueError(f"Line break in header field: {value!r}")
		try:
			value.encode("latin1")
		except UnicodeEncodeError as e:
			raise ValueError(f"Header field is not latin-1: {value!r}") from e


@dataclass(slots=True)
class TransportState:
	"""Tells if the head of the response was committed, and where."""

	committed: bool = False
	origin: str | None = None

	def commit(self, origin: str | None = None) -> "TransportState":
		if not self.committed:
			self.committed = True
			self.origin = origin
		return self


class HeaderCall(NamedTuple):
	"""Records a call to the header sink."""

	header: str
	replace: bool
	status: int | None


class Writer(Protocol):
	def write(self, data: bytes, /) -> object: ...


@mypyc_attr(allow_interpreted_subclasses=True)
class Transport(ABC):
	"""The sink for status line, headers and body of a response."""

	def __init__(self) -> None:
		self.state: TransportState = TransportState()
		self.protocol: str = PROTOCOL
		self.status: int = 200
		self.reason: str | None = None
		self.headers: list[tuple[str, str]] = []
		self.pending: bytearray = bytearray()

	def headersSent(self) -> bool:
		return self.state.committed

	def hasPendingOutput(self) -> bool:
		"""Tells if output was written but not committed yet."""
		return bool(self.pending)

	def headerLine(
		self, name: str, value: str, replace: bool = True, status: int | None = None
	) -> None:
		"""Emits a header line, `replace` drops previous values of the
		header."""
		if self.state.committed:
			raise HeadersAlreadySent(self.state.origin)
		assertHeaderText(name, value)
		name = headername(name)
		if replace:
			key = name.lower()
			self.headers = [_ for _ in self.headers if _[0].lower() != key]
		self.headers.append((name, value))
		if status is not None:
			self.status = status
		self.onHeaderLine(name, value, replace, status)

	def statusLine(self, protocol: str, status: int, reason: str | None = None) -> None:
		if self.state.committed:
			raise HeadersAlreadySent(self.state.origin)
		assertHeaderText(protocol, reason or "")
		self.protocol = protocol
		self.status = status
		self.reason = reason
		self.onStatusLine(HTTPResponseLine(protocol, status, reason or ""))

	@property
	def responseLine(self) -> HTTPResponseLine:
		return HTTPResponseLine(
			self.protocol,
			self.status,
			self.reason if self.reason is not None else HTTP_STATUS.get(self.status, ""),
		)

	def head(self) -> bytes:
		"""Serializes the head as a payload."""
		lines: list[str] = [str(self.responseLine)]
		lines += [f"{k}: {v}" for k, v in self.headers]
		lines.append("")
		lines.append("")
		return EOL.join(_.encode("latin1") for _ in lines)

	def write(self, data: bytes) -> None:
		"""Writes body data, which stays pending until the head is
		committed."""
		if self.state.committed:
			self._write(data)
		else:
			self.pending += data

	def flush(self) -> None:
		"""Commits the head, and writes any pending output."""
		if not self.state.committed:
			at = origin(2)
			# The head is only committed once it was written successfully
			self._commit()
			self.state.commit(at)
			if self.pending:
				data = bytes(self.pending)
				self.pending.clear()
				self._write(data)
		self._flush()

	def onHeaderLine(
		self, name: str, value: str, replace: bool, status: int | None
	) -> None:
		pass

	def onStatusLine(self, line: HTTPResponseLine) -> None:
		pass

	@abstractmethod
	def _commit(self) -> None: ...

	@abstractmethod
	def _write(self, data: bytes) -> None: ...

	def _flush(self) -> None:
		pass


class MemoryTransport(Transport):
	"""A transport that keeps everything in memory, recording each call to
	the header sink."""

	def __init__(self) -> None:
		super().__init__()
		self.stack: list[HeaderCall] = []
		self.output: bytearray = bytearray()

	def onHeaderLine(
		self, name: str, value: str, replace: bool, status: int | None
	) -> None:
		self.stack.append(HeaderCall(f"{name}: {value}", replace, status))

	def onStatusLine(self, line: HTTPResponseLine) -> None:
		self.stack.append(HeaderCall(str(line), True, line.status))

	def has(self, header: str) -> bool:
		"""Tells if the given header line was emitted"""
		return any(_.header == header for _ in self.stack)

	@property
	def body(self) -> bytes:
		return bytes(self.output)

	def _commit(self) -> None:
		pass

	def _write(self, data: bytes) -> None:
		self.output += data


class StreamTransport(Transport):
	"""Writes the response as raw HTTP to a binary writer, such as a socket
	file, the `wfile` of a request handler or `sys.stdout.buffer`."""

	def __init__(self, writer: Writer):
		super().__init__()
		self.writer: Writer = writer

	def _commit(self) -> None:
		self.writer.write(self.head())

	def _write(self, data: bytes) -> None:
		if data:
			self.writer.write(data)

	def _flush(self) -> None:
		flush = getattr(self.writer, "flush", None)
		if flush:
			flush()


# EOF
