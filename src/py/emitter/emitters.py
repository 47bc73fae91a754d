from abc import ABC, abstractmethod
from typing import Iterable, Iterator

from mypy_extensions import mypyc_attr

from .config import MAX_BUFFER_LENGTH, MAX_EMPTY_READS
from .copier import copyAll, copyRange
from .errors import HeadersAlreadySent, InvalidEmitter, OutputAlreadySent
from .http.model import HTTPResponse
from .http.range import ContentRange, parseContentRange
from .transport import Transport
from .utils.logging import debug, logged

# -----------------------------------------------------------------------------
#
# EMITTER
#
# -----------------------------------------------------------------------------


@mypyc_attr(allow_interpreted_subclasses=True)
class Emitter(ABC):
	@abstractmethod
	def emit(self, response: HTTPResponse) -> bool:
		"""Emits a response, including status line, headers, and the message
		body, returning `True` when the response was emitted and `False`
		when this emitter could not handle it.

		Implementations may raise when they are unable to emit the response,
		for instance when the headers were already sent."""
		...


class TransportEmitter(Emitter):
	"""Base class for emitters writing to a `Transport`."""

	__slots__ = ["transport"]

	def __init__(self, transport: Transport):
		self.transport: Transport = transport

	def assertNoPreviousOutput(self) -> None:
		"""Checks that nothing was sent or written to the transport yet, as
		emitting a response after that corrupts the HTTP stream."""
		if self.transport.headersSent():
			raise HeadersAlreadySent(self.transport.state.origin)
		if self.transport.hasPendingOutput():
			raise OutputAlreadySent()

	def emitHeaders(self, response: HTTPResponse) -> None:
		"""Emits the response headers. The first value of each header
		replaces any value set by the transport, the following ones are
		appended so that headers like `Set-Cookie` can be repeated."""
		status: int = response.status
		for name, values in response.headers.items():
			replace: bool = True
			for value in values:
				self.transport.headerLine(name, value, replace, status)
				replace = False

	def emitStatusLine(self, response: HTTPResponse) -> None:
		"""Emits the status line.

		The status line is emitted *after* the headers, so that the status
		of the response takes precedence over any status the transport
		would infer from the headers (like `Location`)."""
		self.transport.statusLine(response.protocol, response.status, response.reason)


class BufferedEmitter(TransportEmitter):
	"""Emits the response body at once, rendering it in memory."""

	def emit(self, response: HTTPResponse) -> bool:
		self.assertNoPreviousOutput()
		self.emitHeaders(response)
		self.emitStatusLine(response)
		self.transport.flush()
		self.transport.write(response.body.render())
		self.transport.flush()
		return True


class StreamEmitter(TransportEmitter):
	"""Emits the response body by chunks of at most `maxBufferLength`
	bytes, restricting it to the byte range given by the `Content-Range`
	header when present."""

	__slots__ = ["maxBufferLength", "maxEmptyReads"]

	def __init__(
		self,
		transport: Transport,
		maxBufferLength: int = MAX_BUFFER_LENGTH,
		*,
		maxEmptyReads: int | None = MAX_EMPTY_READS,
	):
		super().__init__(transport)
		if (
			not isinstance(maxBufferLength, int)
			or isinstance(maxBufferLength, bool)
			or maxBufferLength <= 0
		):
			raise ValueError(
				f"Maximum buffer length must be a positive integer, got: {maxBufferLength!r}"
			)
		self.maxBufferLength: int = maxBufferLength
		self.maxEmptyReads: int | None = maxEmptyReads

	def emit(self, response: HTTPResponse) -> bool:
		self.assertNoPreviousOutput()
		self.emitHeaders(response)
		self.emitStatusLine(response)
		self.transport.flush()

		contentRange = parseContentRange(response.getHeaderLine("Content-Range"))
		if contentRange is None or not contentRange.isBytes:
			self.emitBody(response)
		else:
			self.emitBodyRange(contentRange, response)
		self.transport.flush()
		return True

	def emitBody(self, response: HTTPResponse) -> int:
		logged(debug) and debug(
			"Emitting body",
			Status=response.status,
			Buffer=self.maxBufferLength,
		)
		return copyAll(
			response.body,
			self.transport.write,
			self.maxBufferLength,
			maxEmptyReads=self.maxEmptyReads,
		)

	def emitBodyRange(self, contentRange: ContentRange, response: HTTPResponse) -> int:
		logged(debug) and debug(
			"Emitting body range",
			Status=response.status,
			Range=str(contentRange),
			Buffer=self.maxBufferLength,
		)
		return copyRange(
			contentRange.first,
			contentRange.last,
			response.body,
			self.transport.write,
			self.maxBufferLength,
			maxEmptyReads=self.maxEmptyReads,
		)


# -----------------------------------------------------------------------------
#
# STACK
#
# -----------------------------------------------------------------------------


class EmitterStack(Emitter):
	"""A stack of emitters, tried from the most recently pushed one until
	one of them emits the response. Index `0` is the top of the stack."""

	__slots__ = ["emitters"]

	def __init__(self, emitters: Iterable[Emitter] = ()):
		self.emitters: list[Emitter] = []
		for emitter in emitters:
			self.push(emitter)

	def emit(self, response: HTTPResponse) -> bool:
		for emitter in self:
			if emitter.emit(response):
				return True
		return False

	def push(self, emitter: Emitter) -> "EmitterStack":
		self.emitters.append(self.validate(emitter))
		return self

	def pop(self) -> Emitter:
		if not self.emitters:
			raise IndexError("Cannot pop from an empty emitter stack")
		return self.emitters.pop()

	def unshift(self, emitter: Emitter) -> "EmitterStack":
		"""Adds the emitter at the bottom of the stack."""
		self.emitters.insert(0, self.validate(emitter))
		return self

	def top(self) -> Emitter | None:
		return self.emitters[-1] if self.emitters else None

	def validate(self, emitter: object) -> Emitter:
		if not isinstance(emitter, Emitter):
			raise InvalidEmitter(emitter)
		return emitter

	def __getitem__(self, index: int) -> Emitter:
		return self.emitters[-1 - index]

	def __setitem__(self, index: int, emitter: Emitter) -> None:
		self.emitters[-1 - index] = self.validate(emitter)

	def __iter__(self) -> Iterator[Emitter]:
		return reversed(list(self.emitters))

	def __len__(self) -> int:
		return len(self.emitters)


# EOF
