from typing import Callable, TypeAlias

from .config import MAX_EMPTY_READS
from .errors import BodyStalled
from .http.model import HTTPBody
from .utils.logging import error

# --
# ## Bounded copy
#
# Copies a body (or a slice of it) to an output sink without ever reading
# more than `maxBufferLength` bytes at once. The way a body is copied is
# decided by its capabilities:
#
# - seekable bodies are positioned first (rewound, or sought to the start
#   of the range);
# - readable bodies are read chunk by chunk until EOF;
# - bodies that are not readable can only be rendered at once, which is
#   the only case where the whole body is held in memory.

TWriter: TypeAlias = Callable[[bytes], object]


class StallGuard:
	"""Counts the consecutive empty reads of a body that does not report
	EOF, failing once `limit` is reached. A limit of `None` or `0` never
	fails."""

	__slots__ = ["body", "limit", "count"]

	def __init__(self, body: HTTPBody, limit: int | None):
		self.body: HTTPBody = body
		self.limit: int | None = limit or None
		self.count: int = 0

	def feed(self, chunk: bytes) -> None:
		if chunk:
			self.count = 0
			return
		self.count += 1
		if self.limit is not None and self.count >= self.limit and not self.body.eof():
			position: int | None = (
				self.body.tell() if self.body.isSeekable() else None
			)
			error(
				"Body stalled",
				"STALLED",
				Reads=self.count,
				Position=position,
			)
			raise BodyStalled(self.count, position)


def copyAll(
	body: HTTPBody,
	write: TWriter,
	maxBufferLength: int,
	*,
	maxEmptyReads: int | None = MAX_EMPTY_READS,
) -> int:
	"""Copies the entire body to `write`, returning the number of bytes
	written."""
	seekable, readable = body.capabilities
	if seekable:
		body.rewind()
	if not readable:
		data: bytes = body.render()
		write(data)
		return len(data)
	written: int = 0
	guard = StallGuard(body, maxEmptyReads)
	while not body.eof():
		chunk: bytes = body.read(maxBufferLength)
		if chunk:
			write(chunk)
			written += len(chunk)
		guard.feed(chunk)
	return written


def copyRange(
	first: int,
	last: int,
	body: HTTPBody,
	write: TWriter,
	maxBufferLength: int,
	*,
	maxEmptyReads: int | None = MAX_EMPTY_READS,
) -> int:
	"""Copies the inclusive byte range `[first, last]` of the body to
	`write`, returning the number of bytes written. Fewer bytes are written
	when the body ends before `last`."""
	length: int = last - first + 1
	seekable, readable = body.capabilities
	if seekable:
		# When the range covers the whole body, we start from the beginning
		body.seek(0 if body.getSize() == length else first)
		# The body is now positioned at the start of the range
		first = 0
	if not readable:
		data: bytes = body.getContents()[first : first + max(length, 0)]
		write(data)
		return len(data)
	remaining: int = length
	guard = StallGuard(body, maxEmptyReads)
	while remaining >= maxBufferLength and not body.eof():
		chunk: bytes = body.read(maxBufferLength)
		remaining -= len(chunk)
		if chunk:
			write(chunk)
		guard.feed(chunk)
	if remaining > 0 and not body.eof():
		chunk = body.read(remaining)
		if chunk:
			write(chunk)
		remaining -= len(chunk)
	return length - remaining if length > 0 else 0


# EOF
