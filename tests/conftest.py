"""
pytest configuration and fixtures.
"""

import sys
from io import SEEK_SET
from pathlib import Path

import pytest

# Add src/py to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src" / "py"))

from emitter.http.model import HTTPBody  # NOQA: E402
from emitter.transport import MemoryTransport  # NOQA: E402


class TrackedBody(HTTPBody):
	"""A body with configurable capabilities that records how it is used:
	the calls made, and the largest read requested."""

	def __init__(
		self,
		contents: bytes,
		*,
		seekable: bool = True,
		readable: bool = True,
		position: int = 0,
		size: int | None = None,
	):
		self.contents: bytes = contents
		self.seekable: bool = seekable
		self.readable: bool = readable
		self.position: int = position
		self.size: int = len(contents) if size is None else size
		self.peak: int = 0
		self.calls: list[str] = []
		self.seeks: list[int] = []

	def isSeekable(self) -> bool:
		return self.seekable

	def isReadable(self) -> bool:
		return self.readable

	def read(self, size: int) -> bytes:
		self.calls.append("read")
		self.peak = max(self.peak, size)
		data = self.contents[self.position : self.position + size]
		self.position += len(data)
		return data

	def eof(self) -> bool:
		self.calls.append("eof")
		return self.position >= self.size

	def seek(self, offset: int, whence: int = SEEK_SET) -> None:
		self.calls.append("seek")
		self.seeks.append(offset)
		if offset < self.size:
			self.position = offset

	def rewind(self) -> None:
		self.calls.append("rewind")
		self.position = 0

	def tell(self) -> int:
		return self.position

	def getSize(self) -> int | None:
		return self.size

	def getContents(self) -> bytes:
		self.calls.append("getContents")
		data = self.contents[self.position :]
		self.position += len(data)
		return data

	def render(self) -> bytes:
		self.calls.append("render")
		self.position = self.size
		return self.contents


class StalledBody(TrackedBody):
	"""A body that never reaches its end and never returns data."""

	def read(self, size: int) -> bytes:
		self.calls.append("read")
		return b""

	def eof(self) -> bool:
		return False


@pytest.fixture
def transport() -> MemoryTransport:
	return MemoryTransport()


@pytest.fixture
def trackedBody() -> type[TrackedBody]:
	return TrackedBody


@pytest.fixture
def stalledBody() -> type[StalledBody]:
	return StalledBody

# EOF
