import re
from typing import NamedTuple, TypeAlias

# --
# ## Content-Range
#
# Parsing of `Content-Range` header values, as produced by a handler that
# has already decided which slice of a resource it transfers.
#
# SEE: https://www.rfc-editor.org/rfc/rfc9110#name-content-range

RE_CONTENT_RANGE = re.compile(
	r"(?P<unit>\w+)\s+(?P<first>\d+)-(?P<last>\d+)/(?P<length>\d+|\*)", re.ASCII
)

BYTES: str = "bytes"


class KnownLength(NamedTuple):
	"""The complete length of the resource is known"""

	value: int

	def __str__(self) -> str:
		return str(self.value)


class UnknownLength(NamedTuple):
	"""The complete length of the resource is unknown (`*`)"""

	def __str__(self) -> str:
		return "*"


UNKNOWN_LENGTH: UnknownLength = UnknownLength()

TLength: TypeAlias = KnownLength | UnknownLength


class ContentRange(NamedTuple):
	"""A parsed `Content-Range` header value. Note that `first <= last` is
	not enforced, values are passed through as received."""

	unit: str
	first: int
	last: int
	length: TLength = UNKNOWN_LENGTH

	@property
	def isBytes(self) -> bool:
		return self.unit == BYTES

	@property
	def size(self) -> int:
		"""The number of units covered by the range"""
		return self.last - self.first + 1

	def __str__(self) -> str:
		return formatContentRange(self)


def parseContentRange(value: str | None) -> ContentRange | None:
	"""Parses the given `Content-Range` header value, returning `None` when
	the value is empty or does not match `<unit> <first>-<last>/<length|*>`."""
	if not value:
		return None
	match = RE_CONTENT_RANGE.fullmatch(value.strip())
	if not match:
		return None
	length = match.group("length")
	return ContentRange(
		match.group("unit"),
		int(match.group("first")),
		int(match.group("last")),
		UNKNOWN_LENGTH if length == "*" else KnownLength(int(length)),
	)


def formatContentRange(value: ContentRange) -> str:
	return f"{value.unit} {value.first}-{value.last}/{value.length}"


# EOF
