DEFAULT_ENCODING: str = "utf8"
EOL: bytes = b"\r\n"


def asBytes(value: str | bytes | bytearray | None) -> bytes:
	if isinstance(value, bytes):
		return value
	elif isinstance(value, bytearray):
		return bytes(value)
	elif isinstance(value, str):
		return bytes(value, DEFAULT_ENCODING)
	elif value is None:
		return b""
	else:
		raise ValueError(f"Expected bytes or str, got: {value}")


def asHeaderValue(value: str | int | float | bytes) -> str:
	"""Converts a header value to its text representation, header values
	are always transmitted as latin-1 compatible text."""
	if isinstance(value, bytes):
		return value.decode("latin1")
	else:
		return str(value)


# EOF
