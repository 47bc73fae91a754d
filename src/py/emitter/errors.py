# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class EmitterError(RuntimeError):
	"""Base class for the errors raised while emitting a response."""


class HeadersAlreadySent(EmitterError):
	"""The response head was already committed to the transport, emitting
	again would corrupt the HTTP stream."""

	def __init__(self, origin: str | None = None):
		super().__init__(
			f"Unable to emit response; headers already sent in {origin}"
			if origin
			else "Unable to emit response; headers already sent"
		)
		self.origin: str | None = origin


class OutputAlreadySent(EmitterError):
	"""Output was written to the transport before the response was
	emitted."""

	def __init__(self) -> None:
		super().__init__("Output has been emitted previously; cannot emit response")


class InvalidEmitter(EmitterError):
	def __init__(self, value: object):
		super().__init__(
			f"Expected an Emitter, got {type(value).__name__}: {value!r}"
		)
		self.value: object = value


class BodyStalled(EmitterError):
	"""The body keeps returning empty reads without reaching its end."""

	def __init__(self, reads: int, position: int | None = None):
		super().__init__(
			f"Body returned {reads} consecutive empty reads without reaching EOF"
		)
		self.reads: int = reads
		self.position: int | None = position


class ContractViolation(TypeError):
	"""A collaborator returned a value of the wrong type, which denotes a
	wiring error rather than a runtime condition."""

	def __init__(self, collaborator: str, expected: type, value: object):
		super().__init__(
			f"{collaborator} must return {expected.__name__}, got {type(value).__name__}"
		)
		self.collaborator: str = collaborator
		self.expected: type = expected
		self.value: object = value


# EOF
