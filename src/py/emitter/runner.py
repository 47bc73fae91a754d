from abc import ABC, abstractmethod
from typing import Callable, TypeAlias

from mypy_extensions import mypyc_attr

from . import config
from .emitters import Emitter
from .errors import ContractViolation
from .http.model import HTTPRequest, HTTPResponse
from .utils.logging import exception

# -----------------------------------------------------------------------------
#
# HANDLER
#
# -----------------------------------------------------------------------------


@mypyc_attr(allow_interpreted_subclasses=True)
class RequestHandler(ABC):
	@abstractmethod
	def handle(self, request: HTTPRequest) -> HTTPResponse: ...


TRequestFactory: TypeAlias = Callable[[], HTTPRequest]
TErrorResponseGenerator: TypeAlias = Callable[[Exception], HTTPResponse]
THandler: TypeAlias = RequestHandler | Callable[[HTTPRequest], HTTPResponse]


def errorResponse(error: Exception) -> HTTPResponse:
	"""The default error response generator, a plain text `500` response
	that only details the error in debug mode."""
	content: str = (
		f"Internal Server Error: [{error.__class__.__name__}] {error}"
		if config.DEBUG
		else "Internal Server Error"
	)
	return HTTPResponse.Create(content, contentType="text/plain", status=500)


# -----------------------------------------------------------------------------
#
# RUNNER
#
# -----------------------------------------------------------------------------


class RequestHandlerRunner:
	"""Runs a request handler: a request is created by the request factory,
	passed to the handler and the handler's response is emitted.

	When the request factory fails, the error response generator creates a
	response from the error and that response is emitted instead, the
	handler is not called."""

	__slots__ = ["handler", "emitter", "requestFactory", "errorResponseGenerator"]

	def __init__(
		self,
		handler: THandler,
		emitter: Emitter,
		requestFactory: TRequestFactory,
		errorResponseGenerator: TErrorResponseGenerator = errorResponse,
	):
		self.handler: THandler = handler
		self.emitter: Emitter = emitter
		self.requestFactory: TRequestFactory = requestFactory
		self.errorResponseGenerator: TErrorResponseGenerator = errorResponseGenerator

	def run(self, request: HTTPRequest | None = None) -> None:
		if request is None:
			try:
				request = self.requestFactory()
			except Exception as e:
				self.emitRequestError(e)
				return
			if not isinstance(request, HTTPRequest):
				raise ContractViolation("Request factory", HTTPRequest, request)
		response = (
			self.handler.handle(request)
			if isinstance(self.handler, RequestHandler)
			else self.handler(request)
		)
		if not isinstance(response, HTTPResponse):
			raise ContractViolation("Request handler", HTTPResponse, response)
		self.emit(response)

	def emitRequestError(self, error: Exception) -> None:
		exception(error, "Could not create request")
		response = self.errorResponseGenerator(error)
		if not isinstance(response, HTTPResponse):
			raise ContractViolation("Error response generator", HTTPResponse, response)
		self.emit(response)

	def emit(self, response: HTTPResponse) -> None:
		try:
			self.emitter.emit(response)
		finally:
			response.close()


# EOF
