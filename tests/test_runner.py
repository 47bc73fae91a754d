"""
Unit tests for the request handler runner.
"""

import pytest

from emitter import config
from emitter.emitters import StreamEmitter
from emitter.errors import ContractViolation
from emitter.http.model import HTTPBody, HTTPRequest, HTTPResponse
from emitter.runner import RequestHandler, RequestHandlerRunner, errorResponse


class Handler(RequestHandler):
	def __init__(self):
		self.requests = []

	def handle(self, request):
		self.requests.append(request)
		return request.respond(f"{request.method} {request.path}", "text/plain")


def failingFactory():
	raise RuntimeError("Malformed request")


class TestRequestHandlerRunner:
	def test_runs_handler_on_created_request(self, transport):
		request = HTTPRequest("GET", "/hello")
		handler = Handler()
		RequestHandlerRunner(handler, StreamEmitter(transport), lambda: request).run()
		assert handler.requests == [request]
		assert transport.body == b"GET /hello"
		assert transport.has("HTTP/1.1 200 OK")

	def test_accepts_callable_handler(self, transport):
		runner = RequestHandlerRunner(
			lambda request: HTTPResponse.Create("callable"),
			StreamEmitter(transport),
			lambda: HTTPRequest("GET", "/"),
		)
		runner.run()
		assert transport.body == b"callable"

	def test_explicit_request_skips_factory(self, transport):
		def factory():
			raise AssertionError("Factory should not be called")

		handler = Handler()
		request = HTTPRequest("POST", "/explicit")
		RequestHandlerRunner(handler, StreamEmitter(transport), factory).run(request)
		assert handler.requests == [request]
		assert transport.body == b"POST /explicit"

	def test_factory_error_emits_generated_response(self, transport):
		errors = []
		handler = Handler()

		def generator(error):
			errors.append(error)
			return HTTPResponse.Create("Bad request", status=400)

		RequestHandlerRunner(
			handler, StreamEmitter(transport), failingFactory, generator
		).run()
		assert handler.requests == []
		assert [str(_) for _ in errors] == ["Malformed request"]
		assert transport.has("HTTP/1.1 400 Bad Request")
		assert transport.body == b"Bad request"

	def test_default_error_response(self, transport):
		RequestHandlerRunner(Handler(), StreamEmitter(transport), failingFactory).run()
		assert transport.has("HTTP/1.1 500 Internal Server Error")
		assert transport.body == b"Internal Server Error"

	def test_factory_contract(self, transport):
		runner = RequestHandlerRunner(Handler(), StreamEmitter(transport), lambda: "GET /")
		with pytest.raises(ContractViolation) as info:
			runner.run()
		assert isinstance(info.value, TypeError)
		assert info.value.expected is HTTPRequest
		assert not transport.headersSent()

	def test_handler_contract(self, transport):
		runner = RequestHandlerRunner(
			lambda request: "OK",
			StreamEmitter(transport),
			lambda: HTTPRequest("GET", "/"),
		)
		with pytest.raises(ContractViolation) as info:
			runner.run()
		assert info.value.expected is HTTPResponse
		assert not transport.headersSent()

	def test_error_generator_contract(self, transport):
		runner = RequestHandlerRunner(
			Handler(), StreamEmitter(transport), failingFactory, lambda error: None
		)
		with pytest.raises(ContractViolation):
			runner.run()
		assert not transport.headersSent()

	def test_handler_errors_propagate(self, transport):
		class Failing(RequestHandler):
			def handle(self, request):
				raise KeyError("missing")

		runner = RequestHandlerRunner(
			Failing(), StreamEmitter(transport), lambda: HTTPRequest("GET", "/")
		)
		with pytest.raises(KeyError):
			runner.run()

	def test_closes_response_body(self, transport, trackedBody):
		closed = []

		class Body(trackedBody):
			def close(self):
				closed.append(True)

		RequestHandlerRunner(
			lambda request: HTTPResponse(body=Body(b"data")),
			StreamEmitter(transport),
			lambda: HTTPRequest("GET", "/"),
		).run()
		assert closed == [True]
		assert transport.body == b"data"


class TestErrorResponse:
	def test_hides_details(self, monkeypatch):
		monkeypatch.setattr(config, "DEBUG", False)
		response = errorResponse(ValueError("secret"))
		assert response.status == 500
		assert response.getHeaderLine("Content-Type") == "text/plain"
		assert isinstance(response.body, HTTPBody)
		assert response.body.render() == b"Internal Server Error"

	def test_details_in_debug(self, monkeypatch):
		monkeypatch.setattr(config, "DEBUG", True)
		response = errorResponse(ValueError("secret"))
		assert response.body.render() == b"Internal Server Error: [ValueError] secret"

# EOF
