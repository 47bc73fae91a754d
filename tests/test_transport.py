"""
Unit tests for the header and output sinks.
"""

from io import BytesIO

import pytest

from emitter.emitters import StreamEmitter
from emitter.errors import HeadersAlreadySent
from emitter.http.model import HTTPResponse
from emitter.transport import HeaderCall, MemoryTransport, StreamTransport


class TestMemoryTransport:
	def test_records_header_calls(self, transport):
		transport.headerLine("content-type", "text/plain", True, 200)
		transport.headerLine("Set-Cookie", "a=1", True, 200)
		transport.headerLine("Set-Cookie", "b=2", False, 200)
		transport.statusLine("HTTP/1.1", 200, "OK")
		assert transport.stack == [
			HeaderCall("Content-Type: text/plain", True, 200),
			HeaderCall("Set-Cookie: a=1", True, 200),
			HeaderCall("Set-Cookie: b=2", False, 200),
			HeaderCall("HTTP/1.1 200 OK", True, 200),
		]
		assert transport.has("Set-Cookie: b=2")

	def test_replace_drops_previous_values(self, transport):
		transport.headerLine("X-A", "1")
		transport.headerLine("X-A", "2", False)
		transport.headerLine("x-a", "3", True)
		assert transport.headers == [("X-A", "3")]

	def test_header_status_is_applied(self, transport):
		transport.headerLine("Location", "/elsewhere", True, 302)
		assert transport.status == 302
		transport.statusLine("HTTP/1.1", 202, "Accepted")
		assert transport.status == 202

	def test_writes_before_flush_are_pending(self, transport):
		transport.write(b"early")
		assert transport.hasPendingOutput()
		assert not transport.headersSent()
		assert transport.body == b""
		transport.flush()
		assert not transport.hasPendingOutput()
		assert transport.body == b"early"

	def test_flush_commits_the_head(self, transport):
		transport.flush()
		assert transport.headersSent()
		assert transport.state.origin is not None
		assert __file__.rstrip("c") in transport.state.origin
		with pytest.raises(HeadersAlreadySent) as info:
			transport.headerLine("X-A", "1")
		assert info.value.origin == transport.state.origin
		with pytest.raises(HeadersAlreadySent):
			transport.statusLine("HTTP/1.1", 200)

	@pytest.mark.parametrize(
		"name,value",
		[
			("X-A", "1\r\nSet-Cookie: evil=1"),
			("X-A", "1\nX-B: 2"),
			("X-A\r\nX-B", "1"),
			("X-A", "caf\u00e9 \u2603"),
		],
	)
	def test_rejects_unsafe_header_fields(self, transport, name, value):
		with pytest.raises(ValueError):
			transport.headerLine(name, value)
		assert transport.headers == []
		assert transport.stack == []

	def test_rejects_line_break_in_reason(self, transport):
		with pytest.raises(ValueError):
			transport.statusLine("HTTP/1.1", 200, "OK\r\nX-A: 1")

	def test_writes_after_flush(self, transport):
		transport.flush()
		transport.write(b"Hello")
		transport.write(b" world")
		assert transport.body == b"Hello world"


class TestStreamTransport:
	def test_serializes_head_and_body(self):
		output = BytesIO()
		transport = StreamTransport(output)
		transport.headerLine("Content-Type", "text/plain", True, 200)
		transport.headerLine("Content-Length", "5", True, 200)
		transport.statusLine("HTTP/1.1", 200, "OK")
		transport.write(b"He")
		assert output.getvalue() == b""
		transport.flush()
		transport.write(b"llo")
		assert output.getvalue() == (
			b"HTTP/1.1 200 OK\r\n"
			b"Content-Type: text/plain\r\n"
			b"Content-Length: 5\r\n"
			b"\r\n"
			b"Hello"
		)

	def test_default_reason(self):
		output = BytesIO()
		transport = StreamTransport(output)
		transport.headerLine("Location", "/", True, 404)
		transport.flush()
		assert output.getvalue() == b"HTTP/1.1 404 Not Found\r\nLocation: /\r\n\r\n"

	def test_header_injection_is_rejected(self):
		output = BytesIO()
		response = HTTPResponse.Create("ok", headers={"X-A": "1\r\nSet-Cookie: evil=1"})
		with pytest.raises(ValueError):
			StreamEmitter(StreamTransport(output)).emit(response)
		assert output.getvalue() == b""

	def test_failed_commit_leaves_headers_unsent(self):
		class Broken:
			def write(self, data):
				raise OSError("Connection reset")

		transport = StreamTransport(Broken())
		with pytest.raises(OSError):
			transport.flush()
		assert not transport.headersSent()
		assert transport.state.origin is None

	def test_writer_without_flush(self):
		chunks = []

		class Writer:
			def write(self, data):
				chunks.append(data)

		transport = StreamTransport(Writer())
		transport.flush()
		transport.write(b"")
		transport.write(b"data")
		assert chunks == [b"HTTP/1.1 200 OK\r\n\r\n", b"data"]

# EOF
