"""
Hello World Example

Emits a few responses to the standard output, showing the different kinds of
bodies and how the `Content-Range` header restricts what is emitted.

Usage:
    python helloworld.py
"""

import sys

from emitter import (
	BufferedEmitter,
	CallbackBody,
	EmitterStack,
	HTTPResponse,
	StreamEmitter,
	StreamTransport,
)


def chunks():
	for word in ("Hello", ", ", "World", "!\n"):
		yield word


if __name__ == "__main__":
	out = sys.stdout.buffer
	# A generator body, streamed in chunks of 4 bytes
	StreamEmitter(StreamTransport(out), 4).emit(
		HTTPResponse.Create(chunks(), contentType="text/plain")
	)
	out.write(b"\n")
	# A callback body, restricted to a byte range
	StreamEmitter(StreamTransport(out)).emit(
		HTTPResponse(
			status=206,
			headers={"Content-Range": "bytes 7-11/*"},
			body=CallbackBody(lambda: "Hello, World!\n"),
		)
	)
	out.write(b"\n")
	# A stack of emitters, the most recently pushed one is tried first
	EmitterStack([StreamEmitter(StreamTransport(out)), BufferedEmitter(StreamTransport(out))]).emit(
		HTTPResponse.Create("Hello from the stack\n", contentType="text/plain")
	)

# EOF
