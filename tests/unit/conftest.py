"""Shared fixtures for unit tests."""

import logging

import pytest


class FakeSocket:
    """Minimal socket stub that returns predefined chunks sequentially."""

    def __init__(self, chunks, recv_error=None):
        self._chunks = [
            chunk if isinstance(chunk, bytes) else chunk.encode() for chunk in chunks
        ]
        self._recv_error = recv_error
        self.recv_sizes = []
        self.timeouts = []
        self.sent = b""
        self.closed = False

    def recv(self, size):
        """Return up to size bytes of the next chunk, or b"" when exhausted."""

        self.recv_sizes.append(size)
        if self._chunks:
            chunk = self._chunks.pop(0)
            if len(chunk) > size:
                self._chunks.insert(0, chunk[size:])
                chunk = chunk[:size]
            return chunk
        if self._recv_error is not None:
            raise self._recv_error
        return b""

    def settimeout(self, value):
        """Record timeouts applied by the code under test."""

        self.timeouts.append(value)

    def sendall(self, data):
        """Capture bytes written by the server."""

        self.sent += data

    def shutdown(self, _how):
        """Mirror socket interface compatibility for completeness."""

    def close(self):
        """Mark the stub closed."""

        self.closed = True


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Ensure logs propagate to root so caplog can catch them."""
    logger = logging.getLogger("oneshot_http")
    old_propagate = logger.propagate
    logger.propagate = True
    yield
    logger.propagate = old_propagate


@pytest.fixture(name="fake_socket_factory")
def fake_socket_factory_fixture():
    """Build FakeSocket instances from chunk lists."""
    return FakeSocket
