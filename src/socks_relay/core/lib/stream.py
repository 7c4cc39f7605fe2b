"""Bidirectional byte streams used by a proxy session.

The protocol code only needs three operations from a connection: read some
bytes, write all bytes, close. ``ByteStream`` names that contract so the
session can run over sockets, test doubles, or other transports alike.

``SocketStream`` adapts a connected socket. Its ``close`` shuts the socket down
in both directions before closing it, which also wakes up a reader blocked on
it in another thread; the relay relies on this to end the opposite copy
direction.
"""

import contextlib
import socket
import threading
from typing import Final, Protocol, Self

from socks_relay.core.exceptions import StreamClosedError

# Default chunk size for reads
READ_SIZE: Final = 32768


class ByteStream(Protocol):
    """Minimal bidirectional byte stream."""

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes, returning ``b""`` at end-of-stream."""
        ...

    def write(self, data: bytes) -> None:
        """Write all of ``data``."""
        ...

    def close(self) -> None:
        """Close the stream. Calling it again has no effect."""
        ...


class SocketStream:
    """``ByteStream`` over a connected socket."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def local_address(self) -> tuple[str, int]:
        """Host and port the socket is bound to."""
        host, port = self._sock.getsockname()[:2]
        return host, port

    def read(self, size: int = READ_SIZE) -> bytes:
        return self._sock.recv(size)

    def write(self, data: bytes) -> None:
        self._sock.sendall(data)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        # Already disconnected peers make shutdown fail with ENOTCONN
        with contextlib.suppress(OSError):
            self._sock.shutdown(socket.SHUT_RDWR)
        self._sock.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def read_exactly(stream: ByteStream, size: int) -> bytes:
    """Read exactly ``size`` bytes.

    Raises:
        StreamClosedError: If the stream ends first
    """
    buf = bytearray()
    while len(buf) < size:
        chunk = stream.read(size - len(buf))
        if not chunk:
            msg = f"Stream closed after {len(buf)} of {size} bytes"
            raise StreamClosedError(msg)
        buf += chunk
    return bytes(buf)


def read_at_least(stream: ByteStream, minimum: int, maximum: int) -> bytes:
    """Read until at least ``minimum`` bytes are buffered, never more than ``maximum``.

    Args:
        stream: Stream to read from
        minimum: Bytes that must be available before returning
        maximum: Upper bound of the returned buffer

    Returns:
        bytes: Between ``minimum`` and ``maximum`` bytes

    Raises:
        StreamClosedError: If the stream ends before ``minimum`` bytes arrived
    """
    buf = bytearray()
    while len(buf) < minimum:
        chunk = stream.read(maximum - len(buf))
        if not chunk:
            msg = f"Stream closed after {len(buf)} bytes, expected at least {minimum}"
            raise StreamClosedError(msg)
        buf += chunk
    return bytes(buf)
