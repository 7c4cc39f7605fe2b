import io

DOMAIN_REQUEST = b"\x05\x01\x00\x03\x09google.se\x00\x50"
IPV4_REQUEST = b"\x05\x01\x00\x01\x08\x08\x08\x08\x00\x50"
FAILURE_REPLY = b"\x05\x01\x00\x01\x00\x00\x00\x00\x00\x00"


class FakeStream:
    """In-memory stream: reads from preset bytes, records writes."""

    def __init__(self, data: bytes = b"", chunk_size: int | None = None) -> None:
        self.incoming = io.BytesIO(data)
        self.chunk_size = chunk_size
        self.written = bytearray()
        self.closed = False
        self.close_calls = 0

    def read(self, size: int) -> bytes:
        if self.chunk_size is not None:
            size = min(size, self.chunk_size)
        return self.incoming.read(size)

    def write(self, data: bytes) -> None:
        if self.closed:
            raise BrokenPipeError("stream closed")
        self.written += data

    def close(self) -> None:
        self.close_calls += 1
        self.closed = True


class RecordingDialer:
    """Dialer that records its calls instead of connecting."""

    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[tuple[bytes, int, bytes]] = []
        self.error = error

    def dial(self, address: bytes, address_type: int, port: bytes) -> None:
        self.calls.append((address, address_type, port))
        if self.error is not None:
            raise self.error


class FakeOutbound(FakeStream):
    """Outbound stream double with a bound address."""

    local_address = ("127.0.0.1", 40000)

    def __enter__(self) -> "FakeOutbound":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def recv_exactly(sock, size: int) -> bytes:
    """Receive ``size`` bytes from a raw socket or fail on EOF."""
    buf = b""
    while len(buf) < size:
        chunk = sock.recv(size - len(buf))
        if not chunk:
            raise AssertionError(f"EOF after {len(buf)} of {size} bytes")
        buf += chunk
    return buf
