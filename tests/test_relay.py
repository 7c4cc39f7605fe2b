import socket
import threading

from socks_relay.core.lib.relay import RelayResult, relay
from socks_relay.core.lib.stream import SocketStream

from .utils import FakeStream, recv_exactly


class BrokenStream(FakeStream):
    def write(self, data: bytes) -> None:
        raise ConnectionResetError("reset by peer")


def start_relay(client: SocketStream, outbound: SocketStream) -> tuple[threading.Thread, list[RelayResult]]:
    results: list[RelayResult] = []
    thread = threading.Thread(target=lambda: results.append(relay(client, outbound)))
    thread.start()
    return thread, results


def pairs() -> tuple[socket.socket, SocketStream, socket.socket, SocketStream]:
    client_app, client_proxy = socket.socketpair()
    dest_app, dest_proxy = socket.socketpair()
    client_app.settimeout(5)
    dest_app.settimeout(5)
    return client_app, SocketStream(client_proxy), dest_app, SocketStream(dest_proxy)


def test_destination_eof_closes_client(stats) -> None:
    client_app, client, dest_app, outbound = pairs()
    thread, results = start_relay(client, outbound)

    client_app.sendall(b"GET / HTTP/1.0\r\n\r\n")
    assert recv_exactly(dest_app, 18) == b"GET / HTTP/1.0\r\n\r\n"
    dest_app.sendall(b"HTTP/1.0 200 OK\r\n\r\n")
    dest_app.close()

    assert recv_exactly(client_app, 19) == b"HTTP/1.0 200 OK\r\n\r\n"
    assert client_app.recv(1) == b""

    thread.join(timeout=5)
    assert not thread.is_alive()
    assert client.closed and outbound.closed
    assert results[0].bytes_sent == 18
    assert results[0].bytes_received == 19
    assert stats.total_bytes_sent == 18
    assert stats.total_bytes_received == 19
    client_app.close()


def test_client_eof_closes_destination(stats) -> None:
    client_app, client, dest_app, outbound = pairs()
    thread, _ = start_relay(client, outbound)

    client_app.sendall(b"bye")
    client_app.close()

    assert recv_exactly(dest_app, 3) == b"bye"
    assert dest_app.recv(1) == b""

    thread.join(timeout=5)
    assert not thread.is_alive()
    assert client.closed and outbound.closed
    dest_app.close()


def test_response_streams_before_request_finishes(stats) -> None:
    client_app, client, dest_app, outbound = pairs()
    thread, _ = start_relay(client, outbound)

    # The destination speaks first while the client keeps its side open
    dest_app.sendall(b"220 ready\r\n")
    assert recv_exactly(client_app, 11) == b"220 ready\r\n"
    client_app.sendall(b"QUIT\r\n")
    assert recv_exactly(dest_app, 6) == b"QUIT\r\n"

    dest_app.close()
    thread.join(timeout=5)
    assert not thread.is_alive()
    client_app.close()


def test_copy_errors_are_recorded_not_raised(stats) -> None:
    client = FakeStream(b"payload")
    outbound = BrokenStream()

    result = relay(client, outbound)

    assert len(result.errors) == 1
    assert isinstance(result.errors[0], ConnectionResetError)
    assert result.bytes_sent == 0
    assert stats.relay_errors == 1
    assert client.closed and outbound.closed
