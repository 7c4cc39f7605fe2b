"""Outbound connections on behalf of a SOCKS client.

A ``Dialer`` receives the destination exactly as it appeared in the request
frame and is responsible for the rest of a CONNECT: opening the connection,
telling the client where it was bound, and relaying. Tests and alternate
transports substitute their own implementation.

``NetworkDialer`` is the default. It makes a single TCP connect attempt bounded
by a timeout and lets connect errors propagate unchanged.

Example:
    dialer = NetworkDialer(client_stream, timeout=10.0)
    dialer.dial(b"example.com", AddressType.DOMAIN, b"\\x00\\x50")
"""

import socket
from typing import Final, Protocol

from loguru import logger

from .relay import relay
from .request import AddressType, Status, encode, new_reply, port_from_bytes
from .stream import ByteStream, SocketStream

CONNECT_TIMEOUT: Final = 30.0  # Seconds


class Dialer(Protocol):
    """Capability that carries out a CONNECT request."""

    def dial(self, address: bytes, address_type: int, port: bytes) -> None:
        """Connect to the destination and serve the client.

        Raises:
            OSError: If the destination cannot be reached
        """
        ...


def resolve_target(address: bytes, address_type: int, port: bytes) -> tuple[str, int]:
    """Turn request frame fields into a ``(host, port)`` pair for connecting.

    Raises:
        socket.gaierror: If a domain name cannot be IDNA-encoded for lookup
    """
    if address_type == AddressType.IPV4:
        host = socket.inet_ntop(socket.AF_INET, address)
    elif address_type == AddressType.IPV6:
        host = socket.inet_ntop(socket.AF_INET6, address)
    else:
        host = address.decode("utf-8", errors="replace")
        # Lookups IDNA-encode the name; empty or oversized labels fail there
        try:
            host.encode("idna")
        except UnicodeError as exc:
            msg = f"Invalid domain name: {host!r}"
            raise socket.gaierror(socket.EAI_NONAME, msg) from exc
    return host, port_from_bytes(port)


def format_target(host: str, port: int) -> str:
    """Render ``host:port``, bracketing IPv6 literals."""
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def open_connection(host: str, port: int, timeout: float = CONNECT_TIMEOUT) -> SocketStream:
    """Open a TCP connection with a bounded connect time.

    Returns:
        SocketStream: The connected stream, in blocking mode

    Raises:
        OSError: On timeout, refusal or resolution failure
    """
    sock = socket.create_connection((host, port), timeout=timeout)
    # The timeout bounds the connect only; relayed connections may idle
    sock.settimeout(None)
    return SocketStream(sock)


class NetworkDialer:
    """Default dialer connecting over TCP and relaying to ``client``."""

    def __init__(self, client: ByteStream, timeout: float = CONNECT_TIMEOUT) -> None:
        self.client = client
        self.timeout = timeout

    def dial(self, address: bytes, address_type: int, port: bytes) -> None:
        host, port_number = resolve_target(address, address_type, port)
        target = format_target(host, port_number)
        logger.debug(f"Connecting to {target}")

        outbound = open_connection(host, port_number, self.timeout)
        with outbound:
            bound_host, bound_port = outbound.local_address
            logger.info(f"Connected to {target} via {format_target(bound_host, bound_port)}")
            self.client.write(encode(new_reply(Status.SUCCEEDED, bound_host, bound_port)))
            relay(self.client, outbound)
