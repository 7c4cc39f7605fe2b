"""SOCKS5 request and reply frames.

This module implements the binary codec for the RFC 1928 connection request,
which is also the layout of the server reply:

    VER | CMD/REP | RSV | ATYP | [LEN] DST.ADDR | DST.PORT

It provides:
- Protocol constants and enums (address types, commands, reply codes)
- The ``Request`` value type shared by requests and replies
- Encoding and decoding with framing checks
- Post-decode validation of the supported subset (CONNECT to IPv4 or domain)
- Port conversion helpers and reply constructors

Everything here is pure; no I/O happens in this module.

Example:
    request = decode(b"\\x05\\x01\\x00\\x01\\x08\\x08\\x08\\x08\\x00\\x50")
    assert request.host == "8.8.8.8" and request.port_number == 80
"""

import ipaddress
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Final

from socks_relay.core.exceptions import FramingError, ValidationError

# SOCKS protocol constants
SOCKS_VERSION: Final = 5
RESERVED: Final = 0x00
NO_AUTH: Final = 0x00
NO_ACCEPTABLE_METHODS: Final = 0xFF

# Frame layout
HEADER_SIZE: Final = 4
PORT_SIZE: Final = 2
MIN_FRAME_SIZE: Final = 7
IPV4_SIZE: Final = 4
IPV6_SIZE: Final = 16


class AddressType(IntEnum):
    """ATYP values."""

    IPV4 = 1
    DOMAIN = 3
    IPV6 = 4


class Command(IntEnum):
    """CMD values of a client request."""

    CONNECT = 1
    BIND = 2
    UDP = 3


class Status(IntEnum):
    """REP values of a server reply."""

    SUCCEEDED = 0
    GENERAL_FAILURE = 1
    NOT_ALLOWED = 2
    NETWORK_UNREACHABLE = 3
    HOST_UNREACHABLE = 4
    CONNECTION_REFUSED = 5
    TTL_EXPIRED = 6
    COMMAND_NOT_SUPPORTED = 7
    ADDRESS_TYPE_NOT_SUPPORTED = 8


@dataclass(frozen=True)
class Request:
    """A SOCKS5 request, or a reply when ``command`` carries a status code.

    Attributes:
        version: Protocol version byte
        command: Command of a request, reply code of a reply
        address_type: ATYP tag selecting how ``address`` is read
        address: Raw address bytes (4, 16, or the domain name)
        port: Port in network byte order
    """

    version: int
    command: int
    address_type: int
    address: bytes
    port: bytes

    @property
    def port_number(self) -> int:
        """Port as an integer."""
        return port_from_bytes(self.port)

    @property
    def host(self) -> str:
        """Address rendered as text."""
        if self.address_type == AddressType.IPV4:
            return str(ipaddress.IPv4Address(self.address))
        if self.address_type == AddressType.IPV6:
            return str(ipaddress.IPv6Address(self.address))
        return self.address.decode("utf-8", errors="replace")

    def __str__(self) -> str:
        return (
            f"Ver: {self.version} Cmd: {self.command} Atyp: {self.address_type} "
            f"Addr: {self.address.decode('utf-8', errors='replace')} Port: {self.port_number}"
        )


def port_to_bytes(port: int) -> bytes:
    """Convert a port number to its 2-byte big endian form."""
    return struct.pack("!H", port)


def port_from_bytes(data: bytes) -> int:
    """Convert big endian port bytes to a port number.

    A single byte is read as the low byte of the port.
    """
    return int.from_bytes(data, "big")


def encode(request: Request) -> bytes:
    """Encode a request or reply into its wire form.

    Args:
        request: Request to encode

    Returns:
        bytes: ``VER | CMD | RSV | ATYP | [LEN] ADDR | PORT``
    """
    frame = bytearray((request.version, request.command, RESERVED, request.address_type))

    # Only domain names carry a length prefix
    if request.address_type == AddressType.DOMAIN:
        frame.append(len(request.address) & 0xFF)
    frame += request.address

    port = request.port
    if len(port) == 1:
        port = b"\x00" + port
    frame += port
    return bytes(frame)


def _address_length(address_type: int, body: bytes) -> tuple[int, bytes]:
    """Return the declared address length and the bytes following it."""
    if address_type == AddressType.DOMAIN:
        if not body:
            msg = "Missing address length"
            raise FramingError(msg)
        return body[0], body[1:]
    if address_type == AddressType.IPV4:
        return IPV4_SIZE, body
    if address_type == AddressType.IPV6:
        return IPV6_SIZE, body
    msg = f"Unknown address type: {address_type}"
    raise FramingError(msg)


def decode(data: bytes) -> Request:
    """Decode a request frame and validate it.

    Args:
        data: Raw frame bytes

    Returns:
        Request: The decoded, validated request

    Raises:
        FramingError: If the byte layout is malformed
        ValidationError: If the frame asks for something unsupported
    """
    if len(data) < MIN_FRAME_SIZE:
        msg = "Too few bytes to be a valid request"
        raise FramingError(msg)

    version, command, address_type = data[0], data[1], data[3]
    address_length, body = _address_length(address_type, data[HEADER_SIZE:])

    remaining = len(body) - PORT_SIZE
    if remaining != address_length:
        msg = f"Invalid address length: {address_length}, remaining bytes: {remaining}"
        raise FramingError(msg)

    request = Request(
        version=version,
        command=command,
        address_type=address_type,
        address=bytes(body[:address_length]),
        port=bytes(body[address_length:]),
    )
    validate(request)
    return request


def validate(request: Request) -> None:
    """Check that a decoded request is one this server can act on.

    Raises:
        ValidationError: If any field is outside the supported subset
    """
    if request.version != SOCKS_VERSION:
        msg = "Version not supported"
        raise ValidationError(msg)
    if request.command != Command.CONNECT:
        msg = "Command not understood"
        raise ValidationError(msg)
    if not request.address:
        msg = "Missing address"
        raise ValidationError(msg)
    # IPv6 is only ever produced in replies
    if request.address_type not in (AddressType.IPV4, AddressType.DOMAIN):
        msg = "Unsupported address type"
        raise ValidationError(msg)
    if len(request.port) != PORT_SIZE or request.port == b"\x00\x00":
        msg = "Invalid port number"
        raise ValidationError(msg)


def new_reply(status: int, host: str, port: int) -> Request:
    """Build a reply carrying ``status`` and a bound address.

    Args:
        status: Reply code
        host: IPv4 or IPv6 address literal
        port: Bound port

    Returns:
        Request: Reply frame with the address type matching ``host``
    """
    ip = ipaddress.ip_address(host)
    address_type = AddressType.IPV4 if ip.version == 4 else AddressType.IPV6
    return Request(
        version=SOCKS_VERSION,
        command=status,
        address_type=address_type,
        address=ip.packed,
        port=port_to_bytes(port),
    )


def failure_reply() -> Request:
    """Generic failure reply with a zero address and port."""
    return new_reply(Status.GENERAL_FAILURE, "0.0.0.0", 0)
