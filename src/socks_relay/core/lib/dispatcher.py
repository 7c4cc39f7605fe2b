"""Read a connection request and route it by command."""

from typing import Final

from loguru import logger

from socks_relay.core.exceptions import UnsupportedCommandError

from .dialer import Dialer
from .request import Command, Request, decode
from .stream import ByteStream, read_at_least

# Fixed header + length byte + longest domain + port
MAX_REQUEST_SIZE: Final = 4 + 1 + 255 + 2
# The fixed header must be present before decoding is attempted
MIN_REQUEST_SIZE: Final = 4


def handle_request(stream: ByteStream, dialer: Dialer) -> Request:
    """Read, decode and execute one request.

    Args:
        stream: Client stream positioned after the handshake
        dialer: Dialer carrying out CONNECT

    Returns:
        Request: The request that was executed

    Raises:
        DecodeError: If the frame is malformed or unsupported
        UnsupportedCommandError: For commands without a handler
        OSError: If reading fails or the destination cannot be reached
    """
    data = read_at_least(stream, MIN_REQUEST_SIZE, MAX_REQUEST_SIZE)
    request = decode(data)
    logger.debug(f"Request: {request}")

    if request.command == Command.CONNECT:
        dialer.dial(request.address, request.address_type, request.port)
        return request

    # BIND and UDP ASSOCIATE handlers would go here
    msg = f"Unsupported command: {request.command}"
    raise UnsupportedCommandError(msg)
