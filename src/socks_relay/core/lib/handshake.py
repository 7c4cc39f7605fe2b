"""SOCKS5 method negotiation.

The client opens with ``VER | NMETHODS | METHODS``; the server answers with
``VER | METHOD``. Only "no authentication required" (``0x00``) is offered.

Negotiation moves through ``START -> READ_HEADER -> READ_METHODS`` and ends in
ACCEPTED (reply written) or REJECTED (nothing written). Writing the ``0xFF``
refusal is left to the caller through ``Handshake.reject``.
"""

from enum import Enum, auto

from loguru import logger

from socks_relay.core.exceptions import NegotiationError

from .request import NO_ACCEPTABLE_METHODS, NO_AUTH, SOCKS_VERSION
from .stream import ByteStream, read_exactly


class HandshakeState(Enum):
    START = auto()
    READ_HEADER = auto()
    READ_METHODS = auto()
    ACCEPTED = auto()
    REJECTED = auto()


class Handshake:
    """Negotiate the authentication method on a client stream."""

    def __init__(self, stream: ByteStream) -> None:
        self.stream = stream
        self.state = HandshakeState.START
        self.methods = b""

    def negotiate(self) -> None:
        """Run the negotiation and reply on success.

        Raises:
            NegotiationError: If the version is wrong or no offered method is acceptable
            StreamClosedError: If the client closed mid-message
        """
        self.state = HandshakeState.READ_HEADER
        try:
            version, nmethods = read_exactly(self.stream, 2)
            if version != SOCKS_VERSION:
                msg = "Invalid socks version specified by client"
                raise NegotiationError(msg)

            self.state = HandshakeState.READ_METHODS
            self.methods = read_exactly(self.stream, nmethods)
        except Exception:
            self.state = HandshakeState.REJECTED
            raise

        if NO_AUTH not in self.methods:
            self.state = HandshakeState.REJECTED
            msg = "Could not find a suitable method for authentication"
            raise NegotiationError(msg)

        self.stream.write(bytes((SOCKS_VERSION, NO_AUTH)))
        self.state = HandshakeState.ACCEPTED
        logger.debug(f"Negotiated no-auth from offered methods {self.methods.hex(' ')}")

    def reject(self) -> None:
        """Tell the client none of its methods is acceptable."""
        self.stream.write(bytes((SOCKS_VERSION, NO_ACCEPTABLE_METHODS)))
