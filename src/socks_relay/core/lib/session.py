"""One SOCKS5 session from handshake to the end of the relay.

``serve`` is the entry point an accept loop calls for each connection. It runs
the handshake, then the request, and makes sure the client stream is closed on
every path. Each failure before the relay produces exactly one refusal reply:

- handshake failure: ``05 FF``
- request failure (malformed, unsupported, unreachable destination): a reply
  with status ``GENERAL_FAILURE`` and a zero address

Once the relay has started nothing else is written by this layer.
"""

import contextlib
from enum import Enum, auto

from loguru import logger

from socks_relay.core.exceptions import InvalidStateTransition, ProxyError

from .dialer import Dialer, NetworkDialer
from .dispatcher import handle_request
from .handshake import Handshake
from .request import Request, encode, failure_reply
from .stream import ByteStream


class SessionState(Enum):
    INIT = auto()
    HANDSHAKE = auto()
    REQUEST = auto()
    DONE = auto()
    FAILED = auto()


TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.INIT: frozenset({SessionState.HANDSHAKE}),
    SessionState.HANDSHAKE: frozenset({SessionState.REQUEST, SessionState.FAILED}),
    SessionState.REQUEST: frozenset({SessionState.DONE, SessionState.FAILED}),
    SessionState.DONE: frozenset(),
    SessionState.FAILED: frozenset(),
}


class Session:
    """Drive a single client stream through the SOCKS5 phases."""

    def __init__(self, stream: ByteStream, dialer: Dialer | None = None) -> None:
        self.stream = stream
        self.dialer = dialer if dialer is not None else NetworkDialer(stream)
        self.state = SessionState.INIT

    def _advance(self, state: SessionState) -> None:
        if state not in TRANSITIONS[self.state]:
            msg = f"Cannot move session from {self.state.name} to {state.name}"
            raise InvalidStateTransition(msg)
        self.state = state

    def _reply(self, data: bytes) -> None:
        # Best effort, the client may already be gone
        with contextlib.suppress(OSError):
            self.stream.write(data)

    def run(self) -> Request:
        """Serve the session.

        Returns:
            Request: The executed request

        Raises:
            ProxyError: On negotiation, framing or validation failures
            OSError: On network failures before the relay started
        """
        with contextlib.closing(self.stream):
            self._advance(SessionState.HANDSHAKE)
            handshake = Handshake(self.stream)
            try:
                handshake.negotiate()
            except (ProxyError, OSError):
                self._advance(SessionState.FAILED)
                with contextlib.suppress(OSError):
                    handshake.reject()
                raise

            self._advance(SessionState.REQUEST)
            try:
                request = handle_request(self.stream, self.dialer)
            except (ProxyError, OSError):
                self._advance(SessionState.FAILED)
                self._reply(encode(failure_reply()))
                raise

            self._advance(SessionState.DONE)
            logger.debug(f"Session for {request.host}:{request.port_number} completed")
            return request


def serve(stream: ByteStream, dialer: Dialer | None = None) -> Request:
    """Serve one accepted connection.

    Args:
        stream: The accepted client stream; closed when this returns
        dialer: Outbound connection strategy, ``NetworkDialer`` when omitted

    Returns:
        Request: The executed request

    Raises:
        ProxyError: On negotiation, framing or validation failures
        OSError: On network failures before the relay started
    """
    return Session(stream, dialer).run()
