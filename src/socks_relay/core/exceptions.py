"""Custom exceptions for the SOCKS5 proxy core.

The exceptions mirror the failure classes a session can run into:
- Framing errors: the request bytes do not form a valid frame
- Validation errors: the frame is well formed but asks for something unsupported
- Negotiation errors: client and server share no authentication method
- Stream errors: the client went away in the middle of a protocol message

Network failures (connect timeouts, refused connections, broken pipes) are not
wrapped; they surface as the built-in ``OSError`` family.

Example:
    try:
        request = decode(data)
    except FramingError as e:
        logger.info(f"Malformed request: {e}")
"""


class ProxyError(Exception):
    """Base exception for proxy errors."""


class StreamClosedError(ProxyError):
    """Raised when a stream reaches end-of-stream before a full message arrived."""


class DecodeError(ProxyError):
    """Raised when a request frame cannot be turned into a usable Request."""


class FramingError(DecodeError):
    """Raised when the byte layout of a frame is malformed."""


class ValidationError(DecodeError):
    """Raised when a well-formed frame carries unsupported values."""


class NegotiationError(ProxyError):
    """Raised when method negotiation fails."""


class UnsupportedCommandError(ProxyError):
    """Raised when a request carries a command this server does not execute."""


class InvalidStateTransition(ProxyError):
    """Raised when a session tries to move to a state it cannot reach."""
