"""Core proxy library components."""

from .dialer import Dialer, NetworkDialer
from .proxy_server import SocksHandler, SocksProxy, run_server
from .proxy_stats import ProxyStats, proxy_stats
from .request import AddressType, Command, Request, Status, decode, encode
from .session import Session, SessionState, serve
from .stream import ByteStream, SocketStream

__all__ = [
    "AddressType",
    "ByteStream",
    "Command",
    "decode",
    "Dialer",
    "encode",
    "NetworkDialer",
    "proxy_stats",
    "ProxyStats",
    "Request",
    "run_server",
    "serve",
    "Session",
    "SessionState",
    "SocketStream",
    "SocksHandler",
    "SocksProxy",
    "Status",
]
