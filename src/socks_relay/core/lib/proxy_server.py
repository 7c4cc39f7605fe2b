"""Threaded SOCKS5 proxy server.

This module provides the accept loop around the protocol core:
- ``SocksProxy`` listens and runs each connection in its own thread
- ``SocksHandler`` wraps the accepted socket and serves one session
- ``run_server`` serves until interrupted and closes the listener

Session failures are logged and counted; they never stop the server.

Example:
    # Serve on localhost:1080 with a 10 second connect timeout
    run_server("127.0.0.1", 1080, connect_timeout=10.0)
"""

import contextlib
import socket
import socketserver

from loguru import logger

from socks_relay.core.exceptions import ProxyError

from .dialer import CONNECT_TIMEOUT, NetworkDialer
from .proxy_stats import proxy_stats
from .session import serve
from .stream import SocketStream


class SocksProxy(socketserver.ThreadingMixIn, socketserver.TCPServer):
    """SOCKS proxy server implementation."""

    allow_reuse_address = True
    daemon_threads = True
    request_queue_size = 100

    def __init__(
        self,
        server_address: tuple[str, int],
        handler_class: type[socketserver.BaseRequestHandler] | None = None,
        connect_timeout: float = CONNECT_TIMEOUT,
    ) -> None:
        self.connect_timeout = connect_timeout
        super().__init__(server_address, handler_class or SocksHandler)

    def server_bind(self) -> None:
        """Bind the server socket with reuse options."""
        if hasattr(socket, "SO_REUSEPORT"):
            self.socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)
        super().server_bind()


class SocksHandler(socketserver.BaseRequestHandler):
    """Handle incoming SOCKS5 connections."""

    server: SocksProxy

    def handle(self) -> None:
        client_addr = f"{self.client_address[0]}:{self.client_address[1]}"
        proxy_stats.connection_started()
        stream = SocketStream(self.request)
        try:
            request = serve(stream, NetworkDialer(stream, timeout=self.server.connect_timeout))
            logger.info(f"Session from {client_addr} to {request.host}:{request.port_number} closed")
        except (ProxyError, OSError) as exc:
            proxy_stats.session_failed()
            logger.info(f"Session from {client_addr} failed: {exc!r}")
        finally:
            proxy_stats.connection_ended()


def run_server(host: str, port: int, connect_timeout: float = CONNECT_TIMEOUT) -> None:
    """Serve SOCKS5 clients until interrupted.

    Args:
        host: Host address to bind to
        port: Port number to listen on
        connect_timeout: Seconds allowed for each outbound connect
    """
    server: SocksProxy | None = None
    try:
        server = SocksProxy((host, port), connect_timeout=connect_timeout)
        bound_host, bound_port = server.server_address[:2]
        logger.info(f"SOCKS5 proxy listening on {bound_host}:{bound_port}")
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Server stopping")
    finally:
        if server:
            with contextlib.suppress(OSError):
                server.server_close()
                logger.info("Server closed")
