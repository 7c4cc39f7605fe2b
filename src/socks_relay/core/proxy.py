"""Public entry points of the SOCKS5 proxy core.

An accept loop only needs ``serve``: hand it a connected stream, and optionally
a ``Dialer`` to replace the default TCP connector.

Example:
    from socks_relay.core.proxy import SocketStream, serve

    conn, _ = listener.accept()
    serve(SocketStream(conn))

Attributes:
    __all__ (list): List of public components exposed by this module
"""

from .lib import Dialer, NetworkDialer, SocketStream, SocksProxy, proxy_stats, run_server, serve

__all__ = ["Dialer", "NetworkDialer", "proxy_stats", "run_server", "serve", "SocketStream", "SocksProxy"]
