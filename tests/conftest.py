import socket
from collections.abc import Iterator

import pytest

from socks_relay.core.lib.proxy_stats import ProxyStats
from socks_relay.core.lib.stream import SocketStream


@pytest.fixture
def stats(mocker) -> ProxyStats:
    """Fresh statistics object patched into every module that reports."""
    fresh = ProxyStats()
    mocker.patch("socks_relay.core.lib.relay.proxy_stats", fresh)
    mocker.patch("socks_relay.core.lib.proxy_server.proxy_stats", fresh)
    return fresh


@pytest.fixture
def socket_pair() -> Iterator[tuple[socket.socket, SocketStream]]:
    """A raw socket for the test side and a ``SocketStream`` for the proxy side."""
    app_side, proxy_side = socket.socketpair()
    app_side.settimeout(5)
    stream = SocketStream(proxy_side)
    yield app_side, stream
    app_side.close()
    stream.close()
