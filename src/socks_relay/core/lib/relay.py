"""Full-duplex relay between a client and its destination.

Two copy loops run concurrently: a helper thread copies destination -> client
while the calling thread copies client -> destination.

Shutdown is ordered as follows:
- when the destination reaches end-of-stream the helper closes the client
  stream, which also ends the client -> destination loop
- when the client -> destination loop ends the destination stream is closed,
  which also ends the helper loop
- the caller waits for the helper's completion event before returning

Both streams are closed exactly once when ``relay`` returns. Copy errors end
their leg and are recorded, but never raised: a peer hanging up mid-transfer is
the normal way for a relay to finish.
"""

import threading
from dataclasses import dataclass, field
from typing import Final

from loguru import logger

from .proxy_stats import proxy_stats
from .stream import READ_SIZE, ByteStream

BUFFER_SIZE: Final = READ_SIZE


@dataclass
class RelayResult:
    """Outcome of a relay, for observability."""

    bytes_sent: int = 0
    bytes_received: int = 0
    errors: list[OSError] = field(default_factory=list)


def _copy(source: ByteStream, destination: ByteStream, result: RelayResult, *, upstream: bool) -> int:
    """Copy ``source`` into ``destination`` until end-of-stream or an error."""
    copied = 0
    try:
        while data := source.read(BUFFER_SIZE):
            destination.write(data)
            copied += len(data)
            if upstream:
                proxy_stats.update_bytes(len(data), 0)
            else:
                proxy_stats.update_bytes(0, len(data))
    except OSError as exc:
        direction = "client -> destination" if upstream else "destination -> client"
        logger.debug(f"Relay {direction} stopped: {exc}")
        result.errors.append(exc)
        proxy_stats.relay_error()
    return copied


def relay(client: ByteStream, outbound: ByteStream) -> RelayResult:
    """Relay bytes between ``client`` and ``outbound`` until both directions end.

    Args:
        client: Stream of the SOCKS client
        outbound: Stream to the requested destination

    Returns:
        RelayResult: Bytes copied per direction and the copy errors seen
    """
    result = RelayResult()
    done = threading.Event()

    def downstream() -> None:
        try:
            result.bytes_received = _copy(outbound, client, result, upstream=False)
        finally:
            client.close()
            done.set()

    thread = threading.Thread(target=downstream, name="relay-downstream", daemon=True)
    thread.start()

    try:
        result.bytes_sent = _copy(client, outbound, result, upstream=True)
    finally:
        outbound.close()
        done.wait()
        client.close()

    logger.debug(f"Relay finished: {result.bytes_sent} bytes sent, {result.bytes_received} bytes received")
    return result
