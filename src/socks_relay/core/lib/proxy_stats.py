"""Statistics tracking for the SOCKS proxy server.

This module keeps process-wide counters about proxy sessions:
- Active and total connection counts
- Sessions that ended with a protocol or connect failure
- Bytes relayed in each direction and a short bandwidth history
- Relay copy errors, which end a relay leg without failing the session

All operations take an internal lock since every session runs in its own
thread.

Example:
    from .proxy_stats import proxy_stats

    proxy_stats.connection_started()
    proxy_stats.update_bytes(sent=1024, received=2048)
"""

import threading
import time
from collections import deque
from datetime import UTC, datetime
from typing import Any, Final

# Window used for the bandwidth estimate
BANDWIDTH_WINDOW: Final = 5  # Seconds


class ProxyStats:
    """Thread-safe statistics tracker for the SOCKS proxy server."""

    def __init__(self) -> None:
        """Initialize zeroed counters and record the start time."""
        self.active_connections = 0
        self.total_connections = 0
        self.failed_sessions = 0
        self.relay_errors = 0
        self.total_bytes_sent = 0
        self.total_bytes_received = 0
        self.bandwidth_history: deque[tuple[int, float]] = deque()
        self.start_time = datetime.now(tz=UTC)
        self._lock = threading.Lock()

    def update_bytes(self, sent: int, received: int) -> None:
        """Update byte transfer statistics.

        Args:
            sent: Bytes copied from the client to the destination
            received: Bytes copied from the destination to the client
        """
        with self._lock:
            self.total_bytes_sent += sent
            self.total_bytes_received += received
            now = time.time()
            self.bandwidth_history.append((sent + received, now))
            self._prune(now)

    def _prune(self, now: float) -> None:
        # Keep only samples inside the bandwidth window
        cutoff = now - BANDWIDTH_WINDOW
        while self.bandwidth_history and self.bandwidth_history[0][1] <= cutoff:
            self.bandwidth_history.popleft()

    def get_bandwidth(self) -> float:
        """Calculate current bandwidth usage in bytes per second.

        Returns:
            float: Average over the last ``BANDWIDTH_WINDOW`` seconds
        """
        with self._lock:
            self._prune(time.time())
            return sum(bytes_ for bytes_, _ in self.bandwidth_history) / BANDWIDTH_WINDOW

    def connection_started(self) -> None:
        with self._lock:
            self.active_connections += 1
            self.total_connections += 1

    def connection_ended(self) -> None:
        with self._lock:
            self.active_connections -= 1

    def session_failed(self) -> None:
        with self._lock:
            self.failed_sessions += 1

    def relay_error(self) -> None:
        with self._lock:
            self.relay_errors += 1

    def snapshot(self) -> dict[str, Any]:
        """Return a consistent copy of the counters."""
        with self._lock:
            self._prune(time.time())
            return {
                "active_connections": self.active_connections,
                "total_connections": self.total_connections,
                "failed_sessions": self.failed_sessions,
                "relay_errors": self.relay_errors,
                "total_bytes_sent": self.total_bytes_sent,
                "total_bytes_received": self.total_bytes_received,
                "bandwidth": sum(bytes_ for bytes_, _ in self.bandwidth_history) / BANDWIDTH_WINDOW,
                "uptime": datetime.now(tz=UTC) - self.start_time,
            }


# Global statistics object
proxy_stats = ProxyStats()
