"""Utility functions and helpers."""

from socks_relay.core.utils.log_config import LOG_DIR, setup_logging
from socks_relay.core.utils.utils import format_bytes

__all__ = ["format_bytes", "LOG_DIR", "setup_logging"]
