"""Logging configuration for the proxy server.

Logging goes through Loguru. Library modules only emit records; the command
line entry point calls ``setup_logging`` once to install the sinks: a coloured
console sink and, when a log directory is given, a rotating file sink.
"""

import sys
from pathlib import Path
from typing import Final

from loguru import logger

LOG_DIR: Final = Path.home() / ".socks-relay" / "logs"

CONSOLE_FORMAT: Final = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT: Final = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logging(*, debug: bool = False, log_dir: Path | None = None) -> Path | None:
    """Replace the default Loguru sink with the proxy's sinks.

    Args:
        debug: Log DEBUG records to the console instead of INFO and above
        log_dir: Directory for ``proxy.log``; no file sink when omitted

    Returns:
        Path | None: The log file in use, if any
    """
    logger.remove()  # Remove default handler
    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level="DEBUG" if debug else "INFO",
        backtrace=True,
        diagnose=debug,
    )

    if log_dir is None:
        return None

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "proxy.log"
    logger.add(
        log_file,
        rotation="10 MB",
        retention="1 week",
        compression="zip",
        format=FILE_FORMAT,
        level="DEBUG",
        backtrace=True,
        diagnose=False,
        enqueue=True,
    )
    return log_file


__all__ = ["LOG_DIR", "logger", "setup_logging"]
