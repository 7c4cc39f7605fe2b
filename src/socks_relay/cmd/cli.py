"""Command-line interface for the SOCKS proxy server.

The CLI is built using Typer and handles:
- Command-line and environment configuration
- Logging setup
- Server lifecycle
- A statistics summary when the server stops

Example:
    # Run from command line:
    $ socks-relay serve --host 0.0.0.0 --port 1080 --connect-timeout 10
"""

from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from socks_relay import __version__
from socks_relay.core.proxy import proxy_stats, run_server
from socks_relay.core.utils import LOG_DIR, format_bytes, setup_logging

console = Console()
app = typer.Typer(help="SOCKS5 proxy server")


def stats_table() -> Table:
    """Render the statistics snapshot as a table."""
    snapshot = proxy_stats.snapshot()
    table = Table(title="Session Statistics", show_header=False, box=None, padding=(0, 1))
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Value", style="green", no_wrap=True)

    table.add_row("Total Connections", str(snapshot["total_connections"]))
    table.add_row("Failed Sessions", str(snapshot["failed_sessions"]))
    table.add_row("Relay Errors", str(snapshot["relay_errors"]))
    table.add_row("Data Sent", format_bytes(snapshot["total_bytes_sent"]))
    table.add_row("Data Received", format_bytes(snapshot["total_bytes_received"]))
    table.add_row("Bandwidth", f"{format_bytes(snapshot['bandwidth'])}/s")
    table.add_row("Uptime", str(snapshot["uptime"]).split(".")[0])
    return table


@app.callback()
def version_callback() -> None:
    """Show version information."""
    console.print(f"[cyan]SOCKS Relay v{__version__}[/cyan]")


@app.command(name="serve")
def start_server(
    host: str = typer.Option("127.0.0.1", "--host", envvar="SOCKS_RELAY_HOST", help="Address to listen on"),
    port: int = typer.Option(1080, "--port", "-p", envvar="SOCKS_RELAY_PORT", help="Port to listen on"),
    connect_timeout: float = typer.Option(
        30.0,
        "--connect-timeout",
        envvar="SOCKS_RELAY_CONNECT_TIMEOUT",
        min=0.1,
        help="Seconds allowed for each outbound connect",
    ),
    log_file: bool = typer.Option(default=False, help="Also write logs to a rotating file"),
    log_dir: Path | None = typer.Option(
        None, "--log-dir", envvar="SOCKS_RELAY_LOG_DIR", help=f"Directory for the log file (default: {LOG_DIR})"
    ),
    debug: bool = typer.Option(
        default=False,
        help="Enable debug logging",
    ),
) -> None:
    """Start the SOCKS5 proxy server."""
    log_path = setup_logging(debug=debug, log_dir=(log_dir or LOG_DIR) if log_file or log_dir else None)
    if log_path:
        console.print(f"[dim]Logging to {log_path}[/dim]")

    logger.info(f"Starting SOCKS5 proxy on {host}:{port}")
    try:
        run_server(host, port, connect_timeout=connect_timeout)
    except OSError as e:
        logger.exception("Error starting proxy server")
        console.print(f"[red]Error: {e}")
        raise typer.Exit(1) from e
    finally:
        console.print(stats_table())


if __name__ == "__main__":
    app()
