"""Main Typer application.

Entry point: ``teecp`` (configured via pyproject.toml console_scripts).

``--wait-connection`` and ``--retry-interval`` behave like boolean flags
that may carry a value: a bare flag means ``true`` (one second) and a
value is only taken with ``=``, as in ``--wait-connection=5``.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from teecp.config import load_settings
from teecp.core.durations import DurationParseError
from teecp.core.hub import HubDriver, HubError
from teecp.core.listener import ListenerDriver, ListenerError
from teecp.models.role import ConfigurationError, RoleConfig

err_console = Console(stderr=True)

VALUED_FLAGS = ("--wait-connection", "--retry-interval")

app = typer.Typer(
    name="teecp",
    help="teecp: tee stdin to every connected TCP listener.",
    rich_markup_mode="rich",
    add_completion=False,
)


def normalize_argv(argv: Sequence[str]) -> list[str]:
    """Rewrite bare ``--wait-connection`` / ``--retry-interval`` to ``=true``."""
    return [f"{arg}=true" if arg in VALUED_FLAGS else arg for arg in argv]


def configure_logging(level: str) -> None:
    """Send log records to stderr through a Rich handler."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _pass_through_undecodable(stream) -> None:
    """Carry undecodable input bytes as surrogate escapes instead of failing."""
    reconfigure = getattr(stream, "reconfigure", None)
    if callable(reconfigure):
        reconfigure(errors="surrogateescape")


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    return typer.Exit(code=1)


@app.command()
def teecp_cmd(
    server: int = typer.Option(
        0,
        "--server",
        count=True,
        help="Run as a hub: broadcast stdin to listeners (conflicts with --client).",
    ),
    client: int = typer.Option(
        0,
        "--client",
        count=True,
        help="Run as a listener: print lines from a hub (conflicts with --server).",
    ),
    port: int = typer.Option(
        None,
        "--port",
        "-p",
        help="Hub port. Defaults to $TEECP_PORT or 6667.",
    ),
    host: str = typer.Option(
        None,
        "--host",
        help="Hub bind address, or the hub to connect to with --client.",
    ),
    wait_connection: str = typer.Option(
        None,
        "--wait-connection",
        help="Keep retrying the connection for this long, e.g. 5, 500ms, 2m (requires --client).",
    ),
    retry_interval: str = typer.Option(
        None,
        "--retry-interval",
        help="Time between connection attempts (requires --client and --wait-connection).",
    ),
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level for stderr diagnostics. Defaults to $TEECP_LOG_LEVEL or WARNING.",
    ),
) -> None:
    """Tee lines from stdin to TCP listeners, or listen to a teecp hub."""
    settings = load_settings()
    configure_logging(log_level or settings.log_level)
    port = settings.port if port is None else port

    try:
        role_config = RoleConfig.from_flags(
            server=server,
            client=client,
            wait_connection=wait_connection,
            retry_interval=retry_interval,
        )
    except (ConfigurationError, DurationParseError) as exc:
        raise _fail(str(exc))

    try:
        if role_config.is_hub:
            _pass_through_undecodable(sys.stdin)
            hub = HubDriver(
                port,
                sys.stdin,
                sys.stdout,
                host=settings.bind_host if host is None else host,
                poll_interval=settings.accept_poll_seconds,
            )
            hub.run()
        else:
            target = (settings.target_host if host is None else host, port)
            ListenerDriver(target, role_config, sys.stdout).run()
    except (HubError, ListenerError) as exc:
        raise _fail(str(exc))
    except KeyboardInterrupt:
        raise typer.Exit(code=130)


def main() -> None:
    """CLI entry point."""
    app(args=normalize_argv(sys.argv[1:]), prog_name="teecp")


if __name__ == "__main__":
    main()
