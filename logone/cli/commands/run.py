"""``logone --json`` — read builder/compiler events from stdin and render them.

Wires the configured sinks into a ``PresentationDispatcher``, builds a
``Router`` for the chosen verbosity level, and runs the read loop until
end of input.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from logone import __version__
from logone.config import LogoneConfig
from logone.core.session import run_stream
from logone.errors import ConfigurationError
from logone.models.config import VerbosityMode
from logone.monitor.renderer import MonitorRenderer
from logone.routing.dispatcher import PresentationDispatcher
from logone.routing.router import Router
from logone.routing.sinks.terminal import TerminalSink

err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"logone {__version__}")
        raise typer.Exit()


def require_json_mode(json_mode: bool) -> None:
    """Structured input must be enabled explicitly.

    Raises
    ------
    ConfigurationError
        If ``--json`` was not given.
    """
    if not json_mode:
        raise ConfigurationError("JSON mode is required. Use --json flag.")


def configure_logging(config: LogoneConfig) -> None:
    """Send logone's own log records to stderr through Rich."""
    logging.basicConfig(
        level=config.effective_log_level,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def build_dispatcher(config: LogoneConfig, console: Console | None = None) -> PresentationDispatcher:
    """Create the dispatcher with the terminal sink."""
    console = console or Console(no_color=not config.color, highlight=False)
    dispatcher = PresentationDispatcher()
    dispatcher.register_sink(
        TerminalSink(
            console,
            MonitorRenderer(colored=config.color),
            refresh_per_second=config.refresh_per_second,
        )
    )
    return dispatcher


def run_cmd(
    json_mode: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Enable JSON parsing mode (required).",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output.",
    ),
    level: Optional[VerbosityMode] = typer.Option(
        None,
        "--level",
        "-l",
        case_sensitive=False,
        help="Verbosity: cargo (compiler output only, the default), errors, or verbose.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Log dropped and unhandled events to stderr.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Render a build's @nix / @cargo event stream read from stdin."""
    try:
        require_json_mode(json_mode)
    except ConfigurationError as exc:
        err_console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1)

    overrides: dict[str, object] = {}
    if no_color:
        overrides["color"] = False
    if level is not None:
        overrides["level"] = level
    if debug:
        overrides["debug"] = True
    config = LogoneConfig().model_copy(update=overrides)

    configure_logging(config)
    dispatcher = build_dispatcher(config)
    router = Router(dispatcher, config)

    try:
        run_stream(sys.stdin, router)
    except KeyboardInterrupt:
        dispatcher.close()
        raise typer.Exit(code=130)
    except (OSError, UnicodeDecodeError) as exc:
        # Read error, including undecodable input: abort without flushing open units.
        dispatcher.close()
        err_console.print(f"[bold red]Read error:[/bold red] {exc}")
        raise typer.Exit(code=1)
