"""Main Typer application — registers the CLI command.

Entry point: ``logone`` (configured via pyproject.toml console scripts).
With a single registered command Typer runs it directly, so the usual
invocation is ``nix build --log-format internal-json ... |& logone --json``.
"""

from __future__ import annotations

import typer

from logone.cli.commands.run import run_cmd

app = typer.Typer(
    name="logone",
    help="logone: condense a nix/cargo build event stream into one progress line.",
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="run", help="Read @nix / @cargo events from stdin and render them.")(run_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
