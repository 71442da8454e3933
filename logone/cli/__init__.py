"""logone CLI — Typer-based command-line interface.

Provides the ``logone`` command.  All terminal output uses Rich.
"""
