"""Verbosity policy — pure decisions keyed by the configured mode.

The policy is consulted at two points in a unit's lifecycle: at ingestion
(whether to buffer at all) and at flush time (whether the transcript is
shown or dropped unread).
"""

from __future__ import annotations

from logone.models.config import VerbosityMode

# Producer levels shown in verbose mode: warn, notice, info.
VERBOSE_MESSAGE_LEVELS = range(1, 4)


def buffers_builder_units(mode: VerbosityMode) -> bool:
    """Whether builder unit logs are buffered at all."""
    return mode != VerbosityMode.CARGO


def flush_on_stop(mode: VerbosityMode, failed: bool) -> bool:
    """Whether a stopped unit's transcript is shown (True) or discarded."""
    if mode == VerbosityMode.VERBOSE:
        return True
    if mode == VerbosityMode.ERRORS:
        return failed
    return False


def retains_stopped_units(mode: VerbosityMode) -> bool:
    """Whether a stopped unit that was not shown keeps its buffer.

    Failure messages usually arrive after the unit stops, so errors mode
    holds the transcript until a message is attributed to it or input ends.
    """
    return mode == VerbosityMode.ERRORS


def flush_on_shutdown(mode: VerbosityMode) -> bool:
    """Whether units still open at end of input are force-flushed."""
    return mode == VerbosityMode.VERBOSE


def attributes_failures(mode: VerbosityMode) -> bool:
    """Whether messages are correlated back to units."""
    return mode == VerbosityMode.ERRORS


def show_message(mode: VerbosityMode, level: int, is_failure: bool) -> bool:
    """Whether a builder message is printed immediately."""
    if mode == VerbosityMode.ERRORS:
        return is_failure
    if mode == VerbosityMode.VERBOSE:
        return level in VERBOSE_MESSAGE_LEVELS
    return False


def shows_compiler_diagnostics(mode: VerbosityMode) -> bool:
    """Compiler diagnostics are visible in every mode."""
    return True
