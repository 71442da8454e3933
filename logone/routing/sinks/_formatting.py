"""Shared plain-text formatting helpers for logone sinks.

Keeps the progress line, message and transcript wording in one place for
the terminal renderer.
"""

from __future__ import annotations

from collections.abc import Sequence


def format_progress_base(done: int, expected: int, running: int, failed: int) -> str:
    """Return the bracketed counter block of the progress line.

    Examples
    --------
    >>> format_progress_base(5, 10, 2, 0)
    '[ 5 Done | 10 Expected | 2 Running | 0 Failed ]'
    """
    return f"[ {done} Done | {expected} Expected | {running} Running | {failed} Failed ]"


def crop_targets(targets: Sequence[str], space: int) -> str:
    """Join *targets* with ``", "``, stopping before the first one that overflows *space*.

    >>> crop_targets(["alpha", "beta", "gamma"], 13)
    'alpha, beta'
    """
    result = ""
    for name in targets:
        addition = name if not result else f", {name}"
        if len(result) + len(addition) > space:
            break
        result += addition
    return result


def targets_for_width(base: str, targets: Sequence[str], width: int) -> str:
    """Crop the target list to what fits after *base* on a *width*-column line."""
    if not targets or width <= len(base) + 1:
        return ""
    return crop_targets(targets, width - len(base) - 1)


def format_progress_line(
    done: int,
    expected: int,
    running: int,
    failed: int,
    targets: Sequence[str],
    width: int = 80,
) -> str:
    base = format_progress_base(done, expected, running, failed)
    shown = targets_for_width(base, targets, width)
    return f"{base} {shown}" if shown else base


def format_message(text: str, file: str | None = None) -> str:
    """Prefix *text* with its source file when one is known."""
    return f"{file}: {text}" if file else text


def format_transcript_header(unit_name: str) -> str:
    return f"Build log for '{unit_name}':"
