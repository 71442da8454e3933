"""Verbosity configuration models."""

from __future__ import annotations

from enum import Enum


class VerbosityMode(str, Enum):
    """How much of the builder stream reaches the user.

    CARGO
        Only compiler-family output; builder units are never buffered.
    ERRORS
        Builder units are buffered; transcripts are shown only for units
        that failed.
    VERBOSE
        Every transcript is shown when its unit stops, and any unit still
        open at end of input is flushed at shutdown.
    """

    CARGO = "cargo"
    ERRORS = "errors"
    VERBOSE = "verbose"
