"""logone data models (Pydantic v2, value objects frozen)."""

from logone.models.config import VerbosityMode
from logone.models.events import (
    ACT_BUILD,
    ACT_BUILDS,
    CARGO_EXIT,
    CARGO_START,
    RES_BUILD_LOG_LINE,
    RES_PROGRESS,
    RES_SET_PHASE,
    Event,
    EventKind,
    Family,
)
from logone.models.stats import StatsSnapshot
from logone.models.units import (
    EXIT_CODE_STATES,
    BuildUnit,
    LogLine,
    LogLineKind,
    Transcript,
    UnitState,
)

__all__ = [
    # config
    "VerbosityMode",
    # events
    "Family",
    "EventKind",
    "Event",
    "ACT_BUILD",
    "ACT_BUILDS",
    "RES_BUILD_LOG_LINE",
    "RES_SET_PHASE",
    "RES_PROGRESS",
    "CARGO_START",
    "CARGO_EXIT",
    # units
    "UnitState",
    "EXIT_CODE_STATES",
    "LogLineKind",
    "LogLine",
    "BuildUnit",
    "Transcript",
    # stats
    "StatsSnapshot",
]
