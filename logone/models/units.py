"""Build unit lifecycle models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from logone.models.events import Family


class UnitState(str, Enum):
    """Lifecycle state of a build unit."""

    STARTED = "started"
    STOPPED = "stopped"
    FINISHED_WITH_SUCCESS = "finished_with_success"
    FINISHED_WITH_ERROR = "finished_with_error"


# Compiler exit code -> terminal state.  Any other code maps to STOPPED.
EXIT_CODE_STATES: dict[int, UnitState] = {
    0: UnitState.FINISHED_WITH_SUCCESS,
    1: UnitState.FINISHED_WITH_ERROR,
}


class LogLineKind(str, Enum):
    OUTPUT = "output"
    PHASE = "phase"
    OTHER = "other"


class LogLine(BaseModel):
    """A single buffered transcript line.  Immutable once appended."""

    model_config = ConfigDict(frozen=True)

    kind: LogLineKind = LogLineKind.OUTPUT
    text: str = ""


class BuildUnit(BaseModel):
    """One buildable artifact tracked by id between start and flush.

    ``failed`` is independent of ``state``: failure can be learned from an
    unrelated message that arrives while the unit is still running.
    """

    id: int
    name: str
    family: Family = Family.BUILDER
    buffer: list[LogLine] = []
    state: UnitState = UnitState.STARTED
    failed: bool = False


class Transcript(BaseModel):
    """The buffer of a unit, moved out of the registry by ``flush``."""

    model_config = ConfigDict(frozen=True)

    unit_id: int
    unit_name: str
    lines: list[LogLine] = []
    failed: bool = False
