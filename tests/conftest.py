"""Shared test fixtures for logone."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from typing import Any

import pytest

from logone.config import LogoneConfig
from logone.core.attributor import FailureAttributor
from logone.core.unit_registry import UnitRegistry
from logone.models.config import VerbosityMode
from logone.models.events import Family
from logone.models.units import LogLine
from logone.routing.dispatcher import PresentationDispatcher
from logone.routing.router import Router


class RecordingSink:
    """A presentation sink that records every call it receives."""

    def __init__(self, name: str = "recording") -> None:
        self._name = name
        self.progress: list[tuple[int, int, int, list[str], int]] = []
        self.transcripts: list[tuple[str, list[LogLine]]] = []
        self.messages: list[tuple[int, str, str | None]] = []
        self.closed = 0

    @property
    def sink_name(self) -> str:
        return self._name

    def show_progress(
        self,
        done: int,
        expected: int,
        running: int,
        active_targets: Sequence[str],
        failed: int = 0,
    ) -> None:
        self.progress.append((done, expected, running, list(active_targets), failed))

    def show_transcript(self, unit_name: str, lines: Sequence[LogLine]) -> None:
        self.transcripts.append((unit_name, list(lines)))

    def show_message(self, level: int, text: str, file: str | None = None) -> None:
        self.messages.append((level, text, file))

    def close(self) -> None:
        self.closed += 1

    def transcript_texts(self, unit_name: str) -> list[str]:
        for name, lines in self.transcripts:
            if name == unit_name:
                return [line.text for line in lines]
        raise AssertionError(f"No transcript for {unit_name!r}")


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def make_sink() -> Callable[[str], RecordingSink]:
    """Factory fixture: build named recording sinks."""
    return RecordingSink


@pytest.fixture
def dispatcher(recording_sink: RecordingSink) -> PresentationDispatcher:
    """A dispatcher wired to a single recording sink."""
    return PresentationDispatcher([recording_sink])


@pytest.fixture
def make_router(
    dispatcher: PresentationDispatcher,
) -> Callable[..., Router]:
    """Factory fixture: build a Router for a verbosity mode."""

    def _factory(mode: VerbosityMode = VerbosityMode.VERBOSE, **config: Any) -> Router:
        return Router(dispatcher, LogoneConfig(level=mode, **config))

    return _factory


@pytest.fixture
def builder_registry() -> UnitRegistry:
    return UnitRegistry(Family.BUILDER)


@pytest.fixture
def attributor() -> FailureAttributor:
    return FailureAttributor()


# ---------------------------------------------------------------------------
# Wire-format line factories
# ---------------------------------------------------------------------------


def nix(**payload: Any) -> str:
    """Build a ``@nix`` line from keyword fields."""
    return "@nix " + json.dumps(payload)


def cargo(**payload: Any) -> str:
    """Build a ``@cargo`` line from keyword fields."""
    return "@cargo " + json.dumps(payload)


@pytest.fixture
def nix_line() -> Callable[..., str]:
    return nix


@pytest.fixture
def cargo_line() -> Callable[..., str]:
    return cargo


@pytest.fixture
def unit_lines() -> Callable[..., list[str]]:
    """Factory fixture: a full start/line*/stop sequence for one builder unit."""

    def _factory(unit_id: int, name: str, lines: Sequence[str], *, stop: bool = True) -> list[str]:
        result = [nix(action="start", id=unit_id, type=105, text=name)]
        result.extend(
            nix(action="result", id=unit_id, type=101, fields=[text]) for text in lines
        )
        if stop:
            result.append(nix(action="stop", id=unit_id))
        return result

    return _factory
