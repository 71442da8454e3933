"""Tests for the Router: per-mode behaviour and stop resolution."""

from __future__ import annotations

import pytest

from logone.models.config import VerbosityMode
from logone.models.units import LogLineKind


def _feed(router, lines):
    for line in lines:
        router.route_line(line)


# ---------------------------------------------------------------------------
# Verbose mode
# ---------------------------------------------------------------------------


class TestVerboseMode:
    def test_transcript_shown_once_at_stop(self, make_router, recording_sink, unit_lines):
        router = make_router(VerbosityMode.VERBOSE)
        _feed(router, unit_lines(1, "unit-A", ["hello", "world"]))

        assert recording_sink.transcript_texts("unit-A") == ["hello", "world"]
        assert len(recording_sink.transcripts) == 1

    def test_second_stop_is_noop(self, make_router, recording_sink, unit_lines, nix_line):
        router = make_router(VerbosityMode.VERBOSE)
        _feed(router, unit_lines(1, "unit-A", ["x"]))
        router.route_line(nix_line(action="stop", id=1))
        assert len(recording_sink.transcripts) == 1

    def test_phase_lines(self, make_router, recording_sink, nix_line):
        router = make_router(VerbosityMode.VERBOSE)
        _feed(
            router,
            [
                nix_line(action="start", id=1, type=105, text="unit-A"),
                nix_line(action="result", id=1, type=104, fields=["buildPhase"]),
                nix_line(action="result", id=1, type=104, fields=[]),
                nix_line(action="stop", id=1),
            ],
        )
        _, lines = recording_sink.transcripts[0]
        assert [line.text for line in lines] == ["Phase: buildPhase", "Phase: unknown"]
        assert all(line.kind == LogLineKind.PHASE for line in lines)

    def test_shutdown_flushes_open_units_in_start_order(
        self, make_router, recording_sink, unit_lines
    ):
        router = make_router(VerbosityMode.VERBOSE)
        _feed(router, unit_lines(2, "second", ["b"], stop=False))
        _feed(router, unit_lines(1, "first", ["a"], stop=False))
        router.shutdown()

        assert [name for name, _ in recording_sink.transcripts] == ["second", "first"]
        assert recording_sink.closed == 1

    def test_shutdown_is_idempotent(self, make_router, recording_sink):
        router = make_router(VerbosityMode.VERBOSE)
        router.shutdown()
        router.shutdown()
        assert recording_sink.closed == 1

    def test_messages_shown_by_level(self, make_router, recording_sink, nix_line):
        router = make_router(VerbosityMode.VERBOSE)
        for level in range(5):
            router.route_line(nix_line(action="msg", level=level, msg=f"m{level}"))
        assert [m[1] for m in recording_sink.messages] == ["m1", "m2", "m3"]

    def test_message_file_is_passed_through(self, make_router, recording_sink, nix_line):
        router = make_router(VerbosityMode.VERBOSE)
        router.route_line(nix_line(action="msg", level=1, msg="odd", file="default.nix"))
        assert recording_sink.messages == [(1, "odd", "default.nix")]


# ---------------------------------------------------------------------------
# Errors mode
# ---------------------------------------------------------------------------


class TestErrorsMode:
    def test_failed_unit_transcript_shown(self, make_router, recording_sink, unit_lines, nix_line):
        router = make_router(VerbosityMode.ERRORS)
        _feed(router, unit_lines(1, "unit-A", ["compiling", "oops"], stop=False))
        _feed(router, unit_lines(2, "unit-B", ["fine"], stop=False))
        router.route_line(nix_line(action="msg", level=0, msg="error: '/nix/store/unit-A.drv' failed"))
        router.route_line(nix_line(action="stop", id=1))
        router.route_line(nix_line(action="stop", id=2))
        router.shutdown()

        assert recording_sink.transcript_texts("unit-A") == ["compiling", "oops"]
        assert [name for name, _ in recording_sink.transcripts] == ["unit-A"]
        assert recording_sink.messages == [(0, "error: '/nix/store/unit-A.drv' failed", None)]

    def test_unfailed_unit_discarded(self, make_router, recording_sink, unit_lines):
        router = make_router(VerbosityMode.ERRORS)
        _feed(router, unit_lines(1, "unit-A", ["ok"]))
        # Held after stop in case a failure message names it later.
        assert router.context.builder_units.has_buffer(1)
        router.shutdown()
        assert recording_sink.transcripts == []
        assert len(router.context.builder_units) == 0

    def test_failure_reported_after_stop(self, make_router, recording_sink, unit_lines, nix_line):
        drv = "/nix/store/abc123-hello-0.1.0.drv"
        router = make_router(VerbosityMode.ERRORS)
        _feed(router, unit_lines(20, f"building '{drv}'", ["make: *** [all] Error 2"]))
        assert recording_sink.transcripts == []

        router.route_line(
            nix_line(action="msg", level=0, msg=f"error: builder for '{drv}' failed with exit code 1")
        )
        assert recording_sink.transcript_texts(f"building '{drv}'") == ["make: *** [all] Error 2"]
        assert recording_sink.messages == [
            (0, f"error: builder for '{drv}' failed with exit code 1", None)
        ]

        router.shutdown()
        assert len(recording_sink.transcripts) == 1

    def test_store_path_message_attributes_without_failure_wording(
        self, make_router, recording_sink, unit_lines, nix_line
    ):
        drv = "/nix/store/abc123-hello-0.1.0.drv"
        router = make_router(VerbosityMode.ERRORS)
        _feed(router, unit_lines(20, f"building '{drv}'", ["fetching"], stop=False))
        router.route_line(nix_line(action="msg", level=3, msg=f"note: {drv} output hash mismatch"))

        assert router.context.builder_units.is_failed(20)
        assert recording_sink.messages == []

        router.route_line(nix_line(action="stop", id=20))
        assert recording_sink.transcript_texts(f"building '{drv}'") == ["fetching"]

    def test_store_path_message_ignored_outside_errors_mode(
        self, make_router, recording_sink, unit_lines, nix_line
    ):
        drv = "/nix/store/abc123-hello-0.1.0.drv"
        router = make_router(VerbosityMode.VERBOSE)
        _feed(router, unit_lines(20, f"building '{drv}'", ["fetching"], stop=False))
        router.route_line(nix_line(action="msg", level=3, msg=f"note: {drv} output hash mismatch"))
        assert not router.context.builder_units.is_failed(20)

    def test_ambiguous_failure_attributes_nothing(
        self, make_router, recording_sink, unit_lines, nix_line
    ):
        router = make_router(VerbosityMode.ERRORS)
        _feed(router, unit_lines(1, "unit-A", ["a"], stop=False))
        _feed(router, unit_lines(2, "unit-B", ["b"], stop=False))
        router.route_line(nix_line(action="msg", level=0, msg="error: unit-A and unit-B failed"))
        _feed(router, [nix_line(action="stop", id=1), nix_line(action="stop", id=2)])
        assert recording_sink.transcripts == []

    def test_stop_payload_failure(self, make_router, recording_sink, nix_line):
        router = make_router(VerbosityMode.ERRORS)
        _feed(
            router,
            [
                nix_line(action="start", id=3, type=105, text="unit-C"),
                nix_line(action="result", id=3, type=101, fields=["boom"]),
                nix_line(action="stop", id=3, status="build failed"),
            ],
        )
        assert recording_sink.transcript_texts("unit-C") == ["boom"]

    def test_non_failure_messages_hidden(self, make_router, recording_sink, nix_line):
        router = make_router(VerbosityMode.ERRORS)
        router.route_line(nix_line(action="msg", level=3, msg="copying path"))
        assert recording_sink.messages == []


# ---------------------------------------------------------------------------
# Cargo mode
# ---------------------------------------------------------------------------


class TestCargoMode:
    def test_builder_output_suppressed(self, make_router, recording_sink, unit_lines, nix_line):
        router = make_router(VerbosityMode.CARGO)
        _feed(router, unit_lines(1, "unit-A", ["x"]))
        router.route_line(nix_line(action="msg", level=0, msg="error: boom"))
        router.shutdown()
        assert recording_sink.transcripts == []
        assert recording_sink.messages == []
        assert len(router.context.builder_units) == 0

    def test_compiler_diagnostics_still_shown(self, make_router, recording_sink, cargo_line):
        router = make_router(VerbosityMode.CARGO)
        router.route_line(cargo_line(action="start", type=0, id=1, crate_name="foo"))
        router.route_line(
            cargo_line(
                action="exit",
                type=2,
                id=1,
                crate_name="foo",
                exit_code=1,
                rendered_messages=["error[E0308]: mismatched types\n"],
            )
        )
        assert recording_sink.messages == [(0, "error[E0308]: mismatched types", None)]


# ---------------------------------------------------------------------------
# Stats stream
# ---------------------------------------------------------------------------


class TestStats:
    def test_update_renders_progress(self, make_router, recording_sink, nix_line):
        router = make_router()
        router.route_line(nix_line(action="start", id=9, type=104))
        router.route_line(nix_line(action="result", id=9, type=105, fields=[5, 10, 2, 0]))
        assert recording_sink.progress == [(5, 10, 2, [], 0)]

    def test_identical_update_renders_once(self, make_router, recording_sink, nix_line):
        router = make_router()
        router.route_line(nix_line(action="start", id=9, type=104))
        for _ in range(3):
            router.route_line(nix_line(action="result", id=9, type=105, fields=[5, 10, 2, 0]))
        assert len(recording_sink.progress) == 1

    def test_unregistered_stream_rejected(self, make_router, recording_sink, nix_line):
        router = make_router()
        router.route_line(nix_line(action="result", id=9, type=105, fields=[5, 10, 2, 0]))
        assert recording_sink.progress == []
        assert router.context.stats.snapshot.as_tuple() == (0, 0, 0, 0)

    @pytest.mark.parametrize("fields", [[1, 2, 3], [1, 2, 3, "x"], [1, 2, 3, True], "nope"])
    def test_malformed_counters_dropped(self, make_router, recording_sink, nix_line, fields):
        router = make_router()
        router.route_line(nix_line(action="start", id=9, type=104))
        router.route_line(nix_line(action="result", id=9, type=105, fields=fields))
        assert recording_sink.progress == []

    def test_stop_resolves_stats_stream_first(self, make_router, recording_sink, nix_line):
        router = make_router()
        _feed(
            router,
            [
                nix_line(action="start", id=4, type=104),
                nix_line(action="result", id=4, type=105, fields=[1, 1, 0, 0]),
                nix_line(action="stop", id=4),
                nix_line(action="result", id=4, type=105, fields=[2, 2, 0, 0]),
            ],
        )
        assert not router.context.stats.is_registered(4)
        assert router.context.stats.snapshot.as_tuple() == (1, 1, 0, 0)

    def test_stop_for_unknown_id_is_dropped(self, make_router, recording_sink, nix_line):
        router = make_router()
        router.route_line(nix_line(action="stop", id=77))
        assert recording_sink.transcripts == []
        assert recording_sink.progress == []


# ---------------------------------------------------------------------------
# Compiler events
# ---------------------------------------------------------------------------


class TestCompilerEvents:
    def test_targets_tracked_on_progress_line(self, make_router, recording_sink, cargo_line):
        router = make_router()
        router.route_line(cargo_line(action="start", type=0, id=1, crate_name="serde"))
        router.route_line(cargo_line(action="start", type=0, id=2, crate_name="anyhow"))
        router.route_line(cargo_line(action="exit", type=2, id=1, exit_code=0))

        assert [p[3] for p in recording_sink.progress] == [
            ["serde"],
            ["anyhow", "serde"],
            ["anyhow"],
        ]
        assert router.context.targets.names() == ["anyhow"]

    def test_repeated_target_shows_count(self, make_router, recording_sink, cargo_line):
        router = make_router()
        router.route_line(cargo_line(action="start", type=0, id=1, crate_name="serde"))
        router.route_line(cargo_line(action="start", type=0, id=2, crate_name="serde"))
        router.route_line(cargo_line(action="exit", type=2, id=2, exit_code=0))

        assert [p[3] for p in recording_sink.progress] == [
            ["serde"],
            ["serde (×2)"],
            ["serde"],
        ]

    def test_exit_flushes_compiler_unit(self, make_router, cargo_line):
        router = make_router()
        router.route_line(cargo_line(action="start", type=0, id=1, crate_name="foo"))
        router.route_line(cargo_line(action="exit", type=2, id=1, exit_code=0))
        assert len(router.context.compiler_units) == 0

    def test_diagnostic_levels(self, make_router, recording_sink, cargo_line):
        router = make_router()
        router.route_line(
            cargo_line(
                action="exit",
                type=2,
                id=1,
                crate_name="foo",
                rustc_exit_code=0,
                rustc_messages=[
                    {"rendered": "warning: unused variable\n", "level": "warning"},
                    {"rendered": "note: defined here\n", "level": "note"},
                ],
            )
        )
        assert recording_sink.messages == [
            (1, "warning: unused variable", None),
            (2, "note: defined here", None),
        ]

    def test_nested_compiler_event_in_builder_log(self, make_router, recording_sink, nix_line, cargo_line):
        router = make_router()
        router.route_line(nix_line(action="start", id=5, type=105, text="unit-A"))
        router.route_line(
            nix_line(
                action="result",
                id=5,
                type=101,
                fields=[cargo_line(action="start", type=0, crate_name="serde")],
            )
        )
        assert router.context.targets.names() == ["serde"]
        assert router.context.compiler_units.lookup_name_by_id(5) == "serde"
        # The captured line is a compiler event, not builder output.
        assert router.context.builder_units.get(5).buffer == []


# ---------------------------------------------------------------------------
# Robustness
# ---------------------------------------------------------------------------


class TestRobustness:
    def test_malformed_and_plain_lines(self, make_router, recording_sink):
        router = make_router()
        assert router.route_line("plain text") is None
        assert router.route_line("@nix {broken") is None
        assert router.route_line('@cargo {"no_action": 1}') is None
        assert recording_sink.messages == []

    def test_unrecognized_event_is_ignored(self, make_router, recording_sink, nix_line):
        router = make_router()
        event = router.route_line(nix_line(action="start", id=1, type=108))
        assert event is not None
        assert recording_sink.progress == []
        assert len(router.context.builder_units) == 0

    def test_failing_presentation_does_not_break_routing(self, nix_line, unit_lines):
        from logone.config import LogoneConfig
        from logone.routing.dispatcher import PresentationDispatcher
        from logone.routing.router import Router

        class ExplodingSink:
            sink_name = "exploding"

            def show_progress(self, *args):
                raise RuntimeError("boom")

            def show_transcript(self, *args):
                raise RuntimeError("boom")

            def show_message(self, *args):
                raise RuntimeError("boom")

            def close(self):
                raise RuntimeError("boom")

        router = Router(
            PresentationDispatcher([ExplodingSink()]),
            LogoneConfig(level=VerbosityMode.VERBOSE),
        )
        _feed(router, unit_lines(1, "unit-A", ["x"]))
        router.route_line(nix_line(action="msg", level=1, msg="warn"))
        router.shutdown()
        assert len(router.context.builder_units) == 0

    def test_mode_override(self, dispatcher):
        from logone.config import LogoneConfig
        from logone.routing.router import Router

        router = Router(dispatcher, LogoneConfig(level=VerbosityMode.CARGO), mode=VerbosityMode.ERRORS)
        assert router.mode == VerbosityMode.ERRORS
