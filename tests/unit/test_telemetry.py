"""Tests for telemetry emission."""

from bookmark_reorder.models.node import TelemetryEvent
from bookmark_reorder.telemetry import (
    LogTelemetrySink,
    NullTelemetrySink,
    RecordingTelemetrySink,
    Telemetry,
)
from tests.unit.fakes import FailingSink


def test_emit_stamps_event_with_clock() -> None:
    sink = RecordingTelemetrySink()
    telemetry = Telemetry(sink, clock=lambda: 42.5)

    telemetry.emit("move_attempt", "s1", node_id="A", index=2)

    assert sink.events == [
        TelemetryEvent(
            kind="move_attempt", session_id="s1", timestamp=42.5, data={"node_id": "A", "index": 2}
        )
    ]


def test_sink_failure_is_contained() -> None:
    sink = FailingSink()
    telemetry = Telemetry(sink)

    telemetry.emit("transition", "s1")
    telemetry.emit("transition", "s1")

    assert sink.attempts == 2


def test_default_sink_discards() -> None:
    telemetry = Telemetry()
    assert isinstance(telemetry.sink, NullTelemetrySink)
    telemetry.emit("transition", None)


def test_log_sink_accepts_events() -> None:
    event = TelemetryEvent(
        kind="transition", session_id="s1", timestamp=0.0, data={"to_state": "armed"}
    )
    LogTelemetrySink().record(event)


def test_of_kind_filters() -> None:
    sink = RecordingTelemetrySink()
    telemetry = Telemetry(sink)
    telemetry.emit("transition", "s1")
    telemetry.emit("move_outcome", "s1", success=True)
    assert [e.kind for e in sink.of_kind("move_outcome")] == ["move_outcome"]
