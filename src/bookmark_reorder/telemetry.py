"""Telemetry sinks and the emitter the engine reports through."""

import time
from typing import TYPE_CHECKING

from bookmark_reorder.logging_config import component_logger
from bookmark_reorder.models.node import TelemetryEvent
from bookmark_reorder.protocols import Clock, TelemetrySinkProtocol

if TYPE_CHECKING:
    from loguru import Logger


class NullTelemetrySink:
    """Discards every event."""

    def record(self, event: TelemetryEvent) -> None:
        pass


class RecordingTelemetrySink:
    """Keeps events in memory, in arrival order."""

    def __init__(self) -> None:
        self.events: list[TelemetryEvent] = []

    def record(self, event: TelemetryEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: str) -> list[TelemetryEvent]:
        return [e for e in self.events if e.kind == kind]


class LogTelemetrySink:
    """Writes each event to the log as a structured debug record."""

    def __init__(self, log: "Logger | None" = None) -> None:
        self.logger = log or component_logger("telemetry")

    def record(self, event: TelemetryEvent) -> None:
        self.logger.bind(session_id=event.session_id, **event.data).debug(
            "{} {}", event.kind, event.data
        )


class Telemetry:
    """Stamps events and hands them to a sink without letting it fail the caller."""

    def __init__(
        self,
        sink: TelemetrySinkProtocol | None = None,
        *,
        clock: Clock = time.time,
        log: "Logger | None" = None,
    ) -> None:
        self.sink = sink or NullTelemetrySink()
        self.clock = clock
        self.logger = log or component_logger("telemetry")

    def emit(self, kind: str, session_id: str | None, **data: object) -> None:
        event = TelemetryEvent(kind=kind, session_id=session_id, timestamp=self.clock(), data=data)
        try:
            self.sink.record(event)
        except Exception:
            self.logger.opt(exception=True).warning("Telemetry sink failed on {} event", kind)
