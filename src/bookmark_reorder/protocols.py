"""Protocols for the collaborators the reordering engine depends on."""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from bookmark_reorder.models.node import MoveDestination, MoveResult, Node, TelemetryEvent

Clock = Callable[[], float]


@runtime_checkable
class StoreProtocol(Protocol):
    """Protocol for the ordered bookmark store."""

    def get_tree(self) -> list[Node]:
        """Return every node, parents before their children."""
        ...

    async def move(self, node_id: str, destination: MoveDestination) -> MoveResult:
        """Move a node and report where it actually ended up."""
        ...


@runtime_checkable
class TelemetrySinkProtocol(Protocol):
    """Protocol for telemetry sinks. Must return promptly."""

    def record(self, event: TelemetryEvent) -> None:
        """Accept one telemetry event."""
        ...
