"""Domain models for the bookmark reordering engine."""

from dataclasses import dataclass, field
from enum import Enum


class NodeKind(str, Enum):
    """Whether a node owns children."""

    CONTAINER = "container"
    ITEM = "item"


class SessionState(str, Enum):
    """Lifecycle states of a drag session."""

    IDLE = "idle"
    ARMED = "armed"
    DRAGGING = "dragging"
    HOVERING_ZONE = "hovering_zone"
    DROPPING = "dropping"
    ENDED = "ended"


class EndReason(str, Enum):
    """How a drag session terminated."""

    SUCCESS = "success"
    CANCELLED = "cancelled"
    ERROR = "error"


@dataclass(frozen=True)
class Node:
    """A single container or item in the bookmark tree."""

    id: str
    parent_id: str | None
    kind: NodeKind
    index: int
    title: str
    url: str | None = None

    @property
    def is_container(self) -> bool:
        return self.kind is NodeKind.CONTAINER


@dataclass(frozen=True)
class InsertionPoint:
    """A gap among a container's current children (0 = before the first)."""

    container_id: str
    visual_index: int


@dataclass(frozen=True)
class Bounds:
    """Extent of one rendered sibling along the list's primary axis."""

    start: float
    end: float

    @property
    def midpoint(self) -> float:
        return (self.start + self.end) / 2


@dataclass(frozen=True)
class SourceSnapshot:
    """Where the dragged node was when the session began.

    ``sibling_ids`` is the full child order of ``parent_id`` at that moment,
    the dragged node included.
    """

    node_id: str
    parent_id: str
    index: int
    kind: NodeKind
    sibling_ids: tuple[str, ...]


@dataclass(frozen=True)
class MoveRequest:
    """A single drop, expressed against the pre-move sibling lists."""

    node_id: str
    from_parent_id: str
    from_index: int
    to_parent_id: str
    requested_visual_index: int


@dataclass(frozen=True)
class MoveDestination:
    """Argument of the store's move call."""

    parent_id: str
    index: int


@dataclass(frozen=True)
class MoveResult:
    """Authoritative outcome of a move as reported by the store."""

    node_id: str
    final_parent_id: str
    final_index: int
    success: bool = True
    error: str | None = None


@dataclass(frozen=True)
class MoveOutcome:
    """What a completed drop hands back to its caller.

    ``result`` is None exactly when the drop was a no-op.
    """

    request: MoveRequest
    adjusted_index: int
    noop: bool
    result: MoveResult | None = None


@dataclass
class DragSession:
    """One drag gesture, from arming to its terminal state."""

    session_id: str
    source: SourceSnapshot
    started_at: float
    origin: tuple[float, float] = (0.0, 0.0)
    last_hover: InsertionPoint | None = None
    state: SessionState = SessionState.IDLE
    end_reason: EndReason | None = None
    optimistic_applied: bool = False
    cancel_requested: bool = False


@dataclass(frozen=True)
class TelemetryEvent:
    """A single record handed to the telemetry sink."""

    kind: str
    session_id: str | None
    timestamp: float
    data: dict[str, object] = field(default_factory=dict)
