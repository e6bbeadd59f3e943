"""Drag session state machine.

    IDLE -> ARMED -> DRAGGING <-> HOVERING_ZONE -> DROPPING -> ENDED -> IDLE

A controller runs at most one session at a time and is the only component
that starts a move. Every state change, including the single terminal one, is
reported to the telemetry sink.
"""

import math
import time
import uuid
from typing import TYPE_CHECKING

from bookmark_reorder.config import DRAG_THRESHOLD_PX
from bookmark_reorder.core.drag.insertion import InsertionPointResolver
from bookmark_reorder.core.tree.collection import OrderedCollectionModel
from bookmark_reorder.core.write.executor import MoveExecutor
from bookmark_reorder.errors import CancelledError, ConcurrencyError, ValidationError
from bookmark_reorder.logging_config import component_logger
from bookmark_reorder.models.node import (
    Bounds,
    DragSession,
    EndReason,
    InsertionPoint,
    MoveOutcome,
    SessionState,
)
from bookmark_reorder.protocols import Clock, StoreProtocol, TelemetrySinkProtocol
from bookmark_reorder.telemetry import Telemetry

if TYPE_CHECKING:
    from collections.abc import Sequence

    from loguru import Logger

_HOVERABLE = (SessionState.DRAGGING, SessionState.HOVERING_ZONE)


class DragSessionController:
    """Coordinates pointer input, hovered zones and the drop of one drag at a time.

    Args:
        store: Ordered store moves are sent to.
        model: Mirror of the store's tree; seeded from ``store.get_tree()`` if omitted.
        telemetry_sink: Receives one event per transition, move attempt and outcome.
        clock: Time source for session start and event timestamps.
        log: Logger; each component derives its own when not given.
        drag_threshold: Pointer travel needed before an armed session drags.
    """

    def __init__(
        self,
        store: StoreProtocol,
        model: OrderedCollectionModel | None = None,
        *,
        telemetry_sink: TelemetrySinkProtocol | None = None,
        clock: Clock = time.time,
        log: "Logger | None" = None,
        drag_threshold: float = DRAG_THRESHOLD_PX,
    ) -> None:
        self.logger = log or component_logger("session")
        self.model = model if model is not None else OrderedCollectionModel.from_store(store)
        self.resolver = InsertionPointResolver(self.model)
        self.telemetry = Telemetry(telemetry_sink, clock=clock, log=self.logger)
        self.executor = MoveExecutor(store, self.model, telemetry=self.telemetry)
        self.clock = clock
        self.drag_threshold = drag_threshold
        self._session: DragSession | None = None
        self.last_session: DragSession | None = None

    @property
    def session(self) -> DragSession | None:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._session.state if self._session else SessionState.IDLE

    @property
    def active(self) -> bool:
        return self._session is not None

    # --- Input events ---

    def begin(self, source_node_id: str, origin: tuple[float, float] = (0.0, 0.0)) -> DragSession:
        """Arm a session for ``source_node_id``.

        Raises:
            ConcurrencyError: another session has not ended yet.
            ValidationError: the node is unknown or is the root.
        """
        if self._session is not None:
            msg = (
                f"Drag session {self._session.session_id} is still "
                f"{self._session.state.value}, cannot start another"
            )
            raise ConcurrencyError(msg)

        snapshot = self.model.capture(source_node_id)
        session = DragSession(
            session_id=uuid.uuid4().hex,
            source=snapshot,
            started_at=self.clock(),
            origin=origin,
        )
        self._session = session
        self._transition(session, SessionState.ARMED, node_id=snapshot.node_id)
        return session

    def pointer_move(self, x: float, y: float) -> SessionState:
        """Feed a pointer sample; an armed session starts dragging past the threshold."""
        session = self._session
        if session is not None and session.state is SessionState.ARMED:
            ox, oy = session.origin
            if math.hypot(x - ox, y - oy) > self.drag_threshold:
                self._transition(session, SessionState.DRAGGING)
        return self.state

    def hover(self, zone: InsertionPoint | str) -> InsertionPoint:
        """Record the zone under the pointer.

        A bare container id stands for the point after its last child.
        Hovering the same zone again changes nothing.

        Raises:
            ValidationError: no dragging session, unknown container, an
                out-of-range point, or a container hovered over its own subtree.
        """
        session = self._require(_HOVERABLE, "hover")
        point = self.resolver.append_point(zone) if isinstance(zone, str) else zone
        self._check_zone(session, point)

        if session.state is SessionState.HOVERING_ZONE and session.last_hover == point:
            return point
        session.last_hover = point
        self._transition(
            session,
            SessionState.HOVERING_ZONE,
            container_id=point.container_id,
            visual_index=point.visual_index,
        )
        return point

    def hover_at(
        self,
        container_id: str,
        pointer: float,
        sibling_bounds: "Sequence[Bounds]",
    ) -> InsertionPoint:
        """Resolve the pointer over a rendered sibling list, then hover there."""
        self._require(_HOVERABLE, "hover")
        return self.hover(self.resolver.resolve(container_id, pointer, sibling_bounds))

    def leave(self, zone: InsertionPoint | str) -> None:
        """The pointer left ``zone``; forget it if it is the hovered one."""
        session = self._session
        if session is None or session.state is not SessionState.HOVERING_ZONE:
            return
        hovered = session.last_hover
        if hovered is None:
            return
        if zone == hovered or zone == hovered.container_id:
            session.last_hover = None
            self._transition(session, SessionState.DRAGGING)

    async def drop(self) -> MoveOutcome | None:
        """Release over the hovered zone and carry out the move.

        A drop outside any zone, or a release before the drag threshold was
        crossed, cancels the session and returns None.

        Raises:
            ValidationError: nothing is being dragged, or the move is illegal.
            StoreError: the store rejected the move; the model was rolled back.
        """
        session = self._require((*_HOVERABLE, SessionState.ARMED), "drop")
        if session.state is not SessionState.HOVERING_ZONE or session.last_hover is None:
            self.cancel()
            return None

        point = session.last_hover
        self._transition(session, SessionState.DROPPING)
        try:
            outcome = await self.executor.execute(session, point)
        except BaseException as e:
            # Task cancellation too: the session must end and free the controller.
            self._end(session, EndReason.ERROR, error=str(e) or type(e).__name__)
            raise

        self._end(
            session,
            EndReason.SUCCESS,
            noop=outcome.noop,
            adjusted_index=outcome.adjusted_index,
        )
        return outcome

    def cancel(self) -> bool:
        """Cancel the active session.

        While a move is in flight the call is not aborted: the request is noted
        and the session ends with the move's own outcome.

        Returns:
            True if the session ended here.
        """
        session = self._session
        if session is None:
            return False
        if session.state is SessionState.DROPPING:
            session.cancel_requested = True
            self.telemetry.emit("cancel_deferred", session.session_id)
            self.logger.debug("Cancel of {} deferred until the move settles", session.session_id)
            return False

        if session.optimistic_applied:
            self.model.rollback(session.source)
            session.optimistic_applied = False
        reason = CancelledError(f"Drag of {session.source.node_id} cancelled")
        self._end(session, EndReason.CANCELLED, error=str(reason))
        return True

    # --- Internals ---

    def _require(self, states: tuple[SessionState, ...], action: str) -> DragSession:
        session = self._session
        if session is None or session.state not in states:
            msg = f"Cannot {action} while {self.state.value}"
            raise ValidationError(msg)
        return session

    def _check_zone(self, session: DragSession, point: InsertionPoint) -> None:
        if not self.model.is_container(point.container_id):
            msg = f"Unknown container id: {point.container_id!r}"
            raise ValidationError(msg)
        count = self.model.child_count(point.container_id)
        if not 0 <= point.visual_index <= count:
            msg = (
                f"Insertion point {point.visual_index} out of range 0..{count} "
                f"for {point.container_id!r}"
            )
            raise ValidationError(msg)
        source_id = session.source.node_id
        if self.model.is_container(source_id) and (
            point.container_id == source_id
            or self.model.is_descendant(point.container_id, source_id)
        ):
            msg = f"Cannot drop container {source_id!r} into its own subtree"
            raise ValidationError(msg)

    def _transition(self, session: DragSession, new_state: SessionState, **data: object) -> None:
        old_state = session.state
        session.state = new_state
        self.telemetry.emit(
            "transition",
            session.session_id,
            from_state=old_state.value,
            to_state=new_state.value,
            **data,
        )

    def _end(self, session: DragSession, reason: EndReason, **data: object) -> None:
        session.end_reason = reason
        self._transition(
            session,
            SessionState.ENDED,
            reason=reason.value,
            cancel_requested=session.cancel_requested,
            **data,
        )
        if reason is EndReason.ERROR:
            self.logger.warning(
                "Drag session {} ended with an error: {}", session.session_id, data.get("error")
            )
        else:
            self.logger.debug("Drag session {} ended: {}", session.session_id, reason.value)
        self.last_session = session
        self._session = None
        self.telemetry.emit(
            "transition",
            session.session_id,
            from_state=SessionState.ENDED.value,
            to_state=SessionState.IDLE.value,
        )


async def drag_to(
    controller: DragSessionController,
    node_id: str,
    point: InsertionPoint | str,
) -> MoveOutcome | None:
    """Play a complete gesture: press on ``node_id``, move past the threshold, drop on ``point``."""
    controller.begin(node_id, origin=(0.0, 0.0))
    controller.pointer_move(controller.drag_threshold + 1, 0.0)
    try:
        controller.hover(point)
    except ValidationError:
        controller.cancel()
        raise
    return await controller.drop()
