"""Move execution against the store with optimistic local update."""

from typing import TYPE_CHECKING, NoReturn

from bookmark_reorder.core.drag.index_translator import is_noop, translate
from bookmark_reorder.core.tree.collection import OrderedCollectionModel
from bookmark_reorder.errors import StoreError, ValidationError
from bookmark_reorder.logging_config import component_logger
from bookmark_reorder.models.node import (
    DragSession,
    InsertionPoint,
    MoveDestination,
    MoveOutcome,
    MoveRequest,
    MoveResult,
    SourceSnapshot,
)
from bookmark_reorder.protocols import StoreProtocol
from bookmark_reorder.telemetry import Telemetry

if TYPE_CHECKING:
    from loguru import Logger


def build_request(source: SourceSnapshot, point: InsertionPoint) -> MoveRequest:
    return MoveRequest(
        node_id=source.node_id,
        from_parent_id=source.parent_id,
        from_index=source.index,
        to_parent_id=point.container_id,
        requested_visual_index=point.visual_index,
    )


class MoveExecutor:
    """Turns a drop into exactly one store move.

    The model is updated before the store answers. A successful answer is
    reconciled into the model; a failed or inconsistent one rolls the model
    back to the session's snapshot and raises StoreError. Nothing is retried.
    """

    def __init__(
        self,
        store: StoreProtocol,
        model: OrderedCollectionModel,
        *,
        telemetry: Telemetry | None = None,
        log: "Logger | None" = None,
    ) -> None:
        self.store = store
        self.model = model
        self.telemetry = telemetry or Telemetry()
        self.logger = log or component_logger("executor")

    async def execute(self, session: DragSession, point: InsertionPoint) -> MoveOutcome:
        """Move the session's node to ``point``.

        Raises:
            ValidationError: the move is illegal; nothing was changed.
            StoreError: the store failed; the model has been rolled back.
        """
        req = build_request(session.source, point)
        self.model.validate_move(req)
        adjusted = translate(req)

        if is_noop(req, adjusted):
            self.logger.debug(
                "Drop of {} at {}[{}] leaves it in place, skipping store call",
                req.node_id,
                req.to_parent_id,
                req.requested_visual_index,
            )
            return MoveOutcome(request=req, adjusted_index=adjusted, noop=True)

        self.model.apply_optimistic_move(req, adjusted)
        session.optimistic_applied = True

        self.telemetry.emit(
            "move_attempt",
            session.session_id,
            node_id=req.node_id,
            parent_id=req.to_parent_id,
            index=adjusted,
            requested_visual_index=req.requested_visual_index,
        )
        try:
            result = await self.store.move(req.node_id, MoveDestination(req.to_parent_id, adjusted))
        except Exception as e:
            self._fail(session, req, f"Store move failed: {e}", cause=e)
        except BaseException:
            self._abandon(session, req)
            raise

        if not result.success:
            reason = result.error or "no reason given"
            self._fail(session, req, f"Store reported move failed: {reason}")
        if result.node_id != req.node_id:
            msg = f"Store answered for {result.node_id!r} instead of {req.node_id!r}"
            self._fail(session, req, msg)
        try:
            self.model.reconcile(result)
        except ValidationError as e:
            self._fail(session, req, f"Store returned an inconsistent result: {e}", cause=e)

        self._report(session, req, result)
        self.logger.info(
            "Moved {} to {}[{}]", req.node_id, result.final_parent_id, result.final_index
        )
        return MoveOutcome(request=req, adjusted_index=adjusted, noop=False, result=result)

    def _report(
        self,
        session: DragSession,
        req: MoveRequest,
        result: MoveResult | None,
        error: str | None = None,
    ) -> None:
        data: dict[str, object] = {"node_id": req.node_id, "success": error is None}
        if result is not None and error is None:
            data["final_parent_id"] = result.final_parent_id
            data["final_index"] = result.final_index
        if error is not None:
            data["error"] = error
        self.telemetry.emit("move_outcome", session.session_id, **data)

    def _abandon(self, session: DragSession, req: MoveRequest) -> None:
        """Undo the optimistic move when the wait for the store is interrupted."""
        self.model.rollback(session.source)
        session.optimistic_applied = False
        self._report(session, req, None, error="Move interrupted before the store answered")
        self.logger.warning("Move of {} interrupted, rolled back", req.node_id)

    def _fail(
        self,
        session: DragSession,
        req: MoveRequest,
        message: str,
        *,
        cause: Exception | None = None,
    ) -> NoReturn:
        self.model.rollback(session.source)
        session.optimistic_applied = False
        self._report(session, req, None, error=message)
        self.logger.error("{} (node {}), rolled back", message, req.node_id)
        raise StoreError(message, request=req) from cause
