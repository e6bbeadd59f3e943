"""Exception hierarchy for the reordering engine."""

from bookmark_reorder.models.node import MoveRequest


class ReorderError(Exception):
    """Base class for all reordering failures."""


class ValidationError(ReorderError):
    """Malformed ids, out-of-range indices, or an operation in the wrong state.

    Always raised before anything is mutated.
    """


class ConcurrencyError(ReorderError):
    """A drag session was started while another one is still active."""


class StoreError(ReorderError):
    """The store's move call failed or answered inconsistently.

    The optimistic mutation has already been rolled back when this is raised.
    """

    def __init__(self, message: str, *, request: MoveRequest | None = None) -> None:
        super().__init__(message)
        self.request = request


class CancelledError(ReorderError):
    """A session ended by cancellation. A normal terminal state, not a failure."""
