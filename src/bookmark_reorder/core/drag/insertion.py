"""Resolve a pointer position over a sibling list to an insertion point."""

from collections.abc import Sequence

from bookmark_reorder.core.tree.collection import OrderedCollectionModel
from bookmark_reorder.errors import ValidationError
from bookmark_reorder.models.node import Bounds, InsertionPoint


def resolve_visual_index(pointer: float, sibling_bounds: Sequence[Bounds]) -> int:
    """Count the sibling midpoints the pointer has strictly passed.

    A pointer exactly on a midpoint has not passed it, so it resolves to the
    lower of the two candidate points.
    """
    visual_index = 0
    for bounds in sibling_bounds:
        if pointer > bounds.midpoint:
            visual_index += 1
        else:
            break
    return visual_index


class InsertionPointResolver:
    """Turns pointer locations into insertion points for one model.

    Nothing is cached: sibling geometry may change between two hover ticks
    (a container expanding, for instance), so every call works from the
    bounds it is given.
    """

    def __init__(self, model: OrderedCollectionModel) -> None:
        self.model = model

    def resolve(
        self,
        container_id: str,
        pointer: float,
        sibling_bounds: Sequence[Bounds],
    ) -> InsertionPoint:
        """Resolve ``pointer`` (primary axis) over the container's rendered children.

        Args:
            container_id: Container whose children are rendered.
            pointer: Pointer coordinate along the list's primary axis.
            sibling_bounds: One extent per child, in sibling order.

        Raises:
            ValidationError: unknown container, or geometry for a different
                number of children than the container currently has.
        """
        if not self.model.is_container(container_id):
            msg = f"Unknown container id: {container_id!r}"
            raise ValidationError(msg)
        count = self.model.child_count(container_id)
        if len(sibling_bounds) != count:
            msg = f"Got bounds for {len(sibling_bounds)} siblings, {container_id!r} has {count}"
            raise ValidationError(msg)
        return InsertionPoint(container_id, resolve_visual_index(pointer, sibling_bounds))

    def enumerate(self, container_id: str) -> tuple[InsertionPoint, ...]:
        """All ``count + 1`` insertion points of a container, ends included."""
        count = self.model.child_count(container_id)
        return tuple(InsertionPoint(container_id, i) for i in range(count + 1))

    def append_point(self, container_id: str) -> InsertionPoint:
        """The point after the last child, used when hovering a container itself."""
        return InsertionPoint(container_id, self.model.child_count(container_id))
