"""Translate a visual insertion point into the index the store must receive.

Insertion points are counted against the sibling list as rendered, with the
dragged node still in it. The store inserts into the list after the node has
been removed, so within one container every point past the node's own
position shifts left by one.
"""

from bookmark_reorder.errors import ValidationError
from bookmark_reorder.models.node import MoveRequest


def adjusted_index(
    from_parent_id: str,
    from_index: int,
    to_parent_id: str,
    requested_visual_index: int,
) -> int:
    """Return the post-removal index that lands the node at the requested gap."""
    if from_index < 0 or requested_visual_index < 0:
        msg = f"Negative index: from_index={from_index}, requested={requested_visual_index}"
        raise ValidationError(msg)
    if to_parent_id != from_parent_id:
        return requested_visual_index
    if requested_visual_index > from_index:
        return requested_visual_index - 1
    return requested_visual_index


def translate(req: MoveRequest) -> int:
    return adjusted_index(
        req.from_parent_id, req.from_index, req.to_parent_id, req.requested_visual_index
    )


def is_noop(req: MoveRequest, adjusted: int | None = None) -> bool:
    """True when the drop leaves the node where it already is.

    Dropping on the gap just before or just after the node itself both end up
    here.
    """
    if adjusted is None:
        adjusted = translate(req)
    return req.to_parent_id == req.from_parent_id and adjusted == req.from_index
