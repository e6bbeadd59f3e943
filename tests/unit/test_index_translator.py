"""Tests for the visual-to-storage index translation."""

import pytest

from bookmark_reorder.core.drag.index_translator import adjusted_index, is_noop, translate
from bookmark_reorder.errors import ValidationError
from bookmark_reorder.models.node import MoveRequest


def test_forward_move_in_same_container_shifts_left() -> None:
    """Dragging A (0) to the gap between B and C lands at index 1."""
    assert adjusted_index("root", 0, "root", 2) == 1


def test_backward_move_in_same_container_is_unchanged() -> None:
    """Dragging D (3) to the gap between A and B lands at index 1."""
    assert adjusted_index("root", 3, "root", 1) == 1


def test_move_to_end_of_same_container() -> None:
    assert adjusted_index("root", 1, "root", 4) == 3


@pytest.mark.parametrize("k", [0, 1, 2, 3])
def test_gaps_around_the_node_itself_translate_to_its_own_index(k: int) -> None:
    assert adjusted_index("root", k, "root", k) == k
    assert adjusted_index("root", k, "root", k + 1) == k


@pytest.mark.parametrize("k", [0, 1, 2, 3])
def test_gaps_around_the_node_itself_are_noops(k: int) -> None:
    for requested in (k, k + 1):
        req = MoveRequest("n", "root", k, "root", requested)
        assert is_noop(req)


def test_other_gaps_are_not_noops() -> None:
    assert not is_noop(MoveRequest("n", "root", 1, "root", 0))
    assert not is_noop(MoveRequest("n", "root", 1, "root", 3))


def test_cross_container_never_corrects() -> None:
    for from_index in range(4):
        for requested in range(6):
            assert adjusted_index("X", from_index, "Y", requested) == requested


def test_cross_container_same_index_is_not_a_noop() -> None:
    req = MoveRequest("n", "X", 2, "Y", 2)
    assert translate(req) == 2
    assert not is_noop(req)


def test_negative_indices_are_rejected() -> None:
    with pytest.raises(ValidationError):
        adjusted_index("root", 0, "root", -1)
    with pytest.raises(ValidationError):
        adjusted_index("root", -1, "root", 0)
