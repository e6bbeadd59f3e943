"""Tests for pointer to insertion point resolution."""

import pytest

from bookmark_reorder.core.drag.insertion import InsertionPointResolver, resolve_visual_index
from bookmark_reorder.core.tree.collection import OrderedCollectionModel
from bookmark_reorder.errors import ValidationError
from bookmark_reorder.models.node import Bounds, InsertionPoint
from tests.unit.fakes import SPLIT_LAYOUT, make_nodes

# Four rows of 20px stacked from y=0; midpoints at 10, 30, 50, 70.
ROWS = [Bounds(0, 20), Bounds(20, 40), Bounds(40, 60), Bounds(60, 80)]


@pytest.mark.parametrize(
    ("pointer", "expected"),
    [
        (-50.0, 0),
        (5.0, 0),
        (10.5, 1),
        (29.0, 1),
        (45.0, 2),
        (69.9, 3),
        (75.0, 4),
        (500.0, 4),
    ],
)
def test_resolve_counts_passed_midpoints(pointer: float, expected: int) -> None:
    assert resolve_visual_index(pointer, ROWS) == expected


@pytest.mark.parametrize(("midpoint", "expected"), [(10.0, 0), (30.0, 1), (50.0, 2), (70.0, 3)])
def test_pointer_on_a_midpoint_takes_the_lower_point(midpoint: float, expected: int) -> None:
    assert resolve_visual_index(midpoint, ROWS) == expected


def test_resolve_returns_point_in_container(model: OrderedCollectionModel) -> None:
    resolver = InsertionPointResolver(model)
    assert resolver.resolve("root", 45.0, ROWS) == InsertionPoint("root", 2)


def test_resolve_follows_changed_geometry(model: OrderedCollectionModel) -> None:
    """The same pointer maps elsewhere once a sibling grows."""
    resolver = InsertionPointResolver(model)
    assert resolver.resolve("root", 45.0, ROWS).visual_index == 2

    expanded = [Bounds(0, 100), Bounds(100, 120), Bounds(120, 140), Bounds(140, 160)]
    assert resolver.resolve("root", 45.0, expanded).visual_index == 0


def test_resolve_rejects_stale_geometry(model: OrderedCollectionModel) -> None:
    resolver = InsertionPointResolver(model)
    with pytest.raises(ValidationError, match="bounds for 3 siblings"):
        resolver.resolve("root", 45.0, ROWS[:3])


def test_resolve_rejects_unknown_container(model: OrderedCollectionModel) -> None:
    with pytest.raises(ValidationError, match="Unknown container"):
        InsertionPointResolver(model).resolve("nope", 0.0, [])


def test_enumerate_gives_count_plus_one_points(model: OrderedCollectionModel) -> None:
    points = InsertionPointResolver(model).enumerate("root")
    assert [p.visual_index for p in points] == [0, 1, 2, 3, 4]
    assert all(p.container_id == "root" for p in points)


def test_enumerate_empty_container_gives_single_point() -> None:
    model = OrderedCollectionModel(make_nodes(SPLIT_LAYOUT))
    assert InsertionPointResolver(model).enumerate("Y") == (InsertionPoint("Y", 0),)


def test_empty_container_resolves_to_zero() -> None:
    model = OrderedCollectionModel(make_nodes(SPLIT_LAYOUT))
    assert InsertionPointResolver(model).resolve("Y", 123.0, []) == InsertionPoint("Y", 0)
