"""Shared test fixtures."""

import json
from pathlib import Path

import pytest

from bookmark_reorder.core.drag.session import DragSessionController
from bookmark_reorder.core.tree.collection import OrderedCollectionModel
from bookmark_reorder.models.node import Node
from bookmark_reorder.telemetry import RecordingTelemetrySink
from tests.unit.fakes import FLAT_LAYOUT, SAMPLE_BOOKMARKS, FakeStore, make_nodes


@pytest.fixture
def flat_nodes() -> list[Node]:
    return make_nodes(FLAT_LAYOUT)


@pytest.fixture
def model(flat_nodes: list[Node]) -> OrderedCollectionModel:
    return OrderedCollectionModel(flat_nodes)


@pytest.fixture
def store(flat_nodes: list[Node]) -> FakeStore:
    return FakeStore(flat_nodes)


@pytest.fixture
def sink() -> RecordingTelemetrySink:
    return RecordingTelemetrySink()


@pytest.fixture
def controller(store: FakeStore, sink: RecordingTelemetrySink) -> DragSessionController:
    return DragSessionController(store, telemetry_sink=sink, clock=lambda: 1000.0)


@pytest.fixture
def bookmarks_file(tmp_path: Path) -> Path:
    """Write the sample bookmarks document and return its path."""
    path = tmp_path / "Bookmarks"
    path.write_text(json.dumps(SAMPLE_BOOKMARKS, indent=3))
    return path
