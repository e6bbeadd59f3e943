"""Tests for the bookmark-reorder CLI."""

import json
import sys
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
import requests
from loguru import logger
from typer.testing import CliRunner

from bookmark_reorder.cli import app
from tests.unit.fakes import FLAT_LAYOUT, make_nodes

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """The CLI points loguru at the runner's stderr; put it back afterwards."""
    yield
    logger.remove()
    logger.add(sys.stderr)


def _bar_names(path: Path) -> list[str]:
    data = json.loads(path.read_text())
    return [child["name"] for child in data["roots"]["bookmark_bar"]["children"]]


def test_tree_prints_indices_and_ids(bookmarks_file: Path) -> None:
    result = runner.invoke(app, ["tree", "--file", str(bookmarks_file)])

    assert result.exit_code == 0, result.output
    assert "[0] Bookmarks bar/  id=1" in result.output
    assert "  [0] Python  id=4  https://www.python.org/" in result.output
    assert "    [0] PyPI  id=6" in result.output
    assert "[2] Mobile bookmarks/  id=3" in result.output


def test_tree_of_empty_folder(bookmarks_file: Path) -> None:
    result = runner.invoke(app, ["tree", "-f", str(bookmarks_file), "-c", "2"])
    assert result.exit_code == 0
    assert "(empty)" in result.output


def test_tree_unknown_folder(bookmarks_file: Path) -> None:
    result = runner.invoke(app, ["tree", "-f", str(bookmarks_file), "--container", "4"])
    assert result.exit_code == 1
    assert "Folder '4' not found." in result.output


def test_missing_file_exits_with_error(tmp_path: Path) -> None:
    result = runner.invoke(app, ["tree", "--file", str(tmp_path / "nope")])
    assert result.exit_code == 1


def test_points_lists_every_gap(bookmarks_file: Path) -> None:
    result = runner.invoke(app, ["points", "1", "--file", str(bookmarks_file)])

    assert result.exit_code == 0, result.output
    assert "  0: between '^' and 'Python'" in result.output
    assert "  1: between 'Python' and 'Packages'" in result.output
    assert "  3: between 'Docs' and '$'" in result.output


def test_move_writes_file(bookmarks_file: Path) -> None:
    result = runner.invoke(app, ["move", "4", "--to", "1", "--at", "3", "-f", str(bookmarks_file)])

    assert result.exit_code == 0, result.output
    assert "Moved 4 to 1 at position 2" in result.output
    assert _bar_names(bookmarks_file) == ["Packages", "Docs", "Python"]


def test_move_to_end_of_folder_by_default(bookmarks_file: Path) -> None:
    result = runner.invoke(app, ["-v", "move", "7", "--to", "5", "-f", str(bookmarks_file)])

    assert result.exit_code == 0, result.output
    assert "Moved 7 to 5 at position 1" in result.output
    assert _bar_names(bookmarks_file) == ["Python", "Packages"]


def test_move_to_same_place_is_noop(bookmarks_file: Path) -> None:
    before = bookmarks_file.read_text()
    result = runner.invoke(app, ["move", "5", "-t", "1", "-a", "2", "-f", str(bookmarks_file)])

    assert result.exit_code == 0, result.output
    assert "5 is already there, nothing to do." in result.output
    assert bookmarks_file.read_text() == before


def test_move_dry_run(bookmarks_file: Path) -> None:
    before = bookmarks_file.read_text()
    result = runner.invoke(
        app, ["move", "7", "-t", "1", "-a", "0", "-f", str(bookmarks_file), "--dry-run"]
    )

    assert result.exit_code == 0, result.output
    assert "Moved 7 to 1 at position 0" in result.output
    assert bookmarks_file.read_text() == before


def test_move_folder_into_itself_fails(bookmarks_file: Path) -> None:
    before = bookmarks_file.read_text()
    result = runner.invoke(app, ["move", "5", "-t", "5", "-a", "0", "-f", str(bookmarks_file)])

    assert result.exit_code == 1
    assert bookmarks_file.read_text() == before


def test_move_unknown_node_fails(bookmarks_file: Path) -> None:
    result = runner.invoke(app, ["move", "99", "-t", "1", "-f", str(bookmarks_file)])
    assert result.exit_code == 1


def test_dry_run_with_remote_store_is_rejected() -> None:
    with patch("bookmark_reorder.cli.RemoteStore") as remote_cls:
        result = runner.invoke(
            app, ["move", "7", "--to", "1", "--api-url", "http://x", "--dry-run"]
        )

    assert result.exit_code == 1
    remote_cls.assert_not_called()


def test_unreachable_remote_store_exits_with_error() -> None:
    with patch("bookmark_reorder.cli.RemoteStore") as remote_cls:
        remote_cls.return_value.get_tree.side_effect = requests.ConnectionError("refused")
        result = runner.invoke(app, ["move", "7", "--to", "1", "--api-url", "http://x"])

    assert result.exit_code == 1
    assert not isinstance(result.exception, requests.ConnectionError)
    remote_cls.return_value.move.assert_not_called()


def test_malformed_remote_tree_exits_with_error() -> None:
    with patch("bookmark_reorder.cli.RemoteStore") as remote_cls:
        nodes = make_nodes(FLAT_LAYOUT)
        # Two nodes claim the root id.
        remote_cls.return_value.get_tree.return_value = nodes + nodes[:1]
        result = runner.invoke(app, ["move", "7", "--to", "1", "--api-url", "http://x"])

    assert result.exit_code == 1
    remote_cls.return_value.move.assert_not_called()
