"""CLI for bookmark-reorder: inspect a bookmarks tree and move entries in it."""

import asyncio
from pathlib import Path
from typing import Annotated

import requests
import typer
from loguru import logger

from bookmark_reorder.api import RemoteStore
from bookmark_reorder.config import resolve_bookmarks_file
from bookmark_reorder.core.drag.insertion import InsertionPointResolver
from bookmark_reorder.core.drag.session import DragSessionController, drag_to
from bookmark_reorder.core.tree.collection import OrderedCollectionModel
from bookmark_reorder.errors import ReorderError
from bookmark_reorder.logging_config import configure_logging
from bookmark_reorder.models.node import InsertionPoint, Node
from bookmark_reorder.protocols import StoreProtocol
from bookmark_reorder.store.json_file import JsonFileStore
from bookmark_reorder.telemetry import LogTelemetrySink

app = typer.Typer(help="Reorder bookmarks by simulated drag and drop.")

FileOption = Annotated[
    Path | None,
    typer.Option("--file", "-f", help="Bookmarks JSON file (default: browser profile)"),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _open_store(path: Path | None, *, dry_run: bool = False) -> JsonFileStore:
    """Open the bookmarks file, raising if it doesn't exist."""
    bookmarks = path or resolve_bookmarks_file()
    if not bookmarks.is_file():
        logger.error("Bookmarks file not found: {}", bookmarks)
        raise typer.Exit(1)
    try:
        return JsonFileStore(bookmarks, dry_run=dry_run)
    except (ValueError, ReorderError) as e:
        logger.error("Cannot read {}: {}", bookmarks, e)
        raise typer.Exit(1) from e


def _render(model: OrderedCollectionModel, container_id: str, depth: int, out: list[str]) -> None:
    for child in model.get_children(container_id):
        label = child.title or "(untitled)"
        if child.is_container:
            out.append(f"{'  ' * depth}[{child.index}] {label}/  id={child.id}")
            _render(model, child.id, depth + 1, out)
        else:
            out.append(f"{'  ' * depth}[{child.index}] {label}  id={child.id}  {child.url}")


@app.command()
def tree(
    file: FileOption = None,
    container: Annotated[
        str | None,
        typer.Option("--container", "-c", help="Only show the subtree of this folder"),
    ] = None,
) -> None:
    """Print the bookmarks tree with sibling indices."""
    model = OrderedCollectionModel.from_store(_open_store(file))
    start = container or model.root_id
    if start is None or not model.is_container(start):
        typer.echo(f"Folder '{container}' not found.")
        raise typer.Exit(1)
    lines: list[str] = []
    _render(model, start, 0, lines)
    typer.echo("\n".join(lines) if lines else "(empty)")


@app.command()
def points(
    container: str = typer.Argument(..., help="Folder id"),
    file: FileOption = None,
) -> None:
    """List the insertion points of a folder."""
    model = OrderedCollectionModel.from_store(_open_store(file))
    if not model.is_container(container):
        typer.echo(f"Folder '{container}' not found.")
        raise typer.Exit(1)
    children: list[Node] = list(model.get_children(container))
    for point in InsertionPointResolver(model).enumerate(container):
        before = children[point.visual_index - 1].title if point.visual_index > 0 else "^"
        after = children[point.visual_index].title if point.visual_index < len(children) else "$"
        typer.echo(f"  {point.visual_index}: between {before!r} and {after!r}")


@app.command()
def move(
    node_id: str = typer.Argument(..., help="Id of the bookmark or folder to drag"),
    to: str = typer.Option(..., "--to", "-t", help="Target folder id"),
    at: Annotated[
        int | None,
        typer.Option("--at", "-a", help="Insertion point in the target (default: at the end)"),
    ] = None,
    file: FileOption = None,
    api_url: Annotated[
        str | None,
        typer.Option("--api-url", help="Use the remote bookmark service instead of a file"),
    ] = None,
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Do not write anything"),
) -> None:
    """Drag a bookmark to an insertion point and drop it there."""
    store: StoreProtocol
    if api_url:
        if dry_run:
            logger.error("--dry-run is only supported for bookmark files, not with --api-url")
            raise typer.Exit(1)
        try:
            store = RemoteStore(api_url)
        except RuntimeError as e:
            logger.error("{}", e)
            raise typer.Exit(1) from e
    else:
        store = _open_store(file, dry_run=dry_run)

    point: InsertionPoint | str = to if at is None else InsertionPoint(to, at)
    try:
        controller = DragSessionController(store, telemetry_sink=LogTelemetrySink())
    except (ReorderError, RuntimeError, requests.RequestException) as e:
        logger.error("Cannot load bookmarks tree: {}", e)
        raise typer.Exit(1) from e
    try:
        outcome = asyncio.run(drag_to(controller, node_id, point))
    except ReorderError as e:
        logger.error("Move failed: {}", e)
        raise typer.Exit(1) from e

    if outcome is None:
        typer.echo("Drag cancelled.")
        raise typer.Exit(1)
    result = outcome.result
    if result is None:
        typer.echo(f"{node_id} is already there, nothing to do.")
        return
    typer.echo(f"Moved {node_id} to {result.final_parent_id} at position {result.final_index}")
