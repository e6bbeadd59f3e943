"""Bookmark store backed by a Chromium-style ``Bookmarks`` JSON file."""

import json
from pathlib import Path
from typing import Any

from bookmark_reorder.config import ROOT_ID
from bookmark_reorder.models.node import MoveDestination, MoveResult, Node, NodeKind
from bookmark_reorder.store.memory import InMemoryStore

# Keys rebuilt from the tree on save; everything else on a node is carried through untouched.
_STRUCTURAL_KEYS = frozenset({"children", "id", "name", "type", "url"})


def parse_bookmarks(
    data: dict[str, Any],
) -> tuple[list[Node], dict[str, dict[str, Any]], dict[str, str]]:
    """Flatten a bookmarks document into nodes under a synthetic root.

    Returns:
        Tuple of (nodes in pre-order, extra keys per node id, roots key per
        top-level folder id).
    """
    roots = data.get("roots")
    if not isinstance(roots, dict):
        msg = "Bookmarks document has no 'roots' object"
        raise ValueError(msg)

    root = Node(id=ROOT_ID, parent_id=None, kind=NodeKind.CONTAINER, index=0, title="")
    nodes: list[Node] = [root]
    extras: dict[str, dict[str, Any]] = {}
    root_keys: dict[str, str] = {}

    # (could have done it recursively, but deep folder trees would hit the recursion limit)
    top_level = [(key, raw) for key, raw in roots.items() if isinstance(raw, dict)]
    todo: list[tuple[dict[str, Any], str, int]] = []
    for index, (key, raw) in enumerate(top_level):
        root_keys[str(raw["id"])] = key
        todo.append((raw, ROOT_ID, index))
    todo.reverse()

    while todo:
        raw, parent_id, index = todo.pop()
        node_id = str(raw["id"])
        obj_type = raw.get("type")
        if obj_type not in ("folder", "url"):
            msg = f"unexpected bookmark type: {obj_type!r} (id {node_id!r})"
            raise ValueError(msg)
        kind = NodeKind.CONTAINER if obj_type == "folder" else NodeKind.ITEM
        nodes.append(
            Node(
                id=node_id,
                parent_id=parent_id,
                kind=kind,
                index=index,
                title=raw.get("name", ""),
                url=raw.get("url") if kind is NodeKind.ITEM else None,
            )
        )
        extras[node_id] = {k: v for k, v in raw.items() if k not in _STRUCTURAL_KEYS}
        children = raw.get("children", []) if kind is NodeKind.CONTAINER else []
        todo.extend((child, node_id, i) for i, child in reversed(list(enumerate(children))))

    return nodes, extras, root_keys


class JsonFileStore(InMemoryStore):
    """In-memory store that loads from and writes back to a bookmarks file.

    Each successful move is written straight away unless ``dry_run`` is set.
    The file's ``checksum`` is dropped on save since it no longer matches.
    """

    def __init__(self, path: str | Path, *, dry_run: bool = False) -> None:
        self.path = Path(path)
        self.dry_run = dry_run
        data = json.loads(self.path.read_text(encoding="utf-8"))
        nodes, self._extras, self._root_keys = parse_bookmarks(data)
        self._document = {k: v for k, v in data.items() if k not in ("roots", "checksum")}
        self._passthrough_roots = {
            k: v for k, v in data["roots"].items() if not isinstance(v, dict)
        }
        super().__init__(nodes)
        self.logger.debug(
            "Bookmarks ready: {} nodes from {}, dry_run {!r}", len(nodes), self.path, dry_run
        )

    async def move(self, node_id: str, destination: MoveDestination) -> MoveResult:
        old_parent = self._parent_of(node_id)
        old_index = self._children[old_parent].index(node_id) if old_parent is not None else 0
        result = self.move_now(node_id, destination)
        try:
            self.save()
        except Exception:
            # Memory must keep matching the file on disk.
            self._children[result.final_parent_id].remove(node_id)
            if old_parent is not None:
                self._children[old_parent].insert(old_index, node_id)
            self.logger.error("Could not write {}, move of {} undone", self.path, node_id)
            raise
        return result

    def to_document(self) -> dict[str, Any]:
        """Render the current tree back into bookmarks-file form."""
        by_parent: dict[str | None, list[Node]] = {}
        for node in self.get_tree():
            by_parent.setdefault(node.parent_id, []).append(node)

        def render(node: Node) -> dict[str, Any]:
            out: dict[str, Any] = dict(self._extras.get(node.id, {}))
            out["id"] = node.id
            out["name"] = node.title
            if node.is_container:
                out["type"] = "folder"
                out["children"] = [render(child) for child in by_parent.get(node.id, [])]
            else:
                out["type"] = "url"
                out["url"] = node.url or ""
            return out

        roots: dict[str, Any] = {}
        for top in by_parent.get(ROOT_ID, []):
            roots[self._root_keys.get(top.id, f"folder_{top.id}")] = render(top)
        roots.update(self._passthrough_roots)
        return {**self._document, "roots": roots}

    def save(self) -> None:
        if self.dry_run:
            self.logger.info("Dry run, not writing {}", self.path)
            return
        contents = json.dumps(self.to_document(), indent=3, ensure_ascii=False) + "\n"
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(contents, encoding="utf-8")
        tmp.replace(self.path)
        self.logger.debug("Wrote {}", self.path)
