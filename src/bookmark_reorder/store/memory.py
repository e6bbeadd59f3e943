"""Authoritative ordered bookmark store held in memory."""

import itertools
from collections import deque
from collections.abc import Iterable
from dataclasses import replace
from typing import TYPE_CHECKING

from bookmark_reorder.core.tree.collection import OrderedCollectionModel
from bookmark_reorder.logging_config import component_logger
from bookmark_reorder.models.node import MoveDestination, MoveResult, Node, NodeKind

if TYPE_CHECKING:
    from loguru import Logger


class InMemoryStore:
    """Ordered tree with browser-bookmark move semantics.

    ``move`` removes the node first and then inserts it at ``index`` in the
    remaining list; an index past the end appends. Failures raise
    RuntimeError with a message in the style of the browser API.
    """

    def __init__(self, nodes: Iterable[Node] = (), *, log: "Logger | None" = None) -> None:
        self.logger = log or component_logger("store")
        self._nodes: dict[str, Node] = {}
        self._children: dict[str, list[str]] = {}
        self._root_id: str | None = None
        self._ids = itertools.count(1)
        nodes = list(nodes)
        if nodes:
            self._load(nodes)

    def _load(self, nodes: list[Node]) -> None:
        # Reuse the model's tree checks; the store keeps its own order afterwards.
        checked = OrderedCollectionModel(nodes, log=self.logger)
        self._nodes = {n.id: n for n in nodes}
        self._children = {
            nid: list(checked.child_ids(nid)) for nid, n in self._nodes.items() if n.is_container
        }
        self._root_id = checked.root_id
        numeric = [int(nid) for nid in self._nodes if nid.isdigit()]
        self._ids = itertools.count(max(numeric, default=0) + 1)

    @property
    def root_id(self) -> str | None:
        return self._root_id

    def get_tree(self) -> list[Node]:
        """Every node with its current placement, parents before children."""
        if self._root_id is None:
            return []
        result: list[Node] = []
        todo: deque[tuple[str, str | None, int]] = deque([(self._root_id, None, 0)])
        while todo:
            node_id, parent_id, index = todo.popleft()
            node = self._nodes[node_id]
            result.append(replace(node, parent_id=parent_id, index=index))
            for i, child_id in enumerate(self._children.get(node_id, ())):
                todo.append((child_id, node_id, i))
        return result

    def get_children(self, parent_id: str) -> list[Node]:
        return [
            replace(self._nodes[cid], parent_id=parent_id, index=i)
            for i, cid in enumerate(self._children.get(parent_id, ()))
        ]

    def _parent_of(self, node_id: str) -> str | None:
        for parent_id, ids in self._children.items():
            if node_id in ids:
                return parent_id
        return None

    def _in_subtree(self, node_id: str, ancestor_id: str) -> bool:
        todo = [ancestor_id]
        while todo:
            current = todo.pop()
            if current == node_id:
                return True
            todo.extend(self._children.get(current, ()))
        return False

    async def move(self, node_id: str, destination: MoveDestination) -> MoveResult:
        return self.move_now(node_id, destination)

    def move_now(self, node_id: str, destination: MoveDestination) -> MoveResult:
        """Synchronous body of ``move``."""
        if node_id not in self._nodes:
            msg = f"No node with the given id exists: {node_id!r}"
            raise RuntimeError(msg)
        if node_id == self._root_id:
            msg = "Bookmark root cannot be modified"
            raise RuntimeError(msg)
        if destination.parent_id not in self._children:
            msg = f"Cannot move bookmark: {destination.parent_id!r} is not a folder"
            raise RuntimeError(msg)
        if self._in_subtree(destination.parent_id, node_id):
            msg = f"Cannot move folder {node_id!r} into itself or its subfolder"
            raise RuntimeError(msg)
        if destination.index < 0:
            msg = f"Cannot move bookmark: negative index {destination.index}"
            raise RuntimeError(msg)

        old_parent = self._parent_of(node_id)
        if old_parent is not None:
            self._children[old_parent].remove(node_id)
        siblings = self._children[destination.parent_id]
        index = min(destination.index, len(siblings))
        siblings.insert(index, node_id)
        self.logger.debug(
            "Store moved {} from {} to {}[{}]", node_id, old_parent, destination.parent_id, index
        )
        return MoveResult(node_id=node_id, final_parent_id=destination.parent_id, final_index=index)

    def create(
        self,
        parent_id: str,
        title: str,
        *,
        url: str | None = None,
        index: int | None = None,
    ) -> Node:
        """Create a folder (``url`` is None) or bookmark under ``parent_id``."""
        if parent_id not in self._children:
            msg = f"Cannot create bookmark: {parent_id!r} is not a folder"
            raise RuntimeError(msg)
        node_id = str(next(self._ids))
        while node_id in self._nodes:
            node_id = str(next(self._ids))
        kind = NodeKind.CONTAINER if url is None else NodeKind.ITEM
        siblings = self._children[parent_id]
        position = len(siblings) if index is None else max(0, min(index, len(siblings)))
        node = Node(
            id=node_id, parent_id=parent_id, kind=kind, index=position, title=title, url=url
        )
        self._nodes[node_id] = node
        if kind is NodeKind.CONTAINER:
            self._children[node_id] = []
        siblings.insert(position, node_id)
        return node

    def remove(self, node_id: str) -> None:
        """Remove a node and everything below it."""
        if node_id == self._root_id:
            msg = "Bookmark root cannot be modified"
            raise RuntimeError(msg)
        parent_id = self._parent_of(node_id)
        if parent_id is None:
            msg = f"No node with the given id exists: {node_id!r}"
            raise RuntimeError(msg)
        self._children[parent_id].remove(node_id)
        todo = [node_id]
        while todo:
            current = todo.pop()
            todo.extend(self._children.pop(current, ()))
            del self._nodes[current]
