"""In-memory mirror of the container/item tree used during drags."""

from collections import deque
from collections.abc import Iterable
from dataclasses import replace
from typing import TYPE_CHECKING

from bookmark_reorder.errors import ValidationError
from bookmark_reorder.logging_config import component_logger
from bookmark_reorder.models.node import MoveRequest, MoveResult, Node, SourceSnapshot
from bookmark_reorder.protocols import StoreProtocol

if TYPE_CHECKING:
    from loguru import Logger


class OrderedCollectionModel:
    """Queryable mirror of container contents.

    Holds the current sibling order of every container so insertion points can
    be computed and moves applied without a store round trip. Children of each
    container always carry indices ``0..count-1``; every mutation re-indexes
    the affected containers before returning.
    """

    def __init__(self, nodes: Iterable[Node] = (), *, log: "Logger | None" = None) -> None:
        self.logger = log or component_logger("model")
        self._nodes: dict[str, Node] = {}
        self._children: dict[str, list[str]] = {}
        self._root_id: str | None = None
        nodes = list(nodes)
        if nodes:
            self.load(nodes)

    @classmethod
    def from_store(
        cls, store: StoreProtocol, *, log: "Logger | None" = None
    ) -> "OrderedCollectionModel":
        """Seed a model from the store's current tree."""
        return cls(store.get_tree(), log=log)

    def load(self, nodes: Iterable[Node]) -> None:
        """Replace the mirrored tree with ``nodes``.

        Raises:
            ValidationError: duplicate ids, zero or several roots, unknown
                parents, unreachable nodes, or non-contiguous sibling indices.
        """
        by_id: dict[str, Node] = {}
        roots: list[str] = []
        for node in nodes:
            if node.id in by_id:
                msg = f"Duplicate node id: {node.id!r}"
                raise ValidationError(msg)
            by_id[node.id] = node
            if node.parent_id is None:
                roots.append(node.id)

        if len(roots) != 1:
            msg = f"Expected exactly one root container, found {len(roots)}: {roots!r}"
            raise ValidationError(msg)
        root = by_id[roots[0]]
        if not root.is_container:
            msg = f"Root node {root.id!r} is not a container"
            raise ValidationError(msg)

        children: dict[str, list[str]] = {nid: [] for nid, n in by_id.items() if n.is_container}
        for node in by_id.values():
            if node.parent_id is None:
                continue
            siblings = children.get(node.parent_id)
            if siblings is None:
                msg = f"Node {node.id!r} has unknown or non-container parent {node.parent_id!r}"
                raise ValidationError(msg)
            siblings.append(node.id)

        for container_id, ids in children.items():
            ids.sort(key=lambda i: by_id[i].index)
            indices = [by_id[i].index for i in ids]
            if indices != list(range(len(ids))):
                msg = f"Children of {container_id!r} are not indexed 0..{len(ids) - 1}: {indices!r}"
                raise ValidationError(msg)

        # Parent links could still form a cycle detached from the root.
        reached = 0
        todo: deque[str] = deque([root.id])
        while todo:
            reached += 1
            todo.extend(children.get(todo.popleft(), ()))
        if reached != len(by_id):
            msg = f"{len(by_id) - reached} nodes are not reachable from root {root.id!r}"
            raise ValidationError(msg)

        self._nodes = by_id
        self._children = children
        self._root_id = root.id
        self.logger.debug("Loaded {} nodes ({} containers)", len(by_id), len(children))

    # --- Queries ---

    @property
    def root_id(self) -> str | None:
        return self._root_id

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def get_node(self, node_id: str) -> Node:
        """Return a node by id, raising ValidationError if it is unknown."""
        try:
            return self._nodes[node_id]
        except KeyError:
            msg = f"Unknown node id: {node_id!r}"
            raise ValidationError(msg) from None

    def is_container(self, node_id: str) -> bool:
        return node_id in self._children

    def get_children(self, container_id: str) -> tuple[Node, ...]:
        """Direct children in order; empty for unknown or empty containers."""
        return tuple(self._nodes[nid] for nid in self._children.get(container_id, ()))

    def child_ids(self, container_id: str) -> tuple[str, ...]:
        return tuple(self._children.get(container_id, ()))

    def child_count(self, container_id: str) -> int:
        return len(self._children.get(container_id, ()))

    def is_descendant(self, node_id: str, ancestor_id: str) -> bool:
        """True if ``ancestor_id`` is a strict ancestor of ``node_id``."""
        parent_id = self._nodes[node_id].parent_id if node_id in self._nodes else None
        while parent_id is not None:
            if parent_id == ancestor_id:
                return True
            parent_id = self._nodes[parent_id].parent_id
        return False

    def capture(self, node_id: str) -> SourceSnapshot:
        """Snapshot a node's placement and its container's order for rollback."""
        node = self.get_node(node_id)
        if node.parent_id is None:
            msg = f"The root container {node_id!r} cannot be dragged"
            raise ValidationError(msg)
        return SourceSnapshot(
            node_id=node.id,
            parent_id=node.parent_id,
            index=node.index,
            kind=node.kind,
            sibling_ids=self.child_ids(node.parent_id),
        )

    def validate_move(self, req: MoveRequest, adjusted_index: int | None = None) -> None:
        """Reject a move that the tree cannot accept, before anything changes.

        ``requested_visual_index`` is checked against the pre-removal child
        count of the target, ``adjusted_index`` against the post-removal one.
        """
        node = self.get_node(req.node_id)
        if node.parent_id is None:
            msg = f"The root container {req.node_id!r} cannot be moved"
            raise ValidationError(msg)
        for container_id in (req.from_parent_id, req.to_parent_id):
            if not self.is_container(container_id):
                msg = f"Unknown container id: {container_id!r}"
                raise ValidationError(msg)
        if node.parent_id != req.from_parent_id or node.index != req.from_index:
            msg = (
                f"Node {req.node_id!r} is at {node.parent_id!r}[{node.index}], "
                f"not {req.from_parent_id!r}[{req.from_index}]"
            )
            raise ValidationError(msg)
        if node.is_container and (
            req.to_parent_id == node.id or self.is_descendant(req.to_parent_id, node.id)
        ):
            msg = f"Cannot move container {node.id!r} into itself or one of its descendants"
            raise ValidationError(msg)

        count = self.child_count(req.to_parent_id)
        if not 0 <= req.requested_visual_index <= count:
            msg = (
                f"Insertion point {req.requested_visual_index} out of range "
                f"0..{count} for {req.to_parent_id!r}"
            )
            raise ValidationError(msg)
        if adjusted_index is not None:
            limit = count - 1 if req.to_parent_id == req.from_parent_id else count
            if not 0 <= adjusted_index <= limit:
                msg = f"Index {adjusted_index} out of range 0..{limit} for {req.to_parent_id!r}"
                raise ValidationError(msg)

    # --- Mutations ---

    def apply_optimistic_move(self, req: MoveRequest, adjusted_index: int) -> None:
        """Move a node locally ahead of the store's confirmation."""
        self.validate_move(req, adjusted_index)
        self._splice(req.node_id, req.to_parent_id, adjusted_index)
        self.logger.debug(
            "Optimistic move: {} {}[{}] -> {}[{}]",
            req.node_id,
            req.from_parent_id,
            req.from_index,
            req.to_parent_id,
            adjusted_index,
        )

    def reconcile(self, result: MoveResult) -> None:
        """Align a node with the placement the store reported.

        Raises:
            ValidationError: the reported placement does not fit the tree.
        """
        node = self.get_node(result.node_id)
        if not self.is_container(result.final_parent_id):
            msg = f"Store reported unknown container {result.final_parent_id!r}"
            raise ValidationError(msg)
        if node.is_container and (
            result.final_parent_id == node.id or self.is_descendant(result.final_parent_id, node.id)
        ):
            msg = f"Store reported {node.id!r} inside its own subtree"
            raise ValidationError(msg)
        count = self.child_count(result.final_parent_id)
        limit = count - 1 if node.parent_id == result.final_parent_id else count
        if not 0 <= result.final_index <= limit:
            msg = (
                f"Store reported index {result.final_index} out of range 0..{limit} "
                f"for {result.final_parent_id!r}"
            )
            raise ValidationError(msg)

        if node.parent_id == result.final_parent_id and node.index == result.final_index:
            return
        self.logger.info(
            "Store placed {} at {}[{}], optimistic placement was {}[{}]",
            node.id,
            result.final_parent_id,
            result.final_index,
            node.parent_id,
            node.index,
        )
        self._splice(node.id, result.final_parent_id, result.final_index)

    def rollback(self, snapshot: SourceSnapshot) -> None:
        """Put a dragged node back and restore its container's pre-drag order."""
        node = self.get_node(snapshot.node_id)
        if node.parent_id is not None and node.parent_id != snapshot.parent_id:
            self._detach(node.id)

        current = self._children[snapshot.parent_id]
        present = set(current) | {snapshot.node_id}
        restored = [nid for nid in snapshot.sibling_ids if nid in present]
        # Children that arrived since the snapshot keep their order at the end.
        restored.extend(nid for nid in current if nid not in restored)
        self._children[snapshot.parent_id] = restored
        self._reindex(snapshot.parent_id)
        self.logger.debug(
            "Rolled back {} to {}[{}]", snapshot.node_id, snapshot.parent_id, snapshot.index
        )

    def _splice(self, node_id: str, parent_id: str, index: int) -> None:
        self._detach(node_id)
        self._children[parent_id].insert(index, node_id)
        self._reindex(parent_id)

    def _detach(self, node_id: str) -> None:
        parent_id = self._nodes[node_id].parent_id
        if parent_id is None:
            return
        self._children[parent_id].remove(node_id)
        self._reindex(parent_id)

    def _reindex(self, container_id: str) -> None:
        for i, nid in enumerate(self._children[container_id]):
            node = self._nodes[nid]
            if node.index != i or node.parent_id != container_id:
                self._nodes[nid] = replace(node, index=i, parent_id=container_id)
