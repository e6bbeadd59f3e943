"""Drag-and-drop reordering engine for bookmark trees."""

from bookmark_reorder.core.drag.index_translator import adjusted_index
from bookmark_reorder.core.drag.insertion import InsertionPointResolver
from bookmark_reorder.core.drag.session import DragSessionController
from bookmark_reorder.core.tree.collection import OrderedCollectionModel
from bookmark_reorder.core.write.executor import MoveExecutor
from bookmark_reorder.protocols import StoreProtocol, TelemetrySinkProtocol

__all__ = [
    "DragSessionController",
    "InsertionPointResolver",
    "MoveExecutor",
    "OrderedCollectionModel",
    "StoreProtocol",
    "TelemetrySinkProtocol",
    "adjusted_index",
]
