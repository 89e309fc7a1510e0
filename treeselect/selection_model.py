"""Tree selection model.

Tracks which nodes of a hierarchical item source are selected, addressed by
IndexPath. Mutations are accumulated in a batch (``Operation``) and committed
atomically when the outermost batch closes, producing a single
``selectionChanged`` notification followed by ``propertyChanged`` for every
affected property.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import contextmanager
from dataclasses import dataclass, field

from PySide6.QtCore import QObject, Signal

from . import index_range
from .events import ChangedItems, IndexesChangedEventArgs, SelectionChangedEventArgs
from .index_path import DEFAULT_PATH, IndexPath
from .index_range import IndexRange, IndexRanges
from .items_view import ItemsView, resolve_path
from .selected_views import SelectedIndexes, SelectedItems
from .selection_node import SelectionNode
from .settings import is_trace_enabled


@dataclass
class Operation:
    """Net effect of the batch in progress."""

    selected_index: IndexPath
    anchor_index: IndexPath
    update_count: int = 0
    selected_ranges: IndexRanges | None = None
    deselected_ranges: IndexRanges | None = None
    deselected_items: list | None = None  # removed items that can no longer be resolved by path
    pending_nodes: list = field(default_factory=list)  # nodes materialized for pending selects

    def ensure_selected_ranges(self) -> IndexRanges:
        if self.selected_ranges is None:
            self.selected_ranges = IndexRanges()
        return self.selected_ranges

    def ensure_deselected_ranges(self) -> IndexRanges:
        if self.deselected_ranges is None:
            self.deselected_ranges = IndexRanges()
        return self.deselected_ranges

    def add_removed_items(self, items) -> None:
        if self.deselected_items is None:
            self.deselected_items = []
        self.deselected_items.extend(items)


def shift_path(parent: IndexPath, shift_index: int, shift_delta: int, path: IndexPath) -> IndexPath:
    """Apply a sibling shift under ``parent`` to ``path``.

    Paths inside a removed window (negative delta) collapse to the default path.
    """
    if not parent.is_ancestor_of(path):
        return path
    depth = len(parent)
    i = path[depth]
    if i < shift_index:
        return path
    if shift_delta < 0 and i < shift_index - shift_delta:
        return DEFAULT_PATH
    return path.shift(depth, shift_delta)


class TreeSelectionModel(QObject):
    selectionChanged = Signal(object)  # SelectionChangedEventArgs
    propertyChanged = Signal(str)  # property name
    indexesChanged = Signal(object)  # IndexesChangedEventArgs

    def __init__(
        self,
        children: Callable | None = None,
        source=None,
        single_select: bool = True,
        parent=None,
    ):
        super().__init__(parent)
        self._children_accessor = children
        self._single_select = single_select
        self._selected_index = DEFAULT_PATH
        self._anchor_index = DEFAULT_PATH
        self._operation: Operation | None = None
        self._root = SelectionNode(self, None, DEFAULT_PATH)
        self._selected_indexes: SelectedIndexes | None = None
        self._selected_items: SelectedItems | None = None
        if source is not None:
            self.source = source

    # ---------------- Properties -----------------

    @property
    def root(self) -> SelectionNode:
        return self._root

    @property
    def source(self) -> ItemsView | None:
        return self._root.source

    @source.setter
    def source(self, value):
        view = ItemsView.get_or_create(value)
        if view is self._root.source:
            return
        with self.batch_update() as op:
            removed = list(self._root.iter_selected_items())
            self._root.reset()
            self._root.source = view
            op.selected_ranges = None
            op.deselected_ranges = None
            op.selected_index = DEFAULT_PATH
            op.anchor_index = DEFAULT_PATH
            if removed:
                op.add_removed_items(removed)
        logging.debug("[selection] source replaced, %d selected item(s) dropped", len(removed))

    @property
    def single_select(self) -> bool:
        return self._single_select

    @single_select.setter
    def single_select(self, value: bool):
        if self._single_select == value:
            return
        if value:
            op = self._operation
            self.selected_index = op.selected_index if op is not None else self._selected_index
        self._single_select = value
        self.propertyChanged.emit("single_select")

    @property
    def selected_index(self) -> IndexPath:
        return self._selected_index

    @selected_index.setter
    def selected_index(self, value: IndexPath):
        with self.batch_update():
            self.clear()
            self.select(value)

    @property
    def anchor_index(self) -> IndexPath:
        return self._anchor_index

    @anchor_index.setter
    def anchor_index(self, value: IndexPath):
        with self.batch_update() as op:
            op.anchor_index = value

    @property
    def selected_item(self):
        if self.source is None or not self._selected_index:
            return None
        return self.get_selected_item_at(self._selected_index)

    @property
    def selected_indexes(self) -> SelectedIndexes:
        if self._selected_indexes is None:
            self._selected_indexes = SelectedIndexes(self)
        return self._selected_indexes

    @property
    def selected_items(self) -> SelectedItems:
        if self._selected_items is None:
            self._selected_items = SelectedItems(self)
        return self._selected_items

    @property
    def count(self) -> int:
        return self._root.selected_count()

    def get_children(self, item):
        if self._children_accessor is None:
            return None
        return self._children_accessor(item)

    # ---------------- Batching -----------------

    @contextmanager
    def batch_update(self):
        """Scope a batch; the batch is always ended, even if the body raises."""
        self.begin_batch_update()
        try:
            yield self._operation
        finally:
            self.end_batch_update()

    def begin_batch_update(self):
        if self._operation is None:
            self._operation = Operation(self._selected_index, self._anchor_index)
        self._operation.update_count += 1

    def end_batch_update(self):
        op = self._operation
        if op is None or op.update_count == 0:
            raise RuntimeError("No batch update in progress.")
        op.update_count -= 1
        if op.update_count == 0:
            self._commit_operation(op)

    # ---------------- Selection operations -----------------

    def clear(self):
        with self.batch_update() as op:
            op.selected_ranges = None
            self._root.clear(op)
            op.selected_index = DEFAULT_PATH

    def select(self, path: IndexPath):
        if not path or not self.try_get_item_at(path)[0]:
            if is_trace_enabled():
                logging.debug("[selection] select(%r) ignored: path does not resolve", path)
            return

        if is_trace_enabled():
            logging.debug("[selection] select(%r)", path)

        with self.batch_update() as op:
            if self._single_select:
                self.clear()
            if op.deselected_ranges is not None:
                op.deselected_ranges.remove(path)
            if not self.is_selected(path):
                op.ensure_selected_ranges().add(path)
                # materialize the parent so edits to its children re-key the pending select
                node = self._get_or_create_node(path.parent)
                if node is not None and node.parent is not None:
                    op.pending_nodes.append(node)
            if not op.selected_index:
                op.selected_index = path
            op.anchor_index = path

    def deselect(self, path: IndexPath):
        if not path:
            return
        op = self._operation
        pending = op is not None and op.selected_ranges is not None and path in op.selected_ranges
        if not pending and not self.is_selected(path):
            return

        if is_trace_enabled():
            logging.debug("[selection] deselect(%r)", path)

        with self.batch_update() as op:
            if op.selected_ranges is not None:
                op.selected_ranges.remove(path)
            if self.is_selected(path):
                op.ensure_deselected_ranges().add(path)
            if op.selected_index == path:
                op.selected_index = self._first_selected_index(op)

    def is_selected(self, path: IndexPath) -> bool:
        if not path:
            return False
        node = self._get_node(path.parent)
        return node is not None and index_range.contains(node.ranges, path.leaf)

    def try_get_item_at(self, path: IndexPath) -> tuple[bool, object]:
        return resolve_path(self._root.source, path, self.get_children)

    def get_selected_item_at(self, path: IndexPath):
        if not path:
            raise IndexError("The root path does not address an item")
        if self.source is None:
            raise RuntimeError("Cannot get item from a model without a source.")
        node = self._get_node(path.parent)
        if node is not None and node.source is not None and path.leaf < len(node.source):
            return node.source[path.leaf]
        raise IndexError(f"No item at {path!r}")

    # ---------------- Structural changes -----------------

    def on_indexes_changed(self, parent_index: IndexPath, shift_index: int, shift_delta: int):
        """Siblings under ``parent_index`` from ``shift_index`` on moved by ``shift_delta``."""
        if shift_delta == 0:
            return
        logging.debug("[selection] shift under %r from %d by %+d", parent_index, shift_index, shift_delta)
        self.indexesChanged.emit(IndexesChangedEventArgs(parent_index, shift_index, shift_delta))

        with self.batch_update() as op:
            node = self._get_node(parent_index)
            if node is not None and shift_delta < 0:
                # selection still held inside the removed window is reported as removed
                dropped, items = node.collect_selected(IndexRange(shift_index, shift_index - shift_delta - 1))
                if dropped:
                    self.on_selection_removed(parent_index, shift_index, -shift_delta, items)
                    node = self._get_node(parent_index)
            if node is not None:
                node.shift_indexes(shift_index, shift_delta)
                self._prune(node)
            op.selected_index = shift_path(parent_index, shift_index, shift_delta, op.selected_index)
            op.anchor_index = shift_path(parent_index, shift_index, shift_delta, op.anchor_index)
            for pending in (op.selected_ranges, op.deselected_ranges):
                if pending is not None:
                    pending.shift(parent_index, shift_index, shift_delta)

    def on_selection_removed(self, parent_index: IndexPath, index: int, count: int, removed_items):
        """Selected items ``[index, index + count)`` under ``parent_index`` were removed."""
        logging.debug(
            "[selection] removed %d item(s) under %r at %d (%d selected)",
            count,
            parent_index,
            index,
            len(removed_items),
        )
        with self.batch_update() as op:
            if op.selected_index and (op.selected_index == parent_index or parent_index.is_ancestor_of(op.selected_index)):
                op.selected_index = DEFAULT_PATH
            if op.anchor_index and (op.anchor_index == parent_index or parent_index.is_ancestor_of(op.anchor_index)):
                op.anchor_index = DEFAULT_PATH

            if count > 0:
                window = IndexRange(index, index + count - 1)
                node = self._get_node(parent_index)
                if node is not None:
                    node.drop_range(window)
                    self._prune(node)
                for pending in (op.selected_ranges, op.deselected_ranges):
                    if pending is not None:
                        pending.discard_window(parent_index, window)

            if removed_items:
                op.add_removed_items(removed_items)

    # ---------------- Internals -----------------

    def _first_selected_index(self, op: Operation) -> IndexPath:
        deselected = op.deselected_ranges
        candidates = []
        for path in self._root.iter_selected():
            if deselected is None or path not in deselected:
                candidates.append(path)
                break
        if op.selected_ranges:
            candidates.append(min(op.selected_ranges))
        return min(candidates) if candidates else DEFAULT_PATH

    def _get_node(self, path: IndexPath) -> SelectionNode | None:
        node = self._root
        for i in path:
            node = node.get_child(i)
            if node is None:
                break
        return node

    def _get_or_create_node(self, path: IndexPath) -> SelectionNode | None:
        node = self._root
        for i in path:
            node = node.get_or_create_child(i)
            if node is None:
                break
        return node

    def _prune(self, node: SelectionNode) -> None:
        while node.parent is not None and node.is_empty():
            parent = node.parent
            if parent.get_child(node.path.leaf) is not node:
                break  # already released
            if self._operation is not None and node in self._operation.pending_nodes:
                break
            logging.debug("[selection] pruning empty node %r", node.path)
            parent.remove_child(node.path.leaf)
            node = parent

    def _commit_select(self, ranges: IndexRanges) -> int:
        result = 0
        for parent, parent_ranges in ranges.items():
            node = self._get_or_create_node(parent)
            if node is not None:
                for rng in parent_ranges:
                    result += node.commit_select(rng)
        return result

    def _commit_deselect(self, ranges: IndexRanges) -> int:
        result = 0
        for parent, parent_ranges in ranges.items():
            node = self._get_node(parent)
            if node is not None:
                for rng in parent_ranges:
                    result += node.commit_deselect(rng)
                self._prune(node)
        return result

    def _commit_operation(self, op: Operation) -> None:
        # detach first so listeners mutating the model start a fresh batch
        self._operation = None
        old_selected_index = self._selected_index
        old_anchor_index = self._anchor_index
        indexes_changed = False

        if op.selected_ranges:
            indexes_changed |= self._commit_select(op.selected_ranges) > 0
        if op.deselected_ranges:
            indexes_changed |= self._commit_deselect(op.deselected_ranges) > 0
        if op.deselected_items:
            indexes_changed = True
        for node in op.pending_nodes:
            self._prune(node)

        selected_index = op.selected_index
        if selected_index and not self.is_selected(selected_index):
            selected_index = next(self._root.iter_selected(), DEFAULT_PATH)
        self._selected_index = selected_index
        self._anchor_index = op.anchor_index

        if op.selected_ranges or op.deselected_ranges or op.deselected_items is not None:
            logging.debug(
                "[selection] commit: +%d -%d removed=%d selected_index=%r",
                len(op.selected_ranges or ()),
                len(op.deselected_ranges or ()),
                len(op.deselected_items or ()),
                self._selected_index,
            )
            self._raise_selection_changed(
                SelectionChangedEventArgs(
                    deselected_indexes=op.deselected_ranges or IndexRanges(),
                    selected_indexes=op.selected_ranges or IndexRanges(),
                    deselected_items=ChangedItems(self, op.deselected_ranges, op.deselected_items or ()),
                    selected_items=ChangedItems(self, op.selected_ranges),
                )
            )

        if old_selected_index != self._selected_index:
            indexes_changed = True
            self.propertyChanged.emit("selected_index")
            self.propertyChanged.emit("selected_item")

        if old_anchor_index != self._anchor_index:
            self.propertyChanged.emit("anchor_index")

        if indexes_changed:
            self.propertyChanged.emit("selected_indexes")
            self.propertyChanged.emit("selected_items")

    def _raise_selection_changed(self, args: SelectionChangedEventArgs) -> None:
        self.selectionChanged.emit(args)
