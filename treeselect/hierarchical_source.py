"""Hierarchical item source owning a tree selection model."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .index_path import IndexPath
from .items_view import ItemsView, resolve_path
from .selection_model import TreeSelectionModel


class HierarchicalSource:
    """Root items plus a children accessor describing a tree.

    The selection model is created on first access and follows the source
    when the root items are replaced.
    """

    def __init__(self, items, children: Callable | None = None):
        self._items = items
        self._items_view = ItemsView.get_or_create(items)
        self._children = children
        self._selection: TreeSelectionModel | None = None

    @classmethod
    def from_item(cls, item, children: Callable | None = None) -> HierarchicalSource:
        return cls([item], children)

    @property
    def items(self):
        return self._items

    @items.setter
    def items(self, value):
        if value is self._items:
            return
        self._items = value
        self._items_view = ItemsView.get_or_create(value)
        logging.debug("[source] items replaced (%d root item(s))", len(self._items_view or ()))
        if self._selection is not None:
            self._selection.source = self._items_view

    @property
    def items_view(self) -> ItemsView | None:
        return self._items_view

    @property
    def children(self) -> Callable | None:
        return self._children

    @property
    def selection(self) -> TreeSelectionModel:
        if self._selection is None:
            self._selection = TreeSelectionModel(self._children, source=self._items_view)
        return self._selection

    @selection.setter
    def selection(self, value: TreeSelectionModel):
        if value is None:
            raise ValueError("Selection model cannot be None")
        if self._selection is not None:
            raise RuntimeError("Selection model is already set.")
        self._selection = value
        if value.source is None:
            value.source = self._items_view

    def try_get_model_at(self, path: IndexPath) -> tuple[bool, object]:
        if self._children is None:
            raise RuntimeError("No children accessor defined.")
        return resolve_path(self._items_view, path, self._children)
