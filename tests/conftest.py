import os

# Ensure Qt runs in offscreen mode for headless CI/test environments
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Configure logging for tests so debug information from treeselect modules
# (commits, shifts, pruning) is visible when a test fails.
import logging
handler = logging.StreamHandler()
formatter = logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s')
handler.setFormatter(formatter)
root = logging.getLogger()
if not root.handlers:
    root.addHandler(handler)
root.setLevel(logging.DEBUG)


import pytest
from PySide6.QtCore import QCoreApplication

from treeselect import settings
from treeselect.items_view import ItemsView
from treeselect.selection_model import TreeSelectionModel


class Item:
    def __init__(self, name, children=None):
        self.name = name
        self.children = ItemsView(children) if children is not None else None

    def __repr__(self):
        return f"Item({self.name!r})"


def children_of(item):
    return item.children


class SignalRecorder:
    """Collects every notification raised by a TreeSelectionModel."""

    def __init__(self, model):
        self.selection = []
        self.properties = []
        self.indexes = []
        model.selectionChanged.connect(lambda e: self.selection.append(e))
        model.propertyChanged.connect(lambda name: self.properties.append(name))
        model.indexesChanged.connect(lambda e: self.indexes.append(e))

    def reset(self):
        self.selection.clear()
        self.properties.clear()
        self.indexes.clear()


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the settings layer at a throwaway config file."""
    monkeypatch.setenv(settings.CONFIG_ENV_VAR, str(tmp_path / "treeselect_config.json"))
    monkeypatch.delenv(settings.TRACE_ENV_VAR, raising=False)
    settings.reset_trace_cache()
    yield
    settings.reset_trace_cache()


@pytest.fixture
def app():
    return QCoreApplication.instance() or QCoreApplication([])


@pytest.fixture
def make_item():
    return Item


@pytest.fixture
def tree():
    """Root items A, B, C.

    A -> A0, A1, A2, A3, A4 (A1 -> A1a, A1b); B -> B0, B1; C has no children.
    """
    a1 = Item("A1", [Item("A1a"), Item("A1b")])
    a = Item("A", [Item("A0"), a1, Item("A2"), Item("A3"), Item("A4")])
    b = Item("B", [Item("B0"), Item("B1")])
    c = Item("C")
    return ItemsView([a, b, c])


@pytest.fixture
def model(app, tree):
    return TreeSelectionModel(children_of, source=tree, single_select=False)


@pytest.fixture
def single_model(app, tree):
    return TreeSelectionModel(children_of, source=tree, single_select=True)


@pytest.fixture
def recorder(model):
    return SignalRecorder(model)
