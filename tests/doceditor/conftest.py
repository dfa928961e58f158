import pytest
from unittest.mock import MagicMock
from boothforge.core import CameraElement, Layout, TextElement
from boothforge.doceditor.editor import DocEditor
from boothforge.tasker.manager import TaskManager


@pytest.fixture
def editor():
    """Provides a DocEditor with a mocked TaskManager."""
    task_manager = MagicMock(spec=TaskManager)
    return DocEditor(task_manager, layout=Layout(width=1000, height=1000))


@pytest.fixture
def add(editor):
    """Adds an element directly to the editor's layout."""

    def _add(element):
        editor.layout.add_element(element)
        return element

    return _add


@pytest.fixture
def boxes(editor, add):
    """Three text boxes of widths 50, 100, 150 at x=0, 80, 300."""
    return [
        add(TextElement(text="a", x=0, y=0, width=50, height=20)),
        add(TextElement(text="b", x=80, y=40, width=100, height=40)),
        add(TextElement(text="c", x=300, y=200, width=150, height=60)),
    ]


@pytest.fixture
def camera(add):
    return add(CameraElement(label="Cam", x=100, y=100, width=200, height=200))
