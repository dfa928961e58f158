import pytest
from unittest.mock import MagicMock
from boothforge.core import CameraElement, Layout
from boothforge.doceditor.selection import Selection


@pytest.fixture
def selection():
    return Selection()


def test_select_replaces(selection):
    selection.select("a")
    selection.select("b")
    assert selection.ids == ["b"]
    assert selection.primary == "b"


def test_select_none_clears(selection):
    selection.select("a")
    selection.select(None)
    assert len(selection) == 0
    assert selection.primary is None


def test_extend_without_range_modifier_replaces(selection):
    selection.select("a")
    selection.select("b", extend=True)
    assert selection.ids == ["b"]


def test_extend_with_range_modifier_toggles(selection):
    selection.select("a")
    selection.select("b", extend=True, range_modifier=True)
    assert selection.ids == ["a", "b"]
    assert selection.primary == "b"

    # Removing the primary re-elects a remaining member.
    selection.select("b", extend=True, range_modifier=True)
    assert selection.ids == ["a"]
    assert selection.primary == "a"

    selection.select("a", extend=True, range_modifier=True)
    assert len(selection) == 0
    assert selection.primary is None


def test_extend_without_primary_replaces(selection):
    selection.select("a", extend=True, range_modifier=True)
    assert selection.ids == ["a"]
    assert selection.primary == "a"


def test_removing_non_primary_keeps_primary(selection):
    selection.select_many(["a", "b", "c"])
    selection.select("c", extend=True, range_modifier=True)
    assert selection.ids == ["a", "b"]
    assert selection.primary == "a"


def test_select_many_primary_is_first(selection):
    selection.select_many(["x", "y", "x"])
    assert selection.ids == ["x", "y"]
    assert selection.primary == "x"
    assert selection.has_multiple


def test_select_many_empty_clears(selection):
    selection.select("a")
    selection.select_many([])
    assert selection.primary is None


def test_select_all(selection):
    layout = Layout()
    a = layout.add_element(CameraElement())
    b = layout.add_element(CameraElement())
    selection.select_all(layout)
    assert selection.ids == [a.uid, b.uid]
    assert selection.primary == a.uid


def test_retain_clears_when_primary_gone(selection):
    layout = Layout()
    a = layout.add_element(CameraElement())
    selection.select_many(["gone", a.uid])
    selection.retain(layout)
    assert len(selection) == 0


def test_retain_drops_vanished_members(selection):
    layout = Layout()
    a = layout.add_element(CameraElement())
    selection.select_many([a.uid, "gone"])
    selection.retain(layout)
    assert selection.ids == [a.uid]
    assert selection.primary == a.uid


def test_elements_in_follows_z_order(selection):
    layout = Layout()
    a = layout.add_element(CameraElement())
    b = layout.add_element(CameraElement())
    selection.select_many([b.uid, a.uid, "stale"])
    assert selection.elements_in(layout) == [a, b]


def test_changed_signal(selection):
    listener = MagicMock()
    selection.changed.connect(listener)
    selection.select("a")
    listener.assert_called_once_with(selection)
    listener.reset_mock()
    selection.clear()
    selection.clear()
    listener.assert_called_once_with(selection)
