import pytest


def _order(editor):
    return [e.uid for e in editor.layout]


@pytest.fixture
def ids(boxes):
    return [b.uid for b in boxes]


def test_bring_to_front(editor, ids):
    assert editor.order.bring_to_front(ids[0])
    assert _order(editor) == [ids[1], ids[2], ids[0]]


def test_send_to_back(editor, ids):
    assert editor.order.send_to_back(ids[2])
    assert _order(editor) == [ids[2], ids[0], ids[1]]


def test_move_forward_and_backward(editor, ids):
    assert editor.order.move_forward(ids[0])
    assert _order(editor) == [ids[1], ids[0], ids[2]]
    assert editor.order.move_backward(ids[2])
    assert _order(editor) == [ids[1], ids[2], ids[0]]


def test_steps_are_noops_at_boundaries(editor, ids):
    before = len(editor.history_manager)
    assert not editor.order.move_forward(ids[2])
    assert not editor.order.move_backward(ids[0])
    assert not editor.order.bring_to_front(ids[2])
    assert not editor.order.send_to_back(ids[0])
    assert _order(editor) == ids
    assert len(editor.history_manager) == before


def test_unknown_id_is_noop(editor, ids):
    assert not editor.order.bring_to_front("missing")
    assert not editor.order.move_forward("missing")
    assert _order(editor) == ids


def test_reorder(editor, ids):
    assert editor.order.reorder(0, 2)
    assert _order(editor) == [ids[1], ids[2], ids[0]]


@pytest.mark.parametrize("old, new", [(-1, 0), (0, 3), (5, 1), (1, 1)])
def test_reorder_out_of_range_ignored(editor, ids, old, new):
    assert not editor.order.reorder(old, new)
    assert _order(editor) == ids


def test_reorder_is_undoable(editor, ids):
    editor.checkpoint()
    editor.order.reorder(2, 0)
    editor.undo()
    assert _order(editor) == ids
