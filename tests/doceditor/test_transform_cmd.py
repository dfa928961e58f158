import pytest
from boothforge.core import GroupElement, ImageElement, TextElement
from boothforge.core.geometry import pad_bbox, union_bbox


@pytest.fixture
def group_of_two(editor, add):
    a = add(TextElement(text="a", x=100, y=100, width=50, height=50))
    b = add(TextElement(text="b", x=200, y=150, width=100, height=50))
    editor.select_many([a.uid, b.uid])
    group = editor.group.group_selected()
    return group, a, b


def _derived_box(editor, group):
    children = [c for c in editor.layout.children_of(group) if c.visible]
    return pad_bbox(union_bbox(c.bbox for c in children))


def test_move(editor, camera):
    editor.checkpoint()
    before = len(editor.history_manager)
    assert editor.transform.move(camera.uid, 150, 160)
    assert camera.pos == (150, 160)
    assert len(editor.history_manager) == before + 1


def test_move_missing_element_is_noop(editor):
    assert not editor.transform.move("missing", 1, 1)


def test_move_snaps_to_grid(editor, camera):
    editor.config.snap_to_grid = True
    editor.transform.move(camera.uid, 14, 26)
    assert camera.pos == (10, 30)


def test_locked_element_rejects_move_and_resize(editor, camera):
    camera.locked = True
    assert not editor.transform.move(camera.uid, 0, 0)
    assert not editor.transform.resize(camera.uid, 50, 50)
    assert camera.pos == (100, 100)
    assert camera.size == (200, 200)


def test_drag_checkpoints_once(editor, camera):
    editor.checkpoint()
    before = len(editor.history_manager)

    editor.transform.start_drag()
    assert editor.is_dragging
    for x in (110, 120, 130):
        editor.transform.move(camera.uid, x, 100)
    assert len(editor.history_manager) == before

    editor.transform.stop_drag()
    assert not editor.is_dragging
    assert len(editor.history_manager) == before + 1

    editor.undo()
    assert editor.get(camera.uid).pos == (100, 100)


def test_resize_gesture_checkpoints_once(editor, camera):
    editor.checkpoint()
    before = len(editor.history_manager)
    editor.transform.start_resize()
    editor.transform.resize(camera.uid, 210, 210)
    editor.transform.resize(camera.uid, 220, 220)
    assert len(editor.history_manager) == before
    editor.transform.stop_resize()
    assert len(editor.history_manager) == before + 1


def test_stop_without_start_does_nothing(editor, camera):
    before = len(editor.history_manager)
    editor.transform.stop_drag()
    editor.transform.stop_resize()
    assert len(editor.history_manager) == before


def test_moving_group_moves_children_rigidly(editor, group_of_two):
    group, a, b = group_of_two
    offset = (b.x - a.x, b.y - a.y)

    editor.transform.move(group.uid, group.x + 25, group.y - 15)

    assert a.pos == (125, 85)
    assert b.pos == (225, 135)
    assert (b.x - a.x, b.y - a.y) == offset
    assert a.size == (50, 50)


def test_moving_child_recomputes_padded_group_box(editor, group_of_two):
    group, a, b = group_of_two
    editor.transform.move(a.uid, 20, 30)
    assert group.bbox == _derived_box(editor, group)
    assert group.pos == (10, 20)


def test_resizing_child_recomputes_group_box(editor, group_of_two):
    group, a, b = group_of_two
    editor.transform.resize(b.uid, 300, 200)
    assert group.bbox == _derived_box(editor, group)


def test_hidden_child_excluded_from_group_box(editor, group_of_two):
    group, a, b = group_of_two
    editor.edit.toggle_visibility(b.uid)
    assert group.bbox == pad_bbox(a.bbox)


def test_resize_keeps_image_aspect_ratio(editor, add):
    image = add(ImageElement(path="x.png", width=200, height=100))
    editor.transform.resize(image.uid, 400, 100)
    assert image.size == (400, 200)

    # Width unchanged: the height drives.
    editor.transform.resize(image.uid, 400, 50)
    assert image.size == (100, 50)


def test_resize_unlocked_image_is_free(editor, add):
    image = add(
        ImageElement(path="x.png", width=200, height=100, aspect_locked=False)
    )
    editor.transform.resize(image.uid, 400, 100)
    assert image.size == (400, 100)


def test_resize_snaps_then_clamps(editor, camera):
    editor.config.snap_to_grid = True
    editor.transform.resize(camera.uid, 123, 4)
    assert camera.size == (120, 10)


def test_resize_enforces_minimum(editor, camera):
    editor.transform.resize(camera.uid, 2, -5)
    assert camera.size == (10, 10)


def test_resize_group_scales_children_about_center(editor, add):
    child = add(TextElement(text="c", x=10, y=10, width=20, height=20))
    other = add(TextElement(text="d", x=70, y=70, width=20, height=20))
    group = add(
        GroupElement(
            child_ids=[child.uid, other.uid], x=0, y=0, width=100, height=100
        )
    )

    editor.transform.resize(group.uid, 200, 100)

    # Center of the original box is (50, 50).
    assert child.pos == (-30, 10)
    assert child.size == (40, 20)
    assert other.pos == (90, 70)
    assert other.size == (40, 20)
    assert group.bbox == pad_bbox(union_bbox([child.bbox, other.bbox]))
    assert group.bbox == (-40, 0, 140, 100)


def test_tiny_group_resize_leaves_children_alone(editor, add):
    child = add(TextElement(text="c", x=10, y=10, width=20, height=20))
    group = add(
        GroupElement(child_ids=[child.uid], x=0, y=0, width=100, height=100)
    )
    editor.transform.resize(group.uid, 100.5, 100)
    assert child.pos == (10, 10)
    assert child.size == (20, 20)
    assert group.bbox == (0, 0, 40, 40)


def test_rotate_always_checkpoints(editor, camera):
    editor.checkpoint()
    before = len(editor.history_manager)
    editor.transform.start_drag()
    assert editor.transform.rotate(camera.uid, 45)
    assert camera.rotation == 45
    assert len(editor.history_manager) == before + 1
    assert not editor.transform.rotate("missing", 10)


def test_center_in_canvas(editor, camera):
    editor.transform.center_in_canvas(
        camera.uid, horizontal=True, vertical=False
    )
    assert camera.pos == (400, 100)
    editor.transform.center_in_canvas(camera.uid)
    assert camera.pos == (400, 400)
