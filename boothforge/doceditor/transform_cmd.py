from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Optional
from ..core.geometry import clamp_size, fit_aspect, snap_point, snap_value
from ..core.group import GroupElement
from ..core.image import ImageElement

if TYPE_CHECKING:
    from ..core.element import Element
    from .editor import DocEditor


logger = logging.getLogger(__name__)

# Scale factors closer to 1 than this are treated as float noise.
SCALE_EPSILON = 0.01


class TransformCmd:
    """
    Moves, resizes and rotates elements.

    A move or resize issued outside a drag/resize gesture is a discrete
    action and checkpoints immediately. Inside a gesture the history is
    left alone until the gesture ends, so a drag produces a single undo
    step.
    """

    def __init__(self, editor: "DocEditor"):
        self._editor = editor

    def _editable(self, uid: str, action: str) -> Optional["Element"]:
        element = self._editor.get(uid)
        if element is None:
            logger.debug(f"{action}: no element {uid}")
            return None
        if element.locked:
            logger.debug(f"{action}: element {uid} is locked")
            return None
        return element

    def _commit(self, element: "Element"):
        if not self._editor.in_gesture:
            self._editor.checkpoint()
        self._editor.notify(element)

    def start_drag(self):
        self._editor._dragging = True

    def stop_drag(self):
        if not self._editor._dragging:
            return
        self._editor._dragging = False
        self._editor.checkpoint()

    def start_resize(self):
        self._editor._resizing = True

    def stop_resize(self):
        if not self._editor._resizing:
            return
        self._editor._resizing = False
        self._editor.checkpoint()

    def move(self, uid: str, x: float, y: float) -> bool:
        """
        Moves an element to an absolute position. Moving a group carries
        its children along by the same delta; moving a group's child
        refreshes the group's box.
        """
        element = self._editable(uid, "move")
        if element is None:
            return False

        editor = self._editor
        if editor.snap_to_grid:
            x, y = snap_point(x, y, editor.grid_size)
        self.place(element, x, y)
        self._commit(element)
        return True

    def place(self, element: "Element", x: float, y: float):
        """
        Writes a new position and keeps groups consistent. No snapping
        and no checkpoint; locks are not checked.
        """
        dx, dy = x - element.x, y - element.y
        element.x = x
        element.y = y
        if isinstance(element, GroupElement):
            self._editor.group.translate_children(element, dx, dy)
        else:
            self._editor.group.update_parent_of(element.uid)

    def resize(self, uid: str, width: float, height: float) -> bool:
        """
        Resizes an element.

        Aspect-locked images derive one dimension from the other, the one
        that differs from the current size being the one the user moved.
        Grid snapping and the minimum size are applied after that.
        Resizing a group scales its children about the group's original
        center, after which the group's box is re-derived from them.
        """
        element = self._editable(uid, "resize")
        if element is None:
            return False

        editor = self._editor
        if isinstance(element, ImageElement) and element.aspect_locked:
            width, height = fit_aspect(element.size, (width, height))
        if editor.snap_to_grid:
            width = snap_value(width, editor.grid_size)
            height = snap_value(height, editor.grid_size)
        width, height = clamp_size(width, height)

        orig_w, orig_h = element.size
        element.width = width
        element.height = height

        if isinstance(element, GroupElement):
            scale_x = width / orig_w
            scale_y = height / orig_h
            if (
                abs(scale_x - 1.0) > SCALE_EPSILON
                or abs(scale_y - 1.0) > SCALE_EPSILON
            ):
                editor.group.resize_children(
                    element,
                    scale_x,
                    scale_y,
                    element.x + orig_w / 2,
                    element.y + orig_h / 2,
                )
            editor.group.update_bounding_box(element)
        else:
            editor.group.update_parent_of(uid)
        self._commit(element)
        return True

    def rotate(self, uid: str, degrees: float) -> bool:
        """Sets the rotation in degrees. Always a discrete, undoable step."""
        element = self._editor.get(uid)
        if element is None:
            logger.debug(f"rotate: no element {uid}")
            return False
        element.rotation = degrees
        self._editor.checkpoint()
        self._editor.notify(element)
        return True

    def center_in_canvas(
        self, uid: str, horizontal: bool = True, vertical: bool = True
    ) -> bool:
        element = self._editor.get(uid)
        if element is None:
            return False
        layout = self._editor.layout
        x, y = element.pos
        if horizontal:
            x = (layout.width - element.width) / 2
        if vertical:
            y = (layout.height - element.height) / 2
        return self.move(uid, x, y)
