from __future__ import annotations
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .editor import DocEditor


logger = logging.getLogger(__name__)


class OrderCmd:
    """Z-order changes. Index 0 of the layout is the back-most element."""

    def __init__(self, editor: "DocEditor"):
        self._editor = editor

    def _move(self, uid: str, target: int) -> bool:
        layout = self._editor.layout
        index = layout.index_of(uid)
        if index < 0:
            logger.debug(f"z-order: no element {uid}")
            return False
        if not layout.move_element(index, target):
            return False
        self._editor.checkpoint()
        self._editor.notify()
        return True

    def bring_to_front(self, uid: str) -> bool:
        return self._move(uid, len(self._editor.layout) - 1)

    def send_to_back(self, uid: str) -> bool:
        return self._move(uid, 0)

    def move_forward(self, uid: str) -> bool:
        index = self._editor.layout.index_of(uid)
        if index < 0:
            return False
        return self._move(uid, index + 1)

    def move_backward(self, uid: str) -> bool:
        index = self._editor.layout.index_of(uid)
        if index < 0:
            return False
        return self._move(uid, index - 1)

    def reorder(self, old_index: int, new_index: int) -> bool:
        """
        Moves the element at old_index to new_index. Out-of-range indices
        are ignored.
        """
        if not self._editor.layout.move_element(old_index, new_index):
            logger.debug(f"reorder: ignored {old_index} -> {new_index}")
            return False
        self._editor.checkpoint()
        self._editor.notify()
        return True
