from __future__ import annotations
import logging
from typing import TYPE_CHECKING, List
from .arrange import (
    ALIGN_MODES,
    AlignStrategy,
    ArrangeStrategy,
    SpreadStrategy,
)

if TYPE_CHECKING:
    from ..core.element import Element
    from .editor import DocEditor


logger = logging.getLogger(__name__)


class ArrangeCmd:
    """
    Aligns and distributes the selected elements. Each call is a single
    undo step, bracketed by a checkpoint before and after.
    """

    def __init__(self, editor: "DocEditor"):
        self._editor = editor

    def align_horizontally(self, mode: str) -> bool:
        """Aligns left edges ("start"), centers or right edges ("end")."""
        return self._align("x", mode)

    def align_vertically(self, mode: str) -> bool:
        """Aligns top edges ("start"), centers or bottom edges ("end")."""
        return self._align("y", mode)

    def distribute_horizontally(self) -> bool:
        return self._distribute("x")

    def distribute_vertically(self) -> bool:
        return self._distribute("y")

    def _arrange_units(self) -> List["Element"]:
        """
        The selected elements that move on their own. A child whose group
        is selected as well travels with the group.
        """
        editor = self._editor
        selected = editor.selected_elements
        units = []
        for element in selected:
            parent = editor.layout.parent_group_of(element.uid)
            if parent is not None and editor.is_selected(parent.uid):
                logger.debug(
                    f"arrange: {element.uid} moves with group {parent.uid}"
                )
                continue
            units.append(element)
        return units

    def _align(self, axis: str, mode: str) -> bool:
        elements = self._arrange_units()
        if len(elements) < 2:
            logger.debug("align: fewer than 2 elements selected")
            return False
        if mode not in ALIGN_MODES:
            logger.debug(f"align: unknown mode '{mode}'")
            return False
        return self._apply(AlignStrategy(elements, axis, mode))

    def _distribute(self, axis: str) -> bool:
        elements = self._arrange_units()
        if len(elements) < 3:
            logger.debug("distribute: fewer than 3 elements selected")
            return False
        return self._apply(SpreadStrategy(elements, axis))

    def _apply(self, strategy: ArrangeStrategy) -> bool:
        editor = self._editor
        deltas = strategy.calculate_deltas()

        editor.checkpoint()
        for element in strategy.elements:
            delta = deltas.get(element.uid)
            if delta is None:
                continue
            if element.locked:
                logger.debug(f"arrange: skipping locked element {element.uid}")
                continue
            dx, dy = delta
            editor.transform.place(element, element.x + dx, element.y + dy)
            element.updated.send(element)
        editor.checkpoint()
        editor.notify()
        return True
