from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, List, Tuple, TYPE_CHECKING
from ...core.geometry import BBox, union_bbox

if TYPE_CHECKING:
    from ...core.element import Element

# Axis names accepted by the strategies.
AXES = ("x", "y")


class ArrangeStrategy(ABC):
    """
    Abstract base class for alignment and distribution strategies.

    A strategy looks at a list of elements and calculates how far each
    one has to move. It never mutates the elements itself; applying the
    deltas is left to the caller.
    """

    def __init__(self, elements: List[Element], axis: str = "x"):
        if not elements:
            raise ValueError("ArrangeStrategy requires at least one element.")
        if axis not in AXES:
            raise ValueError(f"Unknown axis '{axis}'")
        self.elements = elements
        self.axis = axis

    def _selection_bbox(self) -> BBox:
        bbox = union_bbox(e.bbox for e in self.elements)
        if bbox is None:
            raise ValueError("No elements left to arrange.")
        return bbox

    def _extent(self) -> Tuple[float, float]:
        """The (min, max) of the selection along the strategy's axis."""
        min_x, min_y, max_x, max_y = self._selection_bbox()
        if self.axis == "x":
            return min_x, max_x
        return min_y, max_y

    def _start(self, element: Element) -> float:
        return element.x if self.axis == "x" else element.y

    def _length(self, element: Element) -> float:
        return element.width if self.axis == "x" else element.height

    def _delta(self, offset: float) -> Tuple[float, float]:
        return (offset, 0.0) if self.axis == "x" else (0.0, offset)

    @abstractmethod
    def calculate_deltas(self) -> Dict[str, Tuple[float, float]]:
        """
        Returns a mapping of element ID to the (dx, dy) that moves the
        element to its target position. Elements that stay put may be
        left out.
        """
        pass
