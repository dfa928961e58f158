from __future__ import annotations
from typing import Dict, Tuple
from .base import ArrangeStrategy

ALIGN_MODES = ("start", "center", "end")


class AlignStrategy(ArrangeStrategy):
    """
    Lines elements up along one axis against the selection's extent:
    their leading edges at the minimum ("start"), their centers at the
    middle ("center"), or their trailing edges at the maximum ("end").
    """

    def __init__(self, elements, axis: str = "x", mode: str = "start"):
        super().__init__(elements, axis)
        if mode not in ALIGN_MODES:
            raise ValueError(f"Unknown alignment mode '{mode}'")
        self.mode = mode

    def calculate_deltas(self) -> Dict[str, Tuple[float, float]]:
        low, high = self._extent()
        deltas = {}
        for element in self.elements:
            length = self._length(element)
            if self.mode == "start":
                target = low
            elif self.mode == "center":
                target = low + (high - low - length) / 2
            else:
                target = high - length
            offset = target - self._start(element)
            if offset:
                deltas[element.uid] = self._delta(offset)
        return deltas
