from __future__ import annotations
from typing import Dict, Tuple
from .base import ArrangeStrategy


class SpreadStrategy(ArrangeStrategy):
    """
    Distributes elements so the gaps between neighbours are equal.

    The elements are sorted by their leading edge. The first one stays
    put and the span runs up to the trailing edge of the last one. When
    the elements are wider than the span the gap goes negative and they
    overlap.
    """

    def __init__(self, elements, axis: str = "x"):
        if len(elements) < 3:
            raise ValueError("Distributing needs at least three elements.")
        super().__init__(elements, axis)

    def calculate_deltas(self) -> Dict[str, Tuple[float, float]]:
        ordered = sorted(self.elements, key=self._start)
        first, last = ordered[0], ordered[-1]
        start = self._start(first)
        span = self._start(last) + self._length(last) - start
        total = sum(self._length(e) for e in ordered)
        gap = (span - total) / (len(ordered) - 1)

        deltas = {}
        position = start
        for i, element in enumerate(ordered):
            if i > 0:
                offset = position - self._start(element)
                if offset:
                    deltas[element.uid] = self._delta(offset)
            position += self._length(element) + gap
        return deltas
