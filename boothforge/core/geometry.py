import math
from typing import Iterable, Optional, Tuple

# An axis-aligned box as (min_x, min_y, max_x, max_y).
BBox = Tuple[float, float, float, float]

GRID_SIZE = 10.0
MIN_SIZE = 10.0
GROUP_PADDING = 10.0


def snap_value(value: float, grid_size: float = GRID_SIZE) -> float:
    """Rounds a single coordinate to the nearest grid line."""
    if grid_size <= 0:
        return value
    return round(value / grid_size) * grid_size


def snap_point(
    x: float, y: float, grid_size: float = GRID_SIZE
) -> Tuple[float, float]:
    return snap_value(x, grid_size), snap_value(y, grid_size)


def clamp_size(
    width: float, height: float, minimum: float = MIN_SIZE
) -> Tuple[float, float]:
    """Enforces the minimum element size on both axes."""
    return max(minimum, width), max(minimum, height)


def fit_aspect(
    current: Tuple[float, float], requested: Tuple[float, float]
) -> Tuple[float, float]:
    """
    Adjusts a requested (width, height) so that it keeps the aspect ratio
    of the current size.

    The dimension that differs from the current size is taken as the one
    the user changed; the other one is derived from it. If the width is
    unchanged, the height drives the result.
    """
    cur_w, cur_h = current
    req_w, req_h = requested
    if cur_w <= 0 or cur_h <= 0:
        return requested
    aspect = cur_w / cur_h
    if req_w != cur_w:
        return req_w, req_w / aspect
    return req_h * aspect, req_h


def fit_within(
    aspect: float, max_edge: float
) -> Tuple[float, float]:
    """
    Returns a size with the given aspect ratio whose longer edge equals
    max_edge. Landscape sources are bounded by width, everything else by
    height.
    """
    if aspect <= 0:
        return max_edge, max_edge
    if aspect > 1.0:
        return max_edge, max_edge / aspect
    return max_edge * aspect, max_edge


def rect_to_bbox(x: float, y: float, width: float, height: float) -> BBox:
    return x, y, x + width, y + height


def union_bbox(boxes: Iterable[BBox]) -> Optional[BBox]:
    """
    Calculates the union of a collection of boxes. Returns None if the
    collection is empty.
    """
    min_x, min_y = math.inf, math.inf
    max_x, max_y = -math.inf, -math.inf
    for bx0, by0, bx1, by1 in boxes:
        min_x = min(min_x, bx0)
        min_y = min(min_y, by0)
        max_x = max(max_x, bx1)
        max_y = max(max_y, by1)
    if math.isinf(min_x):
        return None
    return min_x, min_y, max_x, max_y


def pad_bbox(bbox: BBox, padding: float = GROUP_PADDING) -> BBox:
    min_x, min_y, max_x, max_y = bbox
    return min_x - padding, min_y - padding, max_x + padding, max_y + padding


def scale_about(
    value: float, center: float, factor: float
) -> float:
    """Scales a coordinate's offset from a center point."""
    return center + (value - center) * factor
