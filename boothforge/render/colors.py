from typing import Tuple
from ..core.text import TRANSPARENT

# A fully resolved, render-ready RGBA color.
ColorRGBA = Tuple[float, float, float, float]


def parse_color(value: str) -> ColorRGBA:
    """
    Converts a document color string into an RGBA tuple of floats.

    Accepts "#RRGGBB", "#AARRGGBB" (alpha first) and the sentinel
    "transparent". The leading '#' is optional. Raises ValueError for
    anything else.
    """
    if value.strip().lower() == TRANSPARENT:
        return 0.0, 0.0, 0.0, 0.0

    hex_str = value.strip().lstrip("#")
    if len(hex_str) == 6:
        hex_str = "FF" + hex_str
    if len(hex_str) != 8:
        raise ValueError(f"Invalid color '{value}'")
    try:
        argb = int(hex_str, 16)
    except ValueError:
        raise ValueError(f"Invalid color '{value}'")

    a = (argb >> 24) & 0xFF
    r = (argb >> 16) & 0xFF
    g = (argb >> 8) & 0xFF
    b = argb & 0xFF
    return r / 255.0, g / 255.0, b / 255.0, a / 255.0


def normalize_color(value: str) -> str:
    """
    Brings a user-entered color into document form: the transparent
    sentinel is kept as-is, anything else gets a leading '#'.
    """
    if value.strip().lower() == TRANSPARENT:
        return TRANSPARENT
    return value if value.startswith("#") else f"#{value}"
