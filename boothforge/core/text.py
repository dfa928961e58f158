from typing import Any, Dict, Optional
from .element import (
    Element,
    MalformedDocument,
    as_bool,
    as_float,
    as_str,
)

TRANSPARENT = "transparent"

# The nine anchor combinations of {top, center, bottom} x
# {left, center, right}. The middle one is spelled plain "center".
ALIGNMENTS = (
    "topLeft",
    "topCenter",
    "topRight",
    "centerLeft",
    "center",
    "centerRight",
    "bottomLeft",
    "bottomCenter",
    "bottomRight",
)


def horizontal_anchor(alignment: str) -> str:
    """
    Resolves the horizontal component of an alignment tag to one of
    'left', 'center' or 'right'.
    """
    tag = alignment.lower()
    if "left" in tag:
        return "left"
    if "right" in tag:
        return "right"
    if "center" in tag:
        return "center"
    return "left"


def vertical_anchor(alignment: str) -> str:
    """
    Resolves the vertical component of an alignment tag to one of
    'top', 'center' or 'bottom'. A tag that mentions "center" but neither
    "top" nor "bottom" is vertically centered.
    """
    tag = alignment.lower()
    if "top" in tag:
        return "top"
    if "bottom" in tag:
        return "bottom"
    if "center" in tag:
        return "center"
    return "top"


class TextElement(Element):
    """A text label drawn inside its box with one of nine anchors."""

    type_name = "text"

    def __init__(
        self,
        text: str = "",
        x: float = 0.0,
        y: float = 0.0,
        width: float = 200.0,
        height: float = 50.0,
        rotation: float = 0.0,
        font_family: str = "Arial",
        remote_font: bool = False,
        font_size: float = 20.0,
        color: str = "#000000",
        background_color: str = TRANSPARENT,
        bold: bool = False,
        italic: bool = False,
        alignment: str = "topLeft",
        uid: Optional[str] = None,
    ):
        super().__init__(x, y, width, height, rotation, uid)
        self.text: str = text
        self.font_family: str = font_family
        self.remote_font: bool = remote_font
        self.font_size: float = font_size
        self.color: str = color
        self.background_color: str = background_color
        self.bold: bool = bold
        self.italic: bool = italic
        self.alignment: str = alignment

    @property
    def has_background(self) -> bool:
        return self.background_color.lower() != TRANSPARENT

    def _props_to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "font_family": self.font_family,
            "remote_font": self.remote_font,
            "font_size": self.font_size,
            "color": self.color,
            "background_color": self.background_color,
            "bold": self.bold,
            "italic": self.italic,
            "alignment": self.alignment,
        }

    def _props_from_dict(self, data: Dict[str, Any]):
        self.text = as_str(data, "text")
        self.font_family = as_str(data, "font_family", "Arial")
        self.remote_font = as_bool(data, "remote_font", False)
        self.font_size = as_float(data, "font_size", 20.0)
        self.color = as_str(data, "color", "#000000")
        self.background_color = as_str(data, "background_color", TRANSPARENT)
        self.bold = as_bool(data, "bold", False)
        self.italic = as_bool(data, "italic", False)
        alignment = as_str(data, "alignment", "topLeft")
        if alignment not in ALIGNMENTS:
            raise MalformedDocument(f"Unknown text alignment '{alignment}'")
        self.alignment = alignment
