from typing import Any, Dict, Optional
from .element import Element, MalformedDocument, as_bool, as_float, as_str


class ImageElement(Element):
    """
    A placed image, referenced by file path. The pixels are only decoded
    when rendering or when the natural aspect ratio is needed.
    """

    type_name = "image"

    def __init__(
        self,
        path: str = "",
        x: float = 0.0,
        y: float = 0.0,
        width: float = 200.0,
        height: float = 200.0,
        rotation: float = 0.0,
        opacity: float = 1.0,
        aspect_locked: bool = True,
        uid: Optional[str] = None,
    ):
        super().__init__(x, y, width, height, rotation, uid)
        self.path: str = path
        self.opacity: float = opacity
        self.aspect_locked: bool = aspect_locked

    @property
    def opacity(self) -> float:
        return self._opacity

    @opacity.setter
    def opacity(self, value: float):
        self._opacity = min(1.0, max(0.0, float(value)))

    def _props_to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "opacity": self.opacity,
            "aspect_locked": self.aspect_locked,
        }

    def _props_from_dict(self, data: Dict[str, Any]):
        self.path = as_str(data, "path")
        opacity = as_float(data, "opacity", 1.0)
        if not 0.0 <= opacity <= 1.0:
            raise MalformedDocument(f"Opacity {opacity} is out of range")
        self.opacity = opacity
        self.aspect_locked = as_bool(data, "aspect_locked", True)
