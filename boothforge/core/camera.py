from typing import Any, Dict, Optional
from .element import Element, as_str


class CameraElement(Element):
    """A slot that is filled with a captured photo at print time."""

    type_name = "camera"

    def __init__(
        self,
        label: str = "",
        x: float = 0.0,
        y: float = 0.0,
        width: float = 300.0,
        height: float = 300.0,
        rotation: float = 0.0,
        uid: Optional[str] = None,
    ):
        super().__init__(x, y, width, height, rotation, uid)
        self.label: str = label

    def _props_to_dict(self) -> Dict[str, Any]:
        return {"label": self.label}

    def _props_from_dict(self, data: Dict[str, Any]):
        self.label = as_str(data, "label")
