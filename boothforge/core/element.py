from __future__ import annotations
import math
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple, TypeVar, Type
from blinker import Signal
from .geometry import BBox, MIN_SIZE, clamp_size, rect_to_bbox

T = TypeVar("T", bound="Element")


class MalformedDocument(Exception):
    """
    Raised when a serialized document or element cannot be reconstructed,
    either because a required field is missing or has the wrong type, or
    because the element type tag is unknown.
    """

    pass


def new_uid() -> str:
    return str(uuid.uuid4())


def require(data: Dict[str, Any], key: str) -> Any:
    """Fetches a required field from a serialized mapping."""
    try:
        return data[key]
    except (KeyError, TypeError):
        raise MalformedDocument(f"Missing required field '{key}'")


def as_float(data: Dict[str, Any], key: str, default: Any = None) -> float:
    """Fetches a finite number. Strings and booleans are not numbers."""
    value = require(data, key) if default is None else data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedDocument(f"Field '{key}' must be a number")
    if not math.isfinite(value):
        raise MalformedDocument(f"Field '{key}' must be finite")
    return float(value)


def as_str(data: Dict[str, Any], key: str, default: Any = None) -> str:
    value = require(data, key) if default is None else data.get(key, default)
    if not isinstance(value, str):
        raise MalformedDocument(f"Field '{key}' must be a string")
    return value


def as_bool(data: Dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise MalformedDocument(f"Field '{key}' must be a boolean")
    return value


class Element(ABC):
    """
    An abstract base class for anything that can be placed on a layout.

    All elements carry an absolute position and size in canvas units, a
    rotation in degrees about their own center, and visibility and lock
    flags. Each concrete variant declares a unique `type_name` that is
    used as the discriminant when serializing.
    """

    type_name: str = ""

    def __init__(
        self,
        x: float = 0.0,
        y: float = 0.0,
        width: float = 100.0,
        height: float = 100.0,
        rotation: float = 0.0,
        uid: Optional[str] = None,
    ):
        self.uid: str = uid or new_uid()
        self.x: float = x
        self.y: float = y
        self.width: float = max(MIN_SIZE, width)
        self.height: float = max(MIN_SIZE, height)
        self.rotation: float = rotation
        self.visible: bool = True
        self.locked: bool = False

        # Fired when any of this element's fields change.
        self.updated = Signal()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(uid={self.uid!r}, x={self.x}, "
            f"y={self.y}, width={self.width}, height={self.height})"
        )

    @property
    def pos(self) -> Tuple[float, float]:
        return self.x, self.y

    @property
    def size(self) -> Tuple[float, float]:
        return self.width, self.height

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    @property
    def bbox(self) -> BBox:
        """The unrotated box (min_x, min_y, max_x, max_y) of the element."""
        return rect_to_bbox(self.x, self.y, self.width, self.height)

    @property
    def is_group(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializes the element, including its variant tag, into a plain
        dictionary suitable for JSON encoding.
        """
        data: Dict[str, Any] = {
            "type": self.type_name,
            "id": self.uid,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "rotation": self.rotation,
            "visible": self.visible,
            "locked": self.locked,
        }
        data.update(self._props_to_dict())
        return data

    @abstractmethod
    def _props_to_dict(self) -> Dict[str, Any]:
        """Returns the variant-specific fields."""
        pass

    @abstractmethod
    def _props_from_dict(self, data: Dict[str, Any]):
        """Restores the variant-specific fields."""
        pass

    @classmethod
    def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
        if not isinstance(data, dict):
            raise MalformedDocument("Element data must be a mapping")
        element = cls(uid=as_str(data, "id"))
        element.x = as_float(data, "x")
        element.y = as_float(data, "y")
        element.width, element.height = clamp_size(
            as_float(data, "width"), as_float(data, "height")
        )
        element.rotation = as_float(data, "rotation", 0.0)
        element.visible = as_bool(data, "visible", True)
        element.locked = as_bool(data, "locked", False)
        element._props_from_dict(data)
        return element

    def clone(self: T, uid: Optional[str] = None) -> T:
        """
        Returns an unconnected copy of this element. The copy gets a fresh
        UID unless one is given.
        """
        data = self.to_dict()
        data["id"] = uid or new_uid()
        return self.__class__.from_dict(data)
