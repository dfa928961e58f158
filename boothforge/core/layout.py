import logging
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Type,
    TypeVar,
)
from blinker import Signal
from .element import Element, MalformedDocument, as_float, as_str, require
from .image import ImageElement
from .text import TRANSPARENT, TextElement
from .camera import CameraElement
from .group import GroupElement


logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Element)

element_by_type: Dict[str, Type[Element]] = {
    cls.type_name: cls
    for cls in (ImageElement, TextElement, CameraElement, GroupElement)
}


def element_from_dict(data: Dict[str, Any]) -> Element:
    """Reconstructs the correct element variant from its type tag."""
    type_name = require(data, "type")
    cls = element_by_type.get(type_name)
    if cls is None:
        raise MalformedDocument(f"Unknown element type '{type_name}'")
    return cls.from_dict(data)


class Layout:
    """
    A print template: a fixed-size canvas with a background color and an
    ordered list of elements. The list order is the z-order, index 0
    being the back-most element.
    """

    def __init__(
        self,
        width: float = 1200,
        height: float = 1800,
        background_color: str = "#FFFFFF",
        elements: Optional[Iterable[Element]] = None,
    ):
        self.width = width
        self.height = height
        self.background_color = background_color
        self.elements: List[Element] = []

        # Fired when elements are added, removed or reordered.
        self.elements_changed = Signal()
        # Fired when the layout's own properties change.
        self.updated = Signal()
        # Fired when any element's `updated` signal fires.
        self.descendant_updated = Signal()

        for element in elements or []:
            self.add_element(element)

    def __iter__(self) -> Iterator[Element]:
        return iter(list(self.elements))

    def __len__(self) -> int:
        return len(self.elements)

    def __contains__(self, uid: object) -> bool:
        return self.get(uid) is not None  # type: ignore[arg-type]

    @property
    def has_transparent_background(self) -> bool:
        return self.background_color.lower() == TRANSPARENT

    def get(self, uid: Optional[str]) -> Optional[Element]:
        """Looks up an element by ID, returning None if there is none."""
        if uid is None:
            return None
        for element in self.elements:
            if element.uid == uid:
                return element
        return None

    def index_of(self, uid: str) -> int:
        for i, element in enumerate(self.elements):
            if element.uid == uid:
                return i
        return -1

    def of_type(self, cls: Type[T]) -> List[T]:
        return [e for e in self.elements if isinstance(e, cls)]

    @property
    def groups(self) -> List[GroupElement]:
        return self.of_type(GroupElement)

    def add_element(self, element: T, index: Optional[int] = None) -> T:
        """
        Adds an element on top of the stack, or at the given index.
        """
        if element in self.elements:
            return element
        if self.get(element.uid) is not None:
            raise ValueError(f"Duplicate element ID {element.uid}")

        if index is None:
            self.elements.append(element)
        else:
            self.elements.insert(index, element)
        element.updated.connect(self._on_element_updated)
        self.elements_changed.send(self)
        return element

    def remove_element(self, uid: str) -> Optional[Element]:
        index = self.index_of(uid)
        if index < 0:
            return None
        element = self.elements.pop(index)
        element.updated.disconnect(self._on_element_updated)
        self.elements_changed.send(self)
        return element

    def move_element(self, old_index: int, new_index: int) -> bool:
        """
        Moves the element at old_index to new_index. Out-of-range indices
        are ignored.
        """
        count = len(self.elements)
        if not (0 <= old_index < count and 0 <= new_index < count):
            return False
        if old_index == new_index:
            return False
        element = self.elements.pop(old_index)
        self.elements.insert(new_index, element)
        self.elements_changed.send(self)
        return True

    def parent_group_of(self, uid: str) -> Optional[GroupElement]:
        """
        Returns the first group whose child list contains the ID, or None.
        """
        for group in self.groups:
            if group.uid != uid and group.has_child(uid):
                return group
        return None

    def children_of(self, group: GroupElement) -> List[Element]:
        """Returns the group's existing children in z-order."""
        return [e for e in self.elements if e.uid in group.child_ids]

    def _on_element_updated(self, sender: Element, **kwargs):
        self.descendant_updated.send(self, origin=sender)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "background_color": self.background_color,
            "elements": [e.to_dict() for e in self.elements],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Layout":
        if not isinstance(data, dict):
            raise MalformedDocument("Layout data must be a mapping")
        layout = cls(
            width=as_float(data, "width"),
            height=as_float(data, "height"),
            background_color=as_str(data, "background_color", "#FFFFFF"),
        )
        elements = require(data, "elements")
        if not isinstance(elements, list):
            raise MalformedDocument("Field 'elements' must be a list")

        seen = set()
        for element_data in elements:
            element = element_from_dict(element_data)
            if element.uid in seen:
                raise MalformedDocument(f"Duplicate element ID {element.uid}")
            seen.add(element.uid)
            layout.add_element(element)
        logger.debug(f"Deserialized layout with {len(layout)} elements")
        return layout
