from typing import Any, Dict, List, Optional
from .element import Element, MalformedDocument, as_str, require


class GroupElement(Element):
    """
    A named aggregation of other elements.

    Membership is by ID only: the children stay top-level entries of the
    layout and keep their absolute coordinates. The group's own box is
    derived from its visible children and kept in sync by the editor.
    """

    type_name = "group"

    def __init__(
        self,
        name: str = "",
        child_ids: Optional[List[str]] = None,
        x: float = 0.0,
        y: float = 0.0,
        width: float = 100.0,
        height: float = 100.0,
        rotation: float = 0.0,
        uid: Optional[str] = None,
    ):
        super().__init__(x, y, width, height, rotation, uid)
        self.name: str = name
        self.child_ids: List[str] = list(child_ids or [])

    @property
    def is_group(self) -> bool:
        return True

    def has_child(self, uid: str) -> bool:
        return uid in self.child_ids

    def remove_child_id(self, uid: str) -> bool:
        if uid not in self.child_ids:
            return False
        self.child_ids = [cid for cid in self.child_ids if cid != uid]
        return True

    def _props_to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "child_ids": list(self.child_ids)}

    def _props_from_dict(self, data: Dict[str, Any]):
        self.name = as_str(data, "name", "")
        child_ids = require(data, "child_ids")
        if not isinstance(child_ids, list) or not all(
            isinstance(cid, str) for cid in child_ids
        ):
            raise MalformedDocument("Field 'child_ids' must be a string list")
        self.child_ids = list(child_ids)
