from __future__ import annotations
import logging
from typing import TYPE_CHECKING, List, Optional
from ..core.geometry import (
    GROUP_PADDING,
    MIN_SIZE,
    pad_bbox,
    scale_about,
    union_bbox,
)
from ..core.group import GroupElement

if TYPE_CHECKING:
    from ..core.element import Element
    from .editor import DocEditor


logger = logging.getLogger(__name__)


class GroupCmd:
    """Creates and dissolves groups and keeps their boxes in sync."""

    def __init__(self, editor: "DocEditor"):
        self._editor = editor

    @property
    def _layout(self):
        return self._editor.layout

    def group_selected(self) -> Optional[GroupElement]:
        """
        Groups the selected elements. Needs at least two. The children
        keep their absolute coordinates; the new group gets their
        unpadded union as its box and becomes the selection.
        """
        editor = self._editor
        elements = [
            e for e in editor.selected_elements if not e.is_group
        ]
        if len(elements) < 2:
            logger.debug("group_selected: fewer than 2 elements selected")
            return None

        bbox = union_bbox(e.bbox for e in elements)
        if bbox is None:
            logger.debug("group_selected: selection has no extent")
            return None
        min_x, min_y, max_x, max_y = bbox

        editor.checkpoint()

        # An element belongs to at most one group.
        for element in elements:
            parent = self._layout.parent_group_of(element.uid)
            if parent is not None:
                parent.remove_child_id(element.uid)
                self._after_membership_change(parent)

        count = len(self._layout.groups) + 1
        group = GroupElement(
            name=_("Group {n}").format(n=count),
            child_ids=[e.uid for e in elements],
            x=min_x,
            y=min_y,
            width=max_x - min_x,
            height=max_y - min_y,
        )
        self._layout.add_element(group)
        editor.selection.select(group.uid)
        editor.checkpoint()
        editor.notify(group)
        logger.debug(f"Grouped {len(elements)} elements into {group.uid}")
        return group

    def ungroup_selected(self) -> List[str]:
        """
        Dissolves the selected group, if exactly one group is selected.
        The former children become the selection. Returns their IDs.
        """
        editor = self._editor
        if len(editor.selection) != 1:
            logger.debug("ungroup_selected: need exactly one selection")
            return []
        group = editor.primary_element
        if not isinstance(group, GroupElement):
            logger.debug("ungroup_selected: selection is not a group")
            return []

        editor.checkpoint()
        child_ids = [
            uid for uid in group.child_ids if uid in self._layout
        ]
        self._layout.remove_element(group.uid)
        editor.selection.select_many(child_ids)
        editor.checkpoint()
        editor.notify()
        return child_ids

    @property
    def is_selected_group(self) -> bool:
        return isinstance(self._editor.primary_element, GroupElement)

    def parent_group_of(self, uid: str) -> Optional[GroupElement]:
        return self._layout.parent_group_of(uid)

    def is_in_group(self, uid: str) -> bool:
        return self._layout.parent_group_of(uid) is not None

    def children_of(self, group_id: str) -> List["Element"]:
        group = self._layout.get(group_id)
        if not isinstance(group, GroupElement):
            return []
        return self._layout.children_of(group)

    def rename_group(self, group_id: str, name: str) -> bool:
        group = self._layout.get(group_id)
        if not isinstance(group, GroupElement) or group.name == name:
            return False
        group.name = name
        self._editor.checkpoint()
        self._editor.notify(group)
        return True

    def update_bounding_box(self, group: GroupElement) -> bool:
        """
        Recomputes a group's box as the padded union of its visible
        children. IDs that no longer resolve are purged from the child
        list. The box is left alone when no child is visible.
        """
        stale = [uid for uid in group.child_ids if uid not in self._layout]
        for uid in stale:
            logger.debug(f"Purging dangling child {uid} from {group.uid}")
            group.remove_child_id(uid)

        visible = [
            c for c in self._layout.children_of(group) if c.visible
        ]
        bbox = union_bbox(c.bbox for c in visible)
        if bbox is None:
            return bool(stale)

        min_x, min_y, max_x, max_y = pad_bbox(bbox, GROUP_PADDING)
        group.x = min_x
        group.y = min_y
        group.width = max_x - min_x
        group.height = max_y - min_y
        group.updated.send(group)
        return True

    def update_parent_of(self, uid: str):
        """Refreshes the box of the group containing `uid`, if any."""
        parent = self._layout.parent_group_of(uid)
        if parent is not None:
            self.update_bounding_box(parent)

    def translate_children(self, group: GroupElement, dx: float, dy: float):
        """Moves every child by the same delta, ignoring their locks."""
        for child in self._layout.children_of(group):
            child.x += dx
            child.y += dy
            child.updated.send(child)

    def resize_children(
        self,
        group: GroupElement,
        scale_x: float,
        scale_y: float,
        center_x: float,
        center_y: float,
    ):
        """
        Scales the children about the given center: first each child's
        offset from the center, then its size.
        """
        for child in self._layout.children_of(group):
            child.x = scale_about(child.x, center_x, scale_x)
            child.y = scale_about(child.y, center_y, scale_y)
            child.width = max(MIN_SIZE, child.width * scale_x)
            child.height = max(MIN_SIZE, child.height * scale_y)
            child.updated.send(child)

    def remove_from_groups(self, uid: str):
        """
        Scrubs an element ID from every group. Groups left empty are
        removed, the others get a fresh box.
        """
        for group in self._layout.groups:
            if not group.remove_child_id(uid):
                continue
            self._after_membership_change(group)

    def _after_membership_change(self, group: GroupElement):
        if not any(uid in self._layout for uid in group.child_ids):
            logger.debug(f"Removing empty group {group.uid}")
            self._layout.remove_element(group.uid)
            self._editor.selection.discard(group.uid)
        else:
            self.update_bounding_box(group)
