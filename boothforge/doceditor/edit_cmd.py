from __future__ import annotations
import logging
from pathlib import Path
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    List,
    Optional,
    Tuple,
)
from ..core.camera import CameraElement
from ..core.element import new_uid
from ..core.geometry import fit_within
from ..core.group import GroupElement
from ..core.image import ImageElement
from ..core.layout import element_from_dict
from ..core.text import ALIGNMENTS, TRANSPARENT, TextElement
from ..render.colors import normalize_color
from ..render.fonts import FontUnavailable
from ..render.images import DecodeError, read_image_size

if TYPE_CHECKING:
    from ..core.element import Element
    from ..tasker import ExecutionContext, Task
    from .editor import DocEditor


logger = logging.getLogger(__name__)

Point = Tuple[float, float]
Size = Tuple[float, float]

TEXT_SIZE = (200.0, 50.0)
TEXT_MIN_SIZE = (50.0, 30.0)
CAMERA_SIZE = (300.0, 300.0)
IMAGE_PLACEHOLDER_SIZE = (200.0, 200.0)
# Longest edge of a newly placed image.
IMAGE_MAX_EDGE = 300.0


class EditCmd:
    """
    Creates, updates and deletes elements, and handles the clipboard and
    the bulk lock/visibility toggles.
    """

    def __init__(self, editor: "DocEditor"):
        self._editor = editor
        self._clipboard: List[Dict[str, Any]] = []

    @property
    def _layout(self):
        return self._editor.layout

    def _centered(self, size: Size) -> Point:
        width, height = size
        return (
            self._layout.width / 2 - width / 2,
            self._layout.height / 2 - height / 2,
        )

    def _insert(self, element: "Element") -> "Element":
        self._layout.add_element(element)
        self._editor.selection.select(element.uid)
        self._editor.checkpoint()
        self._editor.notify(element)
        return element

    def add_text(
        self,
        text: Optional[str] = None,
        position: Optional[Point] = None,
        size: Optional[Size] = None,
    ) -> TextElement:
        """
        Adds a text element, by default centered on the canvas. The box
        is at least 50x30 and is kept inside the canvas.
        """
        width, height = size or TEXT_SIZE
        width = max(TEXT_MIN_SIZE[0], width)
        height = max(TEXT_MIN_SIZE[1], height)
        x, y = position or self._centered((width, height))
        x = max(0.0, min(x, self._layout.width - width))
        y = max(0.0, min(y, self._layout.height - height))

        element = TextElement(
            text=text if text is not None else _("New Text"),
            x=x,
            y=y,
            width=width,
            height=height,
        )
        self.preload_font(element.font_family, element.remote_font)
        self._insert(element)
        return element

    def add_camera(
        self,
        position: Optional[Point] = None,
        size: Optional[Size] = None,
    ) -> CameraElement:
        """Adds a camera slot labelled after the number of slots so far."""
        width, height = size or CAMERA_SIZE
        x, y = position or self._centered((width, height))
        count = len(self._layout.of_type(CameraElement))
        element = CameraElement(
            label=_("Photo Spot {n}").format(n=count + 1),
            x=x,
            y=y,
            width=width,
            height=height,
        )
        self._insert(element)
        return element

    def add_image(
        self,
        path: str,
        position: Optional[Point] = None,
        size: Optional[Size] = None,
    ) -> Optional[ImageElement]:
        """
        Adds an aspect-locked image element. Returns None if the file
        does not exist.

        Without an explicit size the element starts with a placeholder
        size; the file is decoded in the background and the element is
        then resized to its natural aspect ratio, its long edge being
        300 units.
        """
        if not Path(path).is_file():
            logger.warning(f"Image file {path} does not exist")
            return None

        width, height = size or IMAGE_PLACEHOLDER_SIZE
        x, y = position or self._centered((width, height))
        element = ImageElement(
            path=path,
            x=x,
            y=y,
            width=width,
            height=height,
            aspect_locked=True,
        )
        self._insert(element)

        if size is None:
            recenter = position is None

            def fit(image: ImageElement, natural: Size):
                w, h = fit_within(natural[0] / natural[1], IMAGE_MAX_EDGE)
                if recenter:
                    image.x, image.y = self._centered((w, h))
                image.width, image.height = w, h

            self._resolve_image_size(element, fit)
        return element

    def _resolve_image_size(
        self,
        element: ImageElement,
        apply: Callable[[ImageElement, Size], None],
    ):
        """
        Reads the image's natural size on a worker thread. The result is
        applied on the main thread, and only if the element still exists
        and still points at the same file.
        """
        uid, path = element.uid, element.path

        def when_done(task: "Task"):
            if task.get_status() != "completed":
                error = task.exception()
                if isinstance(error, (DecodeError, FileNotFoundError)):
                    logger.warning(f"Keeping placeholder size: {error}")
                return
            current = self._layout.get(uid)
            if not isinstance(current, ImageElement) or current.path != path:
                logger.debug(f"Image {uid} gone or changed; size ignored")
                return
            apply(current, task.result())
            self._editor.group.update_parent_of(uid)
            self._editor.checkpoint()
            self._editor.notify(current)

        self._editor.task_manager.run_thread(
            read_image_size,
            path,
            key=f"image-size-{uid}",
            when_done=when_done,
        )

    def update_text(
        self,
        uid: str,
        text: Optional[str] = None,
        font_family: Optional[str] = None,
        font_size: Optional[float] = None,
        color: Optional[str] = None,
        background_color: Optional[str] = None,
        bold: Optional[bool] = None,
        italic: Optional[bool] = None,
        alignment: Optional[str] = None,
        remote_font: Optional[bool] = None,
    ) -> bool:
        element = self._layout.get(uid)
        if not isinstance(element, TextElement):
            logger.debug(f"update_text: no text element {uid}")
            return False
        if alignment is not None and alignment not in ALIGNMENTS:
            logger.debug(f"update_text: unknown alignment '{alignment}'")
            return False

        if text is not None:
            element.text = text
        if remote_font is not None:
            element.remote_font = remote_font
        if font_family is not None:
            element.font_family = font_family
            self.preload_font(font_family, element.remote_font)
        if font_size is not None:
            element.font_size = font_size
        if color is not None:
            element.color = color
        if background_color is not None:
            if background_color.lower() == TRANSPARENT:
                background_color = TRANSPARENT
            element.background_color = background_color
        if bold is not None:
            element.bold = bold
        if italic is not None:
            element.italic = italic
        if alignment is not None:
            element.alignment = alignment

        self._editor.checkpoint()
        self._editor.notify(element)
        return True

    def update_image(
        self,
        uid: str,
        path: Optional[str] = None,
        opacity: Optional[float] = None,
        aspect_locked: Optional[bool] = None,
    ) -> bool:
        """
        Updates an image element. Pointing an aspect-locked image at a new
        file keeps its width and re-derives the height from the new
        file's aspect ratio once it has been read.
        """
        element = self._layout.get(uid)
        if not isinstance(element, ImageElement):
            logger.debug(f"update_image: no image element {uid}")
            return False

        if opacity is not None:
            element.opacity = opacity
        if aspect_locked is not None:
            element.aspect_locked = aspect_locked
        path_changed = path is not None and path != element.path
        if path is not None:
            element.path = path

        self._editor.checkpoint()
        self._editor.notify(element)

        if path_changed and element.aspect_locked:

            def keep_width(image: ImageElement, natural: Size):
                image.height = image.width * natural[1] / natural[0]

            self._resolve_image_size(element, keep_width)
        return True

    def update_camera(self, uid: str, label: Optional[str] = None) -> bool:
        element = self._layout.get(uid)
        if not isinstance(element, CameraElement):
            logger.debug(f"update_camera: no camera element {uid}")
            return False
        if label is not None:
            element.label = label
        self._editor.checkpoint()
        self._editor.notify(element)
        return True

    def set_background(self, color: str):
        self._layout.background_color = normalize_color(color)
        self._layout.updated.send(self._layout)
        self._editor.checkpoint()
        self._editor.notify()

    def preload_fonts(self):
        """Starts resolving the fonts of every text element."""
        for element in self._layout.of_type(TextElement):
            self.preload_font(element.font_family, element.remote_font)

    def preload_font(self, family: str, remote: bool = False):
        fonts = self._editor.renderer.fonts
        if family in fonts:
            return
        key = f"font-{family}"
        task_manager = self._editor.task_manager
        if task_manager.get_task(key) is not None:
            return
        task_manager.add_coroutine(self._load_font, family, remote, key=key)

    async def _load_font(
        self, context: "ExecutionContext", family: str, remote: bool
    ):
        try:
            await self._editor.renderer.fonts.load(family, remote)
        except FontUnavailable as e:
            logger.warning(f"Could not preload font: {e}")

    def toggle_lock(self, uid: str) -> bool:
        element = self._layout.get(uid)
        if element is None:
            return False
        element.locked = not element.locked
        self._editor.checkpoint()
        self._editor.notify(element)
        return True

    def toggle_visibility(self, uid: str) -> bool:
        element = self._layout.get(uid)
        if element is None:
            return False
        element.visible = not element.visible
        self._editor.group.update_parent_of(uid)
        self._editor.checkpoint()
        self._editor.notify(element)
        return True

    def toggle_all_visibility(self) -> bool:
        """
        Hides everything if more than half of the elements are visible,
        otherwise shows everything. With mixed states, repeated calls do
        not simply alternate.
        """
        elements = list(self._layout)
        if not elements:
            return False
        visible_count = sum(1 for e in elements if e.visible)
        show = not visible_count > len(elements) / 2
        for element in elements:
            element.visible = show
            element.updated.send(element)
        for group in self._layout.groups:
            self._editor.group.update_bounding_box(group)
        self._editor.checkpoint()
        self._editor.notify()
        return True

    def toggle_all_lock(self) -> bool:
        """Majority vote, like toggle_all_visibility()."""
        elements = list(self._layout)
        if not elements:
            return False
        locked_count = sum(1 for e in elements if e.locked)
        lock = not locked_count > len(elements) / 2
        for element in elements:
            element.locked = lock
            element.updated.send(element)
        self._editor.checkpoint()
        self._editor.notify()
        return True

    def _remove(self, uid: str) -> bool:
        if self._layout.remove_element(uid) is None:
            return False
        self._editor.group.remove_from_groups(uid)
        self._editor.selection.discard(uid)
        return True

    def delete(self, uid: str) -> bool:
        """
        Deletes an element. Deleting a group leaves its children in
        place; deleting a child removes it from its group.
        """
        if not self._remove(uid):
            logger.debug(f"delete: no element {uid}")
            return False
        self._editor.checkpoint()
        self._editor.notify()
        return True

    def delete_selected(self) -> int:
        removed = sum(
            1 for uid in self._editor.selection.ids if self._remove(uid)
        )
        if removed:
            self._editor.checkpoint()
            self._editor.notify()
        return removed

    @property
    def can_paste(self) -> bool:
        return bool(self._clipboard)

    def _snapshot(self, elements: List["Element"]) -> List[Dict[str, Any]]:
        """
        Serializes elements for the clipboard. Groups bring their
        children along.
        """
        seen: List[str] = []
        data = []
        for element in elements:
            members = [element]
            if isinstance(element, GroupElement):
                members += self._layout.children_of(element)
            for member in members:
                if member.uid in seen:
                    continue
                seen.append(member.uid)
                data.append(member.to_dict())
        return data

    def copy(self, uid: str) -> bool:
        """Puts a single element on the clipboard, replacing its contents."""
        element = self._layout.get(uid)
        if element is None:
            logger.debug(f"copy: no element {uid}")
            return False
        self._clipboard = self._snapshot([element])
        return True

    def copy_selected(self) -> int:
        elements = self._editor.selected_elements
        if not elements:
            return 0
        self._clipboard = self._snapshot(elements)
        return len(elements)

    def paste(self) -> List["Element"]:
        """
        Inserts copies of the clipboard contents with fresh IDs, offset
        from their sources. Pasted cameras get a new sequential label.
        """
        if not self._clipboard:
            return []

        offset = self._editor.config.paste_offset
        id_map = {data["id"]: new_uid() for data in self._clipboard}
        pasted: List["Element"] = []
        for source in self._clipboard:
            data = dict(source)
            data["id"] = id_map[source["id"]]
            data["x"] = source["x"] + offset
            data["y"] = source["y"] + offset
            if data["type"] == GroupElement.type_name:
                data["child_ids"] = [
                    id_map[cid] for cid in source["child_ids"] if cid in id_map
                ]
            element = element_from_dict(data)
            if isinstance(element, CameraElement):
                count = len(self._layout.of_type(CameraElement))
                element.label = _("Photo Spot {n}").format(n=count + 1)
            self._layout.add_element(element)
            pasted.append(element)

        child_ids = {
            cid
            for e in pasted
            if isinstance(e, GroupElement)
            for cid in e.child_ids
        }
        top_level = [e.uid for e in pasted if e.uid not in child_ids]
        self._editor.selection.select_many(top_level)
        self._editor.checkpoint()
        self._editor.notify()
        logger.debug(f"Pasted {len(pasted)} elements")
        return pasted
