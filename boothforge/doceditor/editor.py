from __future__ import annotations
import logging
from typing import TYPE_CHECKING, List, Optional
from blinker import Signal
from ..core.config import Config
from ..core.layout import Layout
from ..render.renderer import LayoutRenderer
from ..tasker import task_mgr
from ..undo import HistoryManager
from .arrange_cmd import ArrangeCmd
from .edit_cmd import EditCmd
from .file_cmd import FileCmd
from .group_cmd import GroupCmd
from .order_cmd import OrderCmd
from .selection import Selection
from .transform_cmd import TransformCmd

if TYPE_CHECKING:
    from ..core.element import Element
    from ..tasker.manager import TaskManager


logger = logging.getLogger(__name__)


class DocEditor:
    """
    The editing session: owns the layout being edited, the selection and
    the undo history, and exposes every document operation through
    namespaced command handlers.

    All mutations run on the thread that owns the editor. Background
    work (image decoding, export) goes through the task manager and
    re-enters through its main thread scheduler.
    """

    def __init__(
        self,
        task_manager: Optional["TaskManager"] = None,
        config: Optional[Config] = None,
        layout: Optional[Layout] = None,
        renderer: Optional[LayoutRenderer] = None,
    ):
        """
        Initializes the DocEditor.

        Args:
            task_manager: The TaskManager for background work. Defaults
                to the shared instance.
            config: Editor preferences. Defaults to a fresh Config.
            layout: An existing layout. If None, a new one is created.
            renderer: The renderer used for export.
        """
        self.task_manager = task_manager or task_mgr
        self.config = config or Config()
        self.renderer = renderer or LayoutRenderer(
            fallback_font=self.config.fallback_font
        )
        self.selection = Selection()
        self.history_manager = HistoryManager(self.config.history_size)
        self.layout: Layout = Layout()
        self._dragging = False
        self._resizing = False

        # Fired after any document mutation.
        self.changed = Signal()
        # Fired when the layout object itself is swapped out, by loading
        # a new document or by undo/redo.
        self.layout_replaced = Signal()
        # Fired with path= and error= once a background export ends.
        self.export_finished = Signal()

        self.edit = EditCmd(self)
        self.transform = TransformCmd(self)
        self.order = OrderCmd(self)
        self.arrange = ArrangeCmd(self)
        self.group = GroupCmd(self)
        self.file = FileCmd(self, self.task_manager)

        self.set_layout(layout or Layout())

    def set_layout(self, layout: Layout):
        """
        Starts editing a new document. The history is reset and the
        initial state becomes its first entry, so the first undo is a
        no-op.
        """
        logger.debug(f"Loading layout with {len(layout)} elements")
        self._replace_layout(layout)
        self.selection.clear()
        self.history_manager.reset()
        self.history_manager.checkpoint(layout)
        self.edit.preload_fonts()
        self.notify()

    def _replace_layout(self, layout: Layout):
        self.layout = layout
        self._dragging = False
        self._resizing = False
        self.layout_replaced.send(self, layout=layout)

    @property
    def snap_to_grid(self) -> bool:
        return self.config.snap_to_grid

    @property
    def grid_size(self) -> float:
        return self.config.grid_size

    def toggle_snap_to_grid(self):
        self.config.set("snap_to_grid", not self.config.snap_to_grid)

    @property
    def is_dragging(self) -> bool:
        return self._dragging

    @property
    def is_resizing(self) -> bool:
        return self._resizing

    @property
    def in_gesture(self) -> bool:
        return self._dragging or self._resizing

    def get(self, uid: Optional[str]) -> Optional["Element"]:
        return self.layout.get(uid)

    @property
    def primary_element(self) -> Optional["Element"]:
        return self.layout.get(self.selection.primary)

    @property
    def selected_elements(self) -> List["Element"]:
        return self.selection.elements_in(self.layout)

    def is_selected(self, uid: str) -> bool:
        return self.selection.is_selected(uid)

    @property
    def has_multiple_elements_selected(self) -> bool:
        return self.selection.has_multiple

    def select(
        self,
        uid: Optional[str],
        extend: bool = False,
        range_modifier: bool = False,
    ):
        if uid is not None and uid not in self.layout:
            logger.debug(f"select: no element {uid}")
            return
        self.selection.select(uid, extend, range_modifier)

    def select_many(self, uids: List[str]):
        self.selection.select_many(u for u in uids if u in self.layout)

    def select_all(self):
        self.selection.select_all(self.layout)

    def clear_selection(self):
        self.selection.clear()

    def checkpoint(self) -> bool:
        return self.history_manager.checkpoint(self.layout)

    @property
    def can_undo(self) -> bool:
        return self.history_manager.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history_manager.can_redo

    def undo(self) -> bool:
        """
        Restores the previous snapshot. Raises MalformedDocument if the
        snapshot cannot be decoded, leaving the document untouched.
        """
        return self.history_manager.undo(self._restore)

    def redo(self) -> bool:
        return self.history_manager.redo(self._restore)

    def _restore(self, layout: Layout):
        self._replace_layout(layout)
        self.selection.retain(layout)
        self.notify()

    def notify(self, element: Optional["Element"] = None):
        """
        Announces a completed mutation. If an element is given, its own
        `updated` signal fires first.
        """
        if element is not None:
            element.updated.send(element)
        self.changed.send(self)
