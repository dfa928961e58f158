from __future__ import annotations
import asyncio
import logging
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Union
from ..core.layout import Layout
from ..render.renderer import ExportError

if TYPE_CHECKING:
    from ..tasker import ExecutionContext, Task, TaskManager
    from .editor import DocEditor


logger = logging.getLogger(__name__)


class FileCmd:
    """
    Document lifecycle and export. Reading and writing document files is
    up to the host; this handler only speaks the dict form of a layout.
    """

    def __init__(self, editor: "DocEditor", task_manager: "TaskManager"):
        self._editor = editor
        self._task_manager = task_manager

    def new_layout(
        self,
        width: float = 1200,
        height: float = 1800,
        background_color: str = "#FFFFFF",
    ) -> Layout:
        layout = Layout(width, height, background_color)
        self._editor.set_layout(layout)
        return layout

    def load_dict(self, data: Dict[str, Any]) -> Layout:
        """
        Replaces the document with one decoded from `data`. Raises
        MalformedDocument, leaving the current document alone, if the
        data cannot be decoded.
        """
        layout = Layout.from_dict(data)
        self._editor.set_layout(layout)
        logger.info(f"Loaded layout with {len(layout)} elements")
        return layout

    def to_dict(self) -> Dict[str, Any]:
        return self._editor.layout.to_dict()

    def _export_options(
        self,
        scale: Optional[float],
        include_background: Optional[bool],
        include_sample_photos: Optional[bool],
    ) -> Dict[str, Any]:
        config = self._editor.config
        return {
            "scale": config.export_scale if scale is None else scale,
            "include_background": (
                config.include_background
                if include_background is None
                else include_background
            ),
            "include_sample_photos": (
                config.include_sample_photos
                if include_sample_photos is None
                else include_sample_photos
            ),
        }

    def _snapshot(self) -> Layout:
        """A private copy of the document, safe to render off-thread."""
        return Layout.from_dict(self._editor.layout.to_dict())

    def export_image(
        self,
        path: Union[str, Path],
        scale: Optional[float] = None,
        include_background: Optional[bool] = None,
        include_sample_photos: Optional[bool] = None,
        when_done: Optional[Callable[["Task"], None]] = None,
    ) -> "Task":
        """
        Renders the document to a PNG file in the background. Options
        left as None come from the config. The outcome is announced
        through DocEditor.export_finished on the main thread.
        """
        editor = self._editor
        target = Path(path)
        options = self._export_options(
            scale, include_background, include_sample_photos
        )
        snapshot = self._snapshot()

        def _when_done(task: "Task"):
            error: Optional[BaseException] = None
            if task.get_status() == "completed":
                logger.info(f"Export to {target} finished")
            elif task.get_status() == "canceled":
                error = ExportError(f"Export to {target} was cancelled")
            else:
                error = task.exception()
                logger.error(f"Export to {target} failed: {error}")
            editor.export_finished.send(editor, path=target, error=error)
            if when_done:
                when_done(task)

        logger.debug(f"Scheduling export to {target} with {options}")
        return self._task_manager.add_coroutine(
            self._export,
            snapshot,
            target,
            options,
            key="export",
            when_done=_when_done,
        )

    async def _export(
        self,
        context: "ExecutionContext",
        layout: Layout,
        target: Path,
        options: Dict[str, Any],
    ) -> Path:
        """Renders, then writes, reporting each step as progress."""
        renderer = self._editor.renderer
        context.set_total(2)
        context.set_message(_("Rendering layout"))
        surface = await self._task_manager.run_in_executor(
            partial(renderer.render, layout, **options)
        )
        context.set_progress(1)

        context.set_message(_("Writing {name}").format(name=target.name))
        path = await self._task_manager.run_in_executor(
            renderer.write_png, surface, target
        )
        context.set_progress(2)
        return path

    async def export_image_async(
        self,
        path: Union[str, Path],
        scale: Optional[float] = None,
        include_background: Optional[bool] = None,
        include_sample_photos: Optional[bool] = None,
    ) -> Path:
        """
        Awaitable variant of export_image() for callers that run their own
        event loop. Raises ExportError on failure.
        """
        options = self._export_options(
            scale, include_background, include_sample_photos
        )
        render = partial(
            self._editor.renderer.export,
            self._snapshot(),
            Path(path),
            **options,
        )
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, render)
        except ExportError:
            logger.error(f"Export to {path} failed", exc_info=True)
            raise
