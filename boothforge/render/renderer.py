"""
Offline rendering of a layout into a raster image.

The renderer draws elements back to front into a cairo ARGB32 surface
sized to the layout's canvas times a scale multiplier. It never touches
the live document; callers pass either the layout itself from the thread
that owns it, or a snapshot when rendering in the background.
"""

from __future__ import annotations
import io
import logging
import math
import os
import tempfile
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union
import cairo
import numpy as np
from ..core.camera import CameraElement
from ..core.element import Element
from ..core.image import ImageElement
from ..core.layout import Layout
from ..core.text import TextElement, horizontal_anchor, vertical_anchor
from .colors import ColorRGBA, parse_color
from .fonts import FontCache, FontHandle, FontUnavailable, font_cache
from .images import DecodeError, DecodedImage, load_image


logger = logging.getLogger(__name__)

ACCENT: ColorRGBA = (0x21 / 255, 0x96 / 255, 0xF3 / 255, 1.0)
SAMPLE_PHOTO_FILL: ColorRGBA = (0x90 / 255, 0xCA / 255, 0xF9 / 255, 1.0)
SAMPLE_PHOTO_SIZE = 300
LABEL_FONT_SIZE = 12.0
LABEL_MARGIN = 5.0
BORDER_WIDTH = 2.0


class ExportError(Exception):
    """Raised when a layout cannot be rendered or written out."""

    pass


def surface_to_array(surface: cairo.ImageSurface) -> np.ndarray:
    """
    Copies an ARGB32 surface into a (height, width, 4) uint8 array in
    straight (non-premultiplied) RGBA order.
    """
    surface.flush()
    width, height = surface.get_width(), surface.get_height()
    stride = surface.get_stride()
    data = np.ndarray(
        shape=(height, stride // 4, 4),
        dtype=np.uint8,
        buffer=surface.get_data(),
    )[:, :width, :]

    # Cairo stores BGRA in memory on little-endian machines.
    rgba = data[..., [2, 1, 0, 3]].astype(np.float64)
    alpha = rgba[..., 3:4]
    with np.errstate(divide="ignore", invalid="ignore"):
        rgb = np.where(alpha > 0, rgba[..., :3] * 255.0 / alpha, 0.0)
    rgba[..., :3] = rgb
    return np.clip(np.rint(rgba), 0, 255).astype(np.uint8)


def wrap_lines(
    ctx: cairo.Context, text: str, max_width: float
) -> List[str]:
    """
    Breaks text into lines that fit max_width using the context's current
    font. Explicit newlines are kept. A single word wider than the box
    gets a line of its own.
    """
    lines: List[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split(" ")
        line = ""
        for word in words:
            candidate = f"{line} {word}" if line else word
            if line and ctx.text_extents(candidate).x_advance > max_width:
                lines.append(line)
                line = word
            else:
                line = candidate
        lines.append(line)
    return lines


class LayoutRenderer:
    """
    Rasterizes layouts. Rendering is deterministic: the same layout with
    the same options and the same files on disk yields the same pixels.
    """

    def __init__(
        self,
        fonts: Optional[FontCache] = None,
        fallback_font: str = "Arial",
        image_loader: Callable[[str], DecodedImage] = load_image,
    ):
        self.fonts = fonts or font_cache
        self.fallback_font = fallback_font
        self.image_loader = image_loader

    def render(
        self,
        layout: Layout,
        scale: float = 1.0,
        include_background: bool = True,
        include_sample_photos: bool = True,
    ) -> cairo.ImageSurface:
        """
        Renders the layout into a new surface of
        round(width * scale) x round(height * scale) pixels.
        """
        if scale <= 0:
            raise ExportError(f"Invalid export scale {scale}")
        width = max(1, int(round(layout.width * scale)))
        height = max(1, int(round(layout.height * scale)))
        logger.debug(
            f"Rendering layout at {width}x{height}px "
            f"(scale {scale}, {len(layout)} elements)"
        )

        try:
            surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, width, height)
            ctx = cairo.Context(surface)
            images: Dict[str, Optional[DecodedImage]] = {}

            if include_background and not layout.has_transparent_background:
                ctx.set_source_rgba(*parse_color(layout.background_color))
                ctx.paint()

            sample: Optional[DecodedImage] = None
            if include_sample_photos and any(
                e.visible for e in layout.of_type(CameraElement)
            ):
                sample = self._sample_photo(layout, images)

            for element in layout:
                if not element.visible or element.is_group:
                    continue
                self._draw_element(ctx, element, scale, images, sample)
        except ExportError:
            raise
        except Exception as e:
            raise ExportError(f"Rendering failed: {e}") from e

        surface.flush()
        return surface

    def render_to_png_bytes(self, layout: Layout, **options) -> bytes:
        surface = self.render(layout, **options)
        buffer = io.BytesIO()
        surface.write_to_png(buffer)
        return buffer.getvalue()

    def export(
        self, layout: Layout, path: Union[str, Path], **options
    ) -> Path:
        """Renders the layout and writes it to `path` as a PNG file."""
        return self.write_png(self.render(layout, **options), path)

    def write_png(
        self, surface: cairo.ImageSurface, path: Union[str, Path]
    ) -> Path:
        """
        Writes a rendered surface to `path` as a PNG file.

        The image is written to a temporary file next to the target and
        moved into place once complete, so a failed write never leaves a
        partial file behind.
        """
        target = Path(path)
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
            )
            os.close(fd)
            surface.write_to_png(tmp_name)
            os.replace(tmp_name, target)
        except (OSError, cairo.Error) as e:
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise ExportError(f"Could not write {target}: {e}") from e
        logger.info(f"Exported layout to {target}")
        return target

    def _load(
        self, path: str, images: Dict[str, Optional[DecodedImage]]
    ) -> Optional[DecodedImage]:
        """
        Decodes an image file once per render. Missing or undecodable
        files yield None.
        """
        if path in images:
            return images[path]
        try:
            decoded: Optional[DecodedImage] = self.image_loader(path)
        except FileNotFoundError:
            logger.warning(f"Image file {path} not found, skipping")
            decoded = None
        except DecodeError as e:
            logger.warning(f"Image file {path} is unreadable: {e}")
            decoded = None
        images[path] = decoded
        return decoded

    def _sample_photo(
        self, layout: Layout, images: Dict[str, Optional[DecodedImage]]
    ) -> DecodedImage:
        """
        Picks the photo used to fill camera slots: the first readable
        image element of the layout, or a synthesized placeholder.
        """
        for element in layout.of_type(ImageElement):
            decoded = self._load(element.path, images)
            if decoded is not None:
                return decoded
        return self._synthesize_sample_photo()

    def _synthesize_sample_photo(self) -> DecodedImage:
        size = SAMPLE_PHOTO_SIZE
        surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, size, size)
        ctx = cairo.Context(surface)
        ctx.set_source_rgba(*SAMPLE_PHOTO_FILL)
        ctx.paint()

        ctx.set_font_face(self._font(self.fallback_font, False).face())
        ctx.set_font_size(24)
        ctx.set_source_rgba(1, 1, 1, 1)
        label = "Sample Photo"
        extents = ctx.text_extents(label)
        ctx.move_to(
            (size - extents.x_advance) / 2 - extents.x_bearing,
            (size - extents.height) / 2 - extents.y_bearing,
        )
        ctx.show_text(label)
        surface.flush()
        return DecodedImage(size, size, surface)

    def _font(self, family: str, remote: bool) -> FontHandle:
        try:
            return self.fonts.get(family, remote)
        except FontUnavailable as e:
            logger.warning(f"{e}, falling back to {self.fallback_font}")
            return self.fonts.get(self.fallback_font, False)

    def _draw_element(
        self,
        ctx: cairo.Context,
        element: Element,
        scale: float,
        images: Dict[str, Optional[DecodedImage]],
        sample: Optional[DecodedImage],
    ):
        x, y = element.x * scale, element.y * scale
        w, h = element.width * scale, element.height * scale

        ctx.save()
        if element.rotation:
            cx, cy = x + w / 2, y + h / 2
            ctx.translate(cx, cy)
            ctx.rotate(element.rotation * math.pi / 180)
            ctx.translate(-cx, -cy)

        if isinstance(element, ImageElement):
            decoded = self._load(element.path, images)
            if decoded is not None:
                self._paint_image(ctx, decoded, x, y, w, h, element.opacity)
        elif isinstance(element, TextElement):
            self._draw_text(ctx, element, x, y, w, h, scale)
        elif isinstance(element, CameraElement):
            if sample is not None:
                self._draw_camera(ctx, element, sample, x, y, w, h)
            else:
                self._draw_camera_placeholder(ctx, element, x, y, w, h)
        ctx.restore()

    def _paint_image(
        self,
        ctx: cairo.Context,
        image: DecodedImage,
        x: float,
        y: float,
        w: float,
        h: float,
        opacity: float = 1.0,
    ):
        """Stretches the image into the box."""
        ctx.save()
        ctx.translate(x, y)
        ctx.scale(w / image.width, h / image.height)
        ctx.rectangle(0, 0, image.width, image.height)
        ctx.clip()
        ctx.set_source_surface(image.surface, 0, 0)
        ctx.get_source().set_filter(cairo.FILTER_GOOD)
        ctx.paint_with_alpha(opacity)
        ctx.restore()

    def _draw_text(
        self,
        ctx: cairo.Context,
        element: TextElement,
        x: float,
        y: float,
        w: float,
        h: float,
        scale: float,
    ):
        if element.has_background:
            ctx.set_source_rgba(*parse_color(element.background_color))
            ctx.rectangle(x, y, w, h)
            ctx.fill()

        handle = self._font(element.font_family, element.remote_font)
        ctx.set_font_face(handle.face(element.bold, element.italic))
        ctx.set_font_size(element.font_size * scale)
        ctx.set_source_rgba(*parse_color(element.color))

        lines = wrap_lines(ctx, element.text, w)
        ascent, descent, line_height = ctx.font_extents()[:3]
        block_height = line_height * len(lines)

        v_anchor = vertical_anchor(element.alignment)
        if v_anchor == "bottom":
            top = y + h - block_height
        elif v_anchor == "center":
            top = y + (h - block_height) / 2
        else:
            top = y

        h_anchor = horizontal_anchor(element.alignment)
        for i, line in enumerate(lines):
            advance = ctx.text_extents(line).x_advance
            if h_anchor == "right":
                left = x + w - advance
            elif h_anchor == "center":
                left = x + (w - advance) / 2
            else:
                left = x
            ctx.move_to(left, top + i * line_height + ascent)
            ctx.show_text(line)

    def _label_origin(
        self, ctx: cairo.Context, x: float, y: float, h: float
    ) -> Tuple[float, float]:
        """Baseline origin for a label sitting in the bottom-left corner."""
        descent = ctx.font_extents()[1]
        return x + LABEL_MARGIN, y + h - LABEL_MARGIN - descent

    def _draw_camera(
        self,
        ctx: cairo.Context,
        element: CameraElement,
        sample: DecodedImage,
        x: float,
        y: float,
        w: float,
        h: float,
    ):
        self._paint_image(ctx, sample, x, y, w, h)

        ctx.set_source_rgba(1, 1, 1, 0.7)
        ctx.set_line_width(BORDER_WIDTH)
        ctx.rectangle(x, y, w, h)
        ctx.stroke()

        if not element.label:
            return
        ctx.set_font_face(self._font(self.fallback_font, False).face())
        ctx.set_font_size(LABEL_FONT_SIZE * (w / SAMPLE_PHOTO_SIZE))
        lx, ly = self._label_origin(ctx, x, y, h)

        # Shadow first, then the label itself.
        ctx.set_source_rgba(0, 0, 0, 0.7)
        ctx.move_to(lx + 1, ly + 1)
        ctx.show_text(element.label)
        ctx.set_source_rgba(1, 1, 1, 1)
        ctx.move_to(lx, ly)
        ctx.show_text(element.label)

    def _draw_camera_placeholder(
        self,
        ctx: cairo.Context,
        element: CameraElement,
        x: float,
        y: float,
        w: float,
        h: float,
    ):
        r, g, b, _ = ACCENT
        ctx.set_source_rgba(r, g, b, 0.2)
        ctx.rectangle(x, y, w, h)
        ctx.fill()

        ctx.set_source_rgba(*ACCENT)
        ctx.set_line_width(BORDER_WIDTH)
        ctx.rectangle(x, y, w, h)
        ctx.stroke()

        self._draw_camera_icon(ctx, x + w / 2, y + h / 2)

        if not element.label:
            return
        ctx.set_source_rgba(*ACCENT)
        ctx.set_font_face(self._font(self.fallback_font, False).face())
        ctx.set_font_size(LABEL_FONT_SIZE)
        ctx.move_to(*self._label_origin(ctx, x, y, h))
        ctx.show_text(element.label)

    def _draw_camera_icon(self, ctx: cairo.Context, cx: float, cy: float):
        """A 24px camera glyph: body, viewfinder bump and lens."""
        ctx.set_source_rgba(*ACCENT)
        ctx.rectangle(cx - 12, cy - 7, 24, 16)
        ctx.rectangle(cx - 5, cy - 10, 10, 4)
        ctx.fill()
        ctx.set_source_rgba(1, 1, 1, 1)
        ctx.arc(cx, cy + 1, 5, 0, 2 * math.pi)
        ctx.fill()
