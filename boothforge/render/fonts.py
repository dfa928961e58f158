"""
Font resolution for text elements.

Text elements name a font family and say whether it is a remote (web)
font. Local families are handed to cairo's toy font API directly. Remote
families must first be made available by the host, which registers them
with the resolver; asking for an unregistered remote family fails with
FontUnavailable and the renderer falls back to its default family.
"""

from __future__ import annotations
import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Dict, Optional
import cairo


logger = logging.getLogger(__name__)


class FontUnavailable(Exception):
    """Raised when a font family cannot be resolved."""

    pass


@dataclass(frozen=True)
class FontHandle:
    """A resolved font family, ready to be selected on a cairo context."""

    family: str
    cairo_family: str

    def face(self, bold: bool = False, italic: bool = False) -> cairo.FontFace:
        slant = cairo.FONT_SLANT_ITALIC if italic else cairo.FONT_SLANT_NORMAL
        weight = cairo.FONT_WEIGHT_BOLD if bold else cairo.FONT_WEIGHT_NORMAL
        return cairo.ToyFontFace(self.cairo_family, slant, weight)


class FontResolver:
    """
    Maps family names to handles. Remote families are only known once the
    host registers them, usually after downloading and installing the
    font files.
    """

    def __init__(self):
        self._remote: Dict[str, str] = {}
        self._lock = threading.Lock()

    def register_remote(self, family: str, installed_as: Optional[str] = None):
        with self._lock:
            self._remote[family] = installed_as or family
        logger.debug(f"Registered remote font family '{family}'")

    def resolve(self, family: str, remote: bool = False) -> FontHandle:
        if not remote:
            return FontHandle(family, family)
        with self._lock:
            installed = self._remote.get(family)
        if installed is None:
            raise FontUnavailable(f"Remote font '{family}' is not available")
        return FontHandle(family, installed)


class FontCache:
    """
    A process-wide cache of resolved fonts, keyed by family name.

    Concurrent asynchronous loads of the same family share a single
    resolution. Failed resolutions are not cached so a later request can
    succeed once the font becomes available.
    """

    def __init__(self, resolver: FontResolver):
        self.resolver = resolver
        self._fonts: Dict[str, FontHandle] = {}
        self._pending: Dict[str, asyncio.Future] = {}
        self._lock = threading.Lock()

    def __contains__(self, family: str) -> bool:
        with self._lock:
            return family in self._fonts

    def clear(self):
        with self._lock:
            self._fonts.clear()

    def get(self, family: str, remote: bool = False) -> FontHandle:
        """Resolves a family synchronously, consulting the cache first."""
        with self._lock:
            handle = self._fonts.get(family)
        if handle is not None:
            return handle
        handle = self.resolver.resolve(family, remote)
        with self._lock:
            self._fonts.setdefault(family, handle)
            return self._fonts[family]

    async def load(self, family: str, remote: bool = False) -> FontHandle:
        """
        Resolves a family without blocking the running loop. Callers that
        ask for a family that is already being resolved wait for that
        resolution instead of starting another.
        """
        with self._lock:
            handle = self._fonts.get(family)
        if handle is not None:
            return handle

        loop = asyncio.get_running_loop()
        pending = self._pending.get(family)
        if pending is not None and pending.get_loop() is loop:
            return await asyncio.shield(pending)

        future: asyncio.Future = loop.create_future()
        self._pending[family] = future
        try:
            handle = await loop.run_in_executor(
                None, self.get, family, remote
            )
        except Exception as e:
            future.set_exception(e)
            # Mark as retrieved; the error is re-raised to this caller.
            future.exception()
            raise
        finally:
            if self._pending.get(family) is future:
                del self._pending[family]
        future.set_result(handle)
        return handle


font_resolver = FontResolver()
font_cache = FontCache(font_resolver)
