# flake8: noqa:F401
from .colors import parse_color, normalize_color
from .fonts import (
    FontCache,
    FontHandle,
    FontResolver,
    FontUnavailable,
    font_cache,
    font_resolver,
)
from .images import DecodeError, DecodedImage, decode_bytes, load_image
from .images import read_image_size
from .renderer import ExportError, LayoutRenderer, surface_to_array
