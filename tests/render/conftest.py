import cairo
import pytest
from boothforge.render.fonts import FontCache, FontResolver
from boothforge.render.renderer import LayoutRenderer


def write_png(path, width, height, rgb):
    surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, width, height)
    ctx = cairo.Context(surface)
    ctx.set_source_rgb(*rgb)
    ctx.paint()
    surface.write_to_png(str(path))
    return path


@pytest.fixture
def red_png(tmp_path):
    return write_png(tmp_path / "red.png", 60, 30, (1, 0, 0))


@pytest.fixture
def resolver():
    return FontResolver()


@pytest.fixture
def renderer(resolver):
    """A renderer with its own font cache."""
    return LayoutRenderer(fonts=FontCache(resolver))
