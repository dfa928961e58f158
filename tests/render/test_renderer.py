import cairo
import pytest
from boothforge.core import (
    CameraElement,
    GroupElement,
    ImageElement,
    Layout,
    TextElement,
)
from boothforge.render.renderer import (
    ExportError,
    SAMPLE_PHOTO_FILL,
    surface_to_array,
    wrap_lines,
)


def _pixel(renderer, layout, x, y, **options):
    pixels = surface_to_array(renderer.render(layout, **options))
    return tuple(int(v) for v in pixels[y, x])


def _close(actual, expected, tolerance=2):
    return all(abs(a - e) <= tolerance for a, e in zip(actual, expected))


def test_output_size_follows_scale(renderer):
    layout = Layout(width=100, height=50)
    assert renderer.render(layout).get_width() == 100
    surface = renderer.render(layout, scale=2.0)
    assert (surface.get_width(), surface.get_height()) == (200, 100)
    surface = renderer.render(layout, scale=1 / 3)
    assert (surface.get_width(), surface.get_height()) == (33, 17)


def test_invalid_scale(renderer):
    with pytest.raises(ExportError):
        renderer.render(Layout(width=10, height=10), scale=0)


def test_background(renderer):
    layout = Layout(width=20, height=20, background_color="#336699")
    assert _pixel(renderer, layout, 5, 5) == (0x33, 0x66, 0x99, 255)
    assert _pixel(renderer, layout, 5, 5, include_background=False)[3] == 0


def test_transparent_background(renderer):
    layout = Layout(width=20, height=20, background_color="transparent")
    assert _pixel(renderer, layout, 5, 5)[3] == 0


def test_rendering_is_deterministic(renderer, red_png):
    layout = Layout(width=200, height=150)
    layout.add_element(TextElement(text="Hello booth", x=10, y=10))
    layout.add_element(ImageElement(path=str(red_png), x=50, y=60))
    layout.add_element(CameraElement(label="Spot", x=100, y=20))
    first = renderer.render_to_png_bytes(layout)
    assert renderer.render_to_png_bytes(layout) == first


def test_invisible_elements_and_groups_are_not_drawn(renderer):
    empty = Layout(width=100, height=100)
    layout = Layout(width=100, height=100)
    text = layout.add_element(
        TextElement(text="X", background_color="#000000")
    )
    text.visible = False
    layout.add_element(GroupElement(name="G", child_ids=[text.uid]))
    assert renderer.render_to_png_bytes(
        layout
    ) == renderer.render_to_png_bytes(empty)


def test_missing_image_is_skipped(renderer, tmp_path):
    empty = Layout(width=50, height=50)
    layout = Layout(width=50, height=50)
    layout.add_element(ImageElement(path=str(tmp_path / "gone.png")))
    assert renderer.render_to_png_bytes(
        layout
    ) == renderer.render_to_png_bytes(empty)


def test_image_is_stretched_into_its_box(renderer, red_png):
    layout = Layout(width=100, height=100)
    layout.add_element(
        ImageElement(path=str(red_png), x=10, y=10, width=40, height=80)
    )
    assert _pixel(renderer, layout, 30, 80) == (255, 0, 0, 255)
    assert _pixel(renderer, layout, 60, 50) == (255, 255, 255, 255)


def test_image_opacity(renderer, red_png):
    layout = Layout(width=100, height=100)
    layout.add_element(
        ImageElement(path=str(red_png), width=100, height=100, opacity=0.5)
    )
    r, g, b, a = _pixel(renderer, layout, 50, 50)
    assert r == 255 and a == 255
    assert 120 <= g <= 135 and g == b


def test_scaled_element_positions(renderer, red_png):
    layout = Layout(width=100, height=100)
    layout.add_element(
        ImageElement(path=str(red_png), x=50, y=50, width=50, height=50)
    )
    assert _pixel(renderer, layout, 150, 150, scale=2.0)[:3] == (255, 0, 0)
    assert _pixel(renderer, layout, 90, 90, scale=2.0)[:3] == (255, 255, 255)


def test_text_background(renderer):
    layout = Layout(width=100, height=100)
    layout.add_element(
        TextElement(
            text="", x=20, y=20, width=50, height=30,
            background_color="#00FF00",
        )
    )
    assert _pixel(renderer, layout, 65, 45) == (0, 255, 0, 255)
    assert _pixel(renderer, layout, 75, 45) == (255, 255, 255, 255)


def test_remote_font_falls_back(renderer):
    def layout_with(family, remote):
        layout = Layout(width=200, height=60)
        layout.add_element(
            TextElement(
                text="Fallback", font_family=family, remote_font=remote
            )
        )
        return layout

    fallback = renderer.render_to_png_bytes(layout_with("Arial", False))
    remote = renderer.render_to_png_bytes(layout_with("NoSuchFont", True))
    assert remote == fallback


def test_camera_placeholder_without_sample_photos(renderer):
    layout = Layout(width=200, height=200)
    layout.add_element(CameraElement(x=0, y=0, width=200, height=200))
    r, g, b, a = _pixel(renderer, layout, 20, 20, include_sample_photos=False)
    assert a == 255
    assert b > r
    assert (r, g, b) != (255, 255, 255)


def test_camera_uses_synthesized_sample(renderer):
    layout = Layout(width=300, height=300)
    layout.add_element(CameraElement(x=0, y=0, width=300, height=300))
    expected = tuple(round(c * 255) for c in SAMPLE_PHOTO_FILL)
    assert _close(_pixel(renderer, layout, 20, 20), expected)


def test_camera_uses_first_image_as_sample(renderer, red_png, tmp_path):
    layout = Layout(width=300, height=300)
    layout.add_element(ImageElement(path=str(tmp_path / "missing.png")))
    layout.add_element(
        ImageElement(path=str(red_png), x=250, y=250, width=50, height=50)
    )
    layout.add_element(CameraElement(x=0, y=0, width=200, height=200))
    assert _pixel(renderer, layout, 20, 20) == (255, 0, 0, 255)


def test_wrap_lines():
    surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, 10, 10)
    ctx = cairo.Context(surface)
    ctx.set_font_size(10)
    assert wrap_lines(ctx, "one\ntwo", 1000) == ["one", "two"]
    lines = wrap_lines(ctx, "alpha beta gamma", 1)
    assert lines == ["alpha", "beta", "gamma"]


def test_export_writes_png(renderer, tmp_path):
    target = tmp_path / "out.png"
    layout = Layout(width=40, height=30)
    assert renderer.export(layout, target, scale=2.0) == target

    surface = cairo.ImageSurface.create_from_png(str(target))
    assert (surface.get_width(), surface.get_height()) == (80, 60)
    assert [p.name for p in tmp_path.iterdir()] == ["out.png"]


def test_failed_export_leaves_no_files(renderer, tmp_path):
    target = tmp_path / "taken"
    target.mkdir()
    with pytest.raises(ExportError):
        renderer.export(Layout(width=10, height=10), target)
    assert [p.name for p in tmp_path.iterdir()] == ["taken"]
    assert list(target.iterdir()) == []

    with pytest.raises(ExportError):
        renderer.export(Layout(width=10, height=10), tmp_path / "a" / "b.png")
