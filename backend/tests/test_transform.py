import pytest
from PIL import Image

from overlaykit.schemas.overlay import Anchor, Canvas, FitMode
from overlaykit.services.transform import Placement, compute_placement, fit_placement, paste_rgba, transform_background


def test_cover_scales_to_fill_and_centres():
    p = fit_placement((200, 100), (100, 100), FitMode.cover, Anchor.center)
    assert p == Placement(200, 100, -50, 0)


def test_contain_scales_to_fit_and_letterboxes():
    p = fit_placement((200, 100), (100, 100), FitMode.contain, Anchor.center)
    assert p == Placement(100, 50, 0, 25)


def test_stretch_ignores_aspect_ratio():
    p = fit_placement((200, 100), (30, 70), FitMode.stretch, Anchor.top)
    assert p == Placement(30, 70, 0, 0)


@pytest.mark.parametrize(
    "anchor, left, top",
    [
        (Anchor.top, 0, 0),
        (Anchor.bottom, 0, -100),
        (Anchor.center, 0, -50),
    ],
)
def test_cover_vertical_anchors(anchor, left, top):
    p = fit_placement((100, 200), (100, 100), FitMode.cover, anchor)
    assert (p.left, p.top) == (left, top)


@pytest.mark.parametrize(
    "anchor, left",
    [(Anchor.left, 0), (Anchor.right, -100), (Anchor.center, -50)],
)
def test_cover_horizontal_anchors(anchor, left):
    p = fit_placement((200, 100), (100, 100), FitMode.cover, anchor)
    assert p.left == left


def test_contain_anchor_bottom():
    p = fit_placement((200, 100), (100, 100), FitMode.contain, Anchor.bottom)
    assert p.top == 50


def test_zoom_and_pan_fold_into_one_placement():
    canvas = Canvas(width=100, height=50, fit=FitMode.stretch, zoom=2, pan_x=50, pan_y=100)
    p = compute_placement((100, 50), canvas)
    # scaled 200x100, offset (200-100)*0.5=50 and (100-50)*1.0=50
    assert p == Placement(200, 100, -50, -50)


def test_zoom_one_leaves_fit_untouched():
    canvas = Canvas(width=100, height=100, fit=FitMode.contain, pan_x=80, pan_y=80)
    assert compute_placement((200, 100), canvas) == Placement(100, 50, 0, 25)


def test_transform_background_fills_canvas_for_cover():
    image = Image.new("RGB", (60, 20), (10, 20, 30))
    out = transform_background(image, Canvas(width=30, height=30))
    assert out.size == (30, 30)
    assert out.mode == "RGBA"
    assert out.getpixel((0, 0)) == (10, 20, 30, 255)
    assert out.getchannel("A").getextrema() == (255, 255)


def test_transform_background_contain_leaves_transparent_bars():
    image = Image.new("RGB", (60, 20), (10, 20, 30))
    out = transform_background(image, Canvas(width=30, height=30, fit=FitMode.contain))
    assert out.getpixel((15, 0))[3] == 0
    assert out.getpixel((15, 15)) == (10, 20, 30, 255)


def test_paste_rgba_clips_at_every_edge():
    base = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
    layer = Image.new("RGBA", (6, 6), (255, 0, 0, 255))
    paste_rgba(base, layer, -3, 7)
    assert base.getpixel((0, 9)) == (255, 0, 0, 255)
    assert base.getpixel((2, 7)) == (255, 0, 0, 255)
    assert base.getpixel((3, 9)) == (0, 0, 0, 0)
    assert base.getpixel((0, 6)) == (0, 0, 0, 0)


def test_paste_rgba_ignores_fully_outside_layers():
    base = Image.new("RGBA", (10, 10), (0, 0, 0, 0))
    paste_rgba(base, Image.new("RGBA", (4, 4), (255, 0, 0, 255)), -4, 0)
    paste_rgba(base, Image.new("RGBA", (4, 4), (255, 0, 0, 255)), 10, 0)
    assert base.getchannel("A").getextrema() == (0, 0)
