"""
Tests for percent <-> pixel conversion and the containment helpers.
"""

import pytest

from room_annotator.core import CoordinateTransformer, Rect, PixelRect, ViewportGeometry
from room_annotator.utils import DegenerateViewportError


@pytest.mark.parametrize("rect, viewport", [
    (Rect(25, 29.1666667, 25, 25), ViewportGeometry(800, 600)),
    (Rect(0.5, 99.5, 1, 1), ViewportGeometry(1920, 1080, top=40, left=12)),
    (Rect(50, 50, 100, 100), ViewportGeometry(333, 77)),
])
def test_round_trip(rect, viewport):
    """Percent -> pixels -> percent returns the original rectangle."""
    back = CoordinateTransformer.to_percent(CoordinateTransformer.to_pixels(rect, viewport), viewport)
    assert back.x == pytest.approx(rect.x, rel=1e-6)
    assert back.y == pytest.approx(rect.y, rel=1e-6)
    assert back.width == pytest.approx(rect.width, rel=1e-6)
    assert back.height == pytest.approx(rect.height, rel=1e-6)


def test_to_pixels_scales_each_axis():
    """Horizontal values scale with width, vertical ones with height."""
    pixels = CoordinateTransformer.to_pixels(Rect(25, 50, 25, 10), ViewportGeometry(800, 600))
    assert (pixels.x, pixels.y, pixels.width, pixels.height) == pytest.approx((200, 300, 200, 60))


def test_to_percent_rejects_degenerate_viewport():
    """Converting against a zero-sized viewport is a precondition violation."""
    with pytest.raises(DegenerateViewportError):
        CoordinateTransformer.to_percent(PixelRect(10, 10, 5, 5), ViewportGeometry(0, 600))


def test_to_image_point_removes_container_offset():
    viewport = ViewportGeometry(800, 600, top=30, left=100)
    assert CoordinateTransformer.to_image_point(150, 40, viewport) == (50, 10)


def test_is_contained():
    """The whole extent must lie inside [0, 100] on both axes."""
    assert CoordinateTransformer.is_contained(Rect(50, 50, 100, 100))
    assert CoordinateTransformer.is_contained(Rect(5, 5, 10, 10))
    assert not CoordinateTransformer.is_contained(Rect(96, 50, 10, 10))
    assert not CoordinateTransformer.is_contained(Rect(50, 4, 10, 10))
    assert CoordinateTransformer.is_contained(Rect(95 + 1e-12, 50, 10, 10))


def test_clamp_rect_moves_centre_back_inside():
    """Size is kept; only the centre moves."""
    clamped = CoordinateTransformer.clamp_rect(Rect(98, 2, 20, 10))
    assert clamped == Rect(90, 5, 20, 10)


def test_clamp_rect_caps_size():
    clamped = CoordinateTransformer.clamp_rect(Rect(70, 50, 150, 40))
    assert clamped.width == 100
    assert clamped.x == 50
    assert CoordinateTransformer.is_contained(clamped)


def test_to_natural_pixels():
    """Bounds in the source image's own resolution."""
    viewport = ViewportGeometry(800, 400, natural_width=1000, natural_height=500)
    bounds = CoordinateTransformer.to_natural_pixels(Rect(50, 50, 20, 10), viewport)
    assert bounds == pytest.approx((400, 225, 600, 275))


def test_pixel_rect_from_corners_normalizes():
    rect = PixelRect.from_corners((300, 250), (100, 100))
    assert (rect.left, rect.top, rect.right, rect.bottom) == (100, 100, 300, 250)
    assert rect.contains(100, 250)
    assert not rect.contains(99, 250)
    assert rect.contains(99, 250, margin=1)


def test_viewport_geometry_helpers():
    assert ViewportGeometry(0, 10).is_degenerate
    assert not ViewportGeometry(10, 10).is_degenerate
    assert ViewportGeometry(800, 600).contains_point(800, 0)
    assert not ViewportGeometry(800, 600).contains_point(-1, 10)
    scaled = ViewportGeometry(800, 600, top=10, left=20).scaled(2)
    assert (scaled.width, scaled.height, scaled.top, scaled.left) == (1600, 1200, 20, 40)
