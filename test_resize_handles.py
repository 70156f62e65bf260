"""
Tests for the resize handle table and resize geometry.
"""

import pytest

from room_annotator.core import PixelRect, ResizeHandle, ViewportGeometry, resize_pixel_rect
from room_annotator.core.resize_handles import HANDLE_EDGES, HANDLE_CURSORS, handle_anchor

VIEWPORT = ViewportGeometry(800, 600)
START = PixelRect.from_edges(100, 100, 300, 250)


def edges(rect):
    return pytest.approx((rect.left, rect.top, rect.right, rect.bottom))


def test_every_handle_has_edges_and_cursor():
    assert set(HANDLE_EDGES) == set(ResizeHandle) == set(HANDLE_CURSORS)
    for handle, moved in HANDLE_EDGES.items():
        corner = '-' in handle.value
        assert sum(moved) == (2 if corner else 1)


def test_handle_anchor_positions():
    assert handle_anchor(ResizeHandle.TOP_LEFT) == (0.0, 0.0)
    assert handle_anchor(ResizeHandle.RIGHT) == (1.0, 0.5)
    assert handle_anchor(ResizeHandle.BOTTOM) == (0.5, 1.0)


def test_right_handle_moves_only_right_edge():
    resized = resize_pixel_rect(START, ResizeHandle.RIGHT, 50, 30, VIEWPORT, 20)
    assert (resized.left, resized.top, resized.right, resized.bottom) == edges(PixelRect.from_edges(100, 100, 350, 250))


def test_top_left_handle_moves_two_edges():
    resized = resize_pixel_rect(START, ResizeHandle.TOP_LEFT, -40, -20, VIEWPORT, 20)
    assert (resized.left, resized.top, resized.right, resized.bottom) == edges(PixelRect.from_edges(60, 80, 300, 250))


def test_moved_edge_stops_at_image_border():
    resized = resize_pixel_rect(START, ResizeHandle.BOTTOM_RIGHT, 1000, 1000, VIEWPORT, 20)
    assert (resized.right, resized.bottom) == (800, 600)


def test_minimum_size_anchors_opposite_edge():
    """Dragging the left edge past the right one pins the width at 20px from the right."""
    resized = resize_pixel_rect(START, ResizeHandle.LEFT, 300, 0, VIEWPORT, 20)
    assert (resized.left, resized.right) == (280, 300)
    assert (resized.top, resized.bottom) == (100, 250)


def test_corner_minimum_size_is_per_axis():
    """Both axes of a corner drag are pinned independently, each on its own far edge."""
    resized = resize_pixel_rect(START, ResizeHandle.TOP_LEFT, 195, 145, VIEWPORT, 20)
    assert (resized.left, resized.top, resized.right, resized.bottom) == (280, 230, 300, 250)

    shrunk = resize_pixel_rect(START, ResizeHandle.BOTTOM_RIGHT, -1000, 10, VIEWPORT, 20)
    assert (shrunk.left, shrunk.right) == (100, 120)
    assert shrunk.bottom == 260
