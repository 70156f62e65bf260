"""
Resize Handles
This module describes the eight resize handles and the edge arithmetic behind them.

Every handle is an entry in a lookup table naming which of the four box edges
it moves. Dragging a handle by (dx, dy) moves each listed edge by the matching
delta component; the opposite edge on each axis is the anchor.
"""

import logging
from typing import Dict, Tuple
from enum import Enum

from .coordinate_system import PixelRect, ViewportGeometry

logger = logging.getLogger(__name__)


class ResizeHandle(Enum):
    """The eight resize handles: four corners and four edge midpoints."""
    TOP_LEFT = "top-left"
    TOP = "top"
    TOP_RIGHT = "top-right"
    RIGHT = "right"
    BOTTOM_RIGHT = "bottom-right"
    BOTTOM = "bottom"
    BOTTOM_LEFT = "bottom-left"
    LEFT = "left"


# handle -> (moves_left, moves_top, moves_right, moves_bottom)
HANDLE_EDGES: Dict[ResizeHandle, Tuple[bool, bool, bool, bool]] = {
    ResizeHandle.TOP_LEFT: (True, True, False, False),
    ResizeHandle.TOP: (False, True, False, False),
    ResizeHandle.TOP_RIGHT: (False, True, True, False),
    ResizeHandle.RIGHT: (False, False, True, False),
    ResizeHandle.BOTTOM_RIGHT: (False, False, True, True),
    ResizeHandle.BOTTOM: (False, False, False, True),
    ResizeHandle.BOTTOM_LEFT: (True, False, False, True),
    ResizeHandle.LEFT: (True, False, False, False),
}

# Cursor shape shown while hovering each handle
HANDLE_CURSORS: Dict[ResizeHandle, str] = {
    ResizeHandle.TOP_LEFT: "nwse-resize",
    ResizeHandle.TOP: "ns-resize",
    ResizeHandle.TOP_RIGHT: "nesw-resize",
    ResizeHandle.RIGHT: "ew-resize",
    ResizeHandle.BOTTOM_RIGHT: "nwse-resize",
    ResizeHandle.BOTTOM: "ns-resize",
    ResizeHandle.BOTTOM_LEFT: "nesw-resize",
    ResizeHandle.LEFT: "ew-resize",
}


def handle_anchor(handle: ResizeHandle) -> Tuple[float, float]:
    """
    Position of a handle on its box as fractions of width and height.

    Returns:
        (fx, fy), each in {0, 0.5, 1}; (0, 0) is the top-left corner
    """
    moves_left, moves_top, moves_right, moves_bottom = HANDLE_EDGES[handle]
    fx = 0.0 if moves_left else 1.0 if moves_right else 0.5
    fy = 0.0 if moves_top else 1.0 if moves_bottom else 0.5
    return fx, fy


def resize_pixel_rect(start: PixelRect, handle: ResizeHandle, dx: float, dy: float,
                      viewport: ViewportGeometry, min_size: float) -> PixelRect:
    """
    Resize a pixel rectangle by dragging one handle.

    Moved edges are shifted by the pointer delta and kept on the image box.
    Each axis is then checked against the minimum size independently: an
    axis that became too small is pinned to min_size, measured from the edge
    opposite the dragged handle, so the box never jumps.

    Args:
        start: Box at gesture start, image-relative pixels
        handle: Handle being dragged
        dx: Horizontal pointer delta since gesture start
        dy: Vertical pointer delta since gesture start
        viewport: Viewport snapshot frozen at gesture start
        min_size: Minimum width and height in pixels

    Returns:
        The resized rectangle
    """
    moves_left, moves_top, moves_right, moves_bottom = HANDLE_EDGES[handle]

    left, top, right, bottom = start.left, start.top, start.right, start.bottom
    if moves_left:
        left = _clamp(left + dx, 0.0, viewport.width)
    if moves_right:
        right = _clamp(right + dx, 0.0, viewport.width)
    if moves_top:
        top = _clamp(top + dy, 0.0, viewport.height)
    if moves_bottom:
        bottom = _clamp(bottom + dy, 0.0, viewport.height)

    left, right = _enforce_min_span(left, right, moves_left, min_size)
    top, bottom = _enforce_min_span(top, bottom, moves_top, min_size)

    return PixelRect.from_edges(left, top, right, bottom)


def _enforce_min_span(low: float, high: float, moves_low: bool, min_size: float) -> Tuple[float, float]:
    """Pin a too-small (or inverted) span to min_size, anchored on the edge that is not dragged."""
    if high - low >= min_size:
        return low, high
    if moves_low:
        return high - min_size, high
    return low, low + min_size


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
