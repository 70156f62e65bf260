"""
Coordinate System Component
This module handles the conversion between percent-space and pixel-space geometry.

Percent-space is the canonical form: every rectangle is stored as percentages
(0-100) of the rendered image box, with (x, y) being the rectangle centre.
Pixel-space is derived from it for one specific ViewportGeometry snapshot and
is never stored.
"""

import logging
from typing import Tuple, Dict
from dataclasses import dataclass

from ..utils.error_handling import DegenerateViewportError

logger = logging.getLogger(__name__)

PERCENT_SCALE = 100.0


@dataclass(frozen=True)
class Rect:
    """Centre-based rectangle in percent-space."""
    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x - self.width / 2

    @property
    def right(self) -> float:
        return self.x + self.width / 2

    @property
    def top(self) -> float:
        return self.y - self.height / 2

    @property
    def bottom(self) -> float:
        return self.y + self.height / 2

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary format."""
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}


@dataclass(frozen=True)
class PixelRect:
    """Centre-based rectangle in pixels, relative to the rendered image box."""
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_edges(cls, left: float, top: float, right: float, bottom: float) -> "PixelRect":
        """Build a rectangle from its four edges."""
        return cls(
            x=(left + right) / 2,
            y=(top + bottom) / 2,
            width=right - left,
            height=bottom - top,
        )

    @classmethod
    def from_corners(cls, a: Tuple[float, float], b: Tuple[float, float]) -> "PixelRect":
        """Build the normalized rectangle spanned by two opposite corners."""
        return cls.from_edges(min(a[0], b[0]), min(a[1], b[1]),
                              max(a[0], b[0]), max(a[1], b[1]))

    @property
    def left(self) -> float:
        return self.x - self.width / 2

    @property
    def right(self) -> float:
        return self.x + self.width / 2

    @property
    def top(self) -> float:
        return self.y - self.height / 2

    @property
    def bottom(self) -> float:
        return self.y + self.height / 2

    def contains(self, px: float, py: float, margin: float = 0.0) -> bool:
        """Check if a point lies inside the rectangle, optionally grown by margin."""
        return (self.left - margin <= px <= self.right + margin and
                self.top - margin <= py <= self.bottom + margin)


@dataclass(frozen=True)
class ViewportGeometry:
    """
    Rendered image box, in pixels, relative to a stable container origin.
    Replaced wholesale on every measurement, never partially updated.
    """
    width: float
    height: float
    top: float = 0.0
    left: float = 0.0
    natural_width: float = 0.0
    natural_height: float = 0.0

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains_point(self, x: float, y: float) -> bool:
        """Check if an image-relative pixel point lies on the image box."""
        return 0.0 <= x <= self.width and 0.0 <= y <= self.height

    def scaled(self, factor: float) -> "ViewportGeometry":
        """Return the same box scaled uniformly around the container origin."""
        return ViewportGeometry(
            width=self.width * factor,
            height=self.height * factor,
            top=self.top * factor,
            left=self.left * factor,
            natural_width=self.natural_width,
            natural_height=self.natural_height,
        )


class CoordinateTransformer:
    """
    Pure conversions between percent-space and pixel-space, plus the
    containment helpers built on them. Holds no state.
    """

    @staticmethod
    def to_pixels(rect: Rect, viewport: ViewportGeometry) -> PixelRect:
        """
        Convert a percent-space rectangle to pixels.

        Args:
            rect: Rectangle in percent-space
            viewport: Viewport snapshot to project onto

        Returns:
            Rectangle in pixels relative to the image box
        """
        return PixelRect(
            x=rect.x / PERCENT_SCALE * viewport.width,
            y=rect.y / PERCENT_SCALE * viewport.height,
            width=rect.width / PERCENT_SCALE * viewport.width,
            height=rect.height / PERCENT_SCALE * viewport.height,
        )

    @staticmethod
    def to_percent(pixel_rect: PixelRect, viewport: ViewportGeometry) -> Rect:
        """
        Convert a pixel rectangle back to percent-space.

        Args:
            pixel_rect: Rectangle in pixels relative to the image box
            viewport: Viewport snapshot the pixels were measured in

        Returns:
            Rectangle in percent-space

        Raises:
            DegenerateViewportError: If the viewport has no area
        """
        if viewport.is_degenerate:
            raise DegenerateViewportError(
                f"Cannot convert to percent-space with a {viewport.width}x{viewport.height} viewport"
            )
        return Rect(
            x=pixel_rect.x / viewport.width * PERCENT_SCALE,
            y=pixel_rect.y / viewport.height * PERCENT_SCALE,
            width=pixel_rect.width / viewport.width * PERCENT_SCALE,
            height=pixel_rect.height / viewport.height * PERCENT_SCALE,
        )

    @staticmethod
    def to_image_point(container_x: float, container_y: float,
                       viewport: ViewportGeometry) -> Tuple[float, float]:
        """Convert a container-relative pointer position to image-relative pixels."""
        return container_x - viewport.left, container_y - viewport.top

    @staticmethod
    def is_contained(rect: Rect, tolerance: float = 1e-9) -> bool:
        """Check the containment invariant: the full extent lies in [0, 100]^2."""
        return (rect.width >= -tolerance and rect.height >= -tolerance and
                rect.left >= -tolerance and rect.right <= PERCENT_SCALE + tolerance and
                rect.top >= -tolerance and rect.bottom <= PERCENT_SCALE + tolerance)

    @staticmethod
    def clamp_rect(rect: Rect) -> Rect:
        """
        Enforce containment by capping the size at 100 and clamping the centre
        so that the box stays fully inside the image.
        """
        width = min(max(rect.width, 0.0), PERCENT_SCALE)
        height = min(max(rect.height, 0.0), PERCENT_SCALE)
        x = _clamp(rect.x, width / 2, PERCENT_SCALE - width / 2)
        y = _clamp(rect.y, height / 2, PERCENT_SCALE - height / 2)
        return Rect(x=x, y=y, width=width, height=height)

    @staticmethod
    def to_natural_pixels(rect: Rect, viewport: ViewportGeometry) -> Tuple[float, float, float, float]:
        """
        Express a percent rectangle in the source image's natural resolution.

        Returns:
            (x_min, y_min, x_max, y_max) in natural image pixels
        """
        sx = viewport.natural_width / PERCENT_SCALE
        sy = viewport.natural_height / PERCENT_SCALE
        return (rect.left * sx, rect.top * sy, rect.right * sx, rect.bottom * sy)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
