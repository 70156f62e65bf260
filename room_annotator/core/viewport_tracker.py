"""
Viewport Tracker Component
This module keeps the latest measurement of the rendered image box.
"""

import logging
from typing import Optional, Callable, Dict, List, Union

from .coordinate_system import ViewportGeometry
from ..utils.error_handling import DegenerateViewportError

logger = logging.getLogger(__name__)

MeasureFn = Callable[[], ViewportGeometry]


class ViewportTracker:
    """
    Measures the rendered image box on image load and on every container
    resize, and exposes the latest snapshot.

    Snapshots are immutable and replaced wholesale. A gesture keeps the
    snapshot it captured at its start, so a measurement taken mid-gesture
    never leaks into that gesture's geometry math.
    """

    def __init__(self):
        self._measure: Optional[MeasureFn] = None
        self._current: Optional[ViewportGeometry] = None

        self.callbacks: Dict[str, List[Callable]] = {
            'viewport_changed': [],
        }

    def on_image_ready(self, measure: Union[MeasureFn, ViewportGeometry]) -> ViewportGeometry:
        """
        Capture the initial geometry once the image element is rendered.

        Args:
            measure: Callable returning a fresh ViewportGeometry, or a fixed
                geometry when the display layer has nothing to re-measure

        Returns:
            The captured snapshot
        """
        if isinstance(measure, ViewportGeometry):
            fixed = measure
            self._measure = lambda: fixed
        else:
            self._measure = measure
        return self._capture("image ready")

    def on_resize(self) -> Optional[ViewportGeometry]:
        """
        Recapture geometry after the container or window changed size.

        Returns:
            The new snapshot, or None if no image has been reported yet
        """
        if self._measure is None:
            logger.debug("Resize before image ready ignored")
            return None
        return self._capture("resize")

    def _capture(self, reason: str) -> ViewportGeometry:
        geometry = self._measure()
        old = self._current
        self._current = geometry

        if geometry.is_degenerate:
            logger.warning(f"Degenerate viewport measured on {reason}: {geometry.width}x{geometry.height}")
        else:
            logger.debug(f"Viewport measured on {reason}: {geometry}")

        if old != geometry:
            self._trigger_callbacks('viewport_changed', old, geometry)
        return geometry

    def current(self) -> ViewportGeometry:
        """
        Get the latest snapshot.

        Raises:
            DegenerateViewportError: If nothing was measured yet
        """
        if self._current is None:
            raise DegenerateViewportError("Viewport has not been measured yet")
        return self._current

    def is_ready(self) -> bool:
        """Check whether a non-degenerate snapshot is available."""
        return self._current is not None and not self._current.is_degenerate

    def add_callback(self, event_type: str, callback: Callable):
        """
        Add a callback for a specific event type.

        Args:
            event_type: Type of event ('viewport_changed')
            callback: Callback called with (old, new) geometry
        """
        if event_type in self.callbacks:
            self.callbacks[event_type].append(callback)
        else:
            logger.warning(f"Unknown event type: {event_type}")

    def remove_callback(self, event_type: str, callback: Callable):
        """Remove a callback for a specific event type."""
        if event_type in self.callbacks and callback in self.callbacks[event_type]:
            self.callbacks[event_type].remove(callback)

    def _trigger_callbacks(self, event_type: str, *args):
        for callback in list(self.callbacks.get(event_type, [])):
            try:
                callback(*args)
            except Exception as e:
                logger.error(f"Error in callback for {event_type}: {e}")

    def teardown(self):
        """Stop tracking: drop the measurement source and all listeners."""
        self._measure = None
        for listeners in self.callbacks.values():
            listeners.clear()
        logger.debug("ViewportTracker torn down")
