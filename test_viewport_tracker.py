"""
Tests for ViewportTracker measurement and change notification.
"""

from unittest.mock import Mock

import pytest

from room_annotator.core import ViewportTracker, ViewportGeometry
from room_annotator.utils import DegenerateViewportError


def test_current_before_measurement_raises():
    with pytest.raises(DegenerateViewportError):
        ViewportTracker().current()


def test_on_image_ready_with_fixed_geometry():
    tracker = ViewportTracker()
    geometry = ViewportGeometry(800, 600)
    assert tracker.on_image_ready(geometry) == geometry
    assert tracker.current() == geometry
    assert tracker.is_ready()


def test_on_resize_before_image_is_ignored():
    assert ViewportTracker().on_resize() is None


def test_on_resize_remeasures_and_notifies():
    """Every resize calls the measurement again and replaces the snapshot."""
    small, large = ViewportGeometry(800, 600), ViewportGeometry(1600, 1200)
    measure = Mock(side_effect=[small, large, large])
    listener = Mock()

    tracker = ViewportTracker()
    tracker.add_callback('viewport_changed', listener)
    tracker.on_image_ready(measure)
    tracker.on_resize()
    tracker.on_resize()

    assert measure.call_count == 3
    assert tracker.current() == large
    # The last resize measured the same geometry: no notification
    assert [c.args for c in listener.call_args_list] == [(None, small), (small, large)]


def test_degenerate_measurement_is_not_ready():
    tracker = ViewportTracker()
    tracker.on_image_ready(ViewportGeometry(0, 0))
    assert not tracker.is_ready()
    assert tracker.current().is_degenerate


def test_failing_listener_does_not_break_measurement():
    tracker = ViewportTracker()
    tracker.add_callback('viewport_changed', Mock(side_effect=RuntimeError("boom")))
    after = Mock()
    tracker.add_callback('viewport_changed', after)
    tracker.on_image_ready(ViewportGeometry(10, 10))
    after.assert_called_once()


def test_teardown_drops_listeners_and_measurement():
    tracker = ViewportTracker()
    listener = Mock()
    tracker.add_callback('viewport_changed', listener)
    tracker.on_image_ready(ViewportGeometry(10, 10))
    tracker.teardown()
    assert tracker.on_resize() is None
    listener.assert_called_once()
