"""
Shared fixtures for the annotation editor tests.
"""

import matplotlib

matplotlib.use("Agg")

import pytest

from room_annotator.core import (
    AnnotationStore,
    GestureController,
    NullEventSource,
    ViewportGeometry,
    ViewportTracker,
)


@pytest.fixture
def viewport():
    """The 800x600 rendering used throughout the scenarios."""
    return ViewportGeometry(width=800, height=600, natural_width=1600, natural_height=1200)


@pytest.fixture
def store():
    return AnnotationStore()


@pytest.fixture
def tracker(viewport):
    tracker = ViewportTracker()
    tracker.on_image_ready(viewport)
    return tracker


@pytest.fixture
def event_source():
    return NullEventSource()


@pytest.fixture
def controller(store, tracker, event_source):
    return GestureController(store, tracker, event_source=event_source)


def drag(controller, start, end, steps=4):
    """Press at start, move in a few steps, release at end."""
    controller.pointer_down(*start)
    (x0, y0), (x1, y1) = start, end
    for i in range(1, steps):
        controller.pointer_move(x0 + (x1 - x0) * i / steps, y0 + (y1 - y0) * i / steps)
    controller.pointer_up(x1, y1)
