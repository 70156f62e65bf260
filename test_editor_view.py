"""
Tests for the matplotlib binding, driven through the canvas callback registry
on the non-interactive Agg backend.
"""

from unittest.mock import Mock

import numpy as np
import pytest
from matplotlib.backend_bases import CloseEvent, KeyEvent, LocationEvent, MouseEvent
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from PIL import Image

from room_annotator.business import AnnotationSession
from room_annotator.core import GestureKind
from room_annotator.ui import AnnotationEditorView, load_image


@pytest.fixture
def figure():
    fig = Figure(figsize=(8, 6), dpi=100)
    FigureCanvasAgg(fig)
    return fig


@pytest.fixture
def session():
    return AnnotationSession(seeds=[{'id': 'd1', 'x': 50, 'y': 50, 'width': 20, 'height': 20, 'class': 'bed'}])


@pytest.fixture
def view(session, figure):
    image = np.zeros((300, 400, 3), dtype=np.uint8)
    return AnnotationEditorView(session, image, figure=figure)


def display_point(view, container_x, container_y):
    """Container coordinates (top-left origin) to matplotlib display coordinates."""
    return container_x, view.figure.bbox.height - container_y


def mouse(view, name, container_x, container_y, button=1):
    x, y = display_point(view, container_x, container_y)
    event = MouseEvent(name, view.canvas, x, y, button=button)
    view.canvas.callbacks.process(name, event)


def key(view, name):
    event = KeyEvent('key_press_event', view.canvas, name)
    view.canvas.callbacks.process('key_press_event', event)


def box_centre(view, index=0):
    rect = view.session.overlay()[index].container_rect
    return rect.x, rect.y


def test_load_image_converts_modes():
    rgba = Image.new('RGBA', (4, 3))
    assert load_image(rgba).shape == (3, 4, 3)
    assert load_image(Image.new('L', (4, 3))).shape == (3, 4)
    array = np.ones((2, 2))
    assert load_image(array) is array


def test_viewport_is_measured_from_axes(view):
    viewport = view.session.tracker.current()
    assert view.session.tracker.is_ready()
    assert (viewport.natural_width, viewport.natural_height) == (400, 300)
    assert viewport.width / viewport.height == pytest.approx(4 / 3)
    assert viewport.left > 0 and viewport.top > 0
    assert viewport.left + viewport.width <= view.figure.bbox.width


def test_overlay_is_drawn_as_patches(view):
    assert len(view.ax.patches) == 1
    assert len(view.ax.texts) == 1
    assert view.ax.texts[0].get_text().startswith("object_1")

    view.session.select(1)
    assert len(view.ax.patches) == 1 + 8


def test_drag_through_canvas_events(view):
    viewport = view.session.tracker.current()
    x, y = box_centre(view)

    mouse(view, 'button_press_event', x, y)
    assert view.session.controller.state.kind == GestureKind.DRAGGING
    assert view.session.controller.listeners_attached
    mouse(view, 'motion_notify_event', x + 30, y)
    mouse(view, 'button_release_event', x + 30, y)

    geometry = view.session.store.get(1).geometry
    assert geometry.x == pytest.approx(50 + 30 / viewport.width * 100)
    assert geometry.y == pytest.approx(50)
    assert not view.session.controller.listeners_attached


def test_each_pointer_move_redraws_once(view, monkeypatch):
    refresh = Mock(wraps=view.refresh)
    monkeypatch.setattr(view, 'refresh', refresh)
    x, y = box_centre(view)

    mouse(view, 'button_press_event', x, y)
    refresh.reset_mock()
    mouse(view, 'motion_notify_event', x + 10, y)
    assert refresh.call_count == 1
    mouse(view, 'motion_notify_event', x + 20, y)
    assert refresh.call_count == 2
    mouse(view, 'button_release_event', x + 20, y)

    # Changes made outside a gesture still redraw
    view.session.clear_selection()
    refresh.reset_mock()
    view.session.remove(1)
    assert refresh.call_count == 1
    assert len(view.ax.patches) == 0


def test_draw_through_canvas_events(view):
    viewport = view.session.tracker.current()
    left, top = viewport.left + 10, viewport.top + 10

    mouse(view, 'button_press_event', left, top)
    mouse(view, 'motion_notify_event', left + 40, top + 30)
    assert view.session.controller.preview_rect() is not None
    mouse(view, 'button_release_event', left + 60, top + 50)

    assert len(view.session.annotations()) == 2
    assert view.session.selected_id == 2


def test_right_button_is_ignored(view):
    x, y = box_centre(view)
    mouse(view, 'button_press_event', x, y, button=3)
    assert not view.session.controller.is_active


def test_figure_leave_cancels_gesture(view):
    x, y = box_centre(view)
    mouse(view, 'button_press_event', x, y)
    event = LocationEvent('figure_leave_event', view.canvas, 0, 0)
    view.canvas.callbacks.process('figure_leave_event', event)
    assert not view.session.controller.is_active
    assert not view.session.controller.listeners_attached


def test_resize_rescales_overlay_only(view):
    before_geometry = view.session.store.get(1).geometry
    before = view.session.overlay()[0].rect

    view.figure.set_size_inches(16, 12)
    view._on_resize(None)

    after = view.session.overlay()[0].rect
    assert view.session.store.get(1).geometry == before_geometry
    assert after.width == pytest.approx(2 * before.width)
    assert after.height == pytest.approx(2 * before.height)


def test_keyboard_shortcuts(view):
    view.session.select(1)
    key(view, 'enter')
    assert view.session.store.get(1).label == 'bed'

    key(view, 'escape')
    assert view.session.selected_id is None

    view.session.select(1)
    key(view, 'delete')
    assert view.session.annotations() == ()


def test_close_finalizes_session(view):
    completed = []
    view.add_close_callback(completed.append)
    view.canvas.callbacks.process('close_event', CloseEvent('close_event', view.canvas))

    assert view.session.is_closed
    assert len(completed) == 1 and completed[0][0].id == 1
    assert completed[0][0].bbox_natural == pytest.approx((160, 120, 240, 180))
