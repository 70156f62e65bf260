"""
Editor View Component
This module binds an AnnotationSession to a matplotlib figure.

The image is shown with imshow; the rendered image box is measured from the
axes transform and fed to the session's ViewportTracker; the RenderProjector
output is drawn as patches. Matplotlib display coordinates have their origin
at the bottom-left of the canvas, so every pointer position is flipped into
container coordinates (origin top-left) before it reaches the session.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, List, Dict, Any, Callable, Union
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.axes import Axes
from matplotlib.patches import Rectangle
from matplotlib.colors import to_rgba
from PIL import Image

from ..config import get_visualization_config
from ..core.coordinate_system import ViewportGeometry, PixelRect
from ..core.annotation_store import AnnotationOrigin
from ..core.render_projector import ProjectedBox
from ..core.interaction_handler import PointerEventSource
from ..business.annotation_session import AnnotationSession

logger = logging.getLogger(__name__)

ImageInput = Union[str, Path, np.ndarray, Image.Image]


def load_image(source: ImageInput) -> np.ndarray:
    """
    Load an image into a numpy array.

    Args:
        source: Image path, PIL image or array

    Returns:
        Image array, RGB or grayscale
    """
    if isinstance(source, np.ndarray):
        return source
    image = source if isinstance(source, Image.Image) else Image.open(source)
    if image.mode not in ['RGB', 'L']:
        image = image.convert('RGB')
    return np.array(image)


def container_point(canvas, event) -> Tuple[float, float]:
    """Pointer position of a matplotlib event relative to the canvas top-left corner."""
    return float(event.x), float(canvas.figure.bbox.height - event.y)


class CanvasEventSource(PointerEventSource):
    """
    Global pointer listeners on a matplotlib canvas.

    Each subscription connects motion, release and figure-leave handlers and
    returns their connection ids; unsubscribing disconnects all three.
    """

    def __init__(self, canvas):
        self.canvas = canvas

    def subscribe(self, on_move, on_up, on_leave) -> List[int]:
        def _move(event):
            on_move(*container_point(self.canvas, event))

        def _up(event):
            on_up(*container_point(self.canvas, event))

        def _leave(event):
            on_leave()

        return [
            self.canvas.mpl_connect('motion_notify_event', _move),
            self.canvas.mpl_connect('button_release_event', _up),
            self.canvas.mpl_connect('figure_leave_event', _leave),
        ]

    def unsubscribe(self, token: List[int]):
        for cid in token:
            self.canvas.mpl_disconnect(cid)


class AnnotationEditorView:
    """
    Matplotlib front end for one AnnotationSession.
    """

    def __init__(self, session: AnnotationSession, image: ImageInput,
                 figure: Optional[Figure] = None, config: Dict[str, Any] = None,
                 preset: str = 'default'):
        """
        Initialize the editor view.

        Args:
            session: Session to edit
            image: Image path, PIL image or array
            figure: Figure to draw into; a new pyplot figure if omitted
            config: Visualization configuration overrides
            preset: Name of the visualization preset
        """
        self.session = session
        self.config = get_visualization_config(preset, **(config or {}))
        self.colors = self.config['colors']

        figure_config = self.config['figure']
        self.figure = figure or plt.figure(figsize=figure_config['figsize'], dpi=figure_config['dpi'])
        self.canvas = self.figure.canvas
        self.ax: Axes = self.figure.add_subplot(1, 1, 1)

        self.image = load_image(image)
        height, width = self.image.shape[:2]
        self.image_size: Tuple[int, int] = (width, height)

        self._overlay_artists: List[Any] = []
        self._connection_ids: List[int] = []
        self._closed = False

        self._setup_display()
        self.event_source = CanvasEventSource(self.canvas)
        self.session.controller.set_event_source(self.event_source)
        self._connect_events()

        self.session.attach_viewport(self.measure_viewport)
        logger.info(f"AnnotationEditorView initialized for a {width}x{height} image")
        self.refresh()

    def _setup_display(self):
        """Show the image with its natural pixel grid as data coordinates."""
        width, height = self.image_size
        self.ax.set_facecolor(self.colors['background'])
        if self.image.ndim == 2:
            self.ax.imshow(self.image, cmap='gray', extent=(0, width, height, 0),
                           interpolation=self.config['figure']['interpolation'])
        else:
            self.ax.imshow(self.image, extent=(0, width, height, 0),
                           interpolation=self.config['figure']['interpolation'])
        self.ax.set_xlim(0, width)
        self.ax.set_ylim(height, 0)
        self.ax.set_autoscale_on(False)
        self.ax.set_xticks([])
        self.ax.set_yticks([])

    def _connect_events(self):
        self._connection_ids = [
            self.canvas.mpl_connect('button_press_event', self._on_mouse_press),
            self.canvas.mpl_connect('resize_event', self._on_resize),
            self.canvas.mpl_connect('key_press_event', self._on_key_press),
            self.canvas.mpl_connect('close_event', self._on_close),
        ]
        controller = self.session.controller
        for event_type in ('gesture_updated', 'gesture_ended', 'gesture_cancelled', 'selection_changed'):
            controller.add_callback(event_type, self._on_overlay_changed)
        self.session.add_callback('annotations_changed', self._on_annotations_changed)

    # ------------------------------------------------------------------
    # Measurement
    # ------------------------------------------------------------------
    def measure_viewport(self) -> ViewportGeometry:
        """
        Measure the rendered image box in container pixels.

        The axes keep the image aspect ratio, so the box is where the image
        corners land after the aspect adjustment.
        """
        width, height = self.image_size
        self.ax.apply_aspect()
        (x0, y0), (x1, y1) = self.ax.transData.transform([(0, 0), (width, height)])
        canvas_height = self.figure.bbox.height
        return ViewportGeometry(
            width=abs(x1 - x0),
            height=abs(y1 - y0),
            left=min(x0, x1),
            top=canvas_height - max(y0, y1),
            natural_width=width,
            natural_height=height,
        )

    def _to_data(self, px: float, py: float, viewport: ViewportGeometry) -> Tuple[float, float]:
        """Image-relative pixels to image data coordinates."""
        width, height = self.image_size
        return px / viewport.width * width, py / viewport.height * height

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def refresh(self):
        """Redraw the overlay from the session's current projection."""
        for artist in self._overlay_artists:
            artist.remove()
        self._overlay_artists = []

        if self.session.tracker.is_ready():
            viewport = self.session.tracker.current()
            for box in self.session.overlay(viewport):
                self._draw_box(box, viewport)
            preview = self.session.controller.preview_rect()
            if preview is not None:
                self._draw_preview(preview, viewport)

        self.ax.set_title(self._status_text())
        self.canvas.draw_idle()

    def _status_text(self) -> str:
        stats = self.session.get_session_statistics()
        text = f"{self.config['figure']['title']} ({stats['labelled']}/{stats['total']} labelled)"
        selected = self.session.selected
        if selected is not None and selected.suggested_label and not selected.verified:
            text += f" - suggestion: {selected.suggested_label} (enter to accept)"
        return text

    def _rectangle(self, rect: PixelRect, viewport: ViewportGeometry, **kwargs) -> Rectangle:
        x0, y0 = self._to_data(rect.left, rect.top, viewport)
        x1, y1 = self._to_data(rect.right, rect.bottom, viewport)
        patch = Rectangle((x0, y0), x1 - x0, y1 - y0, **kwargs)
        self.ax.add_patch(patch)
        self._overlay_artists.append(patch)
        return patch

    def _draw_box(self, box: ProjectedBox, viewport: ViewportGeometry):
        box_config = self.config['boxes']
        if box.selected:
            color = self.colors['selected']
        elif box.origin == AnnotationOrigin.DETECTED:
            color = self.colors['detected']
        else:
            color = self.colors['user_drawn']

        self._rectangle(
            box.rect, viewport,
            edgecolor=color,
            facecolor=to_rgba(color, box_config['fill_alpha']),
            linewidth=box_config['selected_linewidth'] if box.selected else box_config['linewidth'],
            alpha=box_config['alpha'],
            zorder=box_config['z_order'],
        )

        handle_config = self.config['handles']
        for handle in box.handles:
            self._rectangle(
                PixelRect(handle.x, handle.y, handle.size, handle.size), viewport,
                edgecolor=self.colors['handle_edge'],
                facecolor=self.colors['handle'],
                linewidth=handle_config['linewidth'],
                alpha=handle_config['alpha'],
                zorder=handle_config['z_order'],
            )

        label_config = self.config['labels']
        tx, ty = self._to_data(box.rect.left + label_config['offset_px'],
                               box.rect.top + label_config['offset_px'], viewport)
        text = box.display_name if box.label else f"{box.display_name} {label_config['unlabelled_text']}"
        artist = self.ax.text(
            tx, ty, text,
            color=self.colors['text'],
            fontsize=label_config['font_size'],
            fontfamily=label_config['font_family'],
            va='top', ha='left',
            zorder=label_config['z_order'],
            bbox=dict(facecolor=label_config['background_color'],
                      alpha=label_config['background_alpha'],
                      edgecolor='none', pad=1.5),
        )
        self._overlay_artists.append(artist)

    def _draw_preview(self, rect: PixelRect, viewport: ViewportGeometry):
        box_config = self.config['boxes']
        self._rectangle(
            rect, viewport,
            edgecolor=self.colors['drawing'],
            facecolor='none',
            linewidth=box_config['linewidth'],
            linestyle=box_config['preview_linestyle'],
            zorder=box_config['z_order'],
        )

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------
    def _on_mouse_press(self, event):
        if event.button != 1:
            return
        toolbar = getattr(self.canvas, 'toolbar', None)
        if toolbar is not None and getattr(toolbar, 'mode', ''):
            # Pan / zoom tool owns the pointer
            return
        x, y = container_point(self.canvas, event)
        self.session.pointer_down(x, y)
        self.refresh()

    def _on_resize(self, event):
        self.session.handle_resize()
        self.refresh()

    def _on_key_press(self, event):
        if self.session.is_closed:
            return
        key = event.key
        if key == 'escape':
            if not self.session.controller.cancel("escape pressed"):
                self.session.clear_selection()
        elif key in ('delete', 'backspace'):
            removed = self.session.remove_selected()
            if removed is not None:
                logger.info(f"Removed annotation {removed.id} from keyboard")
        elif key == 'enter':
            selected = self.session.selected
            if selected is not None and selected.suggested_label:
                self.session.accept_suggestion(selected.id)
        else:
            return
        self.refresh()

    def _on_overlay_changed(self, *args):
        if not self._closed:
            self.refresh()

    def _on_annotations_changed(self, entities):
        # Store writes made by an active gesture are redrawn through its gesture_* callbacks
        if not self.session.controller.is_active:
            self._on_overlay_changed()

    def _on_close(self, event):
        self.teardown()

    def add_close_callback(self, callback: Callable):
        """Call callback with the finalized annotations once the window closes."""
        self.session.add_callback('session_completed', callback)

    def teardown(self):
        """Disconnect from the canvas and complete the session."""
        if self._closed:
            return
        self._closed = True
        for cid in self._connection_ids:
            self.canvas.mpl_disconnect(cid)
        self._connection_ids = []
        if not self.session.is_closed:
            self.session.finalize()
        logger.info("AnnotationEditorView closed")
