"""
Interaction Handler Component
This module turns raw pointer events into draw / move / resize gestures.

The GestureController is a state machine with exactly one state active at a
time: Idle, Drawing, Dragging or Resizing. Pointer-down classifies the gesture
by hit testing (handles, then box bodies, then empty image area); pointer-move
updates geometry; pointer-up commits and returns to Idle. Every non-idle state
freezes the viewport snapshot taken at gesture start.

Global move/up/leave listeners exist only while a gesture is active: each
gesture owns a ListenerScope that is released on every exit path.
"""

import logging
from typing import Optional, Tuple, Callable, Dict, Any, List, Union
from dataclasses import dataclass, replace
from enum import Enum

from .coordinate_system import CoordinateTransformer, Rect, PixelRect, ViewportGeometry
from .viewport_tracker import ViewportTracker
from .annotation_store import AnnotationStore, AnnotationEntity, AnnotationOrigin
from .resize_handles import ResizeHandle, resize_pixel_rect
from .render_projector import RenderProjector
from ..config import get_editor_config
from ..utils.error_handling import ErrorHandlingSystem, ErrorCategory, ErrorContext, ErrorSeverity

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class GestureKind(Enum):
    """Gesture kinds, one per state."""
    IDLE = "idle"
    DRAWING = "drawing"
    DRAGGING = "dragging"
    RESIZING = "resizing"


@dataclass(frozen=True)
class Idle:
    kind = GestureKind.IDLE


@dataclass(frozen=True)
class Drawing:
    """A new box being dragged out; image-relative pixel corners."""
    start_pixel: Point
    current_pixel: Point
    viewport: ViewportGeometry
    kind = GestureKind.DRAWING


@dataclass(frozen=True)
class Dragging:
    """An existing box being translated; pointer start is container-relative."""
    target_id: int
    pointer_start_pixel: Point
    box_start_percent: Rect
    viewport: ViewportGeometry
    kind = GestureKind.DRAGGING


@dataclass(frozen=True)
class Resizing:
    """An existing box being resized from one handle."""
    target_id: int
    handle: ResizeHandle
    pointer_start_pixel: Point
    box_start_percent: Rect
    viewport: ViewportGeometry
    kind = GestureKind.RESIZING


GestureState = Union[Idle, Drawing, Dragging, Resizing]
IDLE = Idle()


class PointerEventSource:
    """
    Host of the global (document-level) pointer listeners.

    Display layers subclass this; the callbacks receive container-relative
    pixel coordinates (on_leave receives nothing).
    """

    def subscribe(self, on_move: Callable[[float, float], None],
                  on_up: Callable[[float, float], None],
                  on_leave: Callable[[], None]) -> Any:
        raise NotImplementedError

    def unsubscribe(self, token: Any):
        raise NotImplementedError


class NullEventSource(PointerEventSource):
    """Event source for callers that forward every pointer event themselves."""

    def __init__(self):
        self.active_subscriptions = 0

    def subscribe(self, on_move, on_up, on_leave):
        self.active_subscriptions += 1
        return self.active_subscriptions

    def unsubscribe(self, token):
        self.active_subscriptions -= 1


class ListenerScope:
    """
    Registration of the global move/up/leave listeners for one gesture.
    Acquired on construction, released exactly once.
    """

    def __init__(self, source: PointerEventSource,
                 on_move: Callable[[float, float], None],
                 on_up: Callable[[float, float], None],
                 on_leave: Callable[[], None]):
        self._source = source
        self._token = source.subscribe(on_move, on_up, on_leave)
        self.active = True

    def release(self):
        if not self.active:
            return
        self.active = False
        self._source.unsubscribe(self._token)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False


class GestureController:
    """
    Gesture state machine over an AnnotationStore and a ViewportTracker.
    """

    def __init__(self, store: AnnotationStore, tracker: ViewportTracker,
                 projector: Optional[RenderProjector] = None,
                 event_source: Optional[PointerEventSource] = None,
                 config: Dict[str, Any] = None,
                 error_handler: Optional[ErrorHandlingSystem] = None):
        """
        Initialize the gesture controller.

        Args:
            store: Annotation store the gestures mutate
            tracker: Viewport tracker providing the geometry snapshots
            projector: Projector used for hit testing; built from config if omitted
            event_source: Host of the per-gesture global listeners
            config: Editor configuration overrides
            error_handler: Recorder for handled conditions
        """
        self.store = store
        self.tracker = tracker
        self.config = get_editor_config('default', **(config or {}))
        self.event_source = event_source or NullEventSource()
        self.error_handler = error_handler or ErrorHandlingSystem(self.config.get('session'))

        geometry_config = self.config['geometry']
        interaction_config = self.config['interaction']
        self.min_draw_size = geometry_config['min_draw_size_px']
        self.min_resize_size = geometry_config['min_resize_size_px']
        self.handle_slop = interaction_config['handle_hit_slop_px']
        self.commit_on_move = interaction_config['commit_on_move']
        self.select_after_draw = interaction_config['select_after_draw']

        self.projector = projector or RenderProjector(
            handle_size=interaction_config['handle_size_px'],
            handles_for_all=interaction_config['handles_for_all'],
        )

        # Gesture state
        self._state: GestureState = IDLE
        self._scope: Optional[ListenerScope] = None
        self._scratch: Optional[Rect] = None
        self._selected_id: Optional[int] = None
        self._closed = False

        self.callbacks: Dict[str, List[Callable]] = {
            'gesture_started': [],
            'gesture_updated': [],
            'gesture_ended': [],
            'gesture_cancelled': [],
            'selection_changed': [],
        }

        self.store.add_callback('entity_removed', self._on_entity_removed)
        self.tracker.add_callback('viewport_changed', self._on_viewport_changed)

    # ------------------------------------------------------------------
    # State inspection
    # ------------------------------------------------------------------
    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state.kind != GestureKind.IDLE

    @property
    def selected_id(self) -> Optional[int]:
        return self._selected_id

    @property
    def live_geometry(self) -> Optional[Rect]:
        """Geometry computed by the last move of the active drag or resize."""
        return self._scratch

    @property
    def listeners_attached(self) -> bool:
        return self._scope is not None and self._scope.active

    def set_event_source(self, event_source: PointerEventSource):
        """Replace the listener host; takes effect from the next gesture."""
        if self.is_active:
            self.cancel("event source replaced")
        self.event_source = event_source

    def preview_rect(self) -> Optional[PixelRect]:
        """Unclamped image-relative rectangle of an in-progress draw."""
        if isinstance(self._state, Drawing):
            return PixelRect.from_corners(self._state.start_pixel, self._state.current_pixel)
        return None

    def live_entities(self) -> Tuple[AnnotationEntity, ...]:
        """Store contents with the unflushed scratch geometry applied."""
        entities = self.store.all()
        target_id = getattr(self._state, 'target_id', None)
        if self._scratch is None or target_id is None:
            return entities
        return tuple(
            replace(entity, geometry=self._scratch) if entity.id == target_id else entity
            for entity in entities
        )

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def select(self, entity_id: Optional[int]):
        """Select an annotation (or clear the selection with None)."""
        if entity_id is not None and not self.store.contains(entity_id):
            logger.warning(f"Cannot select unknown annotation {entity_id}")
            return
        if entity_id != self._selected_id:
            self._selected_id = entity_id
            self._trigger_callbacks('selection_changed', entity_id)

    def clear_selection(self):
        self.select(None)

    # ------------------------------------------------------------------
    # Pointer input
    # ------------------------------------------------------------------
    def pointer_down(self, x: float, y: float) -> GestureKind:
        """
        Start a gesture at a container-relative pointer position.

        Handles of rendered boxes win over box bodies, and bodies win over
        empty image area. Ignored while a gesture is active, before the
        viewport is ready, or after teardown.

        Returns:
            Kind of the gesture now active
        """
        if self._closed or self.is_active:
            return self._state.kind
        if not self.tracker.is_ready():
            logger.debug("Pointer down ignored: viewport not ready")
            return GestureKind.IDLE

        viewport = self.tracker.current()
        ix, iy = CoordinateTransformer.to_image_point(x, y, viewport)
        boxes = self.projector.project(self.store.all(), viewport, self._selected_id)

        handle_hit = self.projector.hit_test_handle(boxes, ix, iy, self.handle_slop)
        if handle_hit is not None:
            box, handle = handle_hit
            self.select(box.entity_id)
            self._begin(Resizing(
                target_id=box.entity_id,
                handle=handle.handle,
                pointer_start_pixel=(x, y),
                box_start_percent=self.store.get(box.entity_id).geometry,
                viewport=viewport,
            ))
            return self._state.kind

        body_hit = self.projector.hit_test_body(boxes, ix, iy)
        if body_hit is not None:
            self.select(body_hit.entity_id)
            self._begin(Dragging(
                target_id=body_hit.entity_id,
                pointer_start_pixel=(x, y),
                box_start_percent=self.store.get(body_hit.entity_id).geometry,
                viewport=viewport,
            ))
            return self._state.kind

        self.clear_selection()
        if viewport.contains_point(ix, iy):
            self._begin(Drawing(start_pixel=(ix, iy), current_pixel=(ix, iy), viewport=viewport))
        return self._state.kind

    def pointer_move(self, x: float, y: float):
        """Advance the active gesture to a container-relative pointer position."""
        state = self._state
        if isinstance(state, Drawing):
            current = CoordinateTransformer.to_image_point(x, y, state.viewport)
            self._state = replace(state, current_pixel=current)
            self._trigger_callbacks('gesture_updated', self._state)
        elif isinstance(state, (Dragging, Resizing)):
            if not self.store.contains(state.target_id):
                self._cancel_stale(state.target_id)
                return
            rect = self._drag_geometry(state, x, y) if isinstance(state, Dragging) \
                else self._resize_geometry(state, x, y)
            self._scratch = rect
            logger.debug(f"Annotation {state.target_id} {state.kind.value} to {rect}")
            if self.commit_on_move:
                self.store.update_geometry(state.target_id, rect)
            self._trigger_callbacks('gesture_updated', self._state)

    def pointer_up(self, x: float, y: float):
        """Finish the active gesture at a container-relative pointer position."""
        if not self.is_active:
            return
        self.pointer_move(x, y)
        state = self._state
        if isinstance(state, Drawing):
            self._commit_draw(state)
        elif isinstance(state, (Dragging, Resizing)):
            if self._scratch is not None and not self.commit_on_move:
                self.store.update_geometry(state.target_id, self._scratch)
        else:
            # Cancelled by the final move
            return
        self._end('gesture_ended', state)

    def pointer_leave(self):
        """The pointer left the tracked container: abandon the gesture."""
        if not self.is_active:
            return
        self.error_handler.record(
            ErrorCategory.GESTURE,
            f"Pointer left the container during a {self._state.kind.value} gesture",
            ErrorContext("GestureController", "pointer_leave"),
            severity=ErrorSeverity.INFO,
        )
        self.cancel("pointer left container")

    def cancel(self, reason: str = "cancelled") -> bool:
        """
        Cancel the active gesture. A draw is discarded; a drag or resize keeps
        the geometry last committed to the store and drops unflushed scratch.

        Returns:
            True if a gesture was cancelled
        """
        if not self.is_active:
            return False
        state = self._state
        logger.info(f"{state.kind.value} gesture cancelled: {reason}")
        self._end('gesture_cancelled', state)
        return True

    def teardown(self):
        """Cancel any gesture, release listeners and detach from store and tracker."""
        self.cancel("teardown")
        self._closed = True
        self.store.remove_callback('entity_removed', self._on_entity_removed)
        self.tracker.remove_callback('viewport_changed', self._on_viewport_changed)
        logger.debug("GestureController torn down")

    # ------------------------------------------------------------------
    # Gesture lifecycle
    # ------------------------------------------------------------------
    def _begin(self, state: GestureState):
        self._state = state
        target_id = getattr(state, 'target_id', None)
        self._scratch = self.store.get(target_id).geometry if target_id is not None else None
        self._scope = ListenerScope(self.event_source, self.pointer_move, self.pointer_up, self.pointer_leave)
        logger.debug(f"{state.kind.value} gesture started")
        self._trigger_callbacks('gesture_started', state)

    def _end(self, event_type: str, state: GestureState):
        scope, self._scope = self._scope, None
        self._state = IDLE
        self._scratch = None
        try:
            if scope is not None:
                scope.release()
        finally:
            self._trigger_callbacks(event_type, state)

    def _commit_draw(self, state: Drawing):
        pixel_rect = PixelRect.from_corners(state.start_pixel, state.current_pixel)
        if pixel_rect.width <= self.min_draw_size or pixel_rect.height <= self.min_draw_size:
            logger.debug(f"Drawn box {pixel_rect.width:.1f}x{pixel_rect.height:.1f}px discarded as too small")
            return
        # Keeps the drawn size and shifts the box inside the image, as a drag does
        rect = CoordinateTransformer.clamp_rect(CoordinateTransformer.to_percent(pixel_rect, state.viewport))
        entity = self.store.insert(rect, origin=AnnotationOrigin.USER_DRAWN)
        logger.info(f"Annotation {entity.id} drawn at {rect}")
        if self.select_after_draw:
            self.select(entity.id)

    def _pointer_delta(self, state: Union[Dragging, Resizing], x: float, y: float) -> Point:
        sx, sy = state.pointer_start_pixel
        return x - sx, y - sy

    def _drag_geometry(self, state: Dragging, x: float, y: float) -> Rect:
        dx, dy = self._pointer_delta(state, x, y)
        start = CoordinateTransformer.to_pixels(state.box_start_percent, state.viewport)
        moved = CoordinateTransformer.to_percent(
            PixelRect(start.x + dx, start.y + dy, start.width, start.height), state.viewport)
        # Size is unchanged during a drag; only the centre moves
        return CoordinateTransformer.clamp_rect(Rect(
            x=moved.x,
            y=moved.y,
            width=state.box_start_percent.width,
            height=state.box_start_percent.height,
        ))

    def _resize_geometry(self, state: Resizing, x: float, y: float) -> Rect:
        dx, dy = self._pointer_delta(state, x, y)
        start = CoordinateTransformer.to_pixels(state.box_start_percent, state.viewport)
        resized = resize_pixel_rect(start, state.handle, dx, dy, state.viewport, self.min_resize_size)
        return CoordinateTransformer.clamp_rect(CoordinateTransformer.to_percent(resized, state.viewport))

    # ------------------------------------------------------------------
    # External changes
    # ------------------------------------------------------------------
    def _cancel_stale(self, target_id: int):
        self.error_handler.record(
            ErrorCategory.STALE_TARGET,
            f"Annotation {target_id} was removed during a gesture",
            ErrorContext("GestureController", self._state.kind.value, {'target_id': target_id}),
        )
        self.cancel(f"target {target_id} removed")

    def _on_entity_removed(self, entity: AnnotationEntity):
        if getattr(self._state, 'target_id', None) == entity.id:
            self._cancel_stale(entity.id)
        if self._selected_id == entity.id:
            self.clear_selection()

    def _on_viewport_changed(self, old: Optional[ViewportGeometry], new: ViewportGeometry):
        if self.is_active:
            self.error_handler.record(
                ErrorCategory.VIEWPORT,
                f"Viewport changed during a {self._state.kind.value} gesture",
                ErrorContext("GestureController", "viewport_changed"),
                severity=ErrorSeverity.INFO,
            )
            self.cancel("viewport changed")

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------
    def add_callback(self, event_type: str, callback: Callable):
        """
        Add a callback for a specific event type.

        Args:
            event_type: Type of event ('gesture_started', 'gesture_updated',
                'gesture_ended', 'gesture_cancelled', 'selection_changed')
            callback: Callback function to call
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
                self.error_handler.record(
                    ErrorCategory.CALLBACK, f"{event_type} listener failed: {e}",
                    ErrorContext("GestureController", event_type), severity=ErrorSeverity.ERROR, exception=e,
                )
