"""
Core Components Package for the Annotation Editor
This package provides geometry, state and gesture handling for the editor.
"""

from .coordinate_system import (
    CoordinateTransformer,
    Rect,
    PixelRect,
    ViewportGeometry,
    PERCENT_SCALE,
)
from .viewport_tracker import ViewportTracker
from .annotation_store import (
    AnnotationStore,
    AnnotationEntity,
    AnnotationOrigin,
    FinalizedAnnotation,
)
from .resize_handles import ResizeHandle, HANDLE_CURSORS, resize_pixel_rect
from .render_projector import (
    RenderProjector,
    ProjectedBox,
    ProjectedHandle,
    display_name,
)
from .interaction_handler import (
    GestureController,
    GestureKind,
    GestureState,
    Idle,
    Drawing,
    Dragging,
    Resizing,
    ListenerScope,
    PointerEventSource,
    NullEventSource,
)

__all__ = [
    # Coordinate System
    'CoordinateTransformer',
    'Rect',
    'PixelRect',
    'ViewportGeometry',
    'PERCENT_SCALE',

    # Viewport Tracking
    'ViewportTracker',

    # Annotation Store
    'AnnotationStore',
    'AnnotationEntity',
    'AnnotationOrigin',
    'FinalizedAnnotation',

    # Resize Handles
    'ResizeHandle',
    'HANDLE_CURSORS',
    'resize_pixel_rect',

    # Render Projection
    'RenderProjector',
    'ProjectedBox',
    'ProjectedHandle',
    'display_name',

    # Gesture Handling
    'GestureController',
    'GestureKind',
    'GestureState',
    'Idle',
    'Drawing',
    'Dragging',
    'Resizing',
    'ListenerScope',
    'PointerEventSource',
    'NullEventSource',
]
