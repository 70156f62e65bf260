"""
Room Annotator Package
This package provides an interactive bounding-box editor for labelling objects on an image.

Boxes live in percent-space (0-100 of the rendered image box, centre based), so
they survive any resize of the display. Pixel geometry is derived from the
latest viewport measurement whenever it is needed and never stored.

## Package Structure

### Configuration (config/)
Settings with named presets and override merging.

- editor_config.py: geometry thresholds, interaction settings, label catalogue
- visualization_config.py: colours and box / handle / label styles

### Core Components (core/)
Geometry, state and gestures.

- coordinate_system.py: percent <-> pixel conversion and containment helpers
- viewport_tracker.py: measurement of the rendered image box
- annotation_store.py: canonical ordered annotations
- resize_handles.py: the eight handles and their edge arithmetic
- interaction_handler.py: draw / move / resize gesture state machine
- render_projector.py: pixel overlay derived from the store

### Business Logic (business/)

- seed_loader.py: detector output and plan metadata parsing
- annotation_session.py: one editing session, seeds in, finalized annotations out

### UI Components (ui/)

- editor_view.py: matplotlib binding

### Utilities (utils/)

- error_handling.py: exception taxonomy and handled-condition recording

## Usage

```python
from room_annotator import AnnotationSession, AnnotationEditorView

session = AnnotationSession(seeds=[{'id': 'd1', 'x': 40, 'y': 55, 'width': 20, 'height': 15}])
view = AnnotationEditorView(session, "bedroom.png")
session.add_callback('session_completed', print)
```
"""

# Main components
from .core import (
    CoordinateTransformer,
    ViewportTracker,
    AnnotationStore,
    GestureController,
    RenderProjector,
)
from .business import AnnotationSession, load_seeds, load_seed_file
from .ui import AnnotationEditorView, CanvasEventSource
from .utils import ErrorHandlingSystem

# Configuration
from .config import get_editor_config, get_visualization_config, get_object_types

# Types and Enums
from .core import (
    Rect,
    PixelRect,
    ViewportGeometry,
    AnnotationEntity,
    AnnotationOrigin,
    FinalizedAnnotation,
    ResizeHandle,
    GestureKind,
    ProjectedBox,
    ProjectedHandle,
)
from .business import SeedBox, SeedLoadReport, SessionStatus
from .utils import (
    AnnotationError,
    InvariantViolationError,
    DegenerateViewportError,
    AnnotationNotFoundError,
    InvalidLabelError,
    SessionClosedError,
    SeedFormatError,
    ErrorSeverity,
    ErrorCategory,
)

__version__ = "1.0.0"

__all__ = [
    # Core Components
    'CoordinateTransformer',
    'ViewportTracker',
    'AnnotationStore',
    'GestureController',
    'RenderProjector',

    # Business Logic
    'AnnotationSession',
    'load_seeds',
    'load_seed_file',

    # UI Components
    'AnnotationEditorView',
    'CanvasEventSource',

    # Utilities
    'ErrorHandlingSystem',

    # Configuration
    'get_editor_config',
    'get_visualization_config',
    'get_object_types',

    # Types and Enums
    'Rect',
    'PixelRect',
    'ViewportGeometry',
    'AnnotationEntity',
    'AnnotationOrigin',
    'FinalizedAnnotation',
    'ResizeHandle',
    'GestureKind',
    'ProjectedBox',
    'ProjectedHandle',
    'SeedBox',
    'SeedLoadReport',
    'SessionStatus',

    # Exceptions
    'AnnotationError',
    'InvariantViolationError',
    'DegenerateViewportError',
    'AnnotationNotFoundError',
    'InvalidLabelError',
    'SessionClosedError',
    'SeedFormatError',
    'ErrorSeverity',
    'ErrorCategory',
]
