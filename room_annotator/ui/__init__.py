"""
UI Components Package for the Annotation Editor
This package binds annotation sessions to matplotlib figures.
"""

from .editor_view import (
    AnnotationEditorView,
    CanvasEventSource,
    container_point,
    load_image,
)

__all__ = [
    'AnnotationEditorView',
    'CanvasEventSource',
    'container_point',
    'load_image',
]
