"""
Configuration Package for the Annotation Editor
This package provides centralized configuration management for all editor components.
"""

from .editor_config import (
    get_editor_config,
    get_object_types,
    DEFAULT_EDITOR_CONFIG,
    EDITOR_PRESETS,
    OBJECT_TYPES,
)

from .visualization_config import (
    get_visualization_config,
    get_color_palette,
    VISUALIZATION_PRESETS,
    COLOR_PALETTES,
)

__all__ = [
    # Editor Configuration
    'get_editor_config',
    'get_object_types',
    'DEFAULT_EDITOR_CONFIG',
    'EDITOR_PRESETS',
    'OBJECT_TYPES',

    # Visualization Configuration
    'get_visualization_config',
    'get_color_palette',
    'VISUALIZATION_PRESETS',
    'COLOR_PALETTES',
]
