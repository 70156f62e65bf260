"""
Editor Configuration Module
This module contains the geometry and interaction settings of the bounding-box editor.
"""

import copy
import logging
from typing import Dict, Any, List

logger = logging.getLogger(__name__)

# Geometry Configuration (pixels are measured in the rendered image box)
GEOMETRY_CONFIG = {
    'min_draw_size_px': 10,       # A drawn box must exceed this on both axes
    'min_resize_size_px': 20,     # A resized box never shrinks below this per axis
    'default_box_size_percent': 10.0,
    'containment_tolerance': 1e-9,
    'round_trip_tolerance': 1e-6,
}

# Interaction Configuration
INTERACTION_CONFIG = {
    'handle_size_px': 8,          # Side of the square resize handle
    'handle_hit_slop_px': 2,      # Extra grab margin around each handle
    'handles_for_all': False,     # Show handles on every box, not just the selected one
    'commit_on_move': True,       # Flush the scratch geometry to the store on every move
    'select_after_draw': True,
}

# Object types offered for labelling
OBJECT_TYPES: List[str] = [
    "bed",
    "desk",
    "chair",
    "sofa",
    "table",
    "dresser",
    "nightstand",
    "bookshelf",
    "wardrobe",
    "cabinet",
    "lamp",
    "rug",
    "mirror",
    "tv_stand",
    "ottoman",
]

# Session Configuration
SESSION_CONFIG = {
    'max_error_history': 100,
    'display_name_prefix': 'object',
}

DEFAULT_EDITOR_CONFIG = {
    'geometry': GEOMETRY_CONFIG,
    'interaction': INTERACTION_CONFIG,
    'session': SESSION_CONFIG,
    'object_types': OBJECT_TYPES,
}

EDITOR_PRESETS = {
    'default': DEFAULT_EDITOR_CONFIG,
    # Touch screens need bigger grab areas
    'touch': {
        **DEFAULT_EDITOR_CONFIG,
        'interaction': {**INTERACTION_CONFIG, 'handle_size_px': 16, 'handle_hit_slop_px': 6},
    },
    # Defer store writes to gesture end; the view previews the scratch geometry
    'deferred_commit': {
        **DEFAULT_EDITOR_CONFIG,
        'interaction': {**INTERACTION_CONFIG, 'commit_on_move': False},
    },
}


def get_editor_config(preset: str = 'default', **overrides) -> Dict[str, Any]:
    """
    Get editor configuration with preset and overrides.

    Args:
        preset: Name of the preset configuration
        **overrides: Configuration overrides; dictionaries are merged into
            the matching section, anything else replaces it

    Returns:
        Complete editor configuration dictionary
    """
    if preset not in EDITOR_PRESETS:
        logger.warning(f"Unknown editor preset '{preset}', using 'default'")
        preset = 'default'

    config = copy.deepcopy(EDITOR_PRESETS[preset])

    for key, value in overrides.items():
        if key in config and isinstance(config[key], dict) and isinstance(value, dict):
            config[key].update(value)
        else:
            config[key] = copy.deepcopy(value)

    return config


def get_object_types() -> List[str]:
    """Get the default label catalogue."""
    return list(OBJECT_TYPES)
