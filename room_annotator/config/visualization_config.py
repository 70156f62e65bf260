"""
Visualization Configuration Module
This module contains the colours and styles used to draw annotation overlays.
"""

import copy
import logging
from typing import Dict, Any

logger = logging.getLogger(__name__)

# Color Palettes
COLOR_PALETTES = {
    'default': {
        'detected': '#00BFFF',     # Deep sky blue (seeded by a detector)
        'user_drawn': '#00FF00',   # Green (drawn by hand)
        'selected': '#FFD700',     # Gold
        'drawing': '#FFFF00',      # Yellow preview while dragging out a box
        'handle': '#FFFFFF',
        'handle_edge': '#333333',
        'text': '#FFFFFF',
        'background': '#1e1e1e',
    },
    'high_contrast': {
        'detected': '#00FFFF',
        'user_drawn': '#00FF00',
        'selected': '#FF00FF',
        'drawing': '#FFFF00',
        'handle': '#FFFFFF',
        'handle_edge': '#000000',
        'text': '#FFFFFF',
        'background': '#000000',
    },
}

# Box Visualization Configuration
BOX_VISUALIZATION = {
    'linewidth': 2.0,
    'selected_linewidth': 3.0,
    'alpha': 0.9,
    'fill_alpha': 0.08,
    'preview_linestyle': '--',
    'z_order': 5,
}

# Handle Visualization Configuration
HANDLE_VISUALIZATION = {
    'linewidth': 1.0,
    'alpha': 1.0,
    'z_order': 7,
}

# Label Configuration
LABEL_CONFIG = {
    'font_family': 'sans-serif',
    'font_size': 8,
    'background_color': 'black',
    'background_alpha': 0.6,
    'offset_px': 4,
    'unlabelled_text': '?',
    'z_order': 6,
}

# Figure Configuration
FIGURE_CONFIG = {
    'figsize': (10, 7),
    'dpi': 100,
    'interpolation': 'bilinear',
    'title': 'Annotate objects',
}

VISUALIZATION_PRESETS = {
    'default': {
        'colors': COLOR_PALETTES['default'],
        'boxes': BOX_VISUALIZATION,
        'handles': HANDLE_VISUALIZATION,
        'labels': LABEL_CONFIG,
        'figure': FIGURE_CONFIG,
    },
    'accessibility': {
        'colors': COLOR_PALETTES['high_contrast'],
        'boxes': {**BOX_VISUALIZATION, 'linewidth': 3.0, 'selected_linewidth': 4.0},
        'handles': HANDLE_VISUALIZATION,
        'labels': {**LABEL_CONFIG, 'font_size': 12},
        'figure': FIGURE_CONFIG,
    },
}


def get_visualization_config(preset: str = 'default', **overrides) -> Dict[str, Any]:
    """
    Get visualization configuration with preset and overrides.

    Args:
        preset: Name of the preset configuration
        **overrides: Configuration overrides

    Returns:
        Complete visualization configuration dictionary
    """
    if preset not in VISUALIZATION_PRESETS:
        logger.warning(f"Unknown visualization preset '{preset}', using 'default'")
        preset = 'default'

    config = copy.deepcopy(VISUALIZATION_PRESETS[preset])

    for key, value in overrides.items():
        if key in config and isinstance(config[key], dict) and isinstance(value, dict):
            config[key].update(value)
        else:
            config[key] = copy.deepcopy(value)

    return config


def get_color_palette(palette_name: str = 'default') -> Dict[str, str]:
    """Get a specific color palette."""
    return dict(COLOR_PALETTES.get(palette_name, COLOR_PALETTES['default']))
