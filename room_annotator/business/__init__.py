"""
Business Logic Package for the Annotation Editor
This package provides seed loading and editing session orchestration.
"""

from .seed_loader import (
    SeedBox,
    SeedLoadReport,
    parse_seed_list,
    parse_bbox_px,
    parse_plan_metadata,
    load_seeds,
    load_seed_file,
)
from .annotation_session import (
    AnnotationSession,
    SessionStatus,
)

__all__ = [
    # Seed Loading
    'SeedBox',
    'SeedLoadReport',
    'parse_seed_list',
    'parse_bbox_px',
    'parse_plan_metadata',
    'load_seeds',
    'load_seed_file',

    # Session
    'AnnotationSession',
    'SessionStatus',
]
