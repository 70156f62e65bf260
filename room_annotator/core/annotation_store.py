"""
Annotation Store Component
This module holds the canonical, ordered collection of annotations in percent-space.
"""

import logging
from typing import Dict, List, Optional, Callable, Tuple, Any
from dataclasses import dataclass, replace
from enum import Enum
from itertools import count

from .coordinate_system import Rect, CoordinateTransformer
from ..utils.error_handling import InvariantViolationError, AnnotationNotFoundError

logger = logging.getLogger(__name__)


class AnnotationOrigin(Enum):
    """Where an annotation came from."""
    DETECTED = "detected"
    USER_DRAWN = "user-drawn"


@dataclass(frozen=True)
class AnnotationEntity:
    """A labelled rectangular region of the image."""
    id: int
    geometry: Rect
    origin: AnnotationOrigin
    label: Optional[str] = None
    source_reference: Optional[str] = None
    suggested_label: Optional[str] = None
    verified: bool = False
    modified: bool = False


@dataclass(frozen=True)
class FinalizedAnnotation:
    """Read-only record handed to the caller when a session completes."""
    id: int
    label: Optional[str]
    geometry: Rect
    origin: AnnotationOrigin
    source_reference: Optional[str] = None
    bbox_natural: Optional[Tuple[float, float, float, float]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            'id': self.id,
            'label': self.label,
            'geometry': self.geometry.to_dict(),
            'origin': self.origin.value,
            'source_reference': self.source_reference,
            'bbox_natural': list(self.bbox_natural) if self.bbox_natural else None,
        }


class AnnotationStore:
    """
    Ordered collection of AnnotationEntity keyed by id.

    Order is insertion order and survives updates; removal never renumbers
    the remaining entries. Ids come from a monotonic counter and are never
    reused within the store's lifetime. Geometry written to the store must
    already satisfy the containment invariant: the store validates and
    rejects, it does not clamp.
    """

    def __init__(self, tolerance: float = 1e-9):
        self.tolerance = tolerance
        self._entities: Dict[int, AnnotationEntity] = {}
        self._ids = count(1)

        self.callbacks: Dict[str, List[Callable]] = {
            'entity_added': [],
            'geometry_changed': [],
            'label_changed': [],
            'entity_removed': [],
        }

    def _validate(self, rect: Rect):
        if not CoordinateTransformer.is_contained(rect, self.tolerance):
            raise InvariantViolationError(f"Rectangle violates containment: {rect}")

    def _require(self, entity_id: int) -> AnnotationEntity:
        try:
            return self._entities[entity_id]
        except KeyError:
            raise AnnotationNotFoundError(f"No annotation with id {entity_id}") from None

    def insert(self, rect: Rect, label: Optional[str] = None,
               origin: AnnotationOrigin = AnnotationOrigin.USER_DRAWN,
               source_reference: Optional[str] = None,
               suggested_label: Optional[str] = None) -> AnnotationEntity:
        """
        Insert a new annotation.

        Args:
            rect: Geometry in percent-space, must satisfy containment
            label: Initial label, usually unset
            origin: DETECTED for seeded boxes, USER_DRAWN for drawn ones
            source_reference: External id of the seed this box came from
            suggested_label: Label proposed by a detector, pending confirmation

        Returns:
            The stored entity with its newly assigned id

        Raises:
            InvariantViolationError: If rect is not fully contained
        """
        self._validate(rect)
        entity = AnnotationEntity(
            id=next(self._ids),
            geometry=rect,
            origin=origin,
            label=label,
            source_reference=source_reference,
            suggested_label=suggested_label,
            verified=label is not None,
        )
        self._entities[entity.id] = entity
        logger.debug(f"Inserted annotation {entity.id} ({origin.value}) at {rect}")
        self._trigger_callbacks('entity_added', entity)
        return entity

    def update_geometry(self, entity_id: int, rect: Rect) -> AnnotationEntity:
        """
        Replace an annotation's geometry.

        Raises:
            InvariantViolationError: If rect is not fully contained
            AnnotationNotFoundError: If the id is unknown
        """
        self._validate(rect)
        entity = self._require(entity_id)
        if entity.geometry == rect:
            return entity
        updated = replace(entity, geometry=rect, modified=True)
        self._entities[entity_id] = updated
        self._trigger_callbacks('geometry_changed', updated)
        return updated

    def update_label(self, entity_id: int, label: Optional[str],
                     verified: Optional[bool] = None) -> AnnotationEntity:
        """
        Replace an annotation's label.

        Args:
            entity_id: Annotation to update
            label: New label, or None to unset it
            verified: Explicit verification state; defaults to "label is set"

        Raises:
            AnnotationNotFoundError: If the id is unknown
        """
        entity = self._require(entity_id)
        updated = replace(entity, label=label,
                          verified=(label is not None) if verified is None else verified)
        self._entities[entity_id] = updated
        self._trigger_callbacks('label_changed', updated)
        return updated

    def remove(self, entity_id: int) -> AnnotationEntity:
        """
        Remove an annotation.

        Returns:
            The removed entity

        Raises:
            AnnotationNotFoundError: If the id is unknown
        """
        entity = self._require(entity_id)
        del self._entities[entity_id]
        logger.debug(f"Removed annotation {entity_id}")
        self._trigger_callbacks('entity_removed', entity)
        return entity

    def get(self, entity_id: int) -> AnnotationEntity:
        """Get an annotation by id."""
        return self._require(entity_id)

    def contains(self, entity_id: int) -> bool:
        return entity_id in self._entities

    def all(self) -> Tuple[AnnotationEntity, ...]:
        """Get all annotations in insertion order."""
        return tuple(self._entities.values())

    def snapshot(self, viewport=None) -> List[FinalizedAnnotation]:
        """
        Build the read-only finalized list, in insertion order.

        Args:
            viewport: Optional ViewportGeometry; when it carries the image's
                natural size, each record also gets its natural-pixel bounds
        """
        records = []
        for entity in self._entities.values():
            bbox_natural = None
            if viewport is not None and viewport.natural_width and viewport.natural_height:
                bbox_natural = CoordinateTransformer.to_natural_pixels(entity.geometry, viewport)
            records.append(FinalizedAnnotation(
                id=entity.id,
                label=entity.label,
                geometry=entity.geometry,
                origin=entity.origin,
                source_reference=entity.source_reference,
                bbox_natural=bbox_natural,
            ))
        return records

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self):
        return iter(self.all())

    def add_callback(self, event_type: str, callback: Callable):
        """
        Add a callback for a specific event type.

        Args:
            event_type: One of 'entity_added', 'geometry_changed',
                'label_changed', 'entity_removed'
            callback: Callback called with the affected entity
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
