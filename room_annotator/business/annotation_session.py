"""
Annotation Session Component
This module orchestrates one editing session over a single image.

A session owns the ViewportTracker, AnnotationStore, RenderProjector and
GestureController, seeds the store from detector output, exposes the label
operations a selection UI needs, and hands back the finalized annotations
when the user is done.
"""

import logging
from typing import Dict, List, Optional, Any, Callable, Iterable, Tuple, Union
from enum import Enum

from ..config import get_editor_config
from ..core.coordinate_system import CoordinateTransformer, Rect, ViewportGeometry, PERCENT_SCALE
from ..core.viewport_tracker import ViewportTracker, MeasureFn
from ..core.annotation_store import AnnotationStore, AnnotationEntity, AnnotationOrigin, FinalizedAnnotation
from ..core.render_projector import RenderProjector, ProjectedBox
from ..core.interaction_handler import GestureController, GestureKind, PointerEventSource
from ..utils.error_handling import (
    ErrorHandlingSystem,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    InvalidLabelError,
    SessionClosedError,
)
from .seed_loader import SeedBox, SeedLoadReport, load_seeds

logger = logging.getLogger(__name__)

SeedInput = Union[SeedLoadReport, Iterable[SeedBox], Dict[str, Any], List[Dict[str, Any]]]


class SessionStatus(Enum):
    """Annotation session states."""
    ACTIVE = "active"
    COMPLETED = "completed"


class AnnotationSession:
    """
    One editing session: seeds in, finalized annotations out.
    """

    def __init__(self, seeds: Optional[SeedInput] = None, config: Dict[str, Any] = None,
                 event_source: Optional[PointerEventSource] = None,
                 natural_size: Optional[Tuple[float, float]] = None,
                 preset: str = 'default'):
        """
        Initialize the annotation session.

        Args:
            seeds: Seed boxes, a SeedLoadReport, or a raw seed document
            config: Editor configuration overrides, or a full editor configuration
            event_source: Host of the per-gesture global pointer listeners
            natural_size: Natural (width, height) of the image, needed for
                detector output given in image pixels
            preset: Name of the editor configuration preset
        """
        self.config = get_editor_config(preset, **(config or {}))
        self.status = SessionStatus.ACTIVE
        self.error_handler = ErrorHandlingSystem(self.config['session'])

        interaction_config = self.config['interaction']
        self.tracker = ViewportTracker()
        self.store = AnnotationStore(tolerance=self.config['geometry']['containment_tolerance'])
        self.projector = RenderProjector(
            handle_size=interaction_config['handle_size_px'],
            handles_for_all=interaction_config['handles_for_all'],
            name_prefix=self.config['session']['display_name_prefix'],
        )
        self.controller = GestureController(
            self.store,
            self.tracker,
            projector=self.projector,
            event_source=event_source,
            config=self.config,
            error_handler=self.error_handler,
        )

        self._custom_labels: List[str] = []
        self._finalized: Optional[List[FinalizedAnnotation]] = None

        self.callbacks: Dict[str, List[Callable]] = {
            'annotations_changed': [],
            'session_completed': [],
        }
        for event_type in ('entity_added', 'geometry_changed', 'label_changed', 'entity_removed'):
            self.store.add_callback(event_type, self._on_store_changed)

        self.seed_report: Optional[SeedLoadReport] = None
        if seeds is not None:
            self.seed_report = self.load_seeds(seeds, natural_size)

        logger.info(f"AnnotationSession initialized with {len(self.store)} annotations")

    # ------------------------------------------------------------------
    # Seeds
    # ------------------------------------------------------------------
    def load_seeds(self, seeds: SeedInput,
                   natural_size: Optional[Tuple[float, float]] = None) -> SeedLoadReport:
        """
        Insert seed boxes as detected, unlabelled annotations.

        Boxes overflowing the image are clamped into it and recorded as
        SEED conditions.

        Returns:
            Report of the parsed seed document
        """
        self._require_active()
        if isinstance(seeds, SeedLoadReport):
            report = seeds
        elif isinstance(seeds, (dict, list)) and not all(isinstance(s, SeedBox) for s in seeds):
            report = load_seeds(seeds, natural_size, self.config['geometry']['default_box_size_percent'])
        else:
            report = SeedLoadReport(seeds=list(seeds))

        for seed in report.seeds:
            rect = Rect(x=seed.x, y=seed.y, width=seed.width, height=seed.height)
            if not CoordinateTransformer.is_contained(rect, self.store.tolerance):
                clamped = CoordinateTransformer.clamp_rect(rect)
                self.error_handler.record(
                    ErrorCategory.SEED,
                    f"Seed {seed.source_id} overflowed the image and was clamped: {rect} -> {clamped}",
                    ErrorContext("AnnotationSession", "load_seeds", {'source_id': seed.source_id}),
                )
                rect = clamped
            self.store.insert(
                rect,
                origin=AnnotationOrigin.DETECTED,
                source_reference=seed.source_id,
                suggested_label=seed.suggested_label,
            )

        for message in report.messages:
            self.error_handler.record(ErrorCategory.SEED, message,
                                      ErrorContext("AnnotationSession", "load_seeds"))
        logger.info(f"Loaded {report.loaded} seeds ({report.skipped} skipped)")
        return report

    # ------------------------------------------------------------------
    # Viewport
    # ------------------------------------------------------------------
    def attach_viewport(self, measure: Union[MeasureFn, ViewportGeometry]) -> ViewportGeometry:
        """Report that the image is rendered; measure is re-invoked on every resize."""
        return self.tracker.on_image_ready(measure)

    def handle_resize(self) -> Optional[ViewportGeometry]:
        """Re-measure the rendered image box after a container resize."""
        return self.tracker.on_resize()

    # ------------------------------------------------------------------
    # Pointer input
    # ------------------------------------------------------------------
    def pointer_down(self, x: float, y: float) -> GestureKind:
        if self.is_closed:
            return GestureKind.IDLE
        return self.controller.pointer_down(x, y)

    def pointer_move(self, x: float, y: float):
        self.controller.pointer_move(x, y)

    def pointer_up(self, x: float, y: float):
        self.controller.pointer_up(x, y)

    def pointer_leave(self):
        self.controller.pointer_leave()

    # ------------------------------------------------------------------
    # Annotation operations
    # ------------------------------------------------------------------
    def annotations(self) -> Tuple[AnnotationEntity, ...]:
        """Live ordered annotations, for tables and summaries."""
        return self.store.all()

    def assign_label(self, entity_id: int, label: str) -> AnnotationEntity:
        """
        Assign a label chosen by the user and mark the annotation verified.

        Raises:
            InvalidLabelError: If the label is empty or not a string
            AnnotationNotFoundError: If the id is unknown
        """
        self._require_active()
        if not isinstance(label, str) or not label.strip():
            raise InvalidLabelError(f"Label must be a non-empty string, got {label!r}")
        label = label.strip()
        entity = self.store.update_label(entity_id, label, verified=True)
        if label not in self.config['object_types'] and label not in self._custom_labels:
            self._custom_labels.append(label)
        logger.info(f"Annotation {entity_id} labelled '{label}'")
        return entity

    def accept_suggestion(self, entity_id: int) -> AnnotationEntity:
        """
        Take the detector's suggested label as the annotation's label.

        Raises:
            InvalidLabelError: If the annotation has no suggestion
        """
        entity = self.store.get(entity_id)
        if not entity.suggested_label:
            raise InvalidLabelError(f"Annotation {entity_id} has no suggested label")
        return self.assign_label(entity_id, entity.suggested_label)

    def reject_suggestion(self, entity_id: int) -> AnnotationEntity:
        """Mark the annotation unverified; its label stays for manual correction."""
        self._require_active()
        entity = self.store.get(entity_id)
        logger.info(f"Suggestion '{entity.suggested_label}' rejected for annotation {entity_id}")
        return self.store.update_label(entity_id, entity.label, verified=False)

    def label_catalogue(self) -> List[str]:
        """Configured object types followed by custom labels assigned so far."""
        return list(self.config['object_types']) + list(self._custom_labels)

    def add_default_box(self) -> AnnotationEntity:
        """Insert a user-drawn box of the default size centred on the image, and select it."""
        self._require_active()
        size = self.config['geometry']['default_box_size_percent']
        rect = CoordinateTransformer.clamp_rect(
            Rect(x=PERCENT_SCALE / 2, y=PERCENT_SCALE / 2, width=size, height=size))
        entity = self.store.insert(rect, origin=AnnotationOrigin.USER_DRAWN)
        self.controller.select(entity.id)
        return entity

    def remove(self, entity_id: int) -> AnnotationEntity:
        """Remove an annotation; an in-flight gesture on it is cancelled."""
        self._require_active()
        entity = self.store.remove(entity_id)
        logger.info(f"Annotation {entity_id} removed")
        return entity

    def remove_selected(self) -> Optional[AnnotationEntity]:
        if self.selected_id is None:
            return None
        return self.remove(self.selected_id)

    def select(self, entity_id: Optional[int]):
        self._require_active()
        self.controller.select(entity_id)

    def clear_selection(self):
        self.controller.clear_selection()

    @property
    def selected_id(self) -> Optional[int]:
        return self.controller.selected_id

    @property
    def selected(self) -> Optional[AnnotationEntity]:
        if self.selected_id is None:
            return None
        return self.store.get(self.selected_id)

    def overlay(self, viewport: Optional[ViewportGeometry] = None) -> Tuple[ProjectedBox, ...]:
        """
        Project the annotations onto a viewport (the current one by default).

        Returns an empty overlay until a usable viewport was measured.
        """
        if viewport is None:
            if not self.tracker.is_ready():
                return ()
            viewport = self.tracker.current()
        return self.projector.project(self.controller.live_entities(), viewport, self.selected_id)

    def get_session_statistics(self) -> Dict[str, Any]:
        """Counts for a summary table."""
        entities = self.store.all()
        return {
            'total': len(entities),
            'detected': sum(1 for e in entities if e.origin == AnnotationOrigin.DETECTED),
            'user_drawn': sum(1 for e in entities if e.origin == AnnotationOrigin.USER_DRAWN),
            'labelled': sum(1 for e in entities if e.label),
            'verified': sum(1 for e in entities if e.verified),
            'modified': sum(1 for e in entities if e.modified),
            'errors': self.error_handler.get_error_statistics()['total_errors'],
        }

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------
    @property
    def is_closed(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    def finalize(self) -> List[FinalizedAnnotation]:
        """
        Close the session and return the finalized annotations in store order.

        Calling it again returns the same list.
        """
        if self._finalized is not None:
            return list(self._finalized)

        self.controller.teardown()
        viewport = self.tracker.current() if self.tracker.is_ready() else None
        self._finalized = self.store.snapshot(viewport)
        self.status = SessionStatus.COMPLETED
        self.tracker.teardown()

        unlabelled = sum(1 for record in self._finalized if record.label is None)
        logger.info(f"Session completed with {len(self._finalized)} annotations ({unlabelled} unlabelled)")
        self._trigger_callbacks('session_completed', list(self._finalized))
        return list(self._finalized)

    def _require_active(self):
        if self.is_closed:
            raise SessionClosedError("Annotation session is already completed")

    def _on_store_changed(self, entity: AnnotationEntity):
        self._trigger_callbacks('annotations_changed', self.store.all())

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------
    def add_callback(self, event_type: str, callback: Callable):
        """
        Add a callback for a specific event type.

        Args:
            event_type: Type of event ('annotations_changed', 'session_completed')
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
                    ErrorContext("AnnotationSession", event_type), severity=ErrorSeverity.ERROR, exception=e,
                )
