"""
Render Projector Component
This module derives the pixel overlay (boxes, handles, labels) from the store.

The projection is recomputed on every render and never written back: the
AnnotationStore stays the single source of truth, in percent-space.
"""

import logging
from typing import Optional, Tuple, Iterable, Sequence
from dataclasses import dataclass

from .coordinate_system import CoordinateTransformer, PixelRect, ViewportGeometry
from .annotation_store import AnnotationEntity, AnnotationOrigin
from .resize_handles import ResizeHandle, HANDLE_CURSORS, handle_anchor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectedHandle:
    """A resize handle square, centred on (x, y) in image-relative pixels."""
    handle: ResizeHandle
    x: float
    y: float
    size: float
    cursor: str

    def contains(self, px: float, py: float, slop: float = 0.0) -> bool:
        """Check if a point falls on the handle, optionally grown by slop."""
        half = self.size / 2 + slop
        return abs(px - self.x) <= half and abs(py - self.y) <= half


@dataclass(frozen=True)
class ProjectedBox:
    """Everything needed to draw one annotation for one viewport snapshot."""
    entity_id: int
    display_name: str
    label: Optional[str]
    origin: AnnotationOrigin
    rect: PixelRect
    offset: Tuple[float, float]
    selected: bool = False
    handles: Tuple[ProjectedHandle, ...] = ()

    @property
    def container_rect(self) -> PixelRect:
        """The box in container-relative pixels."""
        left, top = self.offset
        return PixelRect(self.rect.x + left, self.rect.y + top, self.rect.width, self.rect.height)


def display_name(entity: AnnotationEntity, prefix: str = "object") -> str:
    """Name shown next to a box and in summary tables."""
    name = f"{prefix}_{entity.id}"
    if entity.label:
        return f"{name} ({entity.label})"
    return name


class RenderProjector:
    """
    Maps annotations through the CoordinateTransformer onto a viewport.
    """

    def __init__(self, handle_size: float = 8.0, handles_for_all: bool = False,
                 name_prefix: str = "object"):
        """
        Initialize the render projector.

        Args:
            handle_size: Side of a handle square in pixels
            handles_for_all: Produce handles for every box instead of only the selected one
            name_prefix: Prefix used for display names
        """
        self.handle_size = handle_size
        self.handles_for_all = handles_for_all
        self.name_prefix = name_prefix

    def project(self, entities: Iterable[AnnotationEntity], viewport: ViewportGeometry,
                selected_id: Optional[int] = None) -> Tuple[ProjectedBox, ...]:
        """
        Project annotations onto a viewport, preserving store order.

        Args:
            entities: Annotations, usually AnnotationStore.all()
            viewport: Snapshot to project onto
            selected_id: Id of the selected annotation, if any

        Returns:
            One ProjectedBox per annotation
        """
        return tuple(
            self.project_entity(entity, viewport, entity.id == selected_id)
            for entity in entities
        )

    def project_entity(self, entity: AnnotationEntity, viewport: ViewportGeometry,
                       selected: bool = False) -> ProjectedBox:
        rect = CoordinateTransformer.to_pixels(entity.geometry, viewport)
        handles = self.handles_for(rect) if (selected or self.handles_for_all) else ()
        return ProjectedBox(
            entity_id=entity.id,
            display_name=display_name(entity, self.name_prefix),
            label=entity.label,
            origin=entity.origin,
            rect=rect,
            offset=(viewport.left, viewport.top),
            selected=selected,
            handles=handles,
        )

    def handles_for(self, rect: PixelRect) -> Tuple[ProjectedHandle, ...]:
        """Handle squares at the corners and edge midpoints of a pixel rectangle."""
        handles = []
        for handle in ResizeHandle:
            fx, fy = handle_anchor(handle)
            handles.append(ProjectedHandle(
                handle=handle,
                x=rect.left + fx * rect.width,
                y=rect.top + fy * rect.height,
                size=self.handle_size,
                cursor=HANDLE_CURSORS[handle],
            ))
        return tuple(handles)

    @staticmethod
    def hit_test_handle(boxes: Sequence[ProjectedBox], px: float, py: float,
                        slop: float = 0.0) -> Optional[Tuple[ProjectedBox, ProjectedHandle]]:
        """
        Find the handle under an image-relative point, topmost box first.
        """
        for box in reversed(boxes):
            for handle in box.handles:
                if handle.contains(px, py, slop):
                    return box, handle
        return None

    @staticmethod
    def hit_test_body(boxes: Sequence[ProjectedBox], px: float, py: float) -> Optional[ProjectedBox]:
        """
        Find the box whose body lies under an image-relative point, topmost first.
        """
        for box in reversed(boxes):
            if box.rect.contains(px, py):
                return box
        return None
