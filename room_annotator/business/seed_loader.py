"""
Seed Loader Module
This module turns detector output into seed boxes that pre-populate a session.

Three input layouts are understood:

* a plain seed list ``[{id, x, y, width?, height?, class?}]`` in percent-space,
  centre based;
* detector output ``[{id, bbox_px: {min: [x, y], max: [x, y]}, ai_guess?}]`` in
  natural image pixels;
* plan metadata ``{plans: [{revit_data: {pixel_dimensions}, unreal_data:
  {furniture: [...]}}]}`` with ``bbox_corners_px`` and ``center_px`` per item.

Malformed entries are skipped with a warning; a malformed container raises
SeedFormatError.
"""

import json
import math
import logging
from pathlib import Path
from typing import Dict, List, Optional, Any, Tuple, Union
from dataclasses import dataclass, field

from ..core.coordinate_system import PERCENT_SCALE
from ..utils.error_handling import SeedFormatError

logger = logging.getLogger(__name__)

DEFAULT_SEED_SIZE = 10.0


@dataclass(frozen=True)
class SeedBox:
    """A detected box in percent-space, centre based, before it enters the store."""
    source_id: Optional[str]
    x: float
    y: float
    width: float
    height: float
    suggested_label: Optional[str] = None


@dataclass
class SeedLoadReport:
    """Outcome of parsing one seed document."""
    seeds: List[SeedBox] = field(default_factory=list)
    skipped: int = 0
    messages: List[str] = field(default_factory=list)

    @property
    def loaded(self) -> int:
        return len(self.seeds)

    def skip(self, index: int, reason: str):
        message = f"Seed {index} skipped: {reason}"
        logger.warning(message)
        self.skipped += 1
        self.messages.append(message)


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SeedFormatError(f"'{name}' must be a number, got {value!r}")
    if not math.isfinite(value):
        raise SeedFormatError(f"'{name}' must be finite, got {value!r}")
    return float(value)


def _point(value: Any, name: str) -> Tuple[float, float]:
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        raise SeedFormatError(f"'{name}' must be an [x, y] pair, got {value!r}")
    return _number(value[0], f"{name}[0]"), _number(value[1], f"{name}[1]")


def _source_id(item: Dict[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        if item.get(key) is not None:
            return str(item[key])
    return None


def _label(item: Dict[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = item.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _require_positive(width: float, height: float):
    if width <= 0 or height <= 0:
        raise SeedFormatError(f"box has no area ({width} x {height})")


def _require_list(items: Any, name: str) -> List[Any]:
    if not isinstance(items, list):
        raise SeedFormatError(f"{name} must be a list, got {type(items).__name__}")
    return items


def parse_seed_list(items: List[Dict[str, Any]],
                    default_size: float = DEFAULT_SEED_SIZE) -> SeedLoadReport:
    """
    Parse a plain seed list in percent-space.

    Args:
        items: Seed dictionaries with ``x``, ``y`` and optional ``width``,
            ``height``, ``id`` and ``class`` / ``label``
        default_size: Size used for a missing width or height

    Returns:
        SeedLoadReport with the parsed seeds
    """
    report = SeedLoadReport()
    for index, item in enumerate(_require_list(items, "Seed list")):
        try:
            if not isinstance(item, dict):
                raise SeedFormatError(f"expected an object, got {type(item).__name__}")
            width = _number(item['width'], 'width') if item.get('width') is not None else default_size
            height = _number(item['height'], 'height') if item.get('height') is not None else default_size
            _require_positive(width, height)
            report.seeds.append(SeedBox(
                source_id=_source_id(item, 'id'),
                x=_number(item.get('x'), 'x'),
                y=_number(item.get('y'), 'y'),
                width=width,
                height=height,
                suggested_label=_label(item, 'class', 'label'),
            ))
        except SeedFormatError as e:
            report.skip(index, str(e))
    logger.info(f"Parsed {report.loaded} seeds from seed list ({report.skipped} skipped)")
    return report


def _percent_from_bounds(min_xy: Tuple[float, float], max_xy: Tuple[float, float],
                         natural_width: float, natural_height: float) -> Tuple[float, float, float, float]:
    (x0, y0), (x1, y1) = min_xy, max_xy
    left, right = min(x0, x1), max(x0, x1)
    top, bottom = min(y0, y1), max(y0, y1)
    _require_positive(right - left, bottom - top)
    return (
        (left + right) / 2 / natural_width * PERCENT_SCALE,
        (top + bottom) / 2 / natural_height * PERCENT_SCALE,
        (right - left) / natural_width * PERCENT_SCALE,
        (bottom - top) / natural_height * PERCENT_SCALE,
    )


def _require_natural_size(natural_width: Any, natural_height: Any) -> Tuple[float, float]:
    width = _number(natural_width, 'natural_width')
    height = _number(natural_height, 'natural_height')
    if width <= 0 or height <= 0:
        raise SeedFormatError(f"Image size must be positive, got {width} x {height}")
    return width, height


def parse_bbox_px(items: List[Dict[str, Any]], natural_width: float,
                  natural_height: float) -> SeedLoadReport:
    """
    Parse detector output with ``bbox_px`` bounds in natural image pixels.

    Args:
        items: Detector records with ``bbox_px: {min: [x, y], max: [x, y]}``
        natural_width: Width of the source image in pixels
        natural_height: Height of the source image in pixels

    Returns:
        SeedLoadReport with the parsed seeds
    """
    natural_width, natural_height = _require_natural_size(natural_width, natural_height)
    report = SeedLoadReport()
    for index, item in enumerate(_require_list(items, "Detector output")):
        try:
            bbox = item.get('bbox_px') if isinstance(item, dict) else None
            if not isinstance(bbox, dict):
                raise SeedFormatError("missing 'bbox_px'")
            x, y, width, height = _percent_from_bounds(
                _point(bbox.get('min'), 'bbox_px.min'),
                _point(bbox.get('max'), 'bbox_px.max'),
                natural_width, natural_height,
            )
            report.seeds.append(SeedBox(
                source_id=_source_id(item, 'id'),
                x=x, y=y, width=width, height=height,
                suggested_label=_label(item, 'ai_guess', 'furniture_type', 'class'),
            ))
        except SeedFormatError as e:
            report.skip(index, str(e))
    logger.info(f"Parsed {report.loaded} seeds from detector output ({report.skipped} skipped)")
    return report


def parse_plan_metadata(metadata: Dict[str, Any]) -> SeedLoadReport:
    """
    Parse the furniture of the first plan in a plan metadata document.

    Box size comes from the extent of ``bbox_corners_px``; the centre comes
    from ``center_px`` when present, otherwise from the corners.

    Raises:
        SeedFormatError: If the document has no plan or no pixel dimensions
    """
    plans = metadata.get('plans') if isinstance(metadata, dict) else None
    if not plans:
        raise SeedFormatError("Plan metadata has no plans")
    plan = _require_list(plans, "Plans")[0]
    if not isinstance(plan, dict):
        raise SeedFormatError(f"Plan must be an object, got {type(plan).__name__}")
    try:
        dimensions = plan['revit_data']['pixel_dimensions']
        natural_width, natural_height = _require_natural_size(dimensions.get('width'), dimensions.get('height'))
    except (KeyError, TypeError, AttributeError):
        raise SeedFormatError("Plan metadata has no revit_data.pixel_dimensions") from None
    furniture = (plan.get('unreal_data') or {}).get('furniture') or []

    report = SeedLoadReport()
    for index, item in enumerate(_require_list(furniture, "Plan furniture")):
        try:
            corners = item.get('bbox_corners_px') if isinstance(item, dict) else None
            if not isinstance(corners, list) or not corners:
                raise SeedFormatError("missing 'bbox_corners_px'")
            points = [_point(corner, 'bbox_corners_px') for corner in corners]
            xs = [p[0] for p in points]
            ys = [p[1] for p in points]
            x, y, width, height = _percent_from_bounds(
                (min(xs), min(ys)), (max(xs), max(ys)), natural_width, natural_height)
            if item.get('center_px') is not None:
                cx, cy = _point(item['center_px'], 'center_px')
                x = cx / natural_width * PERCENT_SCALE
                y = cy / natural_height * PERCENT_SCALE
            report.seeds.append(SeedBox(
                source_id=_source_id(item, 'ai_label', 'id'),
                x=x, y=y, width=width, height=height,
                suggested_label=_label(item, 'category', 'user_label'),
            ))
        except SeedFormatError as e:
            report.skip(index, str(e))
    logger.info(f"Parsed {report.loaded} seeds from plan metadata ({report.skipped} skipped)")
    return report


def load_seeds(data: Union[Dict[str, Any], List[Any]],
               natural_size: Optional[Tuple[float, float]] = None,
               default_size: float = DEFAULT_SEED_SIZE) -> SeedLoadReport:
    """
    Parse a seed document, detecting its layout.

    Args:
        data: Decoded JSON document
        natural_size: (width, height) of the source image; required for
            detector output in natural pixels
        default_size: Size used for seed list entries without one

    Returns:
        SeedLoadReport with the parsed seeds

    Raises:
        SeedFormatError: If the layout is not recognised
    """
    if isinstance(data, dict):
        if 'plans' in data:
            return parse_plan_metadata(data)
        for key in ('seeds', 'objects', 'detections'):
            if isinstance(data.get(key), list):
                return load_seeds(data[key], natural_size, default_size)
        raise SeedFormatError(f"Unrecognised seed document with keys {sorted(data)}")

    items = _require_list(data, "Seed document")
    if any(isinstance(item, dict) and 'bbox_px' in item for item in items):
        if natural_size is None:
            raise SeedFormatError("Detector output in pixels needs the image size")
        return parse_bbox_px(items, *natural_size)
    return parse_seed_list(items, default_size)


def load_seed_file(path: Union[str, Path],
                   natural_size: Optional[Tuple[float, float]] = None,
                   default_size: float = DEFAULT_SEED_SIZE) -> SeedLoadReport:
    """Read a JSON seed file and parse it with load_seeds()."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        raise SeedFormatError(f"{path} is not valid JSON: {e}") from e
    logger.info(f"Loading seeds from {path}")
    return load_seeds(data, natural_size, default_size)
