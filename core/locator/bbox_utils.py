"""Bounding-box geometry utilities for redaction regions."""

from __future__ import annotations

from typing import Iterable

from core.locator.locator_config import MERGE_OVERLAP_RATIO
from models.schemas import BBox, RedactionRegion


def _bbox_overlap_area(a: BBox, b: BBox) -> float:
    """Return the area of intersection between two bounding boxes."""
    ix0 = max(a.x0, b.x0)
    iy0 = max(a.y0, b.y0)
    ix1 = min(a.x1, b.x1)
    iy1 = min(a.y1, b.y1)
    if ix1 <= ix0 or iy1 <= iy0:
        return 0.0
    return (ix1 - ix0) * (iy1 - iy0)


def _bbox_area(b: BBox) -> float:
    """Return the area of a bounding box."""
    return max(0.0, b.x1 - b.x0) * max(0.0, b.y1 - b.y0)


def _union_bbox(boxes: Iterable[BBox]) -> BBox:
    """Smallest box containing every box in *boxes*."""
    boxes = list(boxes)
    return BBox(
        x0=min(b.x0 for b in boxes),
        y0=min(b.y0 for b in boxes),
        x1=max(b.x1 for b in boxes),
        y1=max(b.y1 for b in boxes),
    )


def _regions_overlap(a: RedactionRegion, b: RedactionRegion) -> bool:
    """Same page, and the intersection covers more than half of the
    smaller region."""
    if a.page_number != b.page_number:
        return False
    inter = _bbox_overlap_area(a.bbox, b.bbox)
    if inter <= 0:
        return False
    smaller = min(_bbox_area(a.bbox), _bbox_area(b.bbox))
    return inter > MERGE_OVERLAP_RATIO * smaller
