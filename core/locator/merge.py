"""Region merge: reconcile regions found by the word pass and the
fragment-aware pass (and by different rules) over the same text.
"""

from __future__ import annotations

import logging

from core.locator.bbox_utils import _regions_overlap, _union_bbox
from models.schemas import RedactionRegion

logger = logging.getLogger(__name__)


def _merge_cluster(cluster: list[RedactionRegion]) -> RedactionRegion:
    """Union rectangle; text/pattern from the longest matched text
    (first member wins ties)."""
    if len(cluster) == 1:
        return cluster[0]

    best = cluster[0]
    for region in cluster[1:]:
        if len(region.matched_text or "") > len(best.matched_text or ""):
            best = region

    bbox = _union_bbox(r.bbox for r in cluster)
    return best.model_copy(update={
        "x": bbox.x0,
        "y": bbox.y0,
        "width": bbox.width,
        "height": bbox.height,
    })


def merge_overlapping_regions(regions: list[RedactionRegion]) -> list[RedactionRegion]:
    """Collapse duplicate coverage.

    Regions are visited in order. Each region not yet consumed seeds a
    cluster with every later unconsumed region that overlaps it (see
    :func:`_regions_overlap`); the cluster is replaced by one region at the
    seed's position.
    """
    if len(regions) <= 1:
        return list(regions)

    consumed = [False] * len(regions)
    merged: list[RedactionRegion] = []

    for i, seed in enumerate(regions):
        if consumed[i]:
            continue
        consumed[i] = True
        cluster = [seed]
        for j in range(i + 1, len(regions)):
            if not consumed[j] and _regions_overlap(seed, regions[j]):
                consumed[j] = True
                cluster.append(regions[j])
        merged.append(_merge_cluster(cluster))

    if len(merged) < len(regions):
        logger.debug("Merged %d region(s) into %d", len(regions), len(merged))
    return merged
