"""Line grouping and page-level glyph statistics.

Everything here works on any item exposing a ``bbox`` (glyphs, words,
tokens), so the same grouper orders glyphs before run building and
splits matched tokens into per-line regions afterwards.
"""

from __future__ import annotations

from typing import Any, NamedTuple, Sequence

from core.locator.locator_config import LINE_TOLERANCE_HEIGHT_RATIO, LINE_TOLERANCE_MIN
from models.schemas import Glyph


class PageMetrics(NamedTuple):
    """Median glyph dimensions of one page."""
    median_width: float
    median_height: float


def median(values: Sequence[float]) -> float:
    """Return the median of *values* (0.0 for an empty sequence)."""
    if not values:
        return 0.0
    s = sorted(values)
    n = len(s)
    if n % 2 == 1:
        return s[n // 2]
    return (s[n // 2 - 1] + s[n // 2]) / 2.0


def compute_page_metrics(glyphs: Sequence[Glyph]) -> PageMetrics:
    """Compute median glyph width/height over all glyphs of a page.

    Whitespace glyphs carry no ink and are left out. Computed once per page
    so every line on the page sees the same thresholds.
    """
    inked = [g for g in glyphs if not g.text.isspace()]
    return PageMetrics(
        median_width=median([g.bbox.width for g in inked]),
        median_height=median([g.bbox.height for g in inked]),
    )


def line_tolerance(median_height: float) -> float:
    """Baseline tolerance for grouping items into one visual line."""
    return max(LINE_TOLERANCE_MIN, median_height * LINE_TOLERANCE_HEIGHT_RATIO)


def group_into_lines(items: Sequence[Any], tolerance: float) -> list[list[Any]]:
    """Group items into visual lines by baseline proximity.

    Items are visited top of page first (bottom-left origin, so descending
    ``bbox.y0``). An item joins the current line when its baseline is within
    *tolerance* of the line's first item; otherwise it starts a new line.
    Each returned line is ordered left-to-right.
    """
    if not items:
        return []

    by_baseline = sorted(items, key=lambda it: -it.bbox.y0)

    lines: list[list[Any]] = []
    cur_line: list[Any] = [by_baseline[0]]
    line_ref = by_baseline[0].bbox.y0

    for item in by_baseline[1:]:
        baseline = item.bbox.y0
        if abs(baseline - line_ref) <= tolerance:
            cur_line.append(item)
        else:
            lines.append(cur_line)
            cur_line = [item]
            line_ref = baseline

    lines.append(cur_line)

    return [sorted(line, key=lambda it: it.bbox.x0) for line in lines]
