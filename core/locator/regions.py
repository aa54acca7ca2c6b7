"""Map a match back to page geometry: one region per visual line."""

from __future__ import annotations

from typing import Sequence

from core.locator.lines import PageMetrics, group_into_lines, line_tolerance
from core.locator.runs import token_from_items
from core.locator.search_text import tokens_in_range
from models.schemas import PageData, RedactionRegion, RedactionRule, TextMatch, TokenSpan


def build_regions(
    match: TextMatch,
    spans: Sequence[TokenSpan],
    page: PageData,
    rule: RedactionRule,
    metrics: PageMetrics,
) -> list[RedactionRegion]:
    """Create the redaction regions covering *match*.

    A match that wraps across a line break yields one region per line it
    touches.
    """
    tokens = tokens_in_range(spans, match.start, match.end)
    if not tokens:
        return []

    regions: list[RedactionRegion] = []
    for line_tokens in group_into_lines(tokens, line_tolerance(metrics.median_height)):
        bbox = token_from_items(line_tokens).bbox
        regions.append(RedactionRegion(
            page_number=page.page_number,
            x=bbox.x0,
            y=bbox.y0,
            width=bbox.width,
            height=bbox.height,
            matched_text=match.text,
            rule_pattern=rule.pattern,
            page_rotation=page.rotation,
        ))
    return regions
