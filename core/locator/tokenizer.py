"""Page tokenization: word mode and fragment-aware mode.

Both modes produce an ordered token stream (lines top-to-bottom, tokens
left-to-right) for one page. They are run independently and their outputs
are never mixed inside one search pass.
"""

from __future__ import annotations

import logging

from core.locator.lines import PageMetrics, group_into_lines, line_tolerance
from core.locator.runs import build_word_runs, merge_digit_runs
from models.schemas import PageData, Token

logger = logging.getLogger(__name__)


def _has_ink(page: PageData) -> bool:
    return any(not g.text.isspace() for g in page.glyphs)


def tokenize_words(page: PageData, metrics: PageMetrics) -> list[Token]:
    """Word mode: one token per word.

    Uses the glyph source's own word grouping when the page has it,
    otherwise rebuilds words from glyphs with the pass-1 gap threshold.
    """
    if not _has_ink(page):
        return []

    tolerance = line_tolerance(metrics.median_height)

    if page.words is not None:
        words = [w for w in page.words if w.text.strip()]
        return [
            Token(text=w.text, bbox=w.bbox)
            for line in group_into_lines(words, tolerance)
            for w in line
        ]

    tokens: list[Token] = []
    for line in group_into_lines(page.glyphs, tolerance):
        tokens.extend(build_word_runs(line, metrics))
    return tokens


def tokenize_fragments(page: PageData, metrics: PageMetrics) -> list[Token]:
    """Fragment-aware mode: glyph-level word runs plus boxed digit runs."""
    if not _has_ink(page):
        return []

    tokens: list[Token] = []
    for line in group_into_lines(page.glyphs, line_tolerance(metrics.median_height)):
        tokens.extend(merge_digit_runs(build_word_runs(line, metrics), metrics))

    logger.debug(
        "Page %d: fragment-aware tokenizer produced %d token(s) from %d glyph(s)",
        page.page_number, len(tokens), len(page.glyphs),
    )
    return tokens
