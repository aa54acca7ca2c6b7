"""Run building: turn a line of glyphs into tokens.

Two passes with two different gap thresholds:

1. **Word runs** join glyphs separated by ordinary letter spacing.
2. **Digit runs** join single-character digit/hyphen tokens separated by
   the much wider spacing of boxed form fields (one digit per cell).
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from core.locator.lines import PageMetrics
from core.locator.locator_config import (
    DIGIT_GAP_HEIGHT_RATIO,
    DIGIT_GAP_MIN,
    DIGIT_GAP_WIDTH_RATIO,
    DIGIT_RUN_SEPARATORS,
    WORD_GAP_HEIGHT_RATIO,
    WORD_GAP_MIN,
    WORD_GAP_WIDTH_RATIO,
)
from models.schemas import BBox, Glyph, Token

logger = logging.getLogger(__name__)


def word_gap_threshold(metrics: PageMetrics) -> float:
    """Max horizontal gap (pt) between glyphs of the same word."""
    return max(
        WORD_GAP_MIN,
        metrics.median_width * WORD_GAP_WIDTH_RATIO,
        metrics.median_height * WORD_GAP_HEIGHT_RATIO,
    )


def digit_gap_threshold(metrics: PageMetrics) -> float:
    """Max horizontal gap (pt) between boxed digits of the same field."""
    return max(
        DIGIT_GAP_MIN,
        metrics.median_width * DIGIT_GAP_WIDTH_RATIO,
        metrics.median_height * DIGIT_GAP_HEIGHT_RATIO,
    )


def token_from_items(items: Sequence[Any]) -> Token:
    """Concatenate the text of *items* and union their bounding boxes."""
    return Token(
        text="".join(it.text for it in items),
        bbox=BBox(
            x0=min(it.bbox.x0 for it in items),
            y0=min(it.bbox.y0 for it in items),
            x1=max(it.bbox.x1 for it in items),
            y1=max(it.bbox.y1 for it in items),
        ),
    )


def _same_word_hint(a: Glyph, b: Glyph) -> bool:
    if a.word_index is None or b.word_index is None:
        return True
    return a.word_index == b.word_index


def build_word_runs(line: Sequence[Glyph], metrics: PageMetrics) -> list[Token]:
    """Pass 1: merge left-to-right glyphs of one line into word tokens.

    Consecutive glyphs stay in the same run while ``next.x0 - prev.x1`` is
    within the word gap threshold and the glyph source does not report a
    word boundary between them. Whitespace glyphs always end a run.
    """
    threshold = word_gap_threshold(metrics)
    tokens: list[Token] = []
    run: list[Glyph] = []

    for glyph in sorted(line, key=lambda g: g.bbox.x0):
        if glyph.text.isspace():
            if run:
                tokens.append(token_from_items(run))
                run = []
            continue
        if run:
            prev = run[-1]
            gap = glyph.bbox.x0 - prev.bbox.x1
            if gap <= threshold and _same_word_hint(prev, glyph):
                run.append(glyph)
                continue
            tokens.append(token_from_items(run))
        run = [glyph]

    if run:
        tokens.append(token_from_items(run))

    return tokens


def _is_digit_eligible(token: Token) -> bool:
    return len(token.text) == 1 and (token.text.isdecimal() or token.text in DIGIT_RUN_SEPARATORS)


def merge_digit_runs(tokens: Sequence[Token], metrics: PageMetrics) -> list[Token]:
    """Pass 2: merge adjacent single digit/hyphen tokens into digit runs.

    *tokens* must be the left-to-right pass-1 output of one line. Tokens
    that are not eligible, and eligible tokens too far from their
    neighbour, pass through unchanged.
    """
    threshold = digit_gap_threshold(metrics)
    result: list[Token] = []
    run: list[Token] = []

    def _flush() -> None:
        if len(run) > 1:
            merged = token_from_items(run)
            logger.debug("Digit run %r merged from %d cells", merged.text, len(run))
            result.append(merged)
        elif run:
            result.append(run[0])
        run.clear()

    for token in tokens:
        if not _is_digit_eligible(token):
            _flush()
            result.append(token)
            continue
        if run and token.bbox.x0 - run[-1].bbox.x1 <= threshold:
            run.append(token)
            continue
        _flush()
        run.append(token)

    _flush()
    return result
