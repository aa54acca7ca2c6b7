"""Search-text construction with a token ↔ character-offset mapping.

Tokens are joined with a single space. Every token records the half-open
``[start, end)`` range its text occupies, so a match found in the search
text maps back to the exact tokens (and bounding boxes) that produced it.
"""

from __future__ import annotations

import bisect
from typing import NamedTuple, Sequence

from models.schemas import Token, TokenSpan

DELIMITER = " "


class SearchText(NamedTuple):
    text: str
    spans: list[TokenSpan]


def build_search_text(tokens: Sequence[Token]) -> SearchText:
    """Concatenate *tokens*, each followed by one delimiter.

    The delimiter is not part of any span. Identical input always yields
    the identical string and spans.
    """
    parts: list[str] = []
    spans: list[TokenSpan] = []
    pos = 0

    for token in tokens:
        start = pos
        pos += len(token.text)
        spans.append(TokenSpan(start=start, end=pos, token=token))
        parts.append(token.text)
        parts.append(DELIMITER)
        pos += len(DELIMITER)

    return SearchText(text="".join(parts), spans=spans)


def tokens_in_range(spans: Sequence[TokenSpan], start: int, end: int) -> list[Token]:
    """Return the tokens whose span overlaps ``[start, end)``.

    Spans are sorted and non-overlapping, so a bisect on the end offsets
    finds the first candidate in O(log n).
    """
    if not spans or end <= start:
        return []

    ends = [s.end for s in spans]
    lo = bisect.bisect_right(ends, start)

    result: list[Token] = []
    for span in spans[lo:]:
        if span.start >= end:
            break
        if span.end > start:
            result.append(span.token)
    return result
