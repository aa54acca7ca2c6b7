"""Text-location engine configuration constants.

This module centralizes the thresholds used by the tokenizer, the region
builder and the region merger. All distances are PDF points; ratios are
applied to per-page median glyph dimensions.

Tuning Guide:
- Larger word-gap ratios → more glyphs fused into one word (risk: prose
  collapses into long runs)
- Larger digit-gap ratios → boxed digits bridged across wider cells (risk:
  neighbouring numeric fields merged into one run)
"""

from __future__ import annotations

# =============================================================================
# LINE GROUPING
# =============================================================================

LINE_TOLERANCE_MIN: float = 2.0
"""Minimum baseline difference (pt) still considered the same visual line."""

LINE_TOLERANCE_HEIGHT_RATIO: float = 0.3
"""Baseline tolerance as a fraction of the page's median glyph height."""

# =============================================================================
# PASS 1: WORD RUNS
# =============================================================================

WORD_GAP_MIN: float = 2.0
"""Glyphs closer than this are always joined."""

WORD_GAP_WIDTH_RATIO: float = 1.5
WORD_GAP_HEIGHT_RATIO: float = 0.5
"""Word gap threshold = max(WORD_GAP_MIN, ratio × median width, ratio × median height)."""

# =============================================================================
# PASS 2: DIGIT RUNS
# =============================================================================
# Tuned for boxed form fields (20-25 pt cell pitch) where each character
# occupies roughly 5-7 pt of width.

DIGIT_GAP_MIN: float = 2.0

DIGIT_GAP_WIDTH_RATIO: float = 5.0
"""5× median width bridges ~25 pt gaps between boxed digits."""

DIGIT_GAP_HEIGHT_RATIO: float = 2.5
"""2.5× median height keeps the threshold proportional for larger fonts."""

DIGIT_RUN_SEPARATORS: frozenset[str] = frozenset("-")
"""Besides decimal digits, single-character tokens eligible for digit-run merging."""

# =============================================================================
# FRAGMENT-AWARE AUTO-DETECTION
# =============================================================================

AUTO_FRAGMENT_MIN_DIGITS: int = 3
AUTO_FRAGMENT_MAX_DIGITS: int = 9
"""Digit count range for which numeric patterns enable fragment-aware mode."""

AUTO_FRAGMENT_LITERAL_SEPARATORS: frozenset[str] = frozenset("-/ ")

# =============================================================================
# REGION MERGING
# =============================================================================

MERGE_OVERLAP_RATIO: float = 0.5
"""Two regions are duplicates when their intersection exceeds this fraction
of the smaller region's area."""
