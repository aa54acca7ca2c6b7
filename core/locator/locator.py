"""Text location: turn rules + page glyphs into a redaction plan.

Per page, every rule is matched against the word-mode search text; rules
that are fragment-aware (explicitly or by pattern shape) are additionally
matched against the fragment-aware search text. All regions found on the
page are then merged so text reported by both passes is redacted once.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Optional, Sequence

from core.config import config
from core.locator.lines import PageMetrics, compute_page_metrics
from core.locator.matcher import PatternMatcher, compile_rules
from core.locator.merge import merge_overlapping_regions
from core.locator.regions import build_regions
from core.locator.search_text import SearchText, build_search_text
from core.locator.tokenizer import tokenize_fragments, tokenize_words
from models.schemas import PageData, RedactionPlan, RedactionRegion, RedactionRule

logger = logging.getLogger(__name__)


def _match_pass(
    search: SearchText,
    matcher: PatternMatcher,
    page: PageData,
    metrics: PageMetrics,
) -> list[RedactionRegion]:
    regions: list[RedactionRegion] = []
    for match in matcher.find_matches(search.text):
        regions.extend(build_regions(match, search.spans, page, matcher.rule, metrics))
    return regions


def process_page(page: PageData, matchers: Sequence[PatternMatcher]) -> list[RedactionRegion]:
    """Locate every rule on one page and return the merged regions."""
    if not matchers:
        return []

    metrics = compute_page_metrics(page.glyphs)

    word_search = build_search_text(tokenize_words(page, metrics))

    # Independent of the word pass: a glyph source may report no words for
    # a page that still has glyphs.
    fragment_search: Optional[SearchText] = None
    if any(m.fragment_aware for m in matchers):
        fragment_search = build_search_text(tokenize_fragments(page, metrics))

    if not word_search.spans and not (fragment_search and fragment_search.spans):
        logger.debug("Page %d: no text", page.page_number)
        return []

    regions: list[RedactionRegion] = []
    for matcher in matchers:
        regions.extend(_match_pass(word_search, matcher, page, metrics))
        if matcher.fragment_aware and fragment_search is not None:
            regions.extend(_match_pass(fragment_search, matcher, page, metrics))

    found = len(regions)
    regions = merge_overlapping_regions(regions)
    if regions:
        logger.info(
            f"Page {page.page_number}: {len(regions)} region(s) "
            f"({found - len(regions)} duplicate(s) merged)"
        )
    return regions


def _locate(
    source_path: str,
    pages: Sequence[PageData],
    matchers: Sequence[PatternMatcher],
    workers: int,
) -> RedactionPlan:
    plan = RedactionPlan(source_path=source_path)

    if workers <= 1 or len(pages) <= 1:
        for page in pages:
            plan.regions.extend(process_page(page, matchers))
        return plan

    # Pages are independent; results are put back in page order.
    per_page: dict[int, list[RedactionRegion]] = {}
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {pool.submit(process_page, p, matchers): i for i, p in enumerate(pages)}
        for fut in as_completed(futures):
            per_page[futures[fut]] = fut.result()

    for i in range(len(pages)):
        plan.regions.extend(per_page[i])
    return plan


def locate_in_pages(
    source_path: str,
    pages: Sequence[PageData],
    rules: Sequence[RedactionRule],
    workers: Optional[int] = None,
) -> RedactionPlan:
    """Build a plan from already materialized pages.

    Args:
        source_path: Recorded in the plan as the document identity.
        pages: Page geometry in document order.
        rules: Rules, applied in the given order on each page.
        workers: Thread count for page processing; defaults to
            ``config.page_workers`` (0 or 1 = sequential).

    Raises:
        RuleConfigurationError: If any rule cannot be compiled.
    """
    if not rules:
        return RedactionPlan(source_path=source_path)
    matchers = compile_rules(rules)
    if workers is None:
        workers = config.page_workers
    return _locate(source_path, pages, matchers, workers)


class TextLocator:
    """Locate rule matches in a PDF file."""

    def __init__(self, workers: Optional[int] = None):
        self.workers = config.page_workers if workers is None else workers

    def locate_text(self, pdf_path: str | Path, rules: Sequence[RedactionRule]) -> RedactionPlan:
        """Create a redaction plan for *pdf_path*.

        Raises:
            ValueError: If *pdf_path* is empty.
            FileNotFoundError: If the PDF does not exist.
            RuleConfigurationError: If any rule cannot be compiled.
        """
        if not pdf_path or not str(pdf_path).strip():
            raise ValueError("PDF path cannot be empty")

        path = Path(pdf_path)
        if not path.is_file():
            raise FileNotFoundError(f"PDF file not found: {path}")

        source = os.fspath(pdf_path)
        if not rules:
            logger.info("No rules supplied, returning an empty plan")
            return RedactionPlan(source_path=source)

        matchers = compile_rules(rules)

        from core.ingestion.pdf_glyphs import load_pages

        pages = load_pages(path)
        plan = _locate(source, pages, matchers, self.workers)
        logger.info(
            f"Located {plan.total_redactions} region(s) in {path.name} "
            f"({len(pages)} page(s), {len(matchers)} rule(s))"
        )
        return plan
