"""Mask application: burn opaque fills over every region of a plan."""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from typing import Optional

import fitz  # PyMuPDF

from core.config import config
from models.schemas import RedactionPlan, RedactionRegion

logger = logging.getLogger(__name__)

MASK_FILL = (0, 0, 0)  # Opaque black


class UnsupportedRotationError(RuntimeError):
    """A region targets a rotated page; no coordinate transform is defined."""


def _check_rotations(plan: RedactionPlan, pdf_doc: fitz.Document) -> None:
    """Refuse the whole document if any region would land on a rotated page."""
    for region in plan.regions:
        rotation = region.page_rotation
        if rotation == 0 and 1 <= region.page_number <= len(pdf_doc):
            rotation = pdf_doc[region.page_number - 1].rotation
        if rotation != 0:
            raise UnsupportedRotationError(
                f"Page {region.page_number} is rotated by {rotation}°; redaction masks "
                "cannot be applied to rotated pages. Rotate the PDF to 0° first."
            )


def _mask_rect(region: RedactionRegion, page: fitz.Page, padding: float) -> fitz.Rect:
    """Padded region rectangle in PyMuPDF (top-left origin) page space,
    clamped to the page."""
    pdf_rect = fitz.Rect(
        region.x - padding,
        region.y - padding,
        region.x + region.width + padding,
        region.y + region.height + padding,
    )
    # PDF user space (bottom-left origin) → MuPDF space
    return (pdf_rect * page.transformation_matrix) & page.rect


def apply_masks(
    plan: RedactionPlan,
    output_path: str | Path,
    padding: Optional[float] = None,
) -> int:
    """Write a copy of ``plan.source_path`` with every region masked.

    Regions are drawn as black redaction annotations and then applied, so
    the content underneath is removed, not just covered.

    Returns:
        The number of masks drawn.

    Raises:
        ValueError: If *output_path* is empty or equals the source.
        FileNotFoundError: If the source PDF does not exist.
        UnsupportedRotationError: If any region targets a rotated page.
    """
    if plan is None:
        raise ValueError("Plan cannot be None")
    if not output_path or not str(output_path).strip():
        raise ValueError("Output path cannot be empty")

    source = Path(plan.source_path)
    if not plan.source_path or not source.is_file():
        raise FileNotFoundError(f"Source PDF file not found: {plan.source_path}")

    output = Path(output_path)
    if output.resolve() == source.resolve():
        raise ValueError("Output path must differ from the source PDF")

    pad = config.mask_padding if padding is None else padding

    by_page: dict[int, list[RedactionRegion]] = defaultdict(list)
    for region in plan.regions:
        by_page[region.page_number].append(region)

    pdf_doc = fitz.open(str(source))
    try:
        _check_rotations(plan, pdf_doc)

        masks = 0
        for page_number in sorted(by_page):
            if page_number < 1 or page_number > len(pdf_doc):
                logger.warning(
                    f"Skipping {len(by_page[page_number])} region(s) for page {page_number}: "
                    f"document has {len(pdf_doc)} page(s)"
                )
                continue

            page = pdf_doc[page_number - 1]
            # Top-to-bottom, then left-to-right
            ordered = sorted(by_page[page_number], key=lambda r: (-r.y, r.x))
            for region in ordered:
                rect = _mask_rect(region, page, pad)
                if rect.is_empty:
                    logger.debug("Page %d: region outside page bounds, skipped", page_number)
                    continue
                page.add_redact_annot(rect, fill=MASK_FILL)
                masks += 1

            page.apply_redactions()

        output.parent.mkdir(parents=True, exist_ok=True)
        pdf_doc.save(str(output), deflate=True, garbage=3)
    finally:
        pdf_doc.close()

    logger.info(f"Applied {masks} mask(s) to {source.name} → {output}")
    return masks
