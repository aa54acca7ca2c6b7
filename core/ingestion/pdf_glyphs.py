"""PDF glyph source: per-page characters, words and rotation via PDFium."""

from __future__ import annotations

import logging
from pathlib import Path

import pypdfium2 as pdfium

from models.schemas import BBox, Glyph, PageData, TextBlock

logger = logging.getLogger(__name__)


def _flush_word(word_glyphs: list[Glyph], words: list[TextBlock]) -> None:
    if not word_glyphs:
        return
    words.append(TextBlock(
        text="".join(g.text for g in word_glyphs),
        bbox=BBox(
            x0=min(g.bbox.x0 for g in word_glyphs),
            y0=min(g.bbox.y0 for g in word_glyphs),
            x1=max(g.bbox.x1 for g in word_glyphs),
            y1=max(g.bbox.y1 for g in word_glyphs),
        ),
    ))


def _extract_page(pdf_page: pdfium.PdfPage, page_index: int) -> PageData:
    """Extract glyphs and whitespace-delimited words from one page.

    pypdfium2 reports char boxes as ``(left, bottom, right, top)`` in PDF
    user space, which is already the bottom-left origin used throughout.
    """
    glyphs: list[Glyph] = []
    words: list[TextBlock] = []

    textpage = pdf_page.get_textpage()
    try:
        n_chars = textpage.count_chars()
        word_index = 0
        word_glyphs: list[Glyph] = []

        for i in range(n_chars):
            char = textpage.get_text_range(index=i, count=1)
            if not char or char.isspace():
                # End of word; PDFium also emits generated spaces/newlines
                if word_glyphs:
                    _flush_word(word_glyphs, words)
                    word_glyphs = []
                    word_index += 1
                continue

            left, bottom, right, top = textpage.get_charbox(i)
            glyph = Glyph(
                text=char,
                bbox=BBox(x0=left, y0=bottom, x1=right, y1=top),
                word_index=word_index,
            )
            glyphs.append(glyph)
            word_glyphs.append(glyph)

        _flush_word(word_glyphs, words)
    finally:
        textpage.close()

    return PageData(
        page_number=page_index + 1,
        width=pdf_page.get_width(),
        height=pdf_page.get_height(),
        rotation=pdf_page.get_rotation(),
        glyphs=glyphs,
        words=words,
    )


def load_pages(pdf_path: str | Path) -> list[PageData]:
    """Materialize the text geometry of every page, in document order.

    PDFium is not thread-safe, so extraction is strictly sequential; the
    resulting :class:`PageData` objects are plain data and can be processed
    concurrently afterwards.
    """
    doc = pdfium.PdfDocument(str(pdf_path))
    try:
        pages: list[PageData] = []
        for page_index in range(len(doc)):
            pdf_page = doc[page_index]
            try:
                page = _extract_page(pdf_page, page_index)
            finally:
                pdf_page.close()
            logger.debug(
                "Page %d: %d glyph(s), %d word(s), rotation %d",
                page.page_number, len(page.glyphs), len(page.words or []), page.rotation,
            )
            pages.append(page)
    finally:
        doc.close()

    logger.info(f"Loaded {len(pages)} page(s) from {pdf_path}")
    return pages
