"""Flattening: rasterize every page so no text layer survives redaction."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional

import fitz  # PyMuPDF
import pypdfium2 as pdfium

from core.config import config

logger = logging.getLogger(__name__)

MIN_DPI = 72
MAX_DPI = 600


def _render_page_jpeg(pdf_page: pdfium.PdfPage, dpi: int, quality: int) -> tuple[bytes, int, int]:
    bitmap = pdf_page.render(scale=dpi / 72.0)
    try:
        image = bitmap.to_pil().convert("RGB")
    finally:
        bitmap.close()

    buf = io.BytesIO()
    image.save(buf, format="JPEG", quality=quality)
    return buf.getvalue(), image.width, image.height


def flatten_pdf(
    source_path: str | Path,
    output_path: str | Path,
    dpi: Optional[int] = None,
) -> int:
    """Rebuild *source_path* as an image-only PDF at *output_path*.

    Each page is rendered with PDFium, JPEG-encoded, and placed on a new
    page whose size (in points) is the bitmap size scaled back from *dpi*.

    Returns:
        The number of pages written.
    """
    if not source_path or not str(source_path).strip():
        raise ValueError("Source path cannot be empty")
    if not output_path or not str(output_path).strip():
        raise ValueError("Output path cannot be empty")

    dpi = config.flatten_dpi if dpi is None else dpi
    if not MIN_DPI <= dpi <= MAX_DPI:
        raise ValueError(f"DPI must be between {MIN_DPI} and {MAX_DPI}, got {dpi}")

    source = Path(source_path)
    if not source.is_file():
        raise FileNotFoundError(f"Source PDF file not found: {source}")

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    src_doc = pdfium.PdfDocument(str(source))
    if len(src_doc) == 0:
        src_doc.close()
        raise ValueError(f"Source PDF has no pages: {source}")

    out_doc = fitz.open()
    try:
        for page_index in range(len(src_doc)):
            pdf_page = src_doc[page_index]
            try:
                data, px_w, px_h = _render_page_jpeg(pdf_page, dpi, config.jpeg_quality)
            finally:
                pdf_page.close()

            new_page = out_doc.new_page(width=px_w / dpi * 72.0, height=px_h / dpi * 72.0)
            new_page.insert_image(new_page.rect, stream=data)
            logger.debug("Flattened page %d (%dx%d px)", page_index + 1, px_w, px_h)

        pages = len(out_doc)
        out_doc.save(str(output), deflate=True)
    finally:
        out_doc.close()
        src_doc.close()

    logger.info(f"Flattened {pages} page(s) at {dpi} DPI → {output}")
    return pages
