from __future__ import annotations

import logging
from collections.abc import Sequence

import fitz  # PyMuPDF

from pdf_signing_core.errors import InvalidPdf, OutOfRangePage
from pdf_signing_core.geometry import measure_page_width, viewport_to_pdf_rect
from pdf_signing_core.images import decode_signature_image
from pdf_signing_core.models import SignatureAnnotation
from pdf_signing_core.ports import ImageSource, Viewport

logger = logging.getLogger(__name__)


def open_pdf(pdf_bytes: bytes) -> fitz.Document:
    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except (fitz.FileDataError, RuntimeError, ValueError) as exc:
        raise InvalidPdf(f"Could not parse PDF: {exc}") from exc
    if not doc.is_pdf or doc.page_count == 0:
        doc.close()
        raise InvalidPdf("Document has no pages")
    return doc


def target_page_index(annotation: SignatureAnnotation, page_count: int) -> int:
    if not 1 <= annotation.page <= page_count:
        raise OutOfRangePage(annotation.page, page_count)
    return annotation.page - 1


def composite(
    original_bytes: bytes,
    annotations: Sequence[SignatureAnnotation],
    *,
    viewport: Viewport,
    images: ImageSource,
) -> bytes:
    """
    Stamp every annotation onto its page and return the new PDF bytes.

    The viewport width is measured once, from the rendered page container,
    and reused for every page: pages are assumed to share one size. Images
    are drawn into the page content stream, so the result carries no form
    fields.

    Annotations pointing past the last page are skipped. An image that is
    neither PNG nor JPEG aborts the whole call with `UnsupportedImageFormat`.
    """
    doc = open_pdf(original_bytes)
    try:
        dom_page_width = measure_page_width(viewport)
        stamped = 0
        for ann in annotations:
            try:
                page_index = target_page_index(ann, doc.page_count)
            except OutOfRangePage as exc:
                logger.warning("Skipping annotation %s: %s", ann.id, exc)
                continue

            page = doc.load_page(page_index)
            image = decode_signature_image(images.fetch(ann.image_ref))
            rect = viewport_to_pdf_rect(
                ann,
                pdf_page_width=page.rect.width,
                pdf_page_height=page.rect.height,
                dom_page_width=dom_page_width,
            )
            page.insert_image(
                fitz.Rect(*rect.to_page_rect(page.rect.height)),
                stream=image.data,
                keep_proportion=False,
                overlay=True,
            )
            stamped += 1

        logger.info("Composited %s of %s annotations", stamped, len(annotations))
        return doc.tobytes(garbage=3, deflate=True)
    finally:
        doc.close()
