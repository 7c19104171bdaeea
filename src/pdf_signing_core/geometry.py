from __future__ import annotations

import math
from dataclasses import dataclass

from pdf_signing_core.errors import GeometryUnavailable
from pdf_signing_core.models import SignatureAnnotation
from pdf_signing_core.ports import Viewport


@dataclass(frozen=True)
class PdfRect:
    """Rectangle in PDF point space: origin bottom-left, y grows upward."""

    x: float
    y: float
    width: float
    height: float

    def to_page_rect(self, page_height: float) -> tuple[float, float, float, float]:
        """
        Corners `(x0, y0, x1, y1)` in PyMuPDF page space (origin top-left, y down).
        """
        top = page_height - self.y - self.height
        return (self.x, top, self.x + self.width, top + self.height)


def _usable_width(width: float | None) -> float:
    if width is None or not math.isfinite(width) or width <= 0:
        raise GeometryUnavailable("Rendered page width is not available; wait for the page to render")
    return float(width)


def measure_page_width(viewport: Viewport) -> float:
    return _usable_width(viewport.page_container_width())


def scale_ratio(pdf_page_width: float, dom_page_width: float | None) -> float:
    dom_page_width = _usable_width(dom_page_width)
    if not math.isfinite(pdf_page_width) or pdf_page_width <= 0:
        raise ValueError("pdf_page_width must be a positive finite number")
    return pdf_page_width / dom_page_width


def viewport_to_pdf_rect(
    annotation: SignatureAnnotation,
    *,
    pdf_page_width: float,
    pdf_page_height: float,
    dom_page_width: float | None,
) -> PdfRect:
    """
    Map an annotation's pixel rectangle onto the target page's point space.

    One ratio serves both axes: the viewer renders pages at their native aspect
    ratio, so only the width needs measuring.
    """
    ratio = scale_ratio(pdf_page_width, dom_page_width)
    return PdfRect(
        x=annotation.x * ratio,
        y=pdf_page_height - (annotation.y + annotation.height) * ratio,
        width=annotation.width * ratio,
        height=annotation.height * ratio,
    )
