import pytest

from pdf_signing_core.errors import GeometryUnavailable
from pdf_signing_core.geometry import PdfRect, measure_page_width, scale_ratio, viewport_to_pdf_rect
from pdf_signing_core.models import SignatureAnnotation


def _ann(**overrides) -> SignatureAnnotation:  # noqa: ANN003
    fields = {"id": "a", "image_ref": "mem://sig.png", "x": 50, "y": 50, "width": 200, "height": 100, "page": 1}
    fields.update(overrides)
    return SignatureAnnotation(**fields)


def test_letter_page_rendered_at_500px() -> None:
    assert scale_ratio(612, 500) == pytest.approx(1.224)
    rect = viewport_to_pdf_rect(_ann(), pdf_page_width=612, pdf_page_height=792, dom_page_width=500)
    assert rect.x == pytest.approx(61.2)
    assert rect.y == pytest.approx(792 - 1.224 * 150)
    assert rect.y == pytest.approx(608.4)
    assert rect.width == pytest.approx(244.8)
    assert rect.height == pytest.approx(122.4)


def test_top_left_corner_maps_to_top_of_page() -> None:
    rect = viewport_to_pdf_rect(
        _ann(x=0, y=0, width=10, height=10),
        pdf_page_width=600,
        pdf_page_height=800,
        dom_page_width=600,
    )
    assert (rect.x, rect.y) == (0, 790)


@pytest.mark.parametrize("width", [None, 0, 0.0, -5, float("nan"), float("inf")])
def test_missing_viewport_width_is_rejected(width) -> None:  # noqa: ANN001
    with pytest.raises(GeometryUnavailable):
        viewport_to_pdf_rect(_ann(), pdf_page_width=612, pdf_page_height=792, dom_page_width=width)


def test_measure_page_width_requires_layout(viewport_factory) -> None:  # noqa: ANN001
    assert measure_page_width(viewport_factory(480)) == 480.0
    with pytest.raises(GeometryUnavailable):
        measure_page_width(viewport_factory(None))
    with pytest.raises(GeometryUnavailable):
        measure_page_width(viewport_factory(float("nan")))


def test_pdf_rect_flips_to_top_left_page_space() -> None:
    rect = PdfRect(x=61.2, y=608.4, width=244.8, height=122.4)
    x0, y0, x1, y1 = rect.to_page_rect(792)
    assert x0 == pytest.approx(61.2)
    assert y0 == pytest.approx(61.2)
    assert x1 == pytest.approx(306.0)
    assert y1 == pytest.approx(183.6)
