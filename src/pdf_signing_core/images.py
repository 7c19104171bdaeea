from __future__ import annotations

import base64
import binascii
import io
from dataclasses import dataclass

from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from pdf_signing_core.errors import StorageFailure, UnsupportedImageFormat
from pdf_signing_core.ports import ObjectStore

_DATA_URL_PREFIX = "data:"


@dataclass(frozen=True)
class SignatureImage:
    format: str  # "PNG" | "JPEG"
    width_px: int
    height_px: int
    data: bytes


def parse_data_url(url: str) -> bytes:
    header, sep, payload = url.partition(",")
    if not sep or not header.startswith(_DATA_URL_PREFIX):
        raise UnsupportedImageFormat("Malformed data URL")
    if not header.endswith(";base64"):
        raise UnsupportedImageFormat("Only base64 data URLs are supported")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise UnsupportedImageFormat("Data URL payload is not valid base64") from exc


def png_data_url(png_bytes: bytes) -> str:
    b64 = base64.b64encode(png_bytes).decode("ascii")
    return f"data:image/png;base64,{b64}"


class StoredImageSource:
    """Resolves signature refs that are either inline data URLs or object-store URLs."""

    def __init__(self, store: ObjectStore):
        self._store = store

    def fetch(self, image_ref: str) -> bytes:
        if image_ref.startswith(_DATA_URL_PREFIX):
            return parse_data_url(image_ref)
        try:
            return self._store.get(image_ref)
        except Exception as exc:  # noqa: BLE001
            raise StorageFailure(f"Could not fetch signature image {image_ref}") from exc


def _try_decode(data: bytes, fmt: str) -> SignatureImage | None:
    try:
        with Image.open(io.BytesIO(data), formats=[fmt]) as img:
            img.load()
            return SignatureImage(format=fmt, width_px=img.width, height_px=img.height, data=data)
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        return None


def decode_signature_image(data: bytes) -> SignatureImage:
    """PNG first, then JPEG; anything else is rejected."""
    decoded = _try_decode(data, "PNG") or _try_decode(data, "JPEG")
    if decoded is None:
        raise UnsupportedImageFormat("Signature image is neither PNG nor JPEG")
    return decoded


def render_typed_signature(
    text: str,
    *,
    width: int = 400,
    height: int = 100,
    font_size: int = 48,
) -> bytes:
    """
    Render typed text as a transparent PNG signature stamp.
    """
    if not text.strip():
        raise ValueError("text must be non-empty")
    img = Image.new("RGBA", (width, height), (255, 255, 255, 0))
    draw = ImageDraw.Draw(img)
    font = ImageFont.load_default(size=font_size)
    # Top of the glyphs sits so the baseline lands near 60% of the canvas height.
    draw.text((20, max(0, int(height * 0.6) - font_size)), text, fill=(0, 0, 0, 255), font=font)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
