from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class DocumentStatus(str, Enum):
    UPLOADED = "Uploaded"
    DRAFT = "Draft"
    SIGNED = "Signed"
    SENT = "Sent"


@dataclass(frozen=True)
class SignatureAnnotation:
    """
    A signature image placed on a page, in viewport pixel space.

    `x`/`y` are the top-left corner relative to the rendered page container.
    `page` is 1-based.
    """

    id: str
    image_ref: str
    x: float
    y: float
    width: float
    height: float
    page: int

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("annotation id must be non-empty")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("annotation width and height must be > 0")
        if self.page < 1:
            raise ValueError("annotation page must be >= 1")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SignatureAnnotation:
        # Drafts written by the browser editor use `url` and numeric ids.
        image_ref = data.get("image_ref") or data.get("url")
        if not isinstance(image_ref, str) or not image_ref:
            raise ValueError("annotation is missing image_ref")
        return cls(
            id=str(data["id"]),
            image_ref=image_ref,
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
            page=int(data["page"]),
        )


@dataclass(frozen=True)
class Document:
    id: str
    owner_id: str
    original_name: str
    file_location: str
    storage_key: str
    status: DocumentStatus = DocumentStatus.UPLOADED
    signatures: tuple[SignatureAnnotation, ...] = field(default_factory=tuple)
    created_at: datetime | None = None
    last_modified: datetime | None = None


@dataclass(frozen=True)
class AuditEntry:
    document_id: str
    action: str
    details: str
    actor: str | None = None
    created_at: datetime | None = None
