from __future__ import annotations

from typing import Any, Protocol

from pdf_signing_core.models import AuditEntry, Document


class ObjectStore(Protocol):
    def put(self, key: str, data: bytes, *, content_type: str | None = None) -> str: ...
    def get(self, url: str) -> bytes: ...
    def delete(self, key: str) -> None: ...


class DocumentStore(Protocol):
    def get(self, document_id: str) -> Document: ...
    def insert(self, doc: Document) -> Document: ...
    def update(self, document_id: str, fields: dict[str, Any]) -> None: ...
    def delete(self, document_id: str) -> None: ...


class AuditLog(Protocol):
    def append(
        self,
        document_id: str,
        action: str,
        details: str = "",
        *,
        actor: str | None = None,
    ) -> None: ...

    def list_entries(self, document_id: str) -> list[AuditEntry]: ...


class Mailer(Protocol):
    def send(self, to: str, template_params: dict[str, str]) -> bool: ...


class Viewport(Protocol):
    """The rendering surface showing the document."""

    def page_container_width(self) -> float | None: ...


class ImageSource(Protocol):
    def fetch(self, image_ref: str) -> bytes: ...
