from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from uuid import uuid4

from pdf_signing_core.compositor import open_pdf
from pdf_signing_core.errors import PersistenceFailure, SigningError, StorageFailure
from pdf_signing_core.models import AuditEntry, Document, DocumentStatus
from pdf_signing_core.persistence import fetch_document, log_action, utcnow
from pdf_signing_core.ports import AuditLog, DocumentStore, ObjectStore
from pdf_signing_core.util import upload_key

logger = logging.getLogger(__name__)


class DocumentService:
    def __init__(
        self,
        documents: DocumentStore,
        storage: ObjectStore,
        audit: AuditLog,
        *,
        upload_prefix: str = "uploads",
        clock: Callable[[], datetime] = utcnow,
    ):
        self._documents = documents
        self._storage = storage
        self._audit = audit
        self._prefix = upload_prefix
        self._clock = clock

    def upload(
        self,
        owner_id: str,
        filename: str,
        pdf_bytes: bytes,
        *,
        actor: str | None = None,
    ) -> Document:
        open_pdf(pdf_bytes).close()

        now = self._clock()
        key = upload_key(self._prefix, owner_id, filename, now_ms=int(now.timestamp() * 1000))
        try:
            location = self._storage.put(key, pdf_bytes, content_type="application/pdf")
        except SigningError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise StorageFailure(f"Could not upload {key}") from exc

        doc = Document(
            id=uuid4().hex,
            owner_id=owner_id,
            original_name=filename,
            file_location=location,
            storage_key=key,
            status=DocumentStatus.UPLOADED,
            created_at=now,
            last_modified=now,
        )
        try:
            doc = self._documents.insert(doc)
        except Exception as exc:  # noqa: BLE001
            raise PersistenceFailure(f"Could not record upload {key}") from exc

        logger.info("Uploaded %s as %s", filename, doc.id)
        log_action(
            self._audit,
            doc.id,
            "Document Uploaded",
            f"File {filename} uploaded successfully.",
            actor=actor,
        )
        return doc

    def history(self, document_id: str) -> list[AuditEntry]:
        try:
            return self._audit.list_entries(document_id)
        except Exception as exc:  # noqa: BLE001
            raise PersistenceFailure(f"Could not read history for {document_id}") from exc

    def delete(self, document_id: str) -> None:
        """Remove the stored bytes, then the record (history goes with it)."""
        doc = fetch_document(self._documents, document_id)
        try:
            self._storage.delete(doc.storage_key)
        except SigningError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise StorageFailure(f"Could not delete {doc.storage_key}") from exc
        try:
            self._documents.delete(doc.id)
        except Exception as exc:  # noqa: BLE001
            raise PersistenceFailure(f"Could not delete document {doc.id}") from exc
        logger.info("Deleted document %s", doc.id)
