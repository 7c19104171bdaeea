from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from datetime import datetime

from pdf_signing_core.compositor import composite
from pdf_signing_core.errors import (
    DeliveryFailure,
    PartialFinalizeError,
    SigningError,
    StorageFailure,
)
from pdf_signing_core.images import StoredImageSource
from pdf_signing_core.lifecycle import LifecycleEvent, transition
from pdf_signing_core.models import Document, SignatureAnnotation
from pdf_signing_core.persistence import DocumentLocks, apply_update, fetch_document, log_action, utcnow
from pdf_signing_core.ports import AuditLog, DocumentStore, ImageSource, Mailer, ObjectStore, Viewport

logger = logging.getLogger(__name__)

DEFAULT_DELIVERY_MESSAGE = "Please find the signed document attached via the link below."


@dataclass(frozen=True)
class FinalizeResult:
    document: Document
    pdf_bytes: bytes

    @property
    def file_location(self) -> str:
        return self.document.file_location

    @property
    def download_name(self) -> str:
        return f"signed_{self.document.original_name}"


class SigningService:
    """
    Finalizes (Uploaded|Draft -> Signed) and delivers (Signed -> Sent) documents.

    Both operations hold the per-document lock (shared with `DraftService` when
    both are given the same `DocumentLocks`) for their whole duration, so a
    second finalize of the same document waits, re-reads the record, and is
    rejected by the lifecycle once the first has marked it Signed.
    """

    def __init__(
        self,
        documents: DocumentStore,
        storage: ObjectStore,
        audit: AuditLog,
        *,
        mailer: Mailer | None = None,
        images: ImageSource | None = None,
        locks: DocumentLocks | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._documents = documents
        self._storage = storage
        self._audit = audit
        self._mailer = mailer
        self._images = images or StoredImageSource(storage)
        self._locks = locks if locks is not None else DocumentLocks()
        self._clock = clock

    def _download(self, url: str) -> bytes:
        try:
            return self._storage.get(url)
        except SigningError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise StorageFailure(f"Could not download {url}") from exc

    def _upload(self, key: str, data: bytes) -> str:
        try:
            return self._storage.put(key, data, content_type="application/pdf")
        except SigningError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise StorageFailure(f"Could not upload {key}") from exc

    def finalize(
        self,
        document_id: str,
        annotations: Sequence[SignatureAnnotation],
        *,
        viewport: Viewport,
        actor: str | None = None,
    ) -> FinalizeResult:
        with self._locks.hold(document_id):
            doc = fetch_document(self._documents, document_id)
            status = transition(doc.status, LifecycleEvent.FINALIZE)
            logger.info("Finalizing %s with %s signatures", doc.id, len(annotations))

            original = self._download(doc.file_location)
            signed = composite(original, annotations, viewport=viewport, images=self._images)

            # Upload first: a failed upload leaves the record untouched.
            location = self._upload(doc.storage_key, signed)
            now = self._clock()
            try:
                apply_update(
                    self._documents,
                    doc.id,
                    {
                        "status": status,
                        "file_location": location,
                        "signatures": (),
                        "last_modified": now,
                    },
                )
            except SigningError as exc:
                logger.error(
                    "Reconciliation required: signed bytes for %s are at %s (%s) "
                    "but the record still reads status=%s file_location=%s",
                    doc.id,
                    doc.storage_key,
                    location,
                    doc.status.value,
                    doc.file_location,
                )
                raise PartialFinalizeError(
                    doc.id,
                    storage_key=doc.storage_key,
                    file_location=location,
                ) from exc

            log_action(
                self._audit,
                doc.id,
                "Document Signed",
                "User finalized and signed the document.",
                actor=actor,
            )
            signed_doc = replace(
                doc,
                status=status,
                file_location=location,
                signatures=(),
                last_modified=now,
            )
            return FinalizeResult(document=signed_doc, pdf_bytes=signed)

    def deliver(
        self,
        document_id: str,
        recipient: str,
        *,
        sender_email: str,
        sender_name: str | None = None,
        message: str = DEFAULT_DELIVERY_MESSAGE,
    ) -> Document:
        with self._locks.hold(document_id):
            doc = fetch_document(self._documents, document_id)
            status = transition(doc.status, LifecycleEvent.DELIVER)
            if self._mailer is None:
                raise DeliveryFailure("No mail delivery configured")

            params = {
                "to_email": recipient,
                "document_name": doc.original_name,
                "download_link": doc.file_location,
                "from_name": sender_name or sender_email,
                "from_email": sender_email,
                "reply_to": sender_email,
                "message": message,
            }
            if not self._mailer.send(recipient, params):
                raise DeliveryFailure(f"Could not send {doc.id} to {recipient}")

            now = self._clock()
            apply_update(self._documents, doc.id, {"status": status, "last_modified": now})
            log_action(
                self._audit,
                doc.id,
                "Document Emailed",
                f"Signed PDF sent to {recipient}",
                actor=sender_email,
            )
            return replace(doc, status=status, last_modified=now)
