from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pdf_signing_core.lifecycle import LifecycleEvent
    from pdf_signing_core.models import DocumentStatus


class SigningError(RuntimeError):
    pass


class GeometryUnavailable(SigningError):
    """The rendered page container has no measurable width yet."""


class InvalidPdf(SigningError):
    pass


class UnsupportedImageFormat(SigningError):
    pass


class OutOfRangePage(SigningError):
    def __init__(self, page: int, page_count: int):
        super().__init__(f"Page {page} is outside 1..{page_count}")
        self.page = page
        self.page_count = page_count


class StorageFailure(SigningError):
    pass


class PersistenceFailure(SigningError):
    pass


class DocumentNotFound(PersistenceFailure):
    def __init__(self, document_id: str):
        super().__init__(f"Document not found: {document_id}")
        self.document_id = document_id


class PartialFinalizeError(PersistenceFailure):
    """
    Signed bytes were uploaded but the document record could not be updated.

    The record still points at the pre-signing state; `file_location` is the
    reference returned by the upload and must be reconciled by hand or by a
    repair job.
    """

    def __init__(self, document_id: str, *, storage_key: str, file_location: str):
        super().__init__(
            f"Signed bytes for {document_id} uploaded to {storage_key} "
            "but the document record was not updated"
        )
        self.document_id = document_id
        self.storage_key = storage_key
        self.file_location = file_location


class TransitionRejected(SigningError):
    def __init__(self, current: DocumentStatus, event: LifecycleEvent):
        super().__init__(f"Cannot apply {event.value} to a document in status {current.value}")
        self.current = current
        self.event = event


class DeliveryFailure(SigningError):
    pass
