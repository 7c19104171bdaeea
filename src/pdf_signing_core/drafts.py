from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime

from pdf_signing_core.annotations import Placement, SignatureRecordStore
from pdf_signing_core.lifecycle import LifecycleEvent, transition
from pdf_signing_core.models import Document, SignatureAnnotation
from pdf_signing_core.persistence import DocumentLocks, apply_update, fetch_document, log_action, utcnow
from pdf_signing_core.ports import AuditLog, DocumentStore

logger = logging.getLogger(__name__)


class DraftService:
    """
    Persists in-progress signature placements on the document record.

    Drafts never touch the stored PDF bytes. The lifecycle check runs against
    the stored record under the per-document lock, so a caller holding an
    out-of-date copy cannot pull a Signed document back to Draft.
    """

    def __init__(
        self,
        documents: DocumentStore,
        audit: AuditLog,
        *,
        default_placement: Placement | None = None,
        locks: DocumentLocks | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._documents = documents
        self._audit = audit
        self._placement = default_placement
        self._locks = locks if locks is not None else DocumentLocks()
        self._clock = clock

    def save_draft(
        self,
        document: Document,
        annotations: Iterable[SignatureAnnotation],
        *,
        actor: str | None = None,
    ) -> Document:
        snapshot = tuple(annotations)
        with self._locks.hold(document.id):
            current = fetch_document(self._documents, document.id)
            status = transition(current.status, LifecycleEvent.SAVE_DRAFT)
            now = self._clock()
            apply_update(
                self._documents,
                current.id,
                {"signatures": snapshot, "status": status, "last_modified": now},
            )
        logger.info("Saved draft for %s with %s signatures", current.id, len(snapshot))
        log_action(
            self._audit,
            current.id,
            "Draft Saved",
            "User saved signature positions.",
            actor=actor,
        )
        return replace(current, signatures=snapshot, status=status, last_modified=now)

    def load_draft(self, document: Document) -> list[SignatureAnnotation]:
        return list(document.signatures)

    def open_for_editing(self, document_id: str) -> tuple[Document, SignatureRecordStore]:
        doc = fetch_document(self._documents, document_id)
        store = SignatureRecordStore(self.load_draft(doc), default_placement=self._placement)
        return doc, store
