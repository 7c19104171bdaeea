from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from pdf_signing_core.errors import PersistenceFailure, SigningError
from pdf_signing_core.models import Document
from pdf_signing_core.ports import AuditLog, DocumentStore

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def fetch_document(documents: DocumentStore, document_id: str) -> Document:
    try:
        return documents.get(document_id)
    except SigningError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise PersistenceFailure(f"Could not load document {document_id}") from exc


def apply_update(documents: DocumentStore, document_id: str, fields: dict[str, Any]) -> None:
    try:
        documents.update(document_id, fields)
    except SigningError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise PersistenceFailure(f"Could not update document {document_id}") from exc


def log_action(
    audit: AuditLog,
    document_id: str,
    action: str,
    details: str = "",
    *,
    actor: str | None = None,
) -> None:
    """Append to the document history; a failing audit log never fails the caller."""
    try:
        audit.append(document_id, action, details, actor=actor)
    except Exception:  # noqa: BLE001
        logger.warning("Failed to log %r for document %s", action, document_id, exc_info=True)


class DocumentLocks:
    """
    One lock per document id, kept only while some caller holds or awaits it.

    Every mutation of a document record (draft save, finalize, deliver) runs
    under `hold()`, so services sharing one registry serialize on the same id.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._holders: dict[str, int] = {}

    @contextmanager
    def hold(self, document_id: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.get(document_id)
            if lock is None:
                lock = self._locks[document_id] = threading.Lock()
            self._holders[document_id] = self._holders.get(document_id, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                remaining = self._holders[document_id] - 1
                if remaining:
                    self._holders[document_id] = remaining
                else:
                    del self._holders[document_id]
                    del self._locks[document_id]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
