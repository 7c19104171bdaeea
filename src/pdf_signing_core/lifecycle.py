from __future__ import annotations

from enum import Enum

from pdf_signing_core.errors import TransitionRejected
from pdf_signing_core.models import DocumentStatus


class LifecycleEvent(str, Enum):
    SAVE_DRAFT = "save_draft"
    FINALIZE = "finalize"
    DELIVER = "deliver"


# Signed/Sent documents only return to Draft through a fresh upload.
_TRANSITIONS: dict[tuple[DocumentStatus, LifecycleEvent], DocumentStatus] = {
    (DocumentStatus.UPLOADED, LifecycleEvent.SAVE_DRAFT): DocumentStatus.DRAFT,
    (DocumentStatus.DRAFT, LifecycleEvent.SAVE_DRAFT): DocumentStatus.DRAFT,
    (DocumentStatus.UPLOADED, LifecycleEvent.FINALIZE): DocumentStatus.SIGNED,
    (DocumentStatus.DRAFT, LifecycleEvent.FINALIZE): DocumentStatus.SIGNED,
    (DocumentStatus.SIGNED, LifecycleEvent.DELIVER): DocumentStatus.SENT,
}


def transition(current: DocumentStatus, event: LifecycleEvent) -> DocumentStatus:
    try:
        return _TRANSITIONS[(current, event)]
    except KeyError:
        raise TransitionRejected(current, event) from None


def can_transition(current: DocumentStatus, event: LifecycleEvent) -> bool:
    return (current, event) in _TRANSITIONS


def allowed_events(current: DocumentStatus) -> list[LifecycleEvent]:
    return [ev for (status, ev) in _TRANSITIONS if status == current]
