from pdf_signing_core.annotations import Placement, SignatureRecordStore
from pdf_signing_core.compositor import composite
from pdf_signing_core.config import Settings, load_settings
from pdf_signing_core.documents import DocumentService
from pdf_signing_core.drafts import DraftService
from pdf_signing_core.geometry import PdfRect, viewport_to_pdf_rect
from pdf_signing_core.lifecycle import LifecycleEvent, transition
from pdf_signing_core.models import AuditEntry, Document, DocumentStatus, SignatureAnnotation
from pdf_signing_core.persistence import DocumentLocks
from pdf_signing_core.signing import FinalizeResult, SigningService

__all__ = [
    "__version__",
    "AuditEntry",
    "Document",
    "DocumentLocks",
    "DocumentService",
    "DocumentStatus",
    "DraftService",
    "FinalizeResult",
    "LifecycleEvent",
    "PdfRect",
    "Placement",
    "Settings",
    "SignatureAnnotation",
    "SignatureRecordStore",
    "SigningService",
    "composite",
    "load_settings",
    "transition",
    "viewport_to_pdf_rect",
]

__version__ = "0.1.0"
