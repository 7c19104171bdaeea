from pdf_signing_core.repositories.audit import AuditLogRepository
from pdf_signing_core.repositories.documents import DocumentRepository

__all__ = [
    "AuditLogRepository",
    "DocumentRepository",
]
