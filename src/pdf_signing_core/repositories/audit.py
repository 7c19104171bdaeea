from __future__ import annotations

from uuid import uuid4

import psycopg

from pdf_signing_core.models import AuditEntry


class AuditLogRepository:
    def __init__(self, conn: psycopg.Connection):
        self._conn = conn

    def append(
        self,
        document_id: str,
        action: str,
        details: str = "",
        *,
        actor: str | None = None,
    ) -> None:
        self._conn.execute(
            """
            insert into document_history(entry_id, document_id, action, details, actor)
            values (%s::uuid, %s, %s, %s, %s)
            """,
            (str(uuid4()), document_id, action, details, actor),
        )
        self._conn.commit()

    def list_entries(self, document_id: str) -> list[AuditEntry]:
        rows = self._conn.execute(
            """
            select document_id, action, details, actor, created_at
            from document_history
            where document_id=%s
            order by created_at desc, entry_id
            """,
            (document_id,),
        ).fetchall()
        return [
            AuditEntry(
                document_id=r[0],
                action=r[1],
                details=r[2],
                actor=r[3],
                created_at=r[4],
            )
            for r in rows
        ]
