from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

import psycopg

from pdf_signing_core.errors import DocumentNotFound
from pdf_signing_core.models import Document, DocumentStatus, SignatureAnnotation

# Fields callers may change through `update`, mapped to their columns.
_UPDATABLE = {
    "original_name": "original_name",
    "file_location": "file_location",
    "status": "status",
    "signatures": "signatures",
    "last_modified": "last_modified",
}

_SELECT = """
select
  id, owner_id, original_name, file_location, storage_key,
  status, signatures, created_at, last_modified
from documents
"""


def signatures_to_json(signatures: Iterable[SignatureAnnotation]) -> str:
    return json.dumps([s.to_dict() for s in signatures])


def signatures_from_json(raw: Any) -> tuple[SignatureAnnotation, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        raw = json.loads(raw)
    return tuple(SignatureAnnotation.from_dict(item) for item in raw)


def _row_to_document(row: tuple) -> Document:
    return Document(
        id=row[0],
        owner_id=row[1],
        original_name=row[2],
        file_location=row[3],
        storage_key=row[4],
        status=DocumentStatus(row[5]),
        signatures=signatures_from_json(row[6]),
        created_at=row[7],
        last_modified=row[8],
    )


def _encode(field: str, value: Any) -> Any:
    if field == "signatures":
        return signatures_to_json(value or ())
    if field == "status":
        return DocumentStatus(value).value
    return value


class DocumentRepository:
    def __init__(self, conn: psycopg.Connection):
        self._conn = conn

    def insert(self, doc: Document) -> Document:
        row = self._conn.execute(
            """
            insert into documents(
              id, owner_id, original_name, file_location, storage_key,
              status, signatures, created_at, last_modified
            ) values (
              %s, %s, %s, %s, %s,
              %s, %s::jsonb, coalesce(%s, now()), coalesce(%s, now())
            )
            returning id, owner_id, original_name, file_location, storage_key,
                      status, signatures, created_at, last_modified
            """,
            (
                doc.id,
                doc.owner_id,
                doc.original_name,
                doc.file_location,
                doc.storage_key,
                doc.status.value,
                signatures_to_json(doc.signatures),
                doc.created_at,
                doc.last_modified,
            ),
        ).fetchone()
        self._conn.commit()
        return _row_to_document(row)

    def get(self, document_id: str) -> Document:
        row = self._conn.execute(_SELECT + "where id=%s", (document_id,)).fetchone()
        if not row:
            raise DocumentNotFound(document_id)
        return _row_to_document(row)

    def list_for_owner(self, owner_id: str) -> list[Document]:
        rows = self._conn.execute(
            _SELECT + "where owner_id=%s order by created_at desc",
            (owner_id,),
        ).fetchall()
        return [_row_to_document(r) for r in rows]

    def update(self, document_id: str, fields: dict[str, Any]) -> None:
        unknown = set(fields) - set(_UPDATABLE)
        if unknown:
            raise ValueError(f"Cannot update document fields: {', '.join(sorted(unknown))}")
        if not fields:
            return
        assignments = []
        params: list[Any] = []
        for name, value in fields.items():
            column = _UPDATABLE[name]
            cast = "::jsonb" if column == "signatures" else ""
            assignments.append(f"{column} = %s{cast}")
            params.append(_encode(name, value))
        params.append(document_id)
        cur = self._conn.execute(
            f"update documents set {', '.join(assignments)} where id=%s",  # noqa: S608
            params,
        )
        if cur.rowcount == 0:
            self._conn.rollback()
            raise DocumentNotFound(document_id)
        self._conn.commit()

    def delete(self, document_id: str) -> None:
        # document_history rows go with it (on delete cascade).
        self._conn.execute("delete from documents where id=%s", (document_id,))
        self._conn.commit()
