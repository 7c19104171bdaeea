from __future__ import annotations

import io
import os
import uuid
from collections.abc import Callable, Generator
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any

import fitz
import psycopg
import pytest
from PIL import Image

from pdf_signing_core.db import connect
from pdf_signing_core.errors import DocumentNotFound
from pdf_signing_core.migrations.runner import apply_migrations
from pdf_signing_core.models import AuditEntry, Document


@pytest.fixture(scope="session")
def pg_dsn() -> str:
    dsn = os.environ.get("PG_DSN")
    if not dsn:
        pytest.skip("PG_DSN not set; skipping DB integration tests")
    return dsn


@pytest.fixture(scope="session")
def pg_schema(pg_dsn: str) -> Generator[str, None, None]:
    schema = f"test_{uuid.uuid4().hex[:10]}"
    apply_migrations(pg_dsn, schema=schema)
    yield schema
    with psycopg.connect(pg_dsn) as conn:
        conn.execute(f'drop schema if exists "{schema}" cascade')
        conn.commit()


@pytest.fixture()
def conn(pg_dsn: str, pg_schema: str) -> Generator[psycopg.Connection, None, None]:
    with connect(pg_dsn, schema=pg_schema) as c:
        yield c


class FakeObjectStore:
    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.puts: list[str] = []
        self.fail_put = False
        self._version = 0

    def put(self, key: str, data: bytes, *, content_type: str | None = None) -> str:
        if self.fail_put:
            raise OSError("object store unavailable")
        self._version += 1
        self.objects[key] = data
        self.puts.append(key)
        return f"mem://{key}?v={self._version}"

    def get(self, url: str) -> bytes:
        key = url.removeprefix("mem://").split("?", 1)[0]
        return self.objects[key]

    def delete(self, key: str) -> None:
        self.objects.pop(key, None)


class FakeDocumentStore:
    def __init__(self) -> None:
        self.docs: dict[str, Document] = {}
        self.fail_update = False
        self.updates: list[dict[str, Any]] = []

    def get(self, document_id: str) -> Document:
        try:
            return self.docs[document_id]
        except KeyError:
            raise DocumentNotFound(document_id) from None

    def insert(self, doc: Document) -> Document:
        self.docs[doc.id] = doc
        return doc

    def update(self, document_id: str, fields: dict[str, Any]) -> None:
        if self.fail_update:
            raise psycopg.OperationalError("connection lost")
        doc = self.get(document_id)
        if "signatures" in fields:
            fields = {**fields, "signatures": tuple(fields["signatures"])}
        self.updates.append(fields)
        self.docs[document_id] = replace(doc, **fields)

    def delete(self, document_id: str) -> None:
        self.docs.pop(document_id, None)


class FakeAuditLog:
    def __init__(self) -> None:
        self.entries: list[AuditEntry] = []
        self.fail = False

    def append(
        self,
        document_id: str,
        action: str,
        details: str = "",
        *,
        actor: str | None = None,
    ) -> None:
        if self.fail:
            raise RuntimeError("audit log down")
        self.entries.append(AuditEntry(document_id=document_id, action=action, details=details, actor=actor))

    def list_entries(self, document_id: str) -> list[AuditEntry]:
        return [e for e in reversed(self.entries) if e.document_id == document_id]

    def actions(self, document_id: str) -> list[str]:
        return [e.action for e in self.entries if e.document_id == document_id]


class FakeViewport:
    def __init__(self, width: float | None):
        self.width = width

    def page_container_width(self) -> float | None:
        return self.width


class FakeMailer:
    def __init__(self, *, ok: bool = True):
        self.ok = ok
        self.sent: list[tuple[str, dict[str, str]]] = []

    def send(self, to: str, template_params: dict[str, str]) -> bool:
        self.sent.append((to, template_params))
        return self.ok


class TickingClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


def build_pdf(pages: int = 3, *, width: float = 612, height: float = 792) -> bytes:
    doc = fitz.open()
    for _ in range(pages):
        doc.new_page(width=width, height=height)
    data = doc.tobytes()
    doc.close()
    return data


def build_image(fmt: str = "PNG", size: tuple[int, int] = (40, 20)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, (200, 10, 10)).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture()
def document_store() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture()
def audit_log() -> FakeAuditLog:
    return FakeAuditLog()


@pytest.fixture()
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture()
def pdf_factory() -> Callable[..., bytes]:
    return build_pdf


@pytest.fixture()
def image_factory() -> Callable[..., bytes]:
    return build_image


@pytest.fixture()
def viewport_factory() -> Callable[[float | None], FakeViewport]:
    return FakeViewport


@pytest.fixture()
def mailer() -> FakeMailer:
    return FakeMailer()
