from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

import psycopg

logger = logging.getLogger(__name__)

SQL_DIR = Path(__file__).resolve().parent / "sql"


@dataclass(frozen=True)
class Migration:
    version: str
    path: Path

    def read(self) -> str:
        return self.path.read_text(encoding="utf-8")


def discover_migrations(directory: Path = SQL_DIR) -> list[Migration]:
    return [Migration(version=p.stem, path=p) for p in sorted(directory.glob("*.sql"))]


def _prepare(conn: psycopg.Connection, schema: str) -> set[str]:
    conn.execute(f'create schema if not exists "{schema}"')
    conn.execute(f'set search_path to "{schema}"')
    conn.execute(
        """
        create table if not exists signing_schema_migrations (
          version text primary key,
          applied_at timestamptz not null default now()
        )
        """
    )
    rows = conn.execute("select version from signing_schema_migrations").fetchall()
    conn.commit()
    return {r[0] for r in rows}


def pending_migrations(
    conn: psycopg.Connection,
    *,
    schema: str = "public",
    migrations: Sequence[Migration] | None = None,
) -> list[Migration]:
    done = _prepare(conn, schema)
    candidates = migrations if migrations is not None else discover_migrations()
    return [m for m in candidates if m.version not in done]


def apply_migrations(
    dsn: str,
    *,
    schema: str = "public",
    migrations: Iterable[Migration] | None = None,
) -> list[str]:
    """
    Apply outstanding migrations into `schema`, one transaction each.

    Returns the versions applied by this call; a second call returns `[]`.
    """
    applied: list[str] = []
    with psycopg.connect(dsn) as conn:
        conn.execute("set timezone to 'UTC'")
        todo = pending_migrations(
            conn,
            schema=schema,
            migrations=list(migrations) if migrations is not None else None,
        )
        for mig in todo:
            with conn.transaction():
                conn.execute(mig.read())
                conn.execute(
                    "insert into signing_schema_migrations(version) values (%s)",
                    (mig.version,),
                )
            logger.info("Applied migration %s to schema %s", mig.version, schema)
            applied.append(mig.version)
    return applied
