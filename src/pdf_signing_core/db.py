from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import psycopg
from pydantic import SecretStr


@dataclass(frozen=True)
class PostgresConfig:
    dsn: str | None = None
    host: str | None = None
    port: int = 5432
    db: str | None = None
    user: str | None = None
    password: SecretStr | str | None = None
    application_name: str = "pdf-signing-core"

    def build_dsn(self) -> str:
        if self.dsn:
            return self.dsn
        required = {
            "POSTGRES_HOST": self.host,
            "POSTGRES_DB": self.db,
            "POSTGRES_USER": self.user,
            "POSTGRES_PASSWORD": self.password,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ValueError(f"Missing Postgres config: {', '.join(missing)} (or set PG_DSN)")
        password = self.password
        if isinstance(password, SecretStr):
            password = password.get_secret_value()
        return (
            f"postgresql://{self.user}:{password}@{self.host}:{self.port}/{self.db}"
            f"?application_name={self.application_name}"
        )


@contextmanager
def connect(dsn: str, *, schema: str = "public") -> Iterator[psycopg.Connection]:
    """Connection pinned to `schema` with UTC timestamps."""
    with psycopg.connect(dsn, options=f"-c search_path={schema} -c timezone=UTC") as conn:
        yield conn
