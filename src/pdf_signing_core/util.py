from __future__ import annotations

import hashlib
import re
import time

_UNSAFE_NAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def safe_filename(name: str) -> str:
    cleaned = _UNSAFE_NAME_RE.sub("_", name.strip()).strip("._")
    return cleaned or "document.pdf"


def upload_key(prefix: str, owner_id: str, filename: str, *, now_ms: int | None = None) -> str:
    """
    Object key for a new upload: `<prefix>/<owner>/<millis>_<name>`.
    """
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{prefix.strip('/')}/{owner_id}/{stamp}_{safe_filename(filename)}"
