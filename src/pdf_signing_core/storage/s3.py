from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import parse_qs, urlsplit

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from pdf_signing_core.errors import StorageFailure
from pdf_signing_core.util import sha256_bytes


@dataclass(frozen=True)
class S3Ref:
    bucket: str
    key: str
    version: str | None = None


def parse_s3_uri(uri: str) -> S3Ref:
    """
    Parse `s3://bucket/key[?v=version]`.
    """
    if not uri.startswith("s3://"):
        raise ValueError(f"Not an s3:// URI: {uri}")
    parts = urlsplit(uri)
    bucket = parts.netloc
    key = parts.path.lstrip("/")
    if not bucket or not key:
        raise ValueError(f"Invalid s3:// URI: {uri}")
    version = (parse_qs(parts.query).get("v") or [None])[0]
    return S3Ref(bucket=bucket, key=key, version=version)


def build_s3_uri(bucket: str, key: str, version: str | None = None) -> str:
    uri = f"s3://{bucket}/{key}"
    return f"{uri}?v={version}" if version else uri


@dataclass(frozen=True)
class S3Config:
    endpoint: str
    bucket: str
    access_key: str
    secret_key: str
    region: str = "us-east-1"


class S3ObjectStore:
    """
    Object store backed by S3/MinIO.

    `put` returns a reference that changes whenever the bytes at a key change:
    the S3 VersionId on versioned buckets, a content digest otherwise.
    """

    def __init__(self, cfg: S3Config, *, client=None):  # noqa: ANN001
        self._cfg = cfg
        self._client = client or boto3.client(
            "s3",
            endpoint_url=cfg.endpoint,
            aws_access_key_id=cfg.access_key,
            aws_secret_access_key=cfg.secret_key,
            region_name=cfg.region,
            config=Config(s3={"addressing_style": "path"}),
        )

    @property
    def bucket(self) -> str:
        return self._cfg.bucket

    def _check_bucket(self, ref: S3Ref, uri: str) -> None:
        if ref.bucket != self._cfg.bucket:
            raise StorageFailure(f"Bucket mismatch for URI: {uri}")

    def put(self, key: str, data: bytes, *, content_type: str | None = None) -> str:
        extra: dict = {}
        if content_type:
            extra["ContentType"] = content_type
        try:
            resp = self._client.put_object(Bucket=self._cfg.bucket, Key=key, Body=data, **extra)
        except (BotoCoreError, ClientError) as exc:
            raise StorageFailure(f"Upload to {key} failed: {exc}") from exc
        version = resp.get("VersionId") if isinstance(resp, dict) else None
        if not version or version == "null":
            version = sha256_bytes(data)[:16]
        return build_s3_uri(self._cfg.bucket, key, version)

    def get(self, url: str) -> bytes:
        try:
            ref = parse_s3_uri(url)
        except ValueError as exc:
            raise StorageFailure(str(exc)) from exc
        self._check_bucket(ref, url)
        try:
            obj = self._client.get_object(Bucket=self._cfg.bucket, Key=ref.key)
            return obj["Body"].read()
        except (BotoCoreError, ClientError) as exc:
            raise StorageFailure(f"Download of {url} failed: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._client.delete_object(Bucket=self._cfg.bucket, Key=key)
        except ClientError as exc:
            code = (exc.response or {}).get("Error", {}).get("Code")
            if code in {"NoSuchKey", "NotFound"}:
                return
            raise StorageFailure(f"Delete of {key} failed: {exc}") from exc
        except BotoCoreError as exc:
            raise StorageFailure(f"Delete of {key} failed: {exc}") from exc
