from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pdf_signing_core.annotations import Placement
from pdf_signing_core.mail import MailConfig
from pdf_signing_core.storage.s3 import S3Config


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    pg_dsn: str | None = Field(default=None, alias="PG_DSN")

    s3_endpoint: str = Field(alias="S3_ENDPOINT")
    s3_bucket: str = Field(alias="S3_BUCKET")
    s3_access_key: str = Field(alias="S3_ACCESS_KEY")
    s3_secret_key: str = Field(alias="S3_SECRET_KEY")
    s3_region: str = Field(default="us-east-1", alias="S3_REGION")
    upload_prefix: str = Field(default="uploads", alias="UPLOAD_PREFIX")

    mail_api_url: str = Field(default="https://api.emailjs.com", alias="MAIL_API_URL")
    mail_service_id: str | None = Field(default=None, alias="MAIL_SERVICE_ID")
    mail_template_id: str | None = Field(default=None, alias="MAIL_TEMPLATE_ID")
    mail_public_key: str | None = Field(default=None, alias="MAIL_PUBLIC_KEY")
    mail_private_key: str | None = Field(default=None, alias="MAIL_PRIVATE_KEY")

    signature_default_x: float = Field(default=50.0, alias="SIGNATURE_DEFAULT_X")
    signature_default_y: float = Field(default=50.0, alias="SIGNATURE_DEFAULT_Y")
    signature_default_width: float = Field(default=200.0, gt=0, alias="SIGNATURE_DEFAULT_WIDTH")
    signature_default_height: float = Field(default=100.0, gt=0, alias="SIGNATURE_DEFAULT_HEIGHT")

    def s3_config(self) -> S3Config:
        return S3Config(
            endpoint=self.s3_endpoint,
            bucket=self.s3_bucket,
            access_key=self.s3_access_key,
            secret_key=self.s3_secret_key,
            region=self.s3_region,
        )

    def mail_config(self) -> MailConfig:
        missing = [
            name
            for name, value in (
                ("MAIL_SERVICE_ID", self.mail_service_id),
                ("MAIL_TEMPLATE_ID", self.mail_template_id),
                ("MAIL_PUBLIC_KEY", self.mail_public_key),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"Missing mail config: {', '.join(missing)}")
        return MailConfig(
            base_url=self.mail_api_url,
            service_id=self.mail_service_id or "",
            template_id=self.mail_template_id or "",
            public_key=self.mail_public_key or "",
            private_key=self.mail_private_key,
        )

    def default_placement(self) -> Placement:
        return Placement(
            x=self.signature_default_x,
            y=self.signature_default_y,
            width=self.signature_default_width,
            height=self.signature_default_height,
        )


def load_settings() -> Settings:
    return Settings()
