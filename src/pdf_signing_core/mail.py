from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailConfig:
    base_url: str
    service_id: str
    template_id: str
    public_key: str
    private_key: str | None = None
    timeout_s: float = 15.0


@dataclass(frozen=True)
class TransactionalMailClient:
    """
    Client for an EmailJS-compatible `/api/v1.0/email/send` endpoint.

    The message body lives in the provider-side template; callers supply
    only the template parameters.
    """

    cfg: MailConfig
    transport: httpx.BaseTransport | None = None

    def _body(self, template_params: dict[str, str]) -> dict:
        body = {
            "service_id": self.cfg.service_id,
            "template_id": self.cfg.template_id,
            "user_id": self.cfg.public_key,
            "template_params": template_params,
        }
        if self.cfg.private_key:
            body["accessToken"] = self.cfg.private_key
        return body

    def send(self, to: str, template_params: dict[str, str]) -> bool:
        params = {**template_params, "to_email": to}
        url = self.cfg.base_url.rstrip("/") + "/api/v1.0/email/send"
        try:
            with httpx.Client(timeout=self.cfg.timeout_s, transport=self.transport) as client:
                r = client.post(url, json=self._body(params))
                r.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Mail delivery to %s failed: %s", to, exc)
            return False
        return True
