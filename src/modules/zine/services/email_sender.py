import logging
from typing import Dict, Optional

import httpx

import config

logger = logging.getLogger(__name__)


class EmailError(Exception):
    """El proveedor de email rechazó o no completó la solicitud"""
    pass


class EmailJsSender:
    """Envía emails de plantilla a través de la API REST de EmailJS"""

    def __init__(self, service_id: Optional[str], template_id: Optional[str], public_key: Optional[str],
                 private_key: Optional[str] = None, api_url: str = config.EMAILJS_API_URL,
                 client: Optional[httpx.Client] = None):
        self.service_id = service_id
        self.template_id = template_id
        self.public_key = public_key
        self.private_key = private_key
        self.api_url = api_url
        self.client = client or httpx.Client(timeout=15.0)

    @classmethod
    def from_config(cls) -> "EmailJsSender":
        return cls(
            config.EMAILJS_SERVICE_ID,
            config.EMAILJS_TEMPLATE_ID,
            config.EMAILJS_PUBLIC_KEY,
            config.EMAILJS_PRIVATE_KEY,
        )

    @property
    def configured(self) -> bool:
        return bool(self.service_id and self.template_id and self.public_key)

    def send(self, template_params: Dict[str, str]) -> None:
        if not self.configured:
            raise EmailError("EmailJS is not configured")
        payload = {
            "service_id": self.service_id,
            "template_id": self.template_id,
            "user_id": self.public_key,
            "template_params": template_params,
        }
        if self.private_key:
            payload["accessToken"] = self.private_key
        try:
            response = self.client.post(self.api_url, json=payload)
        except httpx.HTTPError as e:
            raise EmailError(f"EmailJS request failed: {e}") from e
        if response.status_code >= 400:
            raise EmailError(f"EmailJS returned {response.status_code}: {response.text}")
