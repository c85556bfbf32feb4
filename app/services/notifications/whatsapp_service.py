# app/services/notifications/whatsapp_service.py
"""WhatsApp Cloud API delivery"""
import logging
from typing import Any, Dict, Mapping, Optional

import requests

from app.config.settings import Settings, get_settings
from app.models.message_template import MessagingProvider
from app.schemas.reminders import ProviderResponse
from app.services.exceptions import NotificationError

logger = logging.getLogger(__name__)


class WhatsAppCloudGateway:
    provider = MessagingProvider.WHATSAPP_CLOUD

    def __init__(self, token: Optional[str], number_id: Optional[str], settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.token = token
        self.number_id = number_id

    @property
    def url(self) -> str:
        return (
            f"{self.settings.WHATSAPP_API_BASE_URL.rstrip('/')}/"
            f"{self.settings.WHATSAPP_API_VERSION}/{self.number_id}/messages"
        )

    def send(self, to_phone: str, message: str, template_vars: Mapping[str, Any]) -> ProviderResponse:
        if not self.token or not self.number_id:
            logger.error("WhatsApp credentials are missing.")
            raise NotificationError("WhatsApp credentials are missing.")

        payload = self.build_payload(to_phone, message, template_vars)

        try:
            response = requests.post(
                self.url,
                json=payload,
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Accept": "application/json",
                },
                timeout=self.settings.NOTIFICATION_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            logger.error(f"WhatsApp send exception to {to_phone}: {e}")
            raise NotificationError(f"WhatsApp send exception: {e}", cause=e)

        body = self._json_body(response)

        if response.ok:
            accepted = (body.get("messages") or [{}])[0]
            logger.info(f"WhatsApp message accepted for {to_phone}: {accepted.get('id')}")
            return ProviderResponse(
                success=True,
                status_code=response.status_code,
                message_id=accepted.get("id"),
                status=accepted.get("message_status", "accepted"),
                payload=body,
            )

        error = body.get("error") or {}
        logger.warning(
            f"WhatsApp send failed ({response.status_code}) to {to_phone}: "
            f"{error.get('code', 'n/a')} {error.get('message', 'Unknown error')}"
        )
        return ProviderResponse(
            success=False,
            status_code=response.status_code,
            provider_code=str(error.get("code", "n/a")),
            error=error.get("message", "Unknown error"),
            payload=body,
        )

    def build_payload(self, to_phone: str, message: str, template_vars: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Pre-approved provider template when one is configured (required
        outside the 24h customer-care window), plain text otherwise.
        """
        template_name = self.settings.WHATSAPP_TEMPLATE_NAME
        if not template_name:
            return {
                "messaging_product": "whatsapp",
                "to": to_phone,
                "type": "text",
                "text": {"body": message},
            }

        return {
            "messaging_product": "whatsapp",
            "to": to_phone,
            "type": "template",
            "template": {
                "name": template_name,
                "language": {"code": self.settings.WHATSAPP_TEMPLATE_LANGUAGE},
                "components": [
                    {
                        "type": "body",
                        "parameters": [
                            {"type": "text", "text": str(template_vars.get("name") or "")},
                            {"type": "text", "text": str(template_vars.get("time") or "")},
                        ],
                    }
                ],
            },
        }

    @staticmethod
    def _json_body(response: requests.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {"raw": response.text}
        return body if isinstance(body, dict) else {"raw": body}
