# app/services/twilio/sms_service.py
"""Twilio delivery (SMS, or WhatsApp when the sender is a whatsapp: address)"""
import logging
from typing import Any, Mapping, Optional

from twilio.base.exceptions import TwilioException, TwilioRestException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

from app.config.settings import Settings, get_settings
from app.models.message_template import MessagingProvider
from app.schemas.reminders import ProviderResponse
from app.services.exceptions import NotificationError

logger = logging.getLogger(__name__)


class TwilioNotificationGateway:
    provider = MessagingProvider.TWILIO

    def __init__(
            self,
            account_sid: Optional[str],
            auth_token: Optional[str],
            from_number: Optional[str],
            settings: Optional[Settings] = None,
            client: Optional[Client] = None,
    ):
        self.settings = settings or get_settings()
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self._client = client

    def _get_client(self) -> Client:
        if self._client is None:
            self._client = Client(
                self.account_sid,
                self.auth_token,
                http_client=TwilioHttpClient(timeout=self.settings.NOTIFICATION_TIMEOUT_SECONDS),
            )
        return self._client

    def send(self, to_phone: str, message: str, template_vars: Mapping[str, Any]) -> ProviderResponse:
        if not self.account_sid or not self.auth_token or not self.from_number:
            logger.error("Twilio credentials are missing.")
            raise NotificationError("Twilio credentials are missing.")

        # WhatsApp senders need a whatsapp: recipient as well
        if self.from_number.startswith("whatsapp:") and not to_phone.startswith("whatsapp:"):
            to_phone = f"whatsapp:{to_phone}"

        try:
            twilio_message = self._get_client().messages.create(
                body=message,
                from_=self.from_number,
                to=to_phone,
            )
        except TwilioRestException as e:
            logger.warning(f"Twilio rejected message to {to_phone} ({e.status}/{e.code}): {e.msg}")
            return ProviderResponse(
                success=False,
                status_code=e.status,
                provider_code=str(e.code) if e.code is not None else None,
                error=e.msg,
            )
        except TwilioException as e:
            logger.error(f"Twilio error sending SMS to {to_phone}: {str(e)}")
            raise NotificationError(f"Twilio error: {e}", cause=e)

        logger.info(f"SMS sent successfully to {to_phone}: {twilio_message.sid}")
        return ProviderResponse(
            success=True,
            message_id=twilio_message.sid,
            status=twilio_message.status,
        )
