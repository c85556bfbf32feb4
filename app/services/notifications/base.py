# app/services/notifications/base.py
"""Contract for outbound reminder delivery, and provider selection"""
from typing import Any, Mapping, Optional, Protocol

from app.config.settings import Settings, get_settings
from app.models.message_template import MessagingProvider
from app.schemas.reminders import ProviderResponse, TemplateConfig


class NotificationGateway(Protocol):
    """
    Sends one rendered message. A success only means the provider accepted
    it, not that it was delivered.

    Provider rejections come back as ProviderResponse(success=False);
    transport failures and missing credentials raise NotificationError.
    """
    provider: MessagingProvider

    def send(self, to_phone: str, message: str, template_vars: Mapping[str, Any]) -> ProviderResponse:
        ...


def build_notification_gateway(
        template: TemplateConfig,
        settings: Optional[Settings] = None,
) -> NotificationGateway:
    """Gateway for the provider and credentials stored with the active template"""
    settings = settings or get_settings()

    if template.provider == MessagingProvider.TWILIO:
        from app.services.twilio.sms_service import TwilioNotificationGateway

        return TwilioNotificationGateway(
            account_sid=template.account_sid or settings.TWILIO_ACCOUNT_SID,
            auth_token=template.token or settings.TWILIO_AUTH_TOKEN,
            from_number=template.number_id,
            settings=settings,
        )

    from app.services.notifications.whatsapp_service import WhatsAppCloudGateway

    return WhatsAppCloudGateway(
        token=template.token,
        number_id=template.number_id,
        settings=settings,
    )
