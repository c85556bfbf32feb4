import enum

from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, LargeBinary, Enum as SQLAEnum
from sqlalchemy.sql import func

from app.models.base import Base


class MessagingProvider(str, enum.Enum):
    WHATSAPP_CLOUD = "whatsapp_cloud"
    TWILIO = "twilio"


class MessageTemplate(Base):
    """Reminder message body plus the messaging provider credentials"""
    __tablename__ = "message_templates"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Free text with {$name}, {$time}, {$days} style placeholders
    body = Column(Text, nullable=False)

    provider = Column(
        SQLAEnum(
            MessagingProvider,
            name="messaging_provider",
            values_callable=lambda obj: [e.value for e in obj],
        ),
        nullable=False,
        default=MessagingProvider.WHATSAPP_CLOUD,
    )

    # Access token / auth token, Fernet encrypted
    token_encrypted = Column(LargeBinary, nullable=True)
    # WhatsApp phone number id, or the Twilio sender number
    number_id = Column(String(64), nullable=True)
    # Twilio only
    account_sid = Column(String(64), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
