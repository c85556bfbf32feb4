# app/services/reminders/template_service.py
"""Template Store: the single active reminder template and its credentials"""
import logging
from typing import Optional

from cryptography.fernet import InvalidToken
from sqlalchemy.orm import Session

from app.config.settings import Settings, get_settings
from app.models.message_template import MessageTemplate
from app.schemas.reminders import TemplateConfig, TemplateUpdate
from app.services.exceptions import ConfigurationError
from app.utils.encryption import decrypt_token, encrypt_token

logger = logging.getLogger(__name__)


class TemplateService:

    @staticmethod
    def get_active_record(db: Session) -> Optional[MessageTemplate]:
        return (
            db.query(MessageTemplate)
            .filter(MessageTemplate.is_active.is_(True))
            .order_by(MessageTemplate.id.asc())
            .first()
        )

    @staticmethod
    def get_active(
            db: Session,
            settings: Optional[Settings] = None,
            with_token: bool = True,
    ) -> TemplateConfig:
        """
        Snapshot of the active template, falling back to the default body
        without credentials.

        Raises ConfigurationError when the stored token cannot be decrypted
        (wrong or missing ENCRYPTION_KEY). Pass with_token=False when the
        credentials are not needed.
        """
        settings = settings or get_settings()
        record = TemplateService.get_active_record(db)

        if record is None:
            logger.info("No message template stored, using the default body")
            return TemplateConfig(body=settings.REMINDER_DEFAULT_TEMPLATE)

        return TemplateConfig(
            body=record.body,
            provider=record.provider,
            token=TemplateService._read_token(record) if with_token else None,
            number_id=record.number_id,
            account_sid=record.account_sid,
        )

    @staticmethod
    def _read_token(record: MessageTemplate) -> Optional[str]:
        try:
            return decrypt_token(record.token_encrypted)
        except (InvalidToken, ValueError) as e:
            logger.error(f"Could not decrypt the token of message template {record.id}")
            raise ConfigurationError(
                "Stored messaging token could not be decrypted, check ENCRYPTION_KEY", cause=e
            )

    @staticmethod
    def update_active(db: Session, data: TemplateUpdate) -> MessageTemplate:
        """Create or overwrite the active template. An omitted token keeps the stored one."""
        record = TemplateService.get_active_record(db)
        if record is None:
            record = MessageTemplate(is_active=True)
            db.add(record)

        record.body = data.body
        record.provider = data.provider
        record.number_id = data.number_id
        record.account_sid = data.account_sid
        if data.token:
            record.token_encrypted = encrypt_token(data.token)

        db.commit()
        db.refresh(record)
        logger.info(f"Message template {record.id} updated (provider={record.provider.value})")
        return record
