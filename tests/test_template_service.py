import pytest
from cryptography.fernet import InvalidToken
from pydantic import ValidationError

from app.models.message_template import MessageTemplate, MessagingProvider
from app.schemas.reminders import TemplateUpdate
from app.services.exceptions import ConfigurationError
from app.services.reminders.template_service import TemplateService
from app.utils.encryption import decrypt_token


def test_default_template_when_nothing_stored(db, settings):
    template = TemplateService.get_active(db, settings)

    assert template.body == settings.REMINDER_DEFAULT_TEMPLATE
    assert template.token is None
    assert template.number_id is None


def test_update_encrypts_the_token(db, settings):
    TemplateService.update_active(db, TemplateUpdate(
        body="Ciao {$name}, ci vediamo alle {$time}",
        token="EAAG-secret",
        number_id="109876543210",
    ))

    record = db.query(MessageTemplate).one()
    assert record.token_encrypted != b"EAAG-secret"
    assert decrypt_token(record.token_encrypted) == "EAAG-secret"

    template = TemplateService.get_active(db, settings)
    assert template.body == "Ciao {$name}, ci vediamo alle {$time}"
    assert template.token == "EAAG-secret"
    assert template.number_id == "109876543210"


def test_omitted_token_keeps_the_stored_one(db, settings):
    TemplateService.update_active(db, TemplateUpdate(body="First", token="EAAG-secret", number_id="1"))
    TemplateService.update_active(db, TemplateUpdate(body="Second", token="  ", number_id="2"))

    assert db.query(MessageTemplate).count() == 1
    template = TemplateService.get_active(db, settings)
    assert template.body == "Second"
    assert template.number_id == "2"
    assert template.token == "EAAG-secret"


def test_twilio_template_without_account_sid(db, settings):
    TemplateService.update_active(db, TemplateUpdate(
        body="Hi {$name}",
        provider=MessagingProvider.TWILIO,
        token="auth-token",
        number_id="+15550001111",
        account_sid="   ",
    ))

    template = TemplateService.get_active(db, settings)
    assert template.provider == MessagingProvider.TWILIO
    assert template.account_sid is None
    assert template.token == "auth-token"


def test_undecryptable_token_is_a_configuration_error(db, settings):
    db.add(MessageTemplate(body="Hi {$name}", token_encrypted=b"not-a-fernet-token", number_id="1"))
    db.commit()

    with pytest.raises(ConfigurationError) as exc_info:
        TemplateService.get_active(db, settings)

    assert isinstance(exc_info.value.cause, InvalidToken)


def test_template_can_be_read_without_the_token(db, settings):
    db.add(MessageTemplate(body="Hi {$name}", token_encrypted=b"not-a-fernet-token", number_id="1"))
    db.commit()

    template = TemplateService.get_active(db, settings, with_token=False)

    assert template.body == "Hi {$name}"
    assert template.token is None
    assert template.number_id == "1"


@pytest.mark.parametrize("body", ["", "   "])
def test_blank_body_is_rejected(body):
    with pytest.raises(ValidationError):
        TemplateUpdate(body=body)
