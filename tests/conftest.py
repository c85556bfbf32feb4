# tests/conftest.py
import os

from cryptography.fernet import Fernet

# Settings are cached on first import, so the environment goes in first
os.environ.setdefault("ENCRYPTION_KEY", Fernet.generate_key().decode())
os.environ["DEFAULT_TIMEZONE"] = "UTC"
os.environ["ADMIN_API_KEY"] = "test-admin-key"
os.environ["GOOGLE_CREDENTIALS_PATH"] = ""

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config.settings import get_settings
from app.models import Appointment, AppointmentStatus, Base
from app.models.message_template import MessagingProvider
from app.schemas.calendar_events import RemoteEvent
from app.schemas.reminders import ProviderResponse
from app.services.exceptions import FetchError, ServiceError

NOW = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def make_settings(settings):
    def _make(**overrides):
        return settings.model_copy(update=overrides)

    return _make


@pytest.fixture
def make_appointment(db):
    def _make(**fields):
        values = {
            "client_name": "Mario Rossi",
            "client_phone": "+393331112222",
            "service": "Hair Cut",
            "start_time": datetime(2026, 10, 20, 10, 0, tzinfo=timezone.utc),
            "duration_minutes": 30,
            "status": AppointmentStatus.SCHEDULED,
        }
        values.update(fields)
        appointment = Appointment(**values)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make


class FakeCalendarGateway:
    """In-memory calendar with the same contract as GoogleCalendarGateway"""

    def __init__(self, events: Optional[List[RemoteEvent]] = None, configured: bool = True):
        self.events: Dict[str, RemoteEvent] = {e.id: e for e in (events or [])}
        self.configured = configured
        self.fetch_error: Optional[Exception] = None
        self.write_error: Optional[Exception] = None
        self.calls: List[tuple] = []
        self._next_id = 1

    def is_configured(self) -> bool:
        return self.configured

    def list_events(self, time_min, time_max):
        self.calls.append(("list", time_min, time_max))
        if isinstance(self.fetch_error, ServiceError):
            raise self.fetch_error
        if self.fetch_error:
            raise FetchError(str(self.fetch_error), cause=self.fetch_error)
        return list(self.events.values())

    def create_event(self, title, start, end):
        self.calls.append(("create", title, start, end))
        if self.write_error:
            raise self.write_error
        event_id = f"evt-{self._next_id}"
        self._next_id += 1
        created = RemoteEvent(id=event_id, title=title, start=start.isoformat(), end=end.isoformat())
        self.events[event_id] = created
        return created

    def update_event(self, event_id, title, start, end):
        self.calls.append(("update", event_id, title, start, end))
        if self.write_error:
            raise self.write_error
        self.events[event_id] = RemoteEvent(id=event_id, title=title, start=start.isoformat(), end=end.isoformat())

    def delete_event(self, event_id):
        self.calls.append(("delete", event_id))
        if self.write_error:
            raise self.write_error
        self.events.pop(event_id, None)


class FakeNotificationGateway:
    """Records every send; answers with the queued responses, then success"""

    provider = MessagingProvider.WHATSAPP_CLOUD

    def __init__(self):
        self.sent: List[Dict[str, Any]] = []
        self.responses: List[Any] = []

    def send(self, to_phone: str, message: str, template_vars: Mapping[str, Any]) -> ProviderResponse:
        self.sent.append({"to": to_phone, "message": message, "vars": dict(template_vars)})
        if self.responses:
            response = self.responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return ProviderResponse(success=True, status_code=200, message_id=f"wamid.{len(self.sent)}", status="accepted")


@pytest.fixture
def calendar():
    return FakeCalendarGateway()


@pytest.fixture
def notifier():
    return FakeNotificationGateway()


@pytest.fixture
def redis_client():
    """Redis stand-in whose lock is always free unless a test says otherwise"""
    client = MagicMock()
    client.lock.return_value.acquire.return_value = True
    return client
