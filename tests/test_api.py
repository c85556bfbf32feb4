from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_calendar_gateway, get_notification_gateway, get_redis_client
from app.config.database import get_db
from app.main import app
from app.models import Appointment, MessageTemplate, ReminderLog
from app.schemas.calendar_events import RemoteEvent
from app.services.exceptions import CalendarGatewayError

AUTH = {"Authorization": "Bearer test-admin-key"}


@pytest.fixture
def client(db, calendar, notifier, redis_client):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_calendar_gateway] = lambda: calendar
    app.dependency_overrides[get_notification_gateway] = lambda: notifier
    app.dependency_overrides[get_redis_client] = lambda: redis_client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _booking(**fields):
    data = {
        "client_name": "Jane Doe",
        "client_phone": "+15551234",
        "service": "Hair Cut",
        "start_time": "2026-10-20T10:00:00+00:00",
        "duration_minutes": 30,
    }
    data.update(fields)
    return data


class TestAuth:

    def test_missing_key(self, client):
        assert client.get("/api/v1/appointments/1").status_code == 401

    def test_wrong_key(self, client):
        response = client.get("/api/v1/appointments/1", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    def test_api_disabled_without_configured_key(self, client, make_settings, monkeypatch):
        monkeypatch.setattr("app.api.dependencies.get_settings", lambda: make_settings(ADMIN_API_KEY=""))

        assert client.get("/api/v1/appointments/1", headers=AUTH).status_code == 503

    def test_health_is_public(self, client):
        response = client.get("/health/")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Correlation-ID" in response.headers


class TestAppointments:

    def test_create_and_fetch(self, client, calendar):
        created = client.post("/api/v1/appointments", json=_booking(), headers=AUTH)

        assert created.status_code == 201
        body = created.json()
        assert body["external_event_id"] == "evt-1"
        assert body["service_category"] == "hair_cut"
        assert body["sync_status"] == "synced"
        assert calendar.events["evt-1"].title == "Jane Doe - Hair Cut - +15551234"

        fetched = client.get(f"/api/v1/appointments/{body['id']}", headers=AUTH)
        assert fetched.status_code == 200
        assert fetched.json()["client_name"] == "Jane Doe"

    def test_invalid_duration(self, client):
        response = client.post("/api/v1/appointments", json=_booking(duration_minutes=0), headers=AUTH)

        assert response.status_code == 422

    def test_not_found(self, client):
        assert client.get("/api/v1/appointments/999", headers=AUTH).status_code == 404
        assert client.delete("/api/v1/appointments/999", headers=AUTH).status_code == 404

    def test_update(self, client, calendar):
        appointment_id = client.post("/api/v1/appointments", json=_booking(), headers=AUTH).json()["id"]

        response = client.put(
            f"/api/v1/appointments/{appointment_id}",
            json=_booking(service="Beard Shaping", status="confirmed", attendance_status="attended"),
            headers=AUTH,
        )

        assert response.status_code == 200
        assert response.json()["attendance_status"] == "attended"
        assert calendar.events["evt-1"].title == "Jane Doe - Beard Shaping - +15551234"

    def test_reschedule(self, client, calendar):
        appointment_id = client.post("/api/v1/appointments", json=_booking(), headers=AUTH).json()["id"]

        response = client.patch(
            f"/api/v1/appointments/{appointment_id}/time",
            json={"start_time": "2026-10-21T15:00:00+00:00", "duration_minutes": 60},
            headers=AUTH,
        )

        assert response.status_code == 200
        assert response.json()["duration_minutes"] == 60
        assert calendar.events["evt-1"].start == "2026-10-21T15:00:00+00:00"
        assert calendar.events["evt-1"].end == "2026-10-21T16:00:00+00:00"

    def test_delete(self, client, db, calendar):
        appointment_id = client.post("/api/v1/appointments", json=_booking(), headers=AUTH).json()["id"]

        response = client.delete(f"/api/v1/appointments/{appointment_id}", headers=AUTH)

        assert response.status_code == 204
        assert calendar.events == {}
        assert db.query(Appointment).count() == 0

    def test_delete_with_calendar_outage(self, client, db, calendar):
        appointment_id = client.post("/api/v1/appointments", json=_booking(), headers=AUTH).json()["id"]
        calendar.write_error = CalendarGatewayError("Google Calendar delete failed (503)", status_code=503)

        response = client.delete(f"/api/v1/appointments/{appointment_id}", headers=AUTH)

        assert response.status_code == 502
        assert db.query(Appointment).count() == 1


class TestJobs:

    def test_manual_calendar_sync(self, client, calendar):
        calendar.events["evt-7"] = RemoteEvent(
            id="evt-7", title="Luca - Beard Shaping - +393330000000",
            start="2026-10-22T09:00:00Z", end="2026-10-22T09:20:00Z",
        )

        response = client.post("/api/v1/calendar/sync", headers=AUTH)

        assert response.status_code == 200
        assert response.json()["created"] == 1
        assert response.json()["success"] is True

    def test_sync_refused_while_running(self, client, redis_client):
        redis_client.lock.return_value.acquire.return_value = False

        response = client.post("/api/v1/calendar/sync", headers=AUTH)

        assert response.status_code == 409

    def test_dispatch(self, client, db, notifier, make_appointment):
        make_appointment(start_time=datetime.now(timezone.utc) + timedelta(days=1))

        dry = client.post("/api/v1/reminders/dispatch", json={"dry_run": True}, headers=AUTH)
        assert dry.status_code == 200
        assert dry.json()["dry_run"] is True
        assert notifier.sent == []

        sent = client.post("/api/v1/reminders/dispatch", json={}, headers=AUTH)
        assert sent.status_code == 200
        assert len(notifier.sent) == 1
        assert db.query(ReminderLog).count() == 1

        logs = client.get("/api/v1/reminders/logs", headers=AUTH)
        assert logs.status_code == 200
        assert logs.json()[0]["window_label"] == "1_day"


class TestTemplates:

    def test_default_then_update(self, client):
        default = client.get("/api/v1/templates/active", headers=AUTH)

        assert default.status_code == 200
        assert default.json()["has_token"] is False

        updated = client.put(
            "/api/v1/templates/active",
            json={"body": "Ciao {$name}", "token": "EAAG-secret", "number_id": "1098765"},
            headers=AUTH,
        )

        assert updated.status_code == 200
        body = updated.json()
        assert body["body"] == "Ciao {$name}"
        assert body["has_token"] is True
        assert "token" not in body

    def test_unreadable_token_still_shows_the_template(self, client, db):
        db.add(MessageTemplate(body="Hi {$name}", token_encrypted=b"not-a-fernet-token", number_id="1"))
        db.commit()

        response = client.get("/api/v1/templates/active", headers=AUTH)

        assert response.status_code == 200
        assert response.json()["body"] == "Hi {$name}"
        assert response.json()["has_token"] is True

    def test_blank_body(self, client):
        response = client.put("/api/v1/templates/active", json={"body": "  "}, headers=AUTH)

        assert response.status_code == 422
