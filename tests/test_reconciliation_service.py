from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from app.models import Appointment, AppointmentStatus, AttendanceStatus, SyncStatus
from app.models.appointment import ServiceCategory
from app.schemas.calendar_events import RemoteEvent
from app.services.calendar.reconciliation_service import (
    CalendarReconciliationService,
    parse_event_timestamp,
    resolve_event_times,
)
from app.services.exceptions import ConfigurationError, InvalidEventTimeError, MissingStartTimeError
from app.utils.time_utils import to_utc
from tests.conftest import NOW, FakeCalendarGateway

UTC = timezone.utc


def _event(event_id="evt-1", title="Jane Doe - Hair Cut - +15551234",
           start="2026-10-20T10:00:00Z", end="2026-10-20T10:45:00Z"):
    return RemoteEvent(id=event_id, title=title, start=start, end=end)


def _reconcile(db, calendar, settings=None):
    return CalendarReconciliationService(db, calendar, settings=settings, now=NOW).reconcile()


class TestEventTimes:

    def test_zulu_timestamp(self):
        assert parse_event_timestamp("2026-10-20T10:00:00Z", UTC) == datetime(2026, 10, 20, 10, tzinfo=UTC)

    def test_offset_timestamp_keeps_the_instant(self):
        parsed = parse_event_timestamp("2026-10-20T12:00:00+02:00", UTC)

        assert to_utc(parsed) == datetime(2026, 10, 20, 10, tzinfo=UTC)

    def test_all_day_date_is_local_midnight(self):
        rome = ZoneInfo("Europe/Rome")
        parsed = parse_event_timestamp("2026-10-20", rome)

        assert parsed == datetime(2026, 10, 20, 0, 0, tzinfo=rome)

    def test_garbage_raises(self):
        with pytest.raises(InvalidEventTimeError):
            parse_event_timestamp("next tuesday", UTC)

    def test_missing_end_uses_default_duration(self):
        start, duration = resolve_event_times(_event(end=None), UTC, default_duration_minutes=60)

        assert start == datetime(2026, 10, 20, 10, tzinfo=UTC)
        assert duration == 60

    def test_all_day_event_spans_a_day(self):
        _, duration = resolve_event_times(_event(start="2026-10-20", end="2026-10-21"), UTC)

        assert duration == 24 * 60

    def test_zero_length_event_is_one_minute(self):
        _, duration = resolve_event_times(_event(end="2026-10-20T10:00:00Z"), UTC)

        assert duration == 1

    def test_end_before_start_is_rejected(self):
        with pytest.raises(InvalidEventTimeError):
            resolve_event_times(_event(end="2026-10-20T09:00:00Z"), UTC)

    @pytest.mark.parametrize("start", [None, "", "   "])
    def test_missing_start(self, start):
        with pytest.raises(MissingStartTimeError):
            resolve_event_times(_event(start=start), UTC)


class TestReconcile:

    def test_creates_appointments_from_events(self, db):
        calendar = FakeCalendarGateway([
            _event("evt-1"),
            _event("evt-2", title="Luca - Beard Shaping", start="2026-10-21T15:00:00Z", end=None),
            _event("evt-3", title="Walk-in", start="2026-10-22T09:30:00Z", end="2026-10-22T10:00:00Z"),
        ])

        report = _reconcile(db, calendar)

        assert report.success is True
        assert report.created == 3
        assert report.updated == 0
        assert report.message == "Calendar sync completed successfully"

        first = db.query(Appointment).filter_by(external_event_id="evt-1").one()
        assert first.client_name == "Jane Doe"
        assert first.client_phone == "+15551234"
        assert first.service == "Hair Cut"
        assert first.service_category == ServiceCategory.HAIR_CUT
        assert to_utc(first.start_time) == datetime(2026, 10, 20, 10, tzinfo=UTC)
        assert first.duration_minutes == 45
        assert first.status == AppointmentStatus.CONFIRMED
        assert first.attendance_status == AttendanceStatus.PENDING
        assert first.sync_status == SyncStatus.SYNCED

        second = db.query(Appointment).filter_by(external_event_id="evt-2").one()
        assert second.client_phone is None
        assert second.service_category == ServiceCategory.BEARD_SHAPING
        assert second.duration_minutes == 60

        walk_in = db.query(Appointment).filter_by(external_event_id="evt-3").one()
        assert walk_in.client_name is None
        assert walk_in.service == "Walk-in"

    def test_rerun_updates_instead_of_duplicating(self, db):
        calendar = FakeCalendarGateway([_event("evt-1"), _event("evt-2", title="Luca - Beard Shaping")])

        _reconcile(db, calendar)
        report = _reconcile(db, calendar)

        assert report.created == 0
        assert report.updated == 2
        assert db.query(Appointment).count() == 2

    def test_remote_changes_overwrite_local_edits(self, db):
        calendar = FakeCalendarGateway([_event("evt-1")])
        _reconcile(db, calendar)

        appointment = db.query(Appointment).filter_by(external_event_id="evt-1").one()
        appointment.client_name = "Edited locally"
        appointment.status = AppointmentStatus.CANCELED
        db.commit()

        calendar.events["evt-1"] = _event("evt-1", title="Jane Smith - Hair Cut - +15550000",
                                           start="2026-10-20T11:00:00Z", end="2026-10-20T11:30:00Z")
        _reconcile(db, calendar)

        db.refresh(appointment)
        assert appointment.client_name == "Jane Smith"
        assert appointment.client_phone == "+15550000"
        assert appointment.status == AppointmentStatus.CONFIRMED
        assert to_utc(appointment.start_time) == datetime(2026, 10, 20, 11, tzinfo=UTC)
        assert appointment.duration_minutes == 30

    def test_bad_event_is_reported_and_the_rest_still_sync(self, db):
        calendar = FakeCalendarGateway([
            _event("evt-1"),
            _event("evt-bad", start=None),
            _event("evt-worse", end="2026-10-20T08:00:00Z"),
            _event("evt-2", title="Luca - Beard Shaping"),
        ])

        report = _reconcile(db, calendar)

        assert report.success is False
        assert report.message == "Sync completed with some errors"
        assert report.created == 2
        assert [e.event_id for e in report.errors] == ["evt-bad", "evt-worse"]
        assert report.errors[0].error == "Missing start time"
        assert db.query(Appointment).count() == 2

    def test_not_configured_aborts_without_fetching(self, db):
        calendar = FakeCalendarGateway([_event()], configured=False)

        report = _reconcile(db, calendar)

        assert report.success is False
        assert report.run_error.kind == "configuration"
        assert report.message == "Google Calendar credentials not found."
        assert calendar.calls == []
        assert db.query(Appointment).count() == 0

    def test_fetch_failure_aborts_the_run(self, db):
        calendar = FakeCalendarGateway([_event()])
        calendar.fetch_error = RuntimeError("connection reset")

        report = _reconcile(db, calendar)

        assert report.success is False
        assert report.run_error.kind == "fetch"
        assert report.message.startswith("Failed to fetch events")
        assert db.query(Appointment).count() == 0

    def test_no_events(self, db):
        report = _reconcile(db, FakeCalendarGateway([]))

        assert report.success is True
        assert report.message == "No events found"
        assert report.created == report.updated == 0

    def test_sync_window_uses_lookback_and_lookahead(self, db, make_settings):
        calendar = FakeCalendarGateway([])
        settings = make_settings(CALENDAR_SYNC_LOOKBACK_DAYS=2, CALENDAR_SYNC_LOOKAHEAD_DAYS=30)

        _reconcile(db, calendar, settings=settings)

        _, time_min, time_max = calendar.calls[0]
        assert time_min == NOW - timedelta(days=2)
        assert time_max == NOW + timedelta(days=30)

    def test_configuration_error_while_listing(self, db):
        calendar = FakeCalendarGateway([_event()])
        calendar.fetch_error = ConfigurationError("Invalid Google credentials file")

        report = _reconcile(db, calendar)

        assert report.run_error.kind == "configuration"
        assert report.message == "Invalid Google credentials file"
