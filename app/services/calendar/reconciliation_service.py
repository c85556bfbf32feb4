# app/services/calendar/reconciliation_service.py
"""
Pull the remote calendar into the local appointment ledger.

The remote event id is the idempotency key: repeated runs update the same
row instead of creating new ones. The remote side wins for every field it
carries. Each event is committed on its own so a crash mid-run keeps the
work already done.
"""
import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from app.config.settings import Settings, get_settings
from app.models.appointment import (
    Appointment,
    AppointmentStatus,
    AttendanceStatus,
    SyncStatus,
)
from app.schemas.calendar_events import RemoteEvent, SyncReport
from app.services.appointment.appointment_service import AppointmentService
from app.services.calendar.base import CalendarGateway
from app.services.calendar.event_name_parser import parse_event_name
from app.services.exceptions import (
    ConfigurationError,
    FetchError,
    InvalidEventTimeError,
    MissingStartTimeError,
    PerItemError,
)
from app.utils.time_utils import (
    get_business_timezone,
    localize,
    minutes_between,
    utcnow,
)

logger = logging.getLogger(__name__)


def parse_event_timestamp(value: str, tz: tzinfo) -> datetime:
    """Read a provider date-time or all-day date; naive values are business local time"""
    value = value.strip()
    try:
        if len(value) == 10:
            return datetime.combine(date.fromisoformat(value), time.min, tzinfo=tz)
        return localize(datetime.fromisoformat(value.replace("Z", "+00:00")), tz)
    except ValueError:
        raise InvalidEventTimeError(f"Invalid event time {value!r}")


def resolve_event_times(
        event: RemoteEvent,
        tz: tzinfo,
        default_duration_minutes: int = 60,
) -> Tuple[datetime, int]:
    """
    Start and duration (minutes) of a remote event.

    A missing end means the default duration. Zero-length events are
    stored as one minute; an end before the start is an error.
    """
    if not event.start or not event.start.strip():
        raise MissingStartTimeError()

    start = parse_event_timestamp(event.start, tz)
    if event.end and event.end.strip():
        end = parse_event_timestamp(event.end, tz)
    else:
        end = start + timedelta(minutes=default_duration_minutes)

    duration = minutes_between(start, end)
    if duration < 0:
        raise InvalidEventTimeError("End time is before start time")

    return start, max(duration, 1)


class CalendarReconciliationService:
    """Merges the remote event stream into the appointment ledger"""

    def __init__(
            self,
            db: Session,
            calendar: CalendarGateway,
            settings: Optional[Settings] = None,
            now: Optional[datetime] = None,
    ):
        self.db = db
        self.calendar = calendar
        self.settings = settings or get_settings()
        self.tz = get_business_timezone(self.settings.DEFAULT_TIMEZONE)
        self.now = now

    def sync_window(self) -> Tuple[datetime, datetime]:
        now = self.now or utcnow()
        return (
            now - timedelta(days=self.settings.CALENDAR_SYNC_LOOKBACK_DAYS),
            now + timedelta(days=self.settings.CALENDAR_SYNC_LOOKAHEAD_DAYS),
        )

    def reconcile(self) -> SyncReport:
        if not self.calendar.is_configured():
            logger.warning("Calendar sync skipped: Google Calendar credentials not found")
            return SyncReport.aborted("configuration", "Google Calendar credentials not found.")

        time_min, time_max = self.sync_window()
        try:
            events = self.calendar.list_events(time_min, time_max)
        except ConfigurationError as e:
            logger.error(f"Calendar sync aborted: {e}")
            return SyncReport.aborted("configuration", str(e))
        except FetchError as e:
            logger.error(f"Calendar sync aborted, could not fetch events: {e}")
            return SyncReport.aborted("fetch", f"Failed to fetch events: {e}")

        report = SyncReport()
        if not events:
            report.message = "No events found"

        for event in events:
            try:
                created = self._apply_event(event)
            except PerItemError as e:
                self.db.rollback()
                logger.warning(f"Skipping event {event.id}: {e}")
                report.add_error(event.id, str(e))
                continue
            except Exception as e:
                self.db.rollback()
                logger.exception(f"Failed to sync event {event.id}")
                report.add_error(event.id, str(e))
                continue

            if created:
                report.created += 1
            else:
                report.updated += 1

        report.finish()
        logger.info(
            f"Calendar sync finished: {report.created} created, {report.updated} updated, "
            f"{len(report.errors)} errors"
        )
        return report

    def _apply_event(self, event: RemoteEvent) -> bool:
        """Upsert one event in its own transaction; True when a row was created"""
        start, duration = resolve_event_times(
            event, self.tz, self.settings.DEFAULT_EVENT_DURATION_MINUTES
        )
        parsed = parse_event_name(event.title)

        appointment = AppointmentService.find_by_external_id(self.db, event.id)
        created = appointment is None
        if created:
            appointment = Appointment(external_event_id=event.id)
            self.db.add(appointment)

        appointment.client_name = parsed.client_name
        appointment.client_phone = parsed.phone
        appointment.service = parsed.service
        appointment.start_time = start
        appointment.duration_minutes = duration
        appointment.status = AppointmentStatus.CONFIRMED
        appointment.attendance_status = AttendanceStatus.PENDING
        appointment.sync_status = SyncStatus.SYNCED
        appointment.last_sync_error = None
        appointment.last_synced_at = utcnow()
        appointment.remote_updated_at = event.updated_at

        self.db.commit()
        logger.debug(f"{'Created' if created else 'Updated'} appointment {appointment.id} from event {event.id}")
        return created


def run_reconciliation(db: Session, calendar: Optional[CalendarGateway] = None) -> SyncReport:
    """One reconciliation pass against the configured Google calendar"""
    from app.services.calendar.google_calendar_service import GoogleCalendarGateway

    return CalendarReconciliationService(db, calendar or GoogleCalendarGateway()).reconcile()
