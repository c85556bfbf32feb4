# ============================================================================
# app/services/appointment/appointment_service.py
# ============================================================================
"""Appointment ledger: lookups used by the engines plus staff-driven edits"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.appointment import (
    Appointment,
    AppointmentStatus,
    AttendanceStatus,
    SyncStatus,
)
from app.models.reminder_log import ReminderLog
from app.schemas.appointments import AppointmentCreate, AppointmentUpdate
from app.services.calendar.base import CalendarGateway
from app.services.calendar.event_name_parser import format_event_name
from app.services.exceptions import CalendarGatewayError, RemoteEventNotFoundError
from app.utils.time_utils import get_business_timezone, localize, to_utc, utcnow

logger = logging.getLogger(__name__)


class AppointmentService:
    """Handles appointment operations"""

    @staticmethod
    def get_appointment(db: Session, appointment_id: int) -> Optional[Appointment]:
        return db.get(Appointment, appointment_id)

    @staticmethod
    def find_by_external_id(db: Session, event_id: str) -> Optional[Appointment]:
        return db.query(Appointment).filter(Appointment.external_event_id == event_id).first()

    @staticmethod
    def find_due_for_window(
            db: Session,
            start: datetime,
            end: datetime,
            statuses: Sequence[str],
            window_label: str,
            after_id: int = 0,
            limit: int = 200,
    ) -> List[Appointment]:
        """
        One keyset page of appointments due for a reminder in this window.

        Due means: start in [start, end], status in `statuses`, and no
        reminder logged for this window at the appointment's current start.
        Paging on id (not offset) keeps rows from being skipped when earlier
        rows stop matching mid-run.
        """
        already_sent = (
            select(ReminderLog.id)
            .where(
                ReminderLog.appointment_id == Appointment.id,
                ReminderLog.window_label == window_label,
                ReminderLog.scheduled_for == Appointment.start_time,
            )
            .exists()
        )

        return (
            db.query(Appointment)
            .filter(
                Appointment.id > after_id,
                Appointment.start_time >= to_utc(start),
                Appointment.start_time <= to_utc(end),
                Appointment.status.in_([AppointmentStatus(s) for s in statuses]),
                ~already_sent,
            )
            .order_by(Appointment.id.asc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def create_appointment(
            db: Session,
            data: AppointmentCreate,
            calendar: Optional[CalendarGateway] = None,
    ) -> Appointment:
        """Save a staff-booked appointment and push it to the calendar"""
        appointment = Appointment(
            client_name=data.client_name,
            client_phone=data.client_phone,
            service=data.service,
            start_time=localize(data.start_time, get_business_timezone()),
            duration_minutes=data.duration_minutes,
            status=data.status,
            attendance_status=AttendanceStatus.PENDING,
            notes=data.notes,
        )

        if calendar is None or not calendar.is_configured():
            appointment.sync_status = SyncStatus.LOCAL_ONLY
        else:
            try:
                event = calendar.create_event(*AppointmentService._event_fields(appointment))
                appointment.external_event_id = event.id
                appointment.sync_status = SyncStatus.SYNCED
                appointment.last_synced_at = utcnow()
            except CalendarGatewayError as e:
                logger.warning(f"Failed to create calendar event for new appointment: {e}")
                appointment.sync_status = SyncStatus.FAILED
                appointment.last_sync_error = str(e)

        db.add(appointment)
        db.commit()
        db.refresh(appointment)

        logger.info(f"Created appointment {appointment.id} ({appointment.sync_status.value})")
        return appointment

    @staticmethod
    def update_appointment(
            db: Session,
            appointment_id: int,
            data: AppointmentUpdate,
            calendar: Optional[CalendarGateway] = None,
    ) -> Optional[Appointment]:
        appointment = db.get(Appointment, appointment_id)
        if not appointment:
            return None

        appointment.client_name = data.client_name
        appointment.client_phone = data.client_phone
        appointment.service = data.service
        appointment.start_time = localize(data.start_time, get_business_timezone())
        appointment.duration_minutes = data.duration_minutes
        appointment.status = data.status
        appointment.attendance_status = data.attendance_status
        appointment.notes = data.notes

        AppointmentService._push_update(appointment, calendar)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def reschedule_appointment(
            db: Session,
            appointment_id: int,
            start_time: datetime,
            duration_minutes: int,
            calendar: Optional[CalendarGateway] = None,
    ) -> Optional[Appointment]:
        """Move an appointment (drag & drop on the calendar view)"""
        appointment = db.get(Appointment, appointment_id)
        if not appointment:
            return None

        appointment.start_time = localize(start_time, get_business_timezone())
        appointment.duration_minutes = duration_minutes

        AppointmentService._push_update(appointment, calendar)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def delete_appointment(
            db: Session,
            appointment_id: int,
            calendar: Optional[CalendarGateway] = None,
    ) -> bool:
        """
        Delete the remote event, then the local row.

        A remote event that is already gone counts as deleted. Any other
        gateway failure propagates and the local row is kept.
        """
        appointment = db.get(Appointment, appointment_id)
        if not appointment:
            return False

        if appointment.external_event_id and calendar is not None and calendar.is_configured():
            try:
                calendar.delete_event(appointment.external_event_id)
            except RemoteEventNotFoundError:
                logger.info(f"Google event already deleted: {appointment.external_event_id}")

        db.delete(appointment)
        db.commit()
        logger.info(f"Deleted appointment {appointment_id}")
        return True

    @staticmethod
    def _event_fields(appointment: Appointment):
        start = to_utc(appointment.start_time)
        end = start + timedelta(minutes=appointment.duration_minutes)
        title = format_event_name(appointment.client_name, appointment.service, appointment.client_phone)
        return title, start, end

    @staticmethod
    def _push_update(appointment: Appointment, calendar: Optional[CalendarGateway]) -> None:
        """Mirror a local edit onto the linked remote event; never blocks the local save"""
        if not appointment.external_event_id or calendar is None or not calendar.is_configured():
            return

        try:
            calendar.update_event(appointment.external_event_id, *AppointmentService._event_fields(appointment))
            appointment.sync_status = SyncStatus.SYNCED
            appointment.last_sync_error = None
            appointment.last_synced_at = utcnow()
        except RemoteEventNotFoundError:
            logger.warning(f"Linked Google event {appointment.external_event_id} no longer exists")
            appointment.sync_status = SyncStatus.REMOTE_MISSING
        except CalendarGatewayError as e:
            logger.warning(f"Failed to update Google event {appointment.external_event_id}: {e}")
            appointment.sync_status = SyncStatus.FAILED
            appointment.last_sync_error = str(e)
