# app/services/reminders/dispatch_service.py
"""
Reminder Dispatch Engine.

For each lead-time window, walks the appointments due that day in id order,
renders the reminder and hands it to the notification gateway. A successful
send is recorded in reminder_logs, which takes the appointment out of that
window's selection. Failures are left unrecorded so the next run retries
them (at-least-once delivery).
"""
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config.settings import Settings, get_settings
from app.models.appointment import Appointment
from app.models.reminder_log import ReminderLog
from app.schemas.reminders import (
    DispatchOutcome,
    DispatchReport,
    DispatchStatus,
    ProviderResponse,
    ReminderWindow,
    TemplateConfig,
    WindowReport,
)
from app.services.appointment.appointment_service import AppointmentService
from app.services.exceptions import ConfigurationError, ProviderRejection, ServiceError
from app.services.notifications.base import NotificationGateway
from app.services.reminders.template_renderer import render_template
from app.utils.time_utils import get_business_timezone, to_utc, utcnow

logger = logging.getLogger(__name__)


def configured_windows(settings: Optional[Settings] = None) -> List[ReminderWindow]:
    settings = settings or get_settings()
    return [ReminderWindow.from_days(days) for days in settings.REMINDER_LEAD_DAYS]


class ReminderDispatchService:

    def __init__(
            self,
            db: Session,
            template: TemplateConfig,
            gateway: Optional[NotificationGateway] = None,
            settings: Optional[Settings] = None,
            now: Optional[datetime] = None,
    ):
        self.db = db
        self.template = template
        self.gateway = gateway
        self.settings = settings or get_settings()
        self.tz = get_business_timezone(self.settings.DEFAULT_TIMEZONE)
        self.now = now

    def dispatch_due(
            self,
            windows: Optional[Iterable[ReminderWindow]] = None,
            dry_run: bool = False,
    ) -> DispatchReport:
        if not dry_run and self.gateway is None:
            raise ValueError("A notification gateway is required unless dry_run is set")

        now = self.now or utcnow()
        report = DispatchReport(dry_run=dry_run)

        for window in (windows if windows is not None else configured_windows(self.settings)):
            report.windows.append(self._dispatch_window(window, now, dry_run))

        return report

    def _dispatch_window(self, window: ReminderWindow, now: datetime, dry_run: bool) -> WindowReport:
        start, end = window.bounds(now, self.tz)
        window_report = WindowReport(label=window.label, window_start=start, window_end=end)

        logger.info(
            f"📅 Scanning {window.label} appointments from {start} to {end}"
            + (" [DRY RUN]" if dry_run else "")
        )

        last_id = 0
        while True:
            batch = AppointmentService.find_due_for_window(
                self.db,
                start,
                end,
                statuses=self.settings.REMINDER_STATUSES,
                window_label=window.label,
                after_id=last_id,
                limit=self.settings.REMINDER_BATCH_SIZE,
            )
            if not batch:
                break

            last_id = batch[-1].id
            for appointment in batch:
                window_report.outcomes.append(self._process(appointment, window, dry_run))

        logger.info(f"{window.label} reminders: {window_report.summary}")
        return window_report

    def _process(self, appointment: Appointment, window: ReminderWindow, dry_run: bool) -> DispatchOutcome:
        appointment_id = appointment.id
        phone = (appointment.client_phone or "").strip()

        if not phone:
            logger.info(f"Skipping appointment {appointment_id}: no phone number")
            return DispatchOutcome(
                appointment_id=appointment_id,
                window_label=window.label,
                status=DispatchStatus.SKIPPED,
                error="No phone number",
            )

        variables = self.build_message_vars(appointment, window)
        message = render_template(self.template.body, variables)

        if dry_run:
            logger.info(f"🧪 DRY RUN → Would send to {phone}: \"{message}\" ({window.label} reminder)")
            return DispatchOutcome(
                appointment_id=appointment_id,
                window_label=window.label,
                status=DispatchStatus.DRY_RUN,
                phone=phone,
                message=message,
            )

        try:
            response = self._send(phone, message, variables)
        except ProviderRejection as e:
            logger.error(
                f"❌ Failed to send {window.label} reminder for appointment {appointment_id} "
                f"({e.status_code}/{e.provider_code}): {e}"
            )
            return DispatchOutcome(
                appointment_id=appointment_id,
                window_label=window.label,
                status=DispatchStatus.FAILED,
                phone=phone,
                message=message,
                provider_status=str(e.status_code) if e.status_code else None,
                provider_code=e.provider_code,
                error=str(e),
            )
        except ServiceError as e:
            logger.error(f"Reminder for appointment {appointment_id} failed: {e}")
            return self._failed(appointment_id, window, phone, message, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error sending reminder for appointment {appointment_id}")
            return self._failed(appointment_id, window, phone, message, str(e))

        outcome = DispatchOutcome(
            appointment_id=appointment_id,
            window_label=window.label,
            status=DispatchStatus.SENT,
            phone=phone,
            message=message,
            provider_status=response.status,
        )

        try:
            self._record_sent(appointment, window, phone, message, response)
        except SQLAlchemyError as e:
            # Sent but not recorded: the next run will send it again
            self.db.rollback()
            logger.error(f"Reminder for appointment {appointment_id} sent but not recorded: {e}")
            outcome.error = f"Sent but not recorded: {e}"
            return outcome

        logger.info(f"✅ {window.label} reminder sent for appointment {appointment_id} ({phone})")
        return outcome

    def build_message_vars(self, appointment: Appointment, window: ReminderWindow) -> Dict[str, str]:
        local_start = to_utc(appointment.start_time).astimezone(self.tz)
        return {
            "name": appointment.client_name or self.settings.REMINDER_FALLBACK_NAME,
            "time": local_start.strftime(self.settings.REMINDER_TIME_FORMAT),
            "date": local_start.strftime("%d/%m/%Y"),
            "days": window.human_label,
            "service": appointment.service or "",
        }

    def _record_sent(
            self,
            appointment: Appointment,
            window: ReminderWindow,
            phone: str,
            message: str,
            response: ProviderResponse,
    ) -> None:
        sent_at = utcnow()
        self.db.add(ReminderLog(
            appointment_id=appointment.id,
            window_label=window.label,
            scheduled_for=appointment.start_time,
            recipient_phone=phone,
            message_content=message,
            provider=self.gateway.provider.value,
            provider_message_id=response.message_id,
            provider_status=response.status,
            provider_payload=response.payload,
        ))
        appointment.reminder_sent_at = sent_at
        self.db.commit()

    def _send(self, phone: str, message: str, variables: Dict[str, str]) -> ProviderResponse:
        response = self.gateway.send(phone, message, variables)
        if not response.success:
            raise ProviderRejection(
                response.error or "Unknown error",
                status_code=response.status_code,
                provider_code=response.provider_code,
                body=response.payload,
            )
        return response

    @staticmethod
    def _failed(
            appointment_id: int,
            window: ReminderWindow,
            phone: str,
            message: str,
            error: str,
    ) -> DispatchOutcome:
        return DispatchOutcome(
            appointment_id=appointment_id,
            window_label=window.label,
            status=DispatchStatus.FAILED,
            phone=phone,
            message=message,
            error=error,
        )


def run_dispatch(
        db: Session,
        dry_run: bool = False,
        gateway: Optional[NotificationGateway] = None,
        settings: Optional[Settings] = None,
) -> DispatchReport:
    """
    One dispatch pass over every configured window.

    The template and credentials are read once here and passed down, so an
    admin edit mid-run does not change messages half way through. The stored
    token is only decrypted when a real run has to build its own gateway;
    if that fails the run is aborted with a configuration error in the report.
    """
    from app.services.notifications.base import build_notification_gateway
    from app.services.reminders.template_service import TemplateService

    settings = settings or get_settings()
    needs_credentials = gateway is None and not dry_run
    try:
        template = TemplateService.get_active(db, settings, with_token=needs_credentials)
    except ConfigurationError as e:
        logger.error(f"Reminder dispatch aborted: {e}")
        return DispatchReport.aborted("configuration", str(e), dry_run=dry_run)

    if needs_credentials:
        gateway = build_notification_gateway(template, settings)

    service = ReminderDispatchService(db, template, gateway=gateway, settings=settings)
    return service.dispatch_due(configured_windows(settings), dry_run=dry_run)
