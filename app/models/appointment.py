import enum

from sqlalchemy import (
    Column, String, Integer, Text, DateTime, CheckConstraint,
    Enum as SQLAEnum,
)
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func

from app.models.base import Base
from app.utils.time_utils import to_utc


class ServiceCategory(str, enum.Enum):
    HAIR_CUT = "hair_cut"
    BEARD_SHAPING = "beard_shaping"
    OTHER = "other"

    @classmethod
    def from_service_name(cls, service: str | None) -> "ServiceCategory":
        """Map free-text service names ("Hair Cut", "haircut", ...) to a category"""
        key = "".join((service or "").lower().split())
        if key == "haircut":
            return cls.HAIR_CUT
        if key == "beardshaping":
            return cls.BEARD_SHAPING
        return cls.OTHER


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    CANCELED = "canceled"
    COMPLETED = "completed"
    IN_PROGRESS = "in_progress"


class AttendanceStatus(str, enum.Enum):
    PENDING = "pending"
    ATTENDED = "attended"
    NO_SHOW = "no_show"
    CANCELED = "canceled"


class SyncStatus(str, enum.Enum):
    PENDING = "pending"
    SYNCED = "synced"
    FAILED = "failed"
    LOCAL_ONLY = "local_only"  # calendar not configured when saved
    REMOTE_MISSING = "remote_missing"  # linked event was deleted remotely


def _enum_column(enum_cls, name, default):
    return Column(
        SQLAEnum(enum_cls, name=name, values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=default,
    )


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        CheckConstraint("duration_minutes >= 1", name="ck_appointments_duration_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Remote calendar link; at most one appointment per remote event
    external_event_id = Column(String(255), nullable=True, unique=True, index=True)

    # Client info
    client_name = Column(String(255), nullable=True)
    client_phone = Column(String(32), nullable=True)

    # Appointment details
    service = Column(String(255), nullable=False, default="")
    service_category = _enum_column(ServiceCategory, "service_category", ServiceCategory.OTHER)
    start_time = Column(DateTime(timezone=True), nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=False, default=30)
    notes = Column(Text, nullable=True)

    # Status tracking
    status = _enum_column(AppointmentStatus, "appointment_status", AppointmentStatus.SCHEDULED)
    attendance_status = _enum_column(AttendanceStatus, "attendance_status", AttendanceStatus.PENDING)

    # Calendar sync
    sync_status = _enum_column(SyncStatus, "sync_status", SyncStatus.PENDING)
    last_sync_error = Column(Text, nullable=True)
    last_synced_at = Column(DateTime(timezone=True), nullable=True)
    remote_updated_at = Column(DateTime(timezone=True), nullable=True)

    # Most recent successful reminder (per-window history lives in reminder_logs)
    reminder_sent_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    reminders = relationship(
        "ReminderLog",
        back_populates="appointment",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @validates("start_time", "last_synced_at", "remote_updated_at", "reminder_sent_at")
    def _store_utc(self, key, value):
        return to_utc(value)

    @validates("service")
    def _derive_category(self, key, value):
        self.service_category = ServiceCategory.from_service_name(value)
        return value

    def __repr__(self):
        return f"<Appointment {self.id} {self.client_name!r} @ {self.start_time} ({self.status})>"
