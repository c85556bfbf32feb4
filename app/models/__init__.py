# app/models/__init__.py
from .base import Base
from .appointment import (
    Appointment,
    AppointmentStatus,
    AttendanceStatus,
    ServiceCategory,
    SyncStatus,
)
from .reminder_log import ReminderLog
from .message_template import MessageTemplate, MessagingProvider
from .task_log import TaskLog

__all__ = [
    "Base",
    "Appointment",
    "AppointmentStatus",
    "AttendanceStatus",
    "ServiceCategory",
    "SyncStatus",
    "ReminderLog",
    "MessageTemplate",
    "MessagingProvider",
    "TaskLog",
]
