# app/schemas/__init__.py
from .calendar_events import (
    RemoteEvent,
    ParsedEventName,
    SyncError,
    RunError,
    SyncReport,
)

from .reminders import (
    ReminderWindow,
    TemplateConfig,
    ProviderResponse,
    DispatchStatus,
    DispatchOutcome,
    WindowReport,
    DispatchReport,
    TemplateUpdate,
    TemplateResponse,
    DispatchRequest,
    ReminderLogResponse,
)

from .appointments import (
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentReschedule,
    AppointmentResponse,
)

__all__ = [
    # Calendar events
    "RemoteEvent",
    "ParsedEventName",
    "SyncError",
    "RunError",
    "SyncReport",

    # Reminders
    "ReminderWindow",
    "TemplateConfig",
    "ProviderResponse",
    "DispatchStatus",
    "DispatchOutcome",
    "WindowReport",
    "DispatchReport",
    "TemplateUpdate",
    "TemplateResponse",
    "DispatchRequest",
    "ReminderLogResponse",

    # Appointments
    "AppointmentCreate",
    "AppointmentUpdate",
    "AppointmentReschedule",
    "AppointmentResponse",
]
