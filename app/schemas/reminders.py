# app/schemas/reminders.py
from __future__ import annotations
import enum
from datetime import datetime, timedelta, tzinfo
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from app.models.message_template import MessagingProvider
from app.schemas.calendar_events import RunError
from app.utils.time_utils import day_bounds


class ReminderWindow(BaseModel):
    """A lead-time offset from now, e.g. 3 days"""
    label: str = Field(..., description="Machine label, e.g. 3_days")
    lead_time: timedelta
    human_label: str = Field(..., description="Text for the {$days} placeholder")

    @classmethod
    def from_days(cls, days: int) -> "ReminderWindow":
        unit = "day" if days == 1 else "days"
        return cls(label=f"{days}_{unit}", lead_time=timedelta(days=days), human_label=f"{days} {unit}")

    def bounds(self, now: datetime, tz: tzinfo) -> Tuple[datetime, datetime]:
        """Whole local day `lead_time` after `now` on the business calendar, as UTC bounds"""
        return day_bounds(now.astimezone(tz) + self.lead_time, tz)


class TemplateConfig(BaseModel):
    """Active template and credentials, loaded once per dispatch run"""
    body: str
    provider: MessagingProvider = MessagingProvider.WHATSAPP_CLOUD
    token: Optional[str] = None
    number_id: Optional[str] = None
    account_sid: Optional[str] = None


class ProviderResponse(BaseModel):
    """What the messaging provider said about one send (accepted != delivered)"""
    success: bool
    status_code: Optional[int] = None
    provider_code: Optional[str] = None
    message_id: Optional[str] = None
    status: Optional[str] = None
    error: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)


class DispatchStatus(str, enum.Enum):
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"
    DRY_RUN = "dry_run"


class DispatchOutcome(BaseModel):
    appointment_id: int
    window_label: str
    status: DispatchStatus
    phone: Optional[str] = None
    message: Optional[str] = None
    provider_status: Optional[str] = None
    provider_code: Optional[str] = None
    error: Optional[str] = None


class WindowReport(BaseModel):
    label: str
    window_start: datetime
    window_end: datetime
    outcomes: List[DispatchOutcome] = Field(default_factory=list)

    def count(self, status: DispatchStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @computed_field
    @property
    def summary(self) -> Dict[str, int]:
        return {status.value: self.count(status) for status in DispatchStatus}


class DispatchReport(BaseModel):
    dry_run: bool = False
    windows: List[WindowReport] = Field(default_factory=list)
    run_error: Optional[RunError] = None

    @classmethod
    def aborted(cls, kind: str, message: str, dry_run: bool = False) -> "DispatchReport":
        return cls(dry_run=dry_run, run_error=RunError(kind=kind, message=message))

    @property
    def outcomes(self) -> List[DispatchOutcome]:
        return [outcome for window in self.windows for outcome in window.outcomes]


class TemplateUpdate(BaseModel):
    """Administrative edit of the active message template"""
    body: str = Field(..., min_length=1)
    provider: MessagingProvider = MessagingProvider.WHATSAPP_CLOUD
    token: Optional[str] = Field(None, description="Leave empty to keep the stored token")
    number_id: Optional[str] = None
    account_sid: Optional[str] = None

    @field_validator("body")
    @classmethod
    def body_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Template body must not be empty")
        return v

    @field_validator("token", "number_id", "account_sid")
    @classmethod
    def strip_credentials(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class TemplateResponse(BaseModel):
    body: str
    provider: MessagingProvider
    number_id: Optional[str] = None
    account_sid: Optional[str] = None
    has_token: bool = False


class DispatchRequest(BaseModel):
    dry_run: bool = False


class ReminderLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    appointment_id: int
    window_label: str
    scheduled_for: datetime
    recipient_phone: str
    message_content: str
    provider: str
    provider_message_id: Optional[str] = None
    provider_status: Optional[str] = None
    sent_at: datetime
