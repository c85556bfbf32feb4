# app/schemas/calendar_events.py
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Literal
from datetime import datetime, timezone


class RemoteEvent(BaseModel):
    """Calendar event as returned by the Calendar Gateway.

    `start`/`end` are the provider's raw ISO-8601 values: a date-time
    (timed events) or a bare date (all-day events). Resolving them is the
    reconciliation engine's job so a malformed value only fails that event.
    """
    id: str = Field(..., description="Remote event id")
    title: str = Field("", description="Event summary")
    start: Optional[str] = Field(None, description="Start date-time or date")
    end: Optional[str] = Field(None, description="End date-time or date")
    updated_at: Optional[datetime] = Field(None, description="Last remote modification")


EventNameShape = Literal["service_only", "name_service", "name_service_phone"]


class ParsedEventName(BaseModel):
    """Client/service/phone triple read from an event title"""
    model_config = ConfigDict(frozen=True)

    shape: EventNameShape
    client_name: Optional[str] = None
    service: str
    phone: Optional[str] = None


class SyncError(BaseModel):
    event_id: str
    error: str


class RunError(BaseModel):
    """Failure that aborted the whole run before any event was processed"""
    kind: Literal["configuration", "fetch"]
    message: str


class SyncReport(BaseModel):
    """Outcome of one reconciliation run. Never persisted."""
    success: bool = False
    message: str = ""
    created: int = 0
    updated: int = 0
    errors: List[SyncError] = Field(default_factory=list)
    run_error: Optional[RunError] = None
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    @classmethod
    def aborted(cls, kind: str, message: str) -> "SyncReport":
        return cls(
            success=False,
            message=message,
            run_error=RunError(kind=kind, message=message),
            completed_at=datetime.now(timezone.utc),
        )

    def add_error(self, event_id: str, error: str) -> None:
        self.errors.append(SyncError(event_id=event_id, error=error))

    def finish(self) -> "SyncReport":
        self.success = not self.errors
        if not self.message:
            self.message = (
                "Calendar sync completed successfully"
                if self.success
                else "Sync completed with some errors"
            )
        self.completed_at = datetime.now(timezone.utc)
        return self
