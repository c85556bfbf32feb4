# app/services/calendar/base.py
"""Contract the reconciliation engine and appointment store rely on"""
from datetime import datetime
from typing import List, Protocol

from app.schemas.calendar_events import RemoteEvent


class CalendarGateway(Protocol):
    """
    Remote calendar reachable over HTTP.

    list_events raises FetchError; the single-event calls raise
    CalendarGatewayError, or RemoteEventNotFoundError when the event is gone.
    """

    def is_configured(self) -> bool:
        ...

    def list_events(self, time_min: datetime, time_max: datetime) -> List[RemoteEvent]:
        ...

    def create_event(self, title: str, start: datetime, end: datetime) -> RemoteEvent:
        ...

    def update_event(self, event_id: str, title: str, start: datetime, end: datetime) -> None:
        ...

    def delete_event(self, event_id: str) -> None:
        ...
