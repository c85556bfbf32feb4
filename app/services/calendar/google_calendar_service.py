# app/services/calendar/google_calendar_service.py
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

import httplib2
from google.oauth2 import service_account
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from app.config.settings import Settings, get_settings
from app.schemas.calendar_events import RemoteEvent
from app.services.exceptions import (
    CalendarGatewayError,
    ConfigurationError,
    FetchError,
    RemoteEventNotFoundError,
)

logger = logging.getLogger(__name__)

GONE_STATUSES = (404, 410)


class GoogleCalendarGateway:
    """Calendar Gateway backed by one Google calendar and a service account"""

    SCOPES = ['https://www.googleapis.com/auth/calendar']

    def __init__(self, settings: Optional[Settings] = None, service: Any = None):
        self.settings = settings or get_settings()
        self.calendar_id = self.settings.GOOGLE_CALENDAR_ID
        self.num_retries = self.settings.CALENDAR_MAX_RETRIES
        self._service = service

    def is_configured(self) -> bool:
        if not self.calendar_id:
            return False
        if self._service is not None:
            return True
        path = self.settings.GOOGLE_CREDENTIALS_PATH
        return bool(path) and os.path.isfile(path)

    def _get_service(self):
        """Build the API client once; every request carries the configured timeout"""
        if self._service is None:
            if not self.is_configured():
                raise ConfigurationError("Google Calendar credentials not found.")
            try:
                credentials = service_account.Credentials.from_service_account_file(
                    self.settings.GOOGLE_CREDENTIALS_PATH,
                    scopes=self.SCOPES,
                )
            except (ValueError, OSError) as e:
                raise ConfigurationError(f"Invalid Google credentials file: {e}", cause=e)
            http = AuthorizedHttp(
                credentials,
                http=httplib2.Http(timeout=self.settings.CALENDAR_REQUEST_TIMEOUT_SECONDS),
            )
            self._service = build('calendar', 'v3', http=http, cache_discovery=False)
        return self._service

    def list_events(self, time_min: datetime, time_max: datetime) -> List[RemoteEvent]:
        """Fetch every event in [time_min, time_max), following pagination"""
        events: List[RemoteEvent] = []
        page_token = None

        try:
            service = self._get_service()
            while True:
                response = service.events().list(
                    calendarId=self.calendar_id,
                    timeMin=time_min.isoformat(),
                    timeMax=time_max.isoformat(),
                    singleEvents=True,
                    orderBy='startTime',
                    pageToken=page_token,
                ).execute(num_retries=self.num_retries)

                for item in response.get('items', []):
                    if not item.get('id'):
                        logger.warning(f"Skipping calendar item without an id: {item.get('summary')!r}")
                        continue
                    events.append(self._to_remote_event(item))

                page_token = response.get('nextPageToken')
                if not page_token:
                    break
        except ConfigurationError:
            raise
        except HttpError as e:
            logger.error(f"Google Calendar list failed ({e.resp.status}): {e}")
            raise FetchError(f"Google Calendar returned {e.resp.status}", cause=e)
        except Exception as e:
            logger.error(f"Google Calendar list failed: {e}")
            raise FetchError(str(e), cause=e)

        logger.info(f"Fetched {len(events)} events from calendar {self.calendar_id}")
        return events

    def create_event(self, title: str, start: datetime, end: datetime) -> RemoteEvent:
        body = self._event_body(title, start, end)
        item = self._execute(
            lambda service: service.events().insert(calendarId=self.calendar_id, body=body),
            action="create",
        )
        logger.info(f"Created Google event {item.get('id')}: {title}")
        return self._to_remote_event(item)

    def update_event(self, event_id: str, title: str, start: datetime, end: datetime) -> None:
        body = self._event_body(title, start, end)
        self._execute(
            lambda service: service.events().patch(
                calendarId=self.calendar_id, eventId=event_id, body=body
            ),
            action="update",
            event_id=event_id,
        )
        logger.info(f"Updated Google event {event_id}")

    def delete_event(self, event_id: str) -> None:
        self._execute(
            lambda service: service.events().delete(calendarId=self.calendar_id, eventId=event_id),
            action="delete",
            event_id=event_id,
        )
        logger.info(f"Deleted Google event {event_id}")

    def _execute(self, build_request, action: str, event_id: Optional[str] = None) -> Dict[str, Any]:
        try:
            result = build_request(self._get_service()).execute(num_retries=self.num_retries)
        except HttpError as e:
            status = e.resp.status
            if status in GONE_STATUSES:
                raise RemoteEventNotFoundError(
                    f"Google event {event_id} not found", status_code=status, cause=e
                )
            raise CalendarGatewayError(
                f"Google Calendar {action} failed ({status})", status_code=status, cause=e
            )
        except Exception as e:
            raise CalendarGatewayError(f"Google Calendar {action} failed: {e}", cause=e)

        # delete answers with an empty body
        return result or {}

    @staticmethod
    def _event_body(title: str, start: datetime, end: datetime) -> Dict[str, Any]:
        return {
            'summary': title,
            'start': {'dateTime': start.isoformat()},
            'end': {'dateTime': end.isoformat()},
        }

    @staticmethod
    def _to_remote_event(item: Dict[str, Any]) -> RemoteEvent:
        start = item.get('start') or {}
        end = item.get('end') or {}

        updated_at = None
        if item.get('updated'):
            try:
                updated_at = datetime.fromisoformat(item['updated'].replace('Z', '+00:00'))
            except ValueError:
                logger.warning(f"Unparseable 'updated' on event {item.get('id')}: {item['updated']}")

        return RemoteEvent(
            id=item['id'],
            title=item.get('summary') or '',
            start=start.get('dateTime') or start.get('date'),
            end=end.get('dateTime') or end.get('date'),
            updated_at=updated_at,
        )
