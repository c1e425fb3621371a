"""Export of registered events to Google Calendar."""
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Union

import pytz
import requests

from calendar_export.identity import AccessTokenProvider
from processor.models import (
    AuthRequiredError,
    ErrorKind,
    Event,
    ExportFailed,
    ExportSucceeded,
    InvalidScheduleError,
)

logger = logging.getLogger(__name__)

ExportOutcome = Union[ExportSucceeded, ExportFailed]

DATETIME_FORMAT = '%Y-%m-%dT%H:%M:%S'
UTC_FORMAT = '%Y-%m-%dT%H:%M:%SZ'


def _combine(date_str: str, time_str: str, tz) -> datetime:
    combined = f"{date_str}T{time_str}"
    try:
        naive = datetime.strptime(combined, DATETIME_FORMAT)
    except (TypeError, ValueError) as e:
        raise InvalidScheduleError(f"Invalid date/time '{combined}'") from e

    return tz.localize(naive).astimezone(pytz.utc)


def build_schedule(event: Event, tz=pytz.utc) -> Tuple[datetime, datetime]:
    """
    Convert an event's date and time fields to UTC instants.

    The fields are wall-clock values in the event timezone. Ordering is
    not checked; the calendar API decides whether the range is valid.

    Args:
        event: Event to schedule
        tz: pytz timezone the event times are expressed in (default: UTC)

    Returns:
        Tuple of (start, end) as timezone-aware UTC datetimes

    Raises:
        InvalidScheduleError: If a date/time pair cannot be parsed
    """
    start = _combine(event.start_date, event.start_time, tz)
    end = _combine(event.end_date, event.end_time, tz)

    return start, end


def build_payload(event: Event, start: datetime, end: datetime) -> Dict[str, Any]:
    """
    Build the calendar event creation body.

    Args:
        event: Event being exported
        start: UTC start instant
        end: UTC end instant

    Returns:
        JSON-serialisable request body
    """
    return {
        'summary': event.name,
        'location': event.location or '',
        'start': {
            'dateTime': start.strftime(UTC_FORMAT),
            'timeZone': 'UTC'
        },
        'end': {
            'dateTime': end.strftime(UTC_FORMAT),
            'timeZone': 'UTC'
        }
    }


class GoogleCalendarExporter:
    """Adds registered events to the user's primary Google Calendar."""

    BASE_URL = "https://www.googleapis.com/calendar/v3"
    EVENTS_PATH = "/calendars/primary/events"

    def __init__(
        self,
        token_provider: AccessTokenProvider,
        base_url: str = BASE_URL,
        timeout: int = 30,
        timezone: str = 'UTC',
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the exporter.

        Args:
            token_provider: Source of the bearer token
            base_url: Calendar API base URL
            timeout: HTTP request timeout in seconds (default: 30)
            timezone: Timezone name the event times are expressed in
            session: Optional requests session to send the request with

        Raises:
            pytz.UnknownTimeZoneError: If timezone is not a known zone name
        """
        self.token_provider = token_provider
        self.url = base_url.rstrip('/') + self.EVENTS_PATH
        self.timeout = timeout
        self.tz = pytz.timezone(timezone)
        self.session = session or requests.Session()
        self._executor: Optional[ThreadPoolExecutor] = None

    def export_event(self, event: Event) -> ExportOutcome:
        """
        Create a calendar entry for an event.

        At most one request is sent and it is never retried. Calling this
        twice for the same event creates two calendar entries.

        Args:
            event: Registered event to export

        Returns:
            ExportSucceeded, or ExportFailed with the error kind
        """
        try:
            start, end = build_schedule(event, self.tz)
        except InvalidScheduleError as e:
            logger.warning(f"Not exporting event {event.id}: {e}")
            return ExportFailed(kind=ErrorKind.INVALID_SCHEDULE, message=str(e))

        try:
            token = self.token_provider.obtain_access_token()
        except AuthRequiredError as e:
            logger.warning(f"Not exporting event {event.id}: {e}")
            return ExportFailed(kind=ErrorKind.AUTH_REQUIRED, message=str(e))

        payload = build_payload(event, start, end)
        logger.debug(f"Calendar payload for event {event.id}: {payload}")

        try:
            response = self.session.post(
                self.url,
                json=payload,
                headers={
                    'Authorization': f"Bearer {token}",
                    'Content-Type': 'application/json'
                },
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(
                f"Error adding event {event.id} to calendar: {e}",
                extra={'error_type': type(e).__name__}
            )
            return ExportFailed(kind=ErrorKind.TRANSPORT, message=str(e))

        if not 200 <= response.status_code <= 299:
            logger.error(
                f"Calendar rejected event {event.id} with status "
                f"{response.status_code}: {response.text}"
            )
            return ExportFailed(
                kind=ErrorKind.EXPORT_REJECTED,
                message=f"Calendar API returned {response.status_code}",
                status_code=response.status_code
            )

        logger.info(f"Event {event.id} added to calendar")
        return ExportSucceeded(
            status_code=response.status_code,
            calendar_event_id=self._created_id(response)
        )

    def export_event_async(self, event: Event) -> 'Future[ExportOutcome]':
        """
        Export an event on a background thread.

        Args:
            event: Registered event to export

        Returns:
            Future resolving to the export outcome
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1,
                thread_name_prefix="calendar-export"
            )
        return self._executor.submit(self.export_event, event)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
        self.session.close()

    def _created_id(self, response: requests.Response) -> Optional[str]:
        try:
            body = response.json()
        except ValueError:
            return None

        if isinstance(body, dict):
            return body.get('id')
        return None
