"""Data models for the campus event catalog."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class Organization:
    """Club or department that owns an event."""
    id: int
    name: str
    org_type: str


@dataclass(frozen=True)
class Attendee:
    """Attendee placeholder; the events endpoint sends no attendee fields."""


@dataclass(frozen=True)
class Event:
    """One schedulable campus event as served by the events endpoint."""
    id: int
    name: str
    start_date: str
    start_time: str
    end_date: str
    end_time: str
    location: str
    event_type: str
    organization: Organization
    attendees: Tuple[Attendee, ...] = field(default_factory=tuple)


class ErrorKind(Enum):
    """Failure categories reported by fetch and export outcomes."""
    TRANSPORT = 'transport'
    DECODE = 'decode'
    INVALID_SCHEDULE = 'invalid_schedule'
    AUTH_REQUIRED = 'auth_required'
    EXPORT_REJECTED = 'export_rejected'


class DecodeError(ValueError):
    """Response body does not match the events payload schema."""


class InvalidScheduleError(ValueError):
    """Event date and time fields do not combine into a valid timestamp."""


class AuthRequiredError(Exception):
    """No usable access token is available for calendar export."""


@dataclass(frozen=True)
class FetchSucceeded:
    """Result of a successful catalog fetch."""
    catalog: Tuple[Event, ...]
    ok = True


@dataclass(frozen=True)
class FetchFailed:
    """Result of a failed catalog fetch."""
    kind: ErrorKind
    message: str
    ok = False


@dataclass(frozen=True)
class ExportSucceeded:
    """Result of a calendar event accepted by the calendar API."""
    status_code: int
    calendar_event_id: Optional[str] = None
    ok = True


@dataclass(frozen=True)
class ExportFailed:
    """Result of a calendar export that did not go through."""
    kind: ErrorKind
    message: str
    status_code: Optional[int] = None
    ok = False
