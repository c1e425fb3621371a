"""Unit tests for the Google Calendar exporter."""
import json
from datetime import datetime
from unittest.mock import Mock

import pytest
import pytz
import responses
from requests.exceptions import ConnectionError

from calendar_export.google_calendar import (
    GoogleCalendarExporter,
    build_payload,
    build_schedule,
)
from calendar_export.identity import SessionTokenProvider, UserSession
from processor.models import (
    AuthRequiredError,
    ErrorKind,
    Event,
    ExportFailed,
    ExportSucceeded,
    InvalidScheduleError,
    Organization,
)

CALENDAR_BASE_URL = "https://calendar.test/v3"
CALENDAR_EVENTS_URL = "https://calendar.test/v3/calendars/primary/events"


def make_event(**overrides):
    fields = {
        'id': 7,
        'name': 'Slope Day Planning',
        'start_date': '2024-03-01',
        'start_time': '14:00:00',
        'end_date': '2024-03-01',
        'end_time': '15:30:00',
        'location': 'Day Hall',
        'event_type': 'Meeting',
        'organization': Organization(id=3, name='Student Assembly', org_type='Government')
    }
    fields.update(overrides)
    return Event(**fields)


@pytest.fixture
def token_provider():
    return SessionTokenProvider(
        UserSession(
            display_name='Touchdown Bear',
            email_address='touchdown@cornell.edu',
            access_token='token-123'
        )
    )


@pytest.fixture
def exporter(token_provider):
    exporter = GoogleCalendarExporter(
        token_provider=token_provider,
        base_url=CALENDAR_BASE_URL,
        timezone='America/New_York'
    )
    yield exporter
    exporter.close()


class TestBuildSchedule:
    """Test cases for build_schedule."""

    def test_utc_by_default(self):
        """Test that times are taken as UTC when no zone is given."""
        start, end = build_schedule(make_event())

        assert start == datetime(2024, 3, 1, 14, 0, tzinfo=pytz.utc)
        assert end == datetime(2024, 3, 1, 15, 30, tzinfo=pytz.utc)

    def test_converts_local_time_to_utc(self):
        """Test conversion from the event timezone (EST is UTC-5)."""
        start, _ = build_schedule(make_event(), pytz.timezone('America/New_York'))

        assert start == datetime(2024, 3, 1, 19, 0, tzinfo=pytz.utc)

    def test_invalid_calendar_date(self):
        """Test that an impossible date is rejected."""
        with pytest.raises(InvalidScheduleError):
            build_schedule(make_event(start_date='2024-13-40'))

    def test_invalid_end_time(self):
        """Test that a malformed end time is rejected."""
        with pytest.raises(InvalidScheduleError):
            build_schedule(make_event(end_time='3:30 PM'))

    def test_end_before_start_is_not_checked(self):
        """Test that a parseable but reversed range is left to the calendar API."""
        start, end = build_schedule(make_event(start_time='22:00:00', end_time='01:00:00'))

        assert end < start


class TestBuildPayload:
    """Test cases for build_payload."""

    def test_payload_shape(self):
        event = make_event()
        start, end = build_schedule(event)

        assert build_payload(event, start, end) == {
            'summary': 'Slope Day Planning',
            'location': 'Day Hall',
            'start': {'dateTime': '2024-03-01T14:00:00Z', 'timeZone': 'UTC'},
            'end': {'dateTime': '2024-03-01T15:30:00Z', 'timeZone': 'UTC'}
        }


class TestGoogleCalendarExporter:
    """Test cases for GoogleCalendarExporter class."""

    @responses.activate
    def test_export_event_success(self, exporter):
        """Test a successful export request."""
        responses.add(
            responses.POST,
            CALENDAR_EVENTS_URL,
            json={'id': 'abc123', 'status': 'confirmed'},
            status=200
        )

        outcome = exporter.export_event(make_event())

        assert outcome == ExportSucceeded(status_code=200, calendar_event_id='abc123')
        assert len(responses.calls) == 1

        request = responses.calls[0].request
        assert request.headers['Authorization'] == 'Bearer token-123'
        assert request.headers['Content-Type'] == 'application/json'
        body = json.loads(request.body)
        assert body['summary'] == 'Slope Day Planning'
        assert body['start'] == {'dateTime': '2024-03-01T19:00:00Z', 'timeZone': 'UTC'}
        assert body['end'] == {'dateTime': '2024-03-01T20:30:00Z', 'timeZone': 'UTC'}

    @responses.activate
    def test_export_event_invalid_schedule_sends_nothing(self, exporter):
        """Test that an invalid date fails before any request."""
        outcome = exporter.export_event(make_event(start_date='2024-13-40'))

        assert isinstance(outcome, ExportFailed)
        assert outcome.kind is ErrorKind.INVALID_SCHEDULE
        assert len(responses.calls) == 0

    @responses.activate
    def test_export_event_signed_out(self):
        """Test that a missing session fails before any request."""
        exporter = GoogleCalendarExporter(
            token_provider=SessionTokenProvider(),
            base_url=CALENDAR_BASE_URL
        )

        outcome = exporter.export_event(make_event())

        assert outcome.kind is ErrorKind.AUTH_REQUIRED
        assert len(responses.calls) == 0

    @responses.activate
    def test_export_event_rejected(self, exporter):
        """Test that a non-2xx status is reported with its code."""
        responses.add(
            responses.POST,
            CALENDAR_EVENTS_URL,
            json={'error': {'message': 'Invalid Credentials'}},
            status=401
        )

        outcome = exporter.export_event(make_event())

        assert outcome.kind is ErrorKind.EXPORT_REJECTED
        assert outcome.status_code == 401
        assert len(responses.calls) == 1

    @responses.activate
    def test_export_event_transport_error(self, exporter):
        """Test connection failures."""
        responses.add(
            responses.POST,
            CALENDAR_EVENTS_URL,
            body=ConnectionError("Connection refused")
        )

        outcome = exporter.export_event(make_event())

        assert outcome.kind is ErrorKind.TRANSPORT
        assert outcome.status_code is None

    @responses.activate
    def test_export_event_end_before_start_is_sent(self, exporter):
        """Test that a reversed range is posted once and rejected by the API."""
        responses.add(
            responses.POST,
            CALENDAR_EVENTS_URL,
            json={'error': {'message': 'The specified time range is empty.'}},
            status=400
        )

        outcome = exporter.export_event(
            make_event(start_time='22:00:00', end_time='01:00:00')
        )

        assert len(responses.calls) == 1
        assert outcome.kind is ErrorKind.EXPORT_REJECTED
        assert outcome.status_code == 400

    @responses.activate
    def test_export_event_twice_creates_two_requests(self, exporter):
        """Test that exports are not deduplicated."""
        responses.add(responses.POST, CALENDAR_EVENTS_URL, json={'id': 'a'}, status=200)

        exporter.export_event(make_event())
        exporter.export_event(make_event())

        assert len(responses.calls) == 2

    @responses.activate
    def test_export_event_success_without_json_body(self, exporter):
        """Test a 2xx response without a JSON body."""
        responses.add(responses.POST, CALENDAR_EVENTS_URL, body='', status=204)

        outcome = exporter.export_event(make_event())

        assert outcome == ExportSucceeded(status_code=204, calendar_event_id=None)

    @responses.activate
    def test_export_event_async(self, exporter):
        """Test that the async export resolves to the outcome."""
        responses.add(responses.POST, CALENDAR_EVENTS_URL, json={'id': 'xyz'}, status=200)

        outcome = exporter.export_event_async(make_event()).result(timeout=5)

        assert outcome.ok
        assert outcome.calendar_event_id == 'xyz'

    def test_token_requested_per_export(self):
        """Test that the token provider is consulted on each export."""
        provider = Mock()
        provider.obtain_access_token.side_effect = AuthRequiredError('expired')
        exporter = GoogleCalendarExporter(token_provider=provider)

        outcome = exporter.export_event(make_event())

        assert outcome == ExportFailed(kind=ErrorKind.AUTH_REQUIRED, message='expired')
        provider.obtain_access_token.assert_called_once_with()

    def test_unknown_timezone(self, token_provider):
        with pytest.raises(pytz.UnknownTimeZoneError):
            GoogleCalendarExporter(token_provider=token_provider, timezone='Mars/Olympus')
