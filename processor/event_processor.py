"""Event processor for decoding the events endpoint payload."""
import json
import logging
from typing import Any, Dict, Tuple, Union

from processor.models import Attendee, DecodeError, Event, Organization

logger = logging.getLogger(__name__)


class EventProcessor:
    """Processor that turns the events payload into Event objects."""

    # Wire field name -> Event attribute
    EVENT_FIELDS = {
        'name': 'name',
        'start_date': 'start_date',
        'start_time': 'start_time',
        'end_date': 'end_date',
        'end_time': 'end_time',
        'location': 'location',
        'event_type': 'event_type',
    }

    def parse_catalog(
        self,
        payload: Union[bytes, str, Dict[str, Any]]
    ) -> Tuple[Event, ...]:
        """
        Decode a full events payload into a catalog.

        Decoding is all-or-nothing: a single malformed record rejects
        the whole payload.

        Args:
            payload: Raw response body, or the already-decoded JSON object

        Returns:
            Tuple of Event objects in server order

        Raises:
            DecodeError: If the payload does not match the events schema
        """
        if isinstance(payload, (bytes, str)):
            try:
                payload = json.loads(payload)
            except ValueError as e:
                raise DecodeError(f"Response body is not valid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise DecodeError(
                f"Expected a JSON object, got {type(payload).__name__}"
            )

        if 'events' not in payload:
            raise DecodeError("Response body is missing the 'events' key")

        records = payload['events']
        if not isinstance(records, list):
            raise DecodeError("'events' must be a JSON array")

        events = []
        for index, record in enumerate(records):
            try:
                events.append(self.parse_event(record))
            except DecodeError as e:
                raise DecodeError(f"Event record {index}: {e}") from e

        logger.info(f"Decoded {len(events)} events from payload")
        return tuple(events)

    def parse_event(self, record: Any) -> Event:
        """
        Decode a single event record.

        Args:
            record: JSON object for one event

        Returns:
            Event object

        Raises:
            DecodeError: If a field is missing or has the wrong type
        """
        if not isinstance(record, dict):
            raise DecodeError("event record must be a JSON object")

        values = {
            attribute: self._require_str(record, wire_name)
            for wire_name, attribute in self.EVENT_FIELDS.items()
        }

        return Event(
            id=self._require_int(record, 'id'),
            organization=self._parse_organization(record.get('organization')),
            attendees=self._parse_attendees(record.get('attendees')),
            **values
        )

    def _parse_organization(self, record: Any) -> Organization:
        """
        Decode the embedded organization object.

        Args:
            record: JSON object for the owning organization

        Returns:
            Organization object
        """
        if not isinstance(record, dict):
            raise DecodeError("'organization' must be a JSON object")

        return Organization(
            id=self._require_int(record, 'id'),
            name=self._require_str(record, 'name'),
            org_type=self._require_str(record, 'org_type')
        )

    def _parse_attendees(self, records: Any) -> Tuple[Attendee, ...]:
        if not isinstance(records, list):
            raise DecodeError("'attendees' must be a JSON array")

        for record in records:
            if not isinstance(record, dict):
                raise DecodeError("attendee entries must be JSON objects")

        return tuple(Attendee() for _ in records)

    def _require_int(self, record: Dict[str, Any], key: str) -> int:
        if key not in record:
            raise DecodeError(f"missing required field '{key}'")

        value = record[key]
        # bool is a subclass of int
        if isinstance(value, bool) or not isinstance(value, int):
            raise DecodeError(f"field '{key}' must be an integer")

        return value

    def _require_str(self, record: Dict[str, Any], key: str) -> str:
        if key not in record:
            raise DecodeError(f"missing required field '{key}'")

        value = record[key]
        if not isinstance(value, str):
            raise DecodeError(f"field '{key}' must be a string")

        return value
