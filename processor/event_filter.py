"""Client-side filters over the event catalog."""
import logging
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Union

from processor.models import Event

logger = logging.getLogger(__name__)


class Selector(str, Enum):
    """Filter choices offered on the browse screen."""
    ALL = 'All'
    MY_CLUBS = 'My Clubs'
    MORNING = '7 AM - 12 PM'
    AFTERNOON = '12 PM - 5 PM'
    EVENING = '5 PM - 10 PM'

    @classmethod
    def parse(cls, value) -> Optional['Selector']:
        """
        Resolve a selector from a member, its label or its name.

        Args:
            value: Selector member, label (e.g. "My Clubs") or name (e.g. "MORNING")

        Returns:
            Matching Selector, or None if the value is not recognised
        """
        if isinstance(value, cls):
            return value

        if not isinstance(value, str):
            return None

        try:
            return cls(value)
        except ValueError:
            pass

        return cls.__members__.get(value.upper())


# Half-open [start, end) hour ranges for the time-of-day buckets
HOUR_RANGES = {
    Selector.MORNING: (7, 12),
    Selector.AFTERNOON: (12, 17),
    Selector.EVENING: (17, 22),
}


def start_hour(event: Event) -> Optional[int]:
    """
    Hour component of an event's start time.

    Args:
        event: Event to inspect

    Returns:
        Hour (0-23), or None if start_time is not HH:MM:SS
    """
    try:
        return datetime.strptime(event.start_time, '%H:%M:%S').hour
    except (TypeError, ValueError):
        return None


def filter_events(
    catalog: Sequence[Event],
    selector: Union[Selector, str, None],
    club_memberships: Iterable[str] = ()
) -> List[Event]:
    """
    Filter the catalog for display.

    The catalog is never modified; the result preserves catalog order.
    An unrecognised selector returns the whole catalog.

    Args:
        catalog: Events in server order
        selector: Filter choice
        club_memberships: Names of the user's clubs (case-sensitive)

    Returns:
        New list with the matching events
    """
    resolved = Selector.parse(selector)

    if resolved is None or resolved is Selector.ALL:
        if resolved is None and selector is not None:
            logger.debug(f"Unrecognised selector {selector!r}, showing all events")
        return list(catalog)

    if resolved is Selector.MY_CLUBS:
        clubs = set(club_memberships)
        return [event for event in catalog if event.organization.name in clubs]

    first_hour, end_hour = HOUR_RANGES[resolved]
    filtered = []
    for event in catalog:
        hour = start_hour(event)
        if hour is not None and first_hour <= hour < end_hour:
            filtered.append(event)

    return filtered
