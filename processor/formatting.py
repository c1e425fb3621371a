"""Display formatting for event cards and the dashboard."""
from datetime import datetime
from typing import Any, Dict

from processor.models import Event

NO_EVENTS_MESSAGE = "No events signed up yet."


def format_event_date(date_str: str) -> str:
    """
    Format a YYYY-MM-DD date in long form, e.g. "March 1, 2024".

    Falls back to the raw string when it cannot be parsed.
    """
    try:
        date_obj = datetime.strptime(date_str, '%Y-%m-%d')
    except (TypeError, ValueError):
        return date_str

    return f"{date_obj.strftime('%B')} {date_obj.day}, {date_obj.year}"


def format_event_time(time_str: str) -> str:
    """
    Format an HH:MM:SS time on the 12-hour clock, e.g. "2:00 PM".

    Falls back to the raw string when it cannot be parsed.
    """
    try:
        time_obj = datetime.strptime(time_str, '%H:%M:%S')
    except (TypeError, ValueError):
        return time_str

    hour = time_obj.hour % 12 or 12
    return f"{hour}:{time_obj.strftime('%M %p')}"


def format_time_range(event: Event) -> str:
    return f"{format_event_time(event.start_time)} - {format_event_time(event.end_time)}"


def event_card(event: Event) -> Dict[str, str]:
    """
    Build the text shown on an event card.

    Args:
        event: Event to display

    Returns:
        Dict with title, category, date, time range and location
    """
    return {
        'title': event.name,
        'category': event.event_type,
        'date': format_event_date(event.start_date),
        'time': format_time_range(event),
        'location': event.location,
    }


def dashboard_summary(store) -> Dict[str, Any]:
    """
    Summarise the registered events for the dashboard.

    Args:
        store: EventStore holding the registration set

    Returns:
        Dict with the registered count, the event cards and an
        empty-state message when nothing is registered
    """
    registered = store.registered_events
    return {
        'registered_count': store.registered_count(),
        'cards': [event_card(event) for event in registered],
        'message': None if registered else NO_EVENTS_MESSAGE,
    }
