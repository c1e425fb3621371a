"""Startup wiring for the Bear Tracks events client."""
import json
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from calendar_export.google_calendar import ExportOutcome, GoogleCalendarExporter
from calendar_export.identity import AccessTokenProvider, SessionTokenProvider
from catalog.catalog_fetcher import CatalogFetcher, FetchOutcome
from processor.event_filter import Selector, filter_events
from processor.models import Event
from storage.club_list import ClubList
from storage.event_store import EventStore

logger = logging.getLogger(__name__)


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    # Attributes passed through logger `extra=` that are copied into the output
    EXTRA_FIELDS = (
        'error_type',
        'event_id',
        'events_base_url',
        'events_loaded',
        'duration_seconds',
    )

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key in self.EXTRA_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


@dataclass(frozen=True)
class AppConfig:
    """Runtime settings read from the environment."""
    events_base_url: str = 'http://34.30.61.18'
    calendar_base_url: str = GoogleCalendarExporter.BASE_URL
    event_timezone: str = 'America/New_York'
    timeout_seconds: int = 30
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Read configuration from environment variables."""
        return cls(
            events_base_url=os.environ.get('EVENTS_BASE_URL', cls.events_base_url),
            calendar_base_url=os.environ.get('CALENDAR_BASE_URL', cls.calendar_base_url),
            event_timezone=os.environ.get('EVENT_TIMEZONE', cls.event_timezone),
            timeout_seconds=int(os.environ.get('TIMEOUT_SECONDS', cls.timeout_seconds)),
            log_level=os.environ.get('LOG_LEVEL', cls.log_level)
        )


class BrowseSession:
    """
    Browse screen state: the selected filter, the filtered events and a
    cursor over them.
    """

    def __init__(
        self,
        store: EventStore,
        clubs: ClubList,
        exporter: Optional[GoogleCalendarExporter] = None
    ):
        self.store = store
        self.clubs = clubs
        self.exporter = exporter
        self.selector = Selector.ALL
        self.events: List[Event] = []
        self.index = 0

    def select(self, selector) -> List[Event]:
        """
        Change the filter and go back to the first event.

        Args:
            selector: Selector member or label; unknown values show all events

        Returns:
            Filtered events
        """
        self.selector = Selector.parse(selector) or Selector.ALL
        self.index = 0
        return self.refresh()

    def refresh(self) -> List[Event]:
        """Re-apply the current filter to the store's catalog."""
        self.events = filter_events(
            self.store.catalog,
            self.selector,
            self.clubs.memberships()
        )
        if self.index >= len(self.events):
            self.index = max(len(self.events) - 1, 0)
        return self.events

    def current(self) -> Optional[Event]:
        if 0 <= self.index < len(self.events):
            return self.events[self.index]
        return None

    def next_event(self) -> Optional[Event]:
        if self.index < len(self.events) - 1:
            self.index += 1
        return self.current()

    def previous_event(self) -> Optional[Event]:
        if self.index > 0:
            self.index -= 1
        return self.current()

    def add_current(self) -> Optional[ExportOutcome]:
        """
        Register the event under the cursor and push it to the calendar.

        Returns:
            Export outcome, or None when there is no current event or no
            exporter is configured
        """
        event = self.current()
        if event is None:
            return None

        self.store.register(event)

        if self.exporter is None:
            return None

        outcome = self.exporter.export_event(event)
        if outcome.ok:
            logger.info(
                f"Event {event.id} successfully added to calendar",
                extra={'event_id': event.id}
            )
        else:
            logger.warning(
                f"Failed to add event {event.id} to calendar: {outcome.message}",
                extra={'error_type': outcome.kind.value, 'event_id': event.id}
            )
        return outcome


@dataclass
class AppSession:
    """Components wired together at startup."""
    config: AppConfig
    store: EventStore
    fetcher: CatalogFetcher
    exporter: GoogleCalendarExporter
    clubs: ClubList
    browse: BrowseSession
    fetch_outcome: FetchOutcome

    def close(self) -> None:
        self.fetcher.close()
        self.exporter.close()


def start(
    config: AppConfig,
    token_provider: Optional[AccessTokenProvider] = None
) -> AppSession:
    """
    Build the components and load the catalog once.

    A failed fetch is logged and leaves the catalog empty.

    Args:
        config: Runtime settings
        token_provider: Source of calendar tokens (default: signed-out session)

    Returns:
        AppSession with the catalog loaded when the fetch succeeded
    """
    store = EventStore()
    clubs = ClubList()
    fetcher = CatalogFetcher(
        base_url=config.events_base_url,
        timeout=config.timeout_seconds
    )
    exporter = GoogleCalendarExporter(
        token_provider=token_provider or SessionTokenProvider(),
        base_url=config.calendar_base_url,
        timeout=config.timeout_seconds,
        timezone=config.event_timezone
    )

    outcome = fetcher.fetch_catalog()
    store.apply_fetch_outcome(outcome)

    browse = BrowseSession(store, clubs, exporter)
    browse.refresh()

    return AppSession(
        config=config,
        store=store,
        fetcher=fetcher,
        exporter=exporter,
        clubs=clubs,
        browse=browse,
        fetch_outcome=outcome
    )


def main() -> Dict[str, Any]:
    """
    Start the client and report what was loaded.

    Returns:
        Response dict with statusCode and a JSON body
    """
    config = AppConfig.from_env()
    setup_logging(config.log_level)

    start_time = time.time()
    logger.info(
        "Startup fetch started",
        extra={'events_base_url': config.events_base_url}
    )

    try:
        session = start(config)
    except Exception as e:
        duration = time.time() - start_time
        logger.error(
            f"Startup failed: {str(e)}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return {
            'statusCode': 500,
            'body': json.dumps({
                'message': 'Startup failed',
                'error': str(e),
                'error_type': type(e).__name__,
                'duration_seconds': round(duration, 2)
            })
        }

    try:
        duration = time.time() - start_time
        outcome = session.fetch_outcome
        if not outcome.ok:
            logger.error(
                f"Failed to fetch events catalog: {outcome.message}",
                extra={
                    'error_type': outcome.kind.value,
                    'duration_seconds': round(duration, 2)
                }
            )
            return {
                'statusCode': 500,
                'body': json.dumps({
                    'message': 'Failed to fetch events catalog',
                    'error': outcome.message,
                    'error_type': outcome.kind.value,
                    'duration_seconds': round(duration, 2)
                })
            }

        catalog_size = len(session.store.catalog)
        logger.info(
            f"Startup completed with {catalog_size} events",
            extra={
                'events_loaded': catalog_size,
                'duration_seconds': round(duration, 2)
            }
        )

        return {
            'statusCode': 200,
            'body': json.dumps({
                'message': 'Catalog loaded',
                'statistics': {
                    'events_loaded': catalog_size,
                    'duration_seconds': round(duration, 2)
                }
            })
        }
    finally:
        session.close()


if __name__ == '__main__':
    print(json.dumps(main()))
