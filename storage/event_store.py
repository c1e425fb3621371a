"""In-memory store for the event catalog and the user's registrations."""
import logging
from typing import Iterable, List, Tuple, Union

from processor.models import Event, FetchFailed, FetchSucceeded

logger = logging.getLogger(__name__)


class EventStore:
    """
    Single owner of the fetched catalog and the registration set.

    The catalog is held as a tuple and replaced by one reference
    assignment, so readers see either the previous or the new catalog.
    The store is not safe for concurrent writers.
    """

    def __init__(self):
        """Create an empty store."""
        self._catalog: Tuple[Event, ...] = ()
        self._registered: List[Event] = []

    @property
    def catalog(self) -> Tuple[Event, ...]:
        """Events from the last successful fetch."""
        return self._catalog

    @property
    def registered_events(self) -> Tuple[Event, ...]:
        """Registered events in registration order."""
        return tuple(self._registered)

    def set_catalog(self, events: Iterable[Event]) -> None:
        """
        Replace the catalog in full.

        Args:
            events: New catalog in server order
        """
        self._catalog = tuple(events)
        logger.info(f"Catalog replaced with {len(self._catalog)} events")

    def apply_fetch_outcome(self, outcome: Union[FetchSucceeded, FetchFailed]) -> bool:
        """
        Publish a fetch outcome to the store.

        A failed fetch leaves the current catalog untouched.

        Args:
            outcome: Result returned by the catalog fetcher

        Returns:
            True if the catalog was replaced, False otherwise
        """
        if isinstance(outcome, FetchSucceeded):
            self.set_catalog(outcome.catalog)
            return True

        logger.warning(
            f"Keeping previous catalog after failed fetch: {outcome.message}",
            extra={'error_type': outcome.kind.value}
        )
        return False

    def register(self, event: Event) -> bool:
        """
        Add an event to the registration set.

        Registering an event that is already registered is a no-op.

        Args:
            event: Event the user signed up for

        Returns:
            True if the event was added, False if it was already registered
        """
        if self.is_registered(event):
            logger.debug(f"Event {event.id} already registered")
            return False

        self._registered.append(event)
        logger.info(f"Registered for event {event.id} ({event.name})")
        return True

    def cancel(self, event: Event) -> int:
        """
        Remove an event from the registration set.

        Args:
            event: Event to cancel

        Returns:
            Number of entries removed (0 if the event was not registered)
        """
        before = len(self._registered)
        self._registered = [
            registered for registered in self._registered
            if registered.id != event.id
        ]
        removed = before - len(self._registered)

        if removed:
            logger.info(f"Cancelled registration for event {event.id}")
        return removed

    def is_registered(self, event: Event) -> bool:
        return any(registered.id == event.id for registered in self._registered)

    def registered_count(self) -> int:
        return len(self._registered)
