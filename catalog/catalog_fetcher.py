"""Fetcher for the campus events endpoint."""
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional, Union

import requests

from processor.event_processor import EventProcessor
from processor.models import DecodeError, ErrorKind, FetchFailed, FetchSucceeded

logger = logging.getLogger(__name__)

FetchOutcome = Union[FetchSucceeded, FetchFailed]


class CatalogFetcher:
    """One-shot fetcher for the events catalog."""

    EVENTS_PATH = "/events/"

    def __init__(
        self,
        base_url: str,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
        processor: Optional[EventProcessor] = None
    ):
        """
        Initialize the catalog fetcher.

        Args:
            base_url: Events service base URL (e.g. "http://host")
            timeout: HTTP request timeout in seconds (default: 30)
            session: Optional requests session to send the request with
            processor: Optional payload decoder
        """
        self.url = base_url.rstrip('/') + self.EVENTS_PATH
        self.timeout = timeout
        self.session = session or requests.Session()
        self.processor = processor or EventProcessor()
        self._executor: Optional[ThreadPoolExecutor] = None

    def fetch_catalog(self) -> FetchOutcome:
        """
        Fetch and decode the events catalog.

        Issues exactly one GET request; failures are returned, not raised,
        and are never retried here. The HTTP status is not checked: any
        response body is decoded, so only connection-level errors count
        as transport failures.

        Returns:
            FetchSucceeded with the catalog, or FetchFailed with the error kind
        """
        logger.info(f"Fetching events catalog from {self.url}")

        try:
            response = self.session.get(self.url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(
                f"Failed to fetch events catalog: {e}",
                extra={'error_type': type(e).__name__}
            )
            return FetchFailed(kind=ErrorKind.TRANSPORT, message=str(e))

        if not response.ok:
            logger.warning(
                f"Events endpoint returned status {response.status_code}, "
                f"decoding body anyway"
            )

        try:
            catalog = self.processor.parse_catalog(response.content)
        except DecodeError as e:
            logger.error(
                f"Failed to parse events catalog: {e}",
                extra={'error_type': type(e).__name__}
            )
            return FetchFailed(kind=ErrorKind.DECODE, message=str(e))

        logger.info(f"Successfully fetched {len(catalog)} events")
        return FetchSucceeded(catalog=catalog)

    def fetch_catalog_async(self) -> 'Future[FetchOutcome]':
        """
        Fetch the catalog on a background thread.

        Discarding the returned future is enough to abandon the fetch.

        Returns:
            Future resolving to the fetch outcome
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1,
                thread_name_prefix="catalog-fetch"
            )
        return self._executor.submit(self.fetch_catalog)

    def close(self) -> None:
        """Shut down the background worker and the HTTP session."""
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
        self.session.close()
