"""Harvest loop walking the catalog backward in time into a snapshot.

The loop is a small state machine:

* ``FETCHING`` - request the page of maps published strictly before the cursor
* ``RETRYING`` - a transient failure occurred; wait the fixed backoff and
  request the same page again
* ``DONE`` - the catalog returned an empty page

After every non-empty page the cursor moves to the ``uploaded`` time of the
last entry in page order, whether or not that entry was cached. This relies on
the catalog returning pages in non-increasing publication order.
"""

import asyncio
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_never, wait_fixed

from ..cacher_logging import get_logger, metrics, new_trace_id
from ..config import AppSettings, get_settings
from ..errors import CatalogParseError, CatalogTransientError, HarvestAbortedError, MapEncodeError
from ..io_clients.beatsaver import CatalogClient
from ..models.catalog import MapDetail
from ..models.records import Snapshot
from ..transformers.records import cache_map_data

logger = get_logger(__name__)

SleepFn = Callable[[float], Awaitable[None]]
ClockFn = Callable[[], datetime]


class HarvestState(str, Enum):
    FETCHING = "fetching"
    RETRYING = "retrying"
    DONE = "done"


@dataclass
class HarvestStats:
    """Counters for a single run."""

    pages: int = 0
    entries_seen: int = 0
    cached: int = 0
    rejected: int = 0
    invalid: int = 0
    transient_retries: int = 0
    parse_failures: int = 0


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class MapHarvester:
    """Drives the catalog client until the catalog is exhausted."""

    def __init__(
        self,
        client: CatalogClient,
        *,
        page_size: int = 100,
        page_delay_s: float = 0.1,
        retry_backoff_s: float = 3.0,
        max_parse_failures: int = 5,
        sleep: SleepFn = asyncio.sleep,
        clock: ClockFn = _utc_now,
    ):
        """Initialize the harvester.

        Args:
            client: Catalog to page through
            page_size: Maps requested per page
            page_delay_s: Pause after each successful page
            retry_backoff_s: Fixed wait after a transient failure
            max_parse_failures: Consecutive unparseable pages before giving up
            sleep: Awaitable sleep, replaceable in tests
            clock: Source of the initial cursor
        """
        self._client = client
        self.page_size = page_size
        self.page_delay_s = page_delay_s
        self.retry_backoff_s = retry_backoff_s
        self.max_parse_failures = max_parse_failures
        self._sleep = sleep
        self._clock = clock

        self.state = HarvestState.FETCHING
        self.cursor: Optional[datetime] = None
        self.snapshot: Snapshot = {}
        self.stats = HarvestStats()
        self.trace_id: Optional[str] = None

    @classmethod
    def from_settings(
        cls,
        client: CatalogClient,
        settings: Optional[AppSettings] = None,
        **kwargs,
    ) -> "MapHarvester":
        settings = settings or get_settings()
        return cls(
            client,
            page_size=settings.PAGE_SIZE,
            page_delay_s=settings.PAGE_DELAY_S,
            retry_backoff_s=settings.RETRY_BACKOFF_S,
            max_parse_failures=settings.MAX_PARSE_FAILURES,
            **kwargs,
        )

    async def run(self) -> Snapshot:
        """Harvest every eligible map and return the snapshot.

        Raises:
            HarvestAbortedError: After ``max_parse_failures`` consecutive
                unparseable pages
        """
        self.trace_id = new_trace_id()
        self.state = HarvestState.FETCHING
        self.cursor = _as_utc(self._clock())
        self.snapshot = {}
        self.stats = HarvestStats()
        parse_failures = 0

        logger.info("Starting harvest", cursor=self.cursor.isoformat(), page_size=self.page_size)

        while self.state != HarvestState.DONE:
            try:
                page = await self._fetch_page()
            except CatalogParseError as e:
                parse_failures += 1
                self.stats.parse_failures += 1
                metrics.increment("harvest.parse_failures")
                logger.error(
                    "Catalog page could not be parsed",
                    cursor=self.cursor.isoformat(),
                    attempt=parse_failures,
                    error=str(e),
                )
                if parse_failures >= self.max_parse_failures:
                    raise HarvestAbortedError(
                        f"{parse_failures} consecutive unparseable pages at cursor "
                        f"{self.cursor.isoformat()}"
                    ) from e
                await self._sleep(self.retry_backoff_s)
                continue

            parse_failures = 0

            if not page:
                logger.info("No maps left", cached=len(self.snapshot))
                self.state = HarvestState.DONE
                continue

            self._process_page(page)
            await self._sleep(self.page_delay_s)

        self.stats.cached = len(self.snapshot)
        metrics.gauge("harvest.cached", self.stats.cached)
        logger.info("Harvest complete", **asdict(self.stats))
        return self.snapshot

    async def _fetch_page(self) -> List[MapDetail]:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(CatalogTransientError),
            wait=wait_fixed(self.retry_backoff_s),
            stop=stop_never,
            sleep=self._sleep,
            before_sleep=self._before_retry,
            reraise=True,
        )
        try:
            return await retrying(
                self._client.latest,
                before=self.cursor,
                page_size=self.page_size,
                automapper=False,
            )
        finally:
            self.state = HarvestState.FETCHING

    def _before_retry(self, retry_state: RetryCallState) -> None:
        self.state = HarvestState.RETRYING
        self.stats.transient_retries += 1
        metrics.increment("harvest.transient_retries")

        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.error(
            "Catalog request failed, waiting a bit",
            cursor=self.cursor.isoformat(),
            attempt=retry_state.attempt_number,
            status_code=getattr(error, "status_code", None),
            error=str(error),
            backoff_s=self.retry_backoff_s,
        )

    def _process_page(self, page: List[MapDetail]) -> None:
        self.stats.pages += 1
        metrics.increment("harvest.pages")
        logger.debug("Obtained maps", count=len(page))

        for map_detail in page:
            self.stats.entries_seen += 1
            try:
                record = cache_map_data(map_detail)
            except MapEncodeError as e:
                self.stats.invalid += 1
                metrics.increment("harvest.invalid")
                logger.warning(
                    "Dropping map with invalid data",
                    map_id=map_detail.id,
                    field=e.field,
                    error=str(e),
                )
                continue

            if record is None:
                self.stats.rejected += 1
                metrics.increment("harvest.rejected")
                continue

            self.snapshot[map_detail.id] = record

        previous = self.cursor
        last_map = page[-1]
        self.cursor = _as_utc(last_map.uploaded)
        if self.cursor >= previous:
            logger.warning(
                "Cursor did not move backward; catalog order may be broken",
                previous=previous.isoformat(),
                cursor=self.cursor.isoformat(),
            )

        logger.info(
            "Cached maps",
            total=len(self.snapshot),
            last_map=last_map.id,
            cursor=self.cursor.isoformat(),
        )


async def harvest_maps(client: CatalogClient, settings: Optional[AppSettings] = None) -> Snapshot:
    """Run a full harvest with settings-derived pacing."""
    harvester = MapHarvester.from_settings(client, settings)
    return await harvester.run()
