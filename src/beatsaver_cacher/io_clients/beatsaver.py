"""Async BeatSaver catalog client."""

from datetime import UTC, datetime
from typing import List, Optional, Protocol

import httpx
from pydantic import ValidationError

from ..cacher_logging import get_logger
from ..config import AppSettings, get_settings
from ..errors import CatalogParseError, CatalogTransientError
from ..models.catalog import MapDetail, MapSearchResponse

logger = get_logger(__name__)


class CatalogClient(Protocol):
    """What the harvest loop needs from a catalog."""

    async def latest(
        self,
        before: datetime,
        page_size: int = 100,
        automapper: bool = False,
    ) -> List[MapDetail]:
        ...


def format_cursor(before: datetime) -> str:
    """Render a cursor as an ISO-8601 UTC instant with a ``Z`` suffix."""
    if before.tzinfo is None:
        before = before.replace(tzinfo=UTC)
    return before.astimezone(UTC).isoformat().replace("+00:00", "Z")


class BeatSaverClient:
    """Lists maps from the BeatSaver API newest-first."""

    def __init__(
        self,
        base_url: str = "https://api.beatsaver.com",
        timeout: float = 15.0,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            base_url: API root, without trailing path
            timeout: Request timeout in seconds
            user_agent: Value for the User-Agent header
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        headers = {'Accept': 'application/json'}
        if user_agent:
            headers['User-Agent'] = user_agent

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout, connect=10.0),
            headers=headers,
            follow_redirects=True,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Optional[AppSettings] = None) -> "BeatSaverClient":
        """Create client from application settings."""
        settings = settings or get_settings()
        return cls(
            base_url=settings.BEATSAVER_BASE_URL,
            timeout=settings.TIMEOUT_S,
            user_agent=settings.USER_AGENT,
        )

    async def latest(
        self,
        before: datetime,
        page_size: int = 100,
        automapper: bool = False,
    ) -> List[MapDetail]:
        """Fetch one page of maps first published strictly before ``before``.

        Raises:
            CatalogTransientError: On connection failures and non-2xx statuses
            CatalogParseError: If the body is not a valid map page
        """
        params = {
            'before': format_cursor(before),
            'pageSize': page_size,
            'automapper': 'true' if automapper else 'false',
            'sort': 'FIRST_PUBLISHED',
        }

        try:
            logger.debug("Requesting catalog page", params=params)
            response = await self.client.get("/maps/latest", params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Catalog returned error status",
                status_code=e.response.status_code,
                response_text=e.response.text[:500],
            )
            raise CatalogTransientError(
                f"catalog returned status {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            logger.warning("Catalog request failed", error=str(e))
            raise CatalogTransientError(f"catalog request failed: {e}") from e

        try:
            page = MapSearchResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise CatalogParseError(f"could not parse catalog page: {e}") from e

        logger.debug("Catalog page received", maps=len(page.docs), size=len(response.content))
        return page.docs

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
        logger.debug("BeatSaver client closed")

    async def __aenter__(self) -> "BeatSaverClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
