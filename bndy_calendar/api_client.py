"""Async client for the bndy REST API calendar endpoints.

The client is created by the caller and passed to whatever needs it; there is
no shared module-level instance. An existing ``httpx.AsyncClient`` can be
injected (tests use one backed by ``httpx.MockTransport``).
"""

import logging
from datetime import date
from types import TracebackType
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from .calendar_models import CalendarResponse, Event
from .config_loader import Config
from .exceptions import CalendarApiError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS: dict[str, str] = {
    "Accept": "application/json",
    "User-Agent": "bndy-calendar/1.0",
}


class CalendarApiClient:
    """Fetch calendar data from ``/api/artists/{id}/calendar`` and ``/api/me/events``."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        access_token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        config: Optional[Config] = None,
    ) -> None:
        """Initialize API client.

        Args:
            base_url: API root; taken from config when None
            access_token: Bearer token for authenticated requests
            client: Existing HTTP client to use; one is created (and owned) when None
            config: Settings supplying base URL and timeout
        """
        self.config = config or Config()
        self.base_url = (base_url or self.config.api_base_url).rstrip("/")
        self.access_token = access_token
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.request_timeout),
            headers=DEFAULT_HEADERS,
        )

    async def __aenter__(self) -> "CalendarApiClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = dict(DEFAULT_HEADERS)
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    async def _get_json(self, path: str, params: dict[str, str]) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s params=%s", url, params)
        try:
            response = await self._client.get(url, params=params, headers=self._headers())
        except httpx.HTTPError as e:
            logger.warning("Request to %s failed: %s", url, e)
            raise CalendarApiError(f"Request to {path} failed: {e}") from e

        if response.status_code >= 400:
            logger.warning("GET %s returned HTTP %d", url, response.status_code)
            raise CalendarApiError(
                f"HTTP {response.status_code}: {response.text or response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise CalendarApiError(f"Invalid JSON from {path}", status_code=response.status_code) from e

    async def fetch_artist_calendar(self, artist_id: str, start: date, end: date) -> CalendarResponse:
        """Fetch the unified calendar of one artist.

        Args:
            artist_id: Artist in view
            start: First date of the range
            end: Last date of the range

        Returns:
            Artist, user and other-artist events for the range

        Raises:
            CalendarApiError: On transport failures, error statuses or malformed bodies
        """
        data = await self._get_json(
            f"/api/artists/{artist_id}/calendar",
            {"startDate": start.isoformat(), "endDate": end.isoformat()},
        )
        try:
            return CalendarResponse.model_validate(data)
        except ValidationError as e:
            raise CalendarApiError(f"Unexpected calendar payload for artist {artist_id}: {e}") from e

    async def fetch_my_events(self, start: date, end: date) -> list[Event]:
        """Fetch the signed-in user's events across all their artists.

        Raises:
            CalendarApiError: On transport failures, error statuses or malformed bodies
        """
        data = await self._get_json(
            "/api/me/events",
            {"startDate": start.isoformat(), "endDate": end.isoformat()},
        )
        if not isinstance(data, list):
            raise CalendarApiError("Unexpected /api/me/events payload: expected a list")
        try:
            return [Event.model_validate(item) for item in data]
        except ValidationError as e:
            raise CalendarApiError(f"Unexpected /api/me/events payload: {e}") from e
