"""TVDB API client service."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx

from ..config import settings
from .snapshot import EpisodeInfo, Performer, SeriesInfo

logger = logging.getLogger(__name__)


class CatalogUnavailableError(Exception):
    """The catalog could not be reached or returned an error."""


# TVDB status names mapped to ours
STATUS_MAP = {
    "Continuing": "continuing",
    "Ended": "ended",
    "Upcoming": "upcoming",
}


class TVDBService:
    """Service for interacting with TheTVDB API v4."""

    BASE_URL = "https://api4.thetvdb.com/v4"

    def __init__(
        self,
        api_key: str = "",
        client: Optional[httpx.AsyncClient] = None,
        timezone_name: Optional[str] = None,
    ):
        self.api_key = api_key
        self._client = client
        self._timezone_name = timezone_name or settings.catalog_timezone
        self._cache: dict = {}
        self._cache_expiry: dict = {}
        self._token: Optional[str] = None
        self._token_expiry: Optional[datetime] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=30.0)
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def login(self):
        """Authenticate with TVDB API and store bearer token."""
        if not self.api_key:
            raise ValueError("TVDB API key not configured")

        client = await self._get_client()
        response = await client.post(
            f"{self.BASE_URL}/login",
            json={"apikey": self.api_key},
        )
        response.raise_for_status()
        data = self._decode(response)
        self._token = data["data"]["token"]
        # Token valid for 24 hours, refresh after 23
        self._token_expiry = datetime.utcnow() + timedelta(hours=23)

    @staticmethod
    def _decode(response: httpx.Response) -> dict:
        """Parse a JSON body; anything else means TVDB is not answering properly."""
        try:
            return response.json()
        except ValueError as e:
            raise CatalogUnavailableError(
                f"TVDB returned an unreadable response for {response.request.url.path}"
            ) from e

    async def _ensure_token(self):
        """Ensure we have a valid token, refreshing if needed."""
        if not self._token or not self._token_expiry or datetime.utcnow() >= self._token_expiry:
            await self.login()

    async def _request(self, endpoint: str, params: dict = None) -> dict:
        """Make a GET request to TVDB API with authentication."""
        if not self.api_key:
            raise ValueError("TVDB API key not configured")

        # Check cache
        cache_key = f"{endpoint}:{params}"
        if cache_key in self._cache:
            if datetime.utcnow() < self._cache_expiry.get(cache_key, datetime.min):
                return self._cache[cache_key]

        await self._ensure_token()

        client = await self._get_client()
        headers = {"Authorization": f"Bearer {self._token}"}

        response = await client.get(
            f"{self.BASE_URL}{endpoint}",
            params=params or {},
            headers=headers,
        )
        response.raise_for_status()
        data = self._decode(response)

        # Cache response for 1 hour
        self._cache[cache_key] = data
        self._cache_expiry[cache_key] = datetime.utcnow() + timedelta(hours=1)

        return data

    async def get_series(self, tvdb_id: int) -> dict:
        """Get detailed information about a series."""
        data = await self._request(f"/series/{tvdb_id}/extended")
        return data.get("data", {})

    async def get_all_episodes(self, tvdb_id: int, language: str = "eng") -> list[dict]:
        """Get all raw episodes for a series, paginating through all pages.

        Falls back to the default language if the translation endpoint fails.
        """
        episodes = []
        page = 0
        endpoint = f"/series/{tvdb_id}/episodes/official/{language}" if language else f"/series/{tvdb_id}/episodes/official"

        while True:
            try:
                data = await self._request(endpoint, params={"page": page})
            except httpx.HTTPStatusError:
                if not language or endpoint == f"/series/{tvdb_id}/episodes/official":
                    raise
                logger.info("No %s translation for series %s, using default language", language, tvdb_id)
                endpoint = f"/series/{tvdb_id}/episodes/official"
                data = await self._request(endpoint, params={"page": page})

            ep_list = data.get("data", {}).get("episodes", [])
            if not ep_list:
                break
            episodes.extend(ep_list)

            # Check for more pages
            next_page = data.get("links", {}).get("next")
            if next_page is not None and next_page != page:
                page = next_page
            else:
                break

        return episodes

    async def fetch_series_and_episodes(self, tvdb_id: int) -> tuple[SeriesInfo, list[EpisodeInfo]]:
        """Fetch a series and its episodes as snapshots, in catalog order.

        Raises CatalogUnavailableError when TVDB cannot be reached or errors.
        """
        try:
            series = await self.get_series(tvdb_id)
            raw_episodes = await self.get_all_episodes(tvdb_id)
        except httpx.HTTPError as e:
            raise CatalogUnavailableError(f"TVDB request for series {tvdb_id} failed: {e}") from e

        airs_time = series.get("airsTime")
        episodes = []
        for ep in raw_episodes:
            episode_num = ep.get("number")
            if episode_num is None:
                continue
            air_date = ep.get("aired") or None
            episodes.append(EpisodeInfo(
                series_id=None,
                season_number=ep.get("seasonNumber") or 0,
                episode_number=episode_num,
                title=ep.get("name"),
                overview=ep.get("overview"),
                air_date=air_date,
                air_date_utc=self._air_date_utc(air_date, airs_time),
                performers=self._performers(ep),
            ))

        return self._series_info(tvdb_id, series), episodes

    def _series_info(self, tvdb_id: int, series: dict) -> SeriesInfo:
        status_data = series.get("status", {})
        if isinstance(status_data, dict):
            status_name = status_data.get("name", "")
        else:
            status_name = str(status_data) if status_data else ""

        return SeriesInfo(
            id=None,
            tvdb_id=tvdb_id,
            title=series.get("name", "Unknown"),
            overview=series.get("overview"),
            runtime=series.get("averageRuntime") or settings.default_runtime,
            status=STATUS_MAP.get(status_name, "unknown"),
        )

    @staticmethod
    def _performers(ep: dict) -> tuple[Performer, ...]:
        names = []
        for character in ep.get("characters") or []:
            if not isinstance(character, dict):
                continue
            name = character.get("personName")
            if name and name not in names:
                names.append(name)
        return tuple(Performer(name=name) for name in names)

    def _air_date_utc(self, air_date: Optional[str], airs_time: Optional[str]) -> Optional[datetime]:
        """Combine the episode air date with the series air time, as UTC."""
        if not air_date:
            return None
        try:
            day = datetime.strptime(air_date, "%Y-%m-%d")
        except ValueError:
            logger.debug("Ignoring unparseable air date %r", air_date)
            return None

        if airs_time:
            try:
                clock = datetime.strptime(airs_time, "%H:%M")
                day = day.replace(hour=clock.hour, minute=clock.minute)
            except ValueError:
                logger.debug("Ignoring unparseable air time %r", airs_time)

        try:
            tz = ZoneInfo(self._timezone_name)
        except ZoneInfoNotFoundError:
            logger.warning("Unknown catalog timezone %s, assuming UTC", self._timezone_name)
            tz = timezone.utc
        return day.replace(tzinfo=tz).astimezone(timezone.utc)
