"""Adding a series to the library."""

import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ..models import Series, Season
from .refresh_series import RefreshResult, RefreshSeriesService
from .tvdb import TVDBService

logger = logging.getLogger(__name__)

# How a newly added series picks its season monitoring.
# "default" sets nothing and leaves new episodes to the refresh rules.
MONITOR_TYPES = ("default", "all", "none", "first_season", "latest_season")


class SeriesExistsError(Exception):
    """The series is already in the library."""


def season_overrides(monitor: str, season_numbers: Iterable[int]) -> dict[int, bool]:
    """Explicit season monitored flags for a monitor type.

    Specials (season 0) are only monitored when nothing else is selected.
    """
    if monitor not in MONITOR_TYPES:
        raise ValueError(f"Unknown monitor type: {monitor}")

    numbers = sorted(set(season_numbers))
    if monitor == "default":
        return {}
    if monitor == "none":
        return {n: False for n in numbers}

    regular = [n for n in numbers if n > 0]
    if monitor == "all":
        return {n: n > 0 for n in numbers}
    if not regular:
        return {n: False for n in numbers}

    chosen = regular[0] if monitor == "first_season" else regular[-1]
    return {n: n == chosen for n in numbers}


class AddSeriesService:
    """Creates a series row and runs its first refresh."""

    def __init__(self, db: Session, tvdb: TVDBService):
        self.db = db
        self.tvdb = tvdb

    async def add(
        self,
        tvdb_id: int,
        seasons: Optional[dict[int, Optional[bool]]] = None,
        monitor: str = "default",
        now: Optional[datetime] = None,
    ) -> RefreshResult:
        """Add a series by TVDB id.

        Explicit ``seasons`` win over the ones computed from ``monitor``.
        If the first refresh fails for any reason the series is removed again
        and the error is re-raised.
        """
        if monitor not in MONITOR_TYPES:
            raise ValueError(f"Unknown monitor type: {monitor}")

        existing = self.db.query(Series).filter(Series.tvdb_id == tvdb_id).first()
        if existing:
            raise SeriesExistsError(f"Series {tvdb_id} already exists")

        overrides: dict[int, Optional[bool]] = {}
        if monitor != "default":
            # Responses are cached, so the refresh below does not fetch again
            _, episodes = await self.tvdb.fetch_series_and_episodes(tvdb_id)
            overrides.update(season_overrides(monitor, (ep.season_number for ep in episodes)))
        overrides.update(seasons or {})

        series = Series(tvdb_id=tvdb_id, title=f"TVDB {tvdb_id}")
        series.seasons = [
            Season(season_number=number, monitored=monitored)
            for number, monitored in sorted(overrides.items())
        ]
        self.db.add(series)
        self.db.commit()
        self.db.refresh(series)

        try:
            return await RefreshSeriesService(self.db, self.tvdb).refresh(series, now=now)
        except Exception as e:
            # Nothing useful is stored without a first refresh
            logger.warning("Removing series %s after failed first refresh: %s", tvdb_id, e)
            self.db.rollback()
            self.db.delete(series)
            self.db.commit()
            raise
