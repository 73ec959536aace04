"""Series refresh: fetch from TVDB, reconcile, store."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..models import Series
from .episode_store import EpisodeStore, series_to_info
from .refresh_episodes import RefreshPlan, reconcile
from .tvdb import TVDBService

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    """Outcome of refreshing one series."""

    series: Series
    plan: RefreshPlan

    def to_dict(self) -> dict:
        return {"series": self.series.to_dict(), **self.plan.summary()}


class RefreshSeriesService:
    """Brings a stored series and its episodes up to date with TVDB."""

    def __init__(self, db: Session, tvdb: TVDBService):
        self.db = db
        self.tvdb = tvdb
        self.store = EpisodeStore(db)

    async def refresh(self, series: Series, now: Optional[datetime] = None) -> RefreshResult:
        """Refresh one series.

        Catalog errors propagate before anything is written. The episode plan
        is applied in a single commit together with the series metadata.
        """
        remote_series, remote_episodes = await self.tvdb.fetch_series_and_episodes(series.tvdb_id)

        series.title = remote_series.title
        series.overview = remote_series.overview
        series.status = remote_series.status
        series.runtime = remote_series.runtime
        series.last_info_sync = datetime.utcnow()

        stored = self.store.get_episodes_by_series(series.id)
        plan = reconcile(series_to_info(series), remote_episodes, stored, now=now)
        self.store.apply_plan(plan)
        self.db.refresh(series)

        logger.info(
            "Refreshed '%s': %d new, %d updated, %d removed",
            series.title, len(plan.to_insert), len(plan.to_update), len(plan.to_delete),
        )
        return RefreshResult(series=series, plan=plan)
