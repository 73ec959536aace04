"""Episode persistence in terms of snapshots."""

import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ..models import Episode, EpisodePerformer, Series
from .snapshot import EpisodeInfo, Performer, SeasonInfo, SeriesInfo, as_utc

logger = logging.getLogger(__name__)


def series_to_info(series: Series) -> SeriesInfo:
    """Build a series snapshot from its database row."""
    return SeriesInfo(
        id=series.id,
        title=series.title,
        tvdb_id=series.tvdb_id,
        runtime=series.runtime,
        status=series.status,
        overview=series.overview,
        seasons=tuple(
            SeasonInfo(season_number=s.season_number, monitored=s.monitored)
            for s in series.seasons
        ),
    )


def episode_to_info(episode: Episode) -> EpisodeInfo:
    """Build an episode snapshot from its database row."""
    return EpisodeInfo(
        id=episode.id,
        series_id=episode.series_id,
        season_number=episode.season_number,
        episode_number=episode.episode_number,
        title=episode.title,
        overview=episode.overview,
        air_date=episode.air_date,
        air_date_utc=as_utc(episode.air_date_utc),
        monitored=episode.monitored,
        performers=tuple(Performer(name=p.name) for p in episode.performers),
    )


def _to_naive_utc(value):
    value = as_utc(value)
    return value.replace(tzinfo=None) if value is not None else None


def _copy_fields(row: Episode, info: EpisodeInfo):
    row.title = info.title
    row.overview = info.overview
    row.air_date = info.air_date
    row.air_date_utc = _to_naive_utc(info.air_date_utc)
    row.monitored = info.monitored

    names = [p.name for p in info.performers]
    if [p.name for p in row.performers] != names:
        row.performers = [
            EpisodePerformer(name=name, position=position)
            for position, name in enumerate(names)
        ]


class EpisodeStore:
    """Reads and writes episodes for the refresh and lookup services."""

    def __init__(self, db: Session):
        self.db = db

    def get_episodes_by_series(self, series_id: int) -> list[EpisodeInfo]:
        """All stored episodes of a series, oldest row first."""
        rows = (
            self.db.query(Episode)
            .filter(Episode.series_id == series_id)
            .order_by(Episode.id)
            .all()
        )
        return [episode_to_info(row) for row in rows]

    def find_episodes_by_air_date(self, series_id: int, air_date: str) -> list[EpisodeInfo]:
        """Stored episodes of a series that aired on a calendar date."""
        rows = (
            self.db.query(Episode)
            .filter(Episode.series_id == series_id, Episode.air_date == air_date)
            .order_by(Episode.season_number, Episode.episode_number)
            .all()
        )
        return [episode_to_info(row) for row in rows]

    def get_episode(self, episode_id: int) -> Optional[EpisodeInfo]:
        row = self.db.get(Episode, episode_id)
        return episode_to_info(row) if row else None

    def insert_many(self, episodes: Iterable[EpisodeInfo]) -> list[EpisodeInfo]:
        """Add new episodes; returns them with their assigned ids."""
        rows = []
        for info in episodes:
            row = Episode(
                series_id=info.series_id,
                season_number=info.season_number,
                episode_number=info.episode_number,
            )
            _copy_fields(row, info)
            self.db.add(row)
            rows.append(row)
        self.db.flush()
        return [episode_to_info(row) for row in rows]

    def update_many(self, episodes: Iterable[EpisodeInfo]):
        """Write snapshot fields back onto existing rows, matched by id."""
        by_id = {info.id: info for info in episodes if info.id is not None}
        if not by_id:
            return
        rows = self.db.query(Episode).filter(Episode.id.in_(by_id.keys())).all()
        for row in rows:
            _copy_fields(row, by_id[row.id])
        if len(rows) != len(by_id):
            logger.warning(
                "%d episodes vanished before they could be updated",
                len(by_id) - len(rows),
            )
        self.db.flush()

    def delete_many(self, episodes: Iterable[EpisodeInfo]):
        """Delete stored episodes by id."""
        ids = [info.id for info in episodes if info.id is not None]
        if not ids:
            return
        for row in self.db.query(Episode).filter(Episode.id.in_(ids)).all():
            self.db.delete(row)
        self.db.flush()

    def apply_plan(self, plan) -> list[EpisodeInfo]:
        """Apply a refresh plan in a single transaction.

        Returns the inserted episodes with their new ids.
        """
        try:
            self.delete_many(plan.to_delete)
            self.update_many(plan.to_update)
            inserted = self.insert_many(plan.to_insert)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return inserted
