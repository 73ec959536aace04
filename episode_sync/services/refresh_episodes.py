"""Episode reconciliation between the catalog and the local library.

``reconcile`` compares what the catalog currently reports for a series with
what is stored locally and returns a plan of inserts, updates and deletes.
It does no I/O; callers fetch both snapshots and apply the plan.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from .snapshot import EpisodeInfo, SeriesInfo, as_utc

logger = logging.getLogger(__name__)

TBA_TITLE = "TBA"

# Same-night releases are only re-spaced for small groups; bigger groups
# usually mean the catalog has no real schedule for them.
MIN_SPREAD_GROUP = 2
MAX_SPREAD_GROUP = 3


@dataclass
class RefreshPlan:
    """Result of reconciling one series."""

    to_insert: list[EpisodeInfo] = field(default_factory=list)
    to_update: list[EpisodeInfo] = field(default_factory=list)
    to_delete: list[EpisodeInfo] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __iter__(self):
        return iter((self.to_insert, self.to_update, self.to_delete))

    def summary(self) -> dict:
        """Counts and warnings for API responses."""
        return {
            "inserted": len(self.to_insert),
            "updated": len(self.to_update),
            "deleted": len(self.to_delete),
            "warnings": list(self.warnings),
        }


def default_title(title: Optional[str]) -> str:
    """Use the placeholder title for missing or blank titles."""
    if title is None or not title.strip():
        return TBA_TITLE
    return title


def reconcile(
    series: SeriesInfo,
    remote_episodes: Iterable[EpisodeInfo],
    stored_episodes: Iterable[EpisodeInfo],
    now: Optional[datetime] = None,
) -> RefreshPlan:
    """Build the insert/update/delete plan for a series.

    Stored episodes keep their id and monitored flag; only new episodes get a
    computed monitored value. Stored duplicates of the same
    (season, episode) key beyond the first are always deleted.
    """
    now = as_utc(now) or datetime.now(timezone.utc)
    plan = RefreshPlan()

    remote = _dedupe_remote(series, list(remote_episodes), plan)
    stored = list(stored_episodes)
    first_refresh = not stored

    stored_by_key: dict[tuple[int, int], EpisodeInfo] = {}
    for episode in stored:
        if episode.key in stored_by_key:
            logger.debug(
                "Removing duplicate stored episode %s for series %s",
                episode.episode_code, series.id,
            )
            plan.to_delete.append(episode)
        else:
            stored_by_key[episode.key] = episode

    resolved: list[EpisodeInfo] = []
    is_new: list[bool] = []
    assumed_defaults = False

    for episode in remote:
        existing = stored_by_key.get(episode.key)
        if existing is not None:
            resolved.append(replace(
                existing,
                title=default_title(episode.title),
                air_date=episode.air_date,
                air_date_utc=as_utc(episode.air_date_utc),
                performers=tuple(episode.performers),
                overview=episode.overview,
            ))
            is_new.append(False)
            continue

        monitored, assumed = _resolve_monitored(series, episode, now, first_refresh)
        assumed_defaults = assumed_defaults or assumed
        resolved.append(replace(
            episode,
            id=None,
            series_id=series.id,
            title=default_title(episode.title),
            air_date_utc=as_utc(episode.air_date_utc),
            performers=tuple(episode.performers),
            monitored=monitored,
        ))
        is_new.append(True)

    if assumed_defaults:
        _warn(plan, f"Series {series.title or series.id} is newly added, assuming monitoring defaults for its episodes")

    remote_keys = {episode.key for episode in remote}
    for key, episode in stored_by_key.items():
        if key not in remote_keys:
            plan.to_delete.append(episode)

    resolved = spread_air_times(resolved, series.runtime)

    for episode, new in zip(resolved, is_new):
        if new:
            plan.to_insert.append(episode)
        else:
            plan.to_update.append(episode)

    logger.info(
        "Reconciled series %s: %d new, %d updated, %d deleted",
        series.id, len(plan.to_insert), len(plan.to_update), len(plan.to_delete),
    )
    return plan


def spread_air_times(episodes: list[EpisodeInfo], runtime: int) -> list[EpisodeInfo]:
    """Space out episodes that the catalog lists at the same air time.

    Episodes are grouped by season, air day and exact air time. Groups of two
    or three are re-timed back to back, one runtime apart, keeping input
    order. Anything else is returned unchanged.
    """
    groups: dict[tuple, list[int]] = defaultdict(list)
    for index, episode in enumerate(episodes):
        if episode.air_date_utc is None:
            continue
        air_day = episode.air_date or episode.air_date_utc.date().isoformat()
        groups[(episode.season_number, air_day, episode.air_date_utc)].append(index)

    result = list(episodes)
    for indices in groups.values():
        if not MIN_SPREAD_GROUP <= len(indices) <= MAX_SPREAD_GROUP:
            continue
        base = result[indices[0]].air_date_utc
        for offset, index in enumerate(indices):
            result[index] = replace(
                result[index],
                air_date_utc=base + timedelta(minutes=runtime * offset),
            )
    return result


def _dedupe_remote(
    series: SeriesInfo, episodes: list[EpisodeInfo], plan: RefreshPlan
) -> list[EpisodeInfo]:
    """Keep the first remote episode per key, warning about the rest."""
    seen: set[tuple[int, int]] = set()
    unique = []
    for episode in episodes:
        if episode.key in seen:
            _warn(
                plan,
                f"Series {series.title or series.id} lists {episode.episode_code} more than once, "
                f"ignoring duplicate",
            )
            continue
        seen.add(episode.key)
        unique.append(episode)
    return unique


def _resolve_monitored(
    series: SeriesInfo, episode: EpisodeInfo, now: datetime, first_refresh: bool
) -> tuple[bool, bool]:
    """Monitored value for a new episode, and whether the first-refresh default was used."""
    season = series.season(episode.season_number)
    if season is not None and season.monitored is not None:
        return season.monitored, False

    air_date_utc = as_utc(episode.air_date_utc)
    if air_date_utc is not None and air_date_utc > now:
        return True, False

    if first_refresh:
        return True, True

    return False, False


def _warn(plan: RefreshPlan, message: str):
    logger.warning(message)
    plan.warnings.append(message)
