"""In-memory snapshots of series and episodes.

The refresh and air-date services work on these frozen records rather than on
ORM rows, so they can be called without a database session and never mutate
what they are given.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class Performer:
    """A performer credited on an episode."""

    name: str


@dataclass(frozen=True)
class SeasonInfo:
    """Season number plus the user's explicit monitoring choice, if any."""

    season_number: int
    monitored: Optional[bool] = None


@dataclass(frozen=True)
class SeriesInfo:
    """Series data needed to reconcile its episodes."""

    id: Optional[int]
    title: str = ""
    tvdb_id: Optional[int] = None
    runtime: int = 0
    status: str = "unknown"
    overview: Optional[str] = None
    seasons: tuple[SeasonInfo, ...] = ()

    def season(self, season_number: int) -> Optional[SeasonInfo]:
        """Look up a season by number."""
        for season in self.seasons:
            if season.season_number == season_number:
                return season
        return None


@dataclass(frozen=True)
class EpisodeInfo:
    """A single episode, either as reported by the catalog or as stored."""

    series_id: Optional[int]
    season_number: int
    episode_number: int
    title: Optional[str] = None
    air_date: Optional[str] = None
    air_date_utc: Optional[datetime] = None
    monitored: bool = False
    performers: tuple[Performer, ...] = field(default_factory=tuple)
    overview: Optional[str] = None
    id: Optional[int] = None

    @property
    def key(self) -> tuple[int, int]:
        return episode_key(self)

    @property
    def episode_code(self) -> str:
        """Get episode code like S01E01."""
        return f"S{self.season_number:02d}E{self.episode_number:02d}"


def episode_key(episode: EpisodeInfo) -> tuple[int, int]:
    """Identity of an episode within its series: (season, episode number)."""
    return (episode.season_number, episode.episode_number)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
