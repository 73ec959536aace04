"""Resolve a release to an episode by series and air date."""

import logging
from typing import Optional, Sequence

from .episode_store import EpisodeStore
from .snapshot import EpisodeInfo
from .text import contains_phrase, normalize_text

logger = logging.getLogger(__name__)


def _performer_match(episode: EpisodeInfo, descriptor: str) -> bool:
    return any(
        contains_phrase(descriptor, normalize_text(performer.name))
        for performer in episode.performers
    )


def _title_match(episode: EpisodeInfo, descriptor: str) -> bool:
    return contains_phrase(descriptor, normalize_text(episode.title))


def _single(episodes: list[EpisodeInfo]) -> Optional[EpisodeInfo]:
    return episodes[0] if len(episodes) == 1 else None


def select_episode(
    candidates: Sequence[EpisodeInfo], descriptor: Optional[str]
) -> Optional[EpisodeInfo]:
    """Pick the episode a descriptor refers to among same-day candidates.

    A lone candidate is returned without looking at the descriptor. With
    several, performer names decide first and titles break ties; when that
    still leaves zero or several episodes, nothing is returned.
    """
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]

    normalized = normalize_text(descriptor)
    if not normalized:
        return None

    by_performer = [c for c in candidates if _performer_match(c, normalized)]
    if by_performer:
        if len(by_performer) == 1:
            return by_performer[0]
        return _single([c for c in by_performer if _title_match(c, normalized)])

    return _single([c for c in candidates if _title_match(c, normalized)])


class EpisodeService:
    """Episode lookups backed by the episode store."""

    def __init__(self, store: EpisodeStore):
        self.store = store

    def find_episode(
        self, series_id: int, air_date: str, descriptor: Optional[str] = None
    ) -> Optional[EpisodeInfo]:
        """Find the episode of a series that aired on a date."""
        candidates = self.store.find_episodes_by_air_date(series_id, air_date)
        episode = select_episode(candidates, descriptor)

        if episode is None and len(candidates) > 1:
            logger.debug(
                "Could not tell apart %d episodes of series %s on %s from '%s'",
                len(candidates), series_id, air_date, descriptor,
            )
        return episode
