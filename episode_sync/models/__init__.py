"""Database models for episode-sync."""

from .series import Series, Season
from .episode import Episode, EpisodePerformer
from .pending_release import PendingRelease
from .import_list import ImportList

__all__ = ["Series", "Season", "Episode", "EpisodePerformer", "PendingRelease", "ImportList"]
