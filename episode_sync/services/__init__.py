"""Services for episode-sync."""

from .air_date import EpisodeService, select_episode
from .download import DownloadService
from .episode_store import EpisodeStore
from .refresh_episodes import RefreshPlan, reconcile
from .refresh_series import RefreshSeriesService
from .series_add import AddSeriesService, SeriesExistsError, season_overrides
from .tvdb import CatalogUnavailableError, TVDBService

__all__ = [
    "EpisodeService",
    "select_episode",
    "DownloadService",
    "EpisodeStore",
    "RefreshPlan",
    "reconcile",
    "RefreshSeriesService",
    "AddSeriesService",
    "SeriesExistsError",
    "season_overrides",
    "CatalogUnavailableError",
    "TVDBService",
]
