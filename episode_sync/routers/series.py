"""API endpoints for series and episode management."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..models import Series, Season, Episode
from ..services.air_date import EpisodeService
from ..services.episode_store import EpisodeStore
from ..services.refresh_series import RefreshSeriesService
from ..services.series_add import AddSeriesService, SeriesExistsError
from ..services.tvdb import CatalogUnavailableError, TVDBService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/series", tags=["series"])


class SeasonSetting(BaseModel):
    """Explicit monitoring choice for one season."""

    season_number: int
    monitored: Optional[bool] = None


class SeriesCreate(BaseModel):
    """Request model for adding a series."""

    tvdb_id: int
    seasons: list[SeasonSetting] = []
    monitor: str = "default"


class SeasonUpdate(BaseModel):
    """Request model for a season's monitored flag; null clears it."""

    monitored: Optional[bool] = None


class EpisodeMonitoredUpdate(BaseModel):
    """Request model for an episode's monitored flag."""

    monitored: bool


def get_tvdb_service() -> TVDBService:
    """Get TVDB service with API key from settings."""
    return TVDBService(api_key=settings.tvdb_api_key)


def _get_series_or_404(db: Session, series_id: int) -> Series:
    series = db.query(Series).filter(Series.id == series_id).first()
    if not series:
        raise HTTPException(status_code=404, detail="Series not found")
    return series


async def _refresh(db: Session, tvdb: TVDBService, series: Series) -> dict:
    service = RefreshSeriesService(db, tvdb)
    try:
        result = await service.refresh(series)
    except CatalogUnavailableError as e:
        raise HTTPException(status_code=502, detail=f"Failed to refresh from TVDB: {e}")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return result.to_dict()


@router.get("")
async def list_series(db: Session = Depends(get_db)):
    """List all series."""
    return [s.to_dict() for s in db.query(Series).order_by(Series.title).all()]


@router.post("")
async def create_series(
    data: SeriesCreate,
    db: Session = Depends(get_db),
    tvdb: TVDBService = Depends(get_tvdb_service),
):
    """Add a series by TVDB id and run its first refresh."""
    seasons = {s.season_number: s.monitored for s in data.seasons}
    try:
        result = await AddSeriesService(db, tvdb).add(
            data.tvdb_id, seasons=seasons, monitor=data.monitor
        )
    except SeriesExistsError:
        raise HTTPException(status_code=400, detail="Series already exists")
    except CatalogUnavailableError as e:
        raise HTTPException(status_code=502, detail=f"Failed to refresh from TVDB: {e}")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return result.to_dict()


@router.get("/{series_id}")
async def get_series(series_id: int, db: Session = Depends(get_db)):
    """Get a series with its seasons."""
    series = _get_series_or_404(db, series_id)
    result = series.to_dict()
    result["episode_count"] = db.query(Episode).filter(Episode.series_id == series.id).count()
    return result


@router.delete("/{series_id}")
async def delete_series(series_id: int, db: Session = Depends(get_db)):
    """Remove a series and its episodes from the library."""
    series = _get_series_or_404(db, series_id)
    db.delete(series)
    db.commit()
    return {"message": "Series deleted"}


@router.post("/{series_id}/refresh")
async def refresh_series(
    series_id: int,
    db: Session = Depends(get_db),
    tvdb: TVDBService = Depends(get_tvdb_service),
):
    """Refresh series metadata and episodes from TVDB."""
    series = _get_series_or_404(db, series_id)
    return await _refresh(db, tvdb, series)


@router.get("/{series_id}/episodes")
async def list_episodes(
    series_id: int,
    db: Session = Depends(get_db),
    season: Optional[int] = Query(None, ge=0),
):
    """List stored episodes of a series."""
    _get_series_or_404(db, series_id)
    query = db.query(Episode).filter(Episode.series_id == series_id)
    if season is not None:
        query = query.filter(Episode.season_number == season)
    episodes = query.order_by(Episode.season_number, Episode.episode_number).all()
    return [ep.to_dict() for ep in episodes]


@router.get("/{series_id}/episodes/by-air-date")
async def find_episode_by_air_date(
    series_id: int,
    air_date: str = Query(..., pattern=r"^\d{4}-\d{2}-\d{2}$"),
    descriptor: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Find the episode a release refers to from its air date and name."""
    _get_series_or_404(db, series_id)
    episode = EpisodeService(EpisodeStore(db)).find_episode(series_id, air_date, descriptor)
    if episode is None:
        raise HTTPException(status_code=404, detail="Episode not found")
    return db.get(Episode, episode.id).to_dict()


@router.put("/{series_id}/seasons/{season_number}")
async def update_season(
    series_id: int,
    season_number: int,
    data: SeasonUpdate,
    db: Session = Depends(get_db),
):
    """Set or clear a season's monitored flag.

    Only episodes the next refresh adds follow it; stored episodes keep
    their own flag.
    """
    series = _get_series_or_404(db, series_id)
    season = next((s for s in series.seasons if s.season_number == season_number), None)
    if season is None:
        season = Season(season_number=season_number)
        series.seasons.append(season)
    season.monitored = data.monitored

    db.commit()
    db.refresh(series)
    return series.to_dict()


@router.put("/{series_id}/episodes/{episode_id}/monitored")
async def update_episode_monitored(
    series_id: int,
    episode_id: int,
    data: EpisodeMonitoredUpdate,
    db: Session = Depends(get_db),
):
    """Set an episode's monitored flag."""
    episode = (
        db.query(Episode)
        .filter(Episode.id == episode_id, Episode.series_id == series_id)
        .first()
    )
    if not episode:
        raise HTTPException(status_code=404, detail="Episode not found")

    episode.monitored = data.monitored
    db.commit()
    db.refresh(episode)
    return episode.to_dict()
