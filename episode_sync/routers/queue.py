"""API endpoints for the release grab queue."""

from fastapi import APIRouter, Depends, HTTPException
import httpx
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import PendingRelease
from ..services.download import DownloadService

router = APIRouter(prefix="/api/queue", tags=["queue"])


class QueueBulkRequest(BaseModel):
    """Request model for grabbing several releases."""

    ids: list[int]


def get_download_service(db: Session = Depends(get_db)) -> DownloadService:
    """Get download service."""
    return DownloadService(db)


async def _grab(download: DownloadService, release: PendingRelease):
    try:
        await download.download_report(release)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except httpx.HTTPError as e:
        raise HTTPException(status_code=502, detail=f"Download client error: {e}")


@router.get("")
async def list_queue(db: Session = Depends(get_db)):
    """List releases waiting to be grabbed."""
    releases = (
        db.query(PendingRelease)
        .filter(PendingRelease.status == "pending")
        .order_by(PendingRelease.created_at)
        .all()
    )
    return [r.to_dict() for r in releases]


@router.post("/grab/bulk")
async def grab_bulk(
    data: QueueBulkRequest,
    download: DownloadService = Depends(get_download_service),
):
    """Grab several pending releases."""
    releases = []
    # Repeated ids are grabbed once
    for release_id in dict.fromkeys(data.ids):
        release = download.find_pending(release_id)
        if release is None:
            raise HTTPException(status_code=404, detail=f"Queue item {release_id} not found")
        releases.append(release)

    for release in releases:
        await _grab(download, release)

    return {}


@router.post("/grab/{release_id}")
async def grab(
    release_id: int,
    download: DownloadService = Depends(get_download_service),
):
    """Grab a single pending release."""
    release = download.find_pending(release_id)
    if release is None:
        raise HTTPException(status_code=404, detail="Queue item not found")

    await _grab(download, release)
    return {}
