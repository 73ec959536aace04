"""API endpoints for import lists."""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import ImportList
from ..services.series_add import MONITOR_TYPES, AddSeriesService, SeriesExistsError
from ..services.tvdb import CatalogUnavailableError, TVDBService
from .series import get_tvdb_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/import-lists", tags=["import-lists"])

LIST_TYPES = ("program", "plex", "trakt", "simkl", "other", "advanced")


class ImportListCreate(BaseModel):
    """Request model for creating an import list."""

    name: str
    list_type: str = "other"
    enable_automatic_add: bool = True
    should_monitor: str = "all"
    quality_profile_id: Optional[int] = None
    root_folder_path: Optional[str] = None
    min_refresh_interval: int = 360


class ImportListUpdate(BaseModel):
    """Request model for updating an import list."""

    name: Optional[str] = None
    list_type: Optional[str] = None
    enable_automatic_add: Optional[bool] = None
    should_monitor: Optional[str] = None
    quality_profile_id: Optional[int] = None
    root_folder_path: Optional[str] = None
    min_refresh_interval: Optional[int] = None


class ImportListSync(BaseModel):
    """Series currently on the list."""

    tvdb_ids: list[int]


def _get_list_or_404(db: Session, list_id: int) -> ImportList:
    import_list = db.query(ImportList).filter(ImportList.id == list_id).first()
    if not import_list:
        raise HTTPException(status_code=404, detail="Import list not found")
    return import_list


def _validate(values: dict):
    if values.get("should_monitor") is not None and values["should_monitor"] not in MONITOR_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown monitor type: {values['should_monitor']}")
    if values.get("list_type") is not None and values["list_type"] not in LIST_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown list type: {values['list_type']}")
    if values.get("min_refresh_interval") is not None and values["min_refresh_interval"] < 0:
        raise HTTPException(status_code=400, detail="Refresh interval cannot be negative")


@router.get("")
async def list_import_lists(db: Session = Depends(get_db)):
    """List all import lists."""
    return [il.to_dict() for il in db.query(ImportList).order_by(ImportList.name).all()]


@router.post("")
async def create_import_list(data: ImportListCreate, db: Session = Depends(get_db)):
    """Create an import list."""
    values = data.model_dump()
    _validate(values)

    existing = db.query(ImportList).filter(ImportList.name == data.name).first()
    if existing:
        raise HTTPException(status_code=400, detail="Import list already exists")

    import_list = ImportList(**values)
    db.add(import_list)
    db.commit()
    db.refresh(import_list)
    return import_list.to_dict()


@router.get("/{list_id}")
async def get_import_list(list_id: int, db: Session = Depends(get_db)):
    """Get an import list."""
    return _get_list_or_404(db, list_id).to_dict()


@router.put("/{list_id}")
async def update_import_list(list_id: int, data: ImportListUpdate, db: Session = Depends(get_db)):
    """Update an import list."""
    import_list = _get_list_or_404(db, list_id)
    values = {k: v for k, v in data.model_dump().items() if v is not None}
    _validate(values)

    for field, value in values.items():
        setattr(import_list, field, value)

    db.commit()
    db.refresh(import_list)
    return import_list.to_dict()


@router.delete("/{list_id}")
async def delete_import_list(list_id: int, db: Session = Depends(get_db)):
    """Delete an import list. Series it added stay in the library."""
    import_list = _get_list_or_404(db, list_id)
    db.delete(import_list)
    db.commit()
    return {"message": "Import list deleted"}


@router.post("/{list_id}/sync")
async def sync_import_list(
    list_id: int,
    data: ImportListSync,
    db: Session = Depends(get_db),
    tvdb: TVDBService = Depends(get_tvdb_service),
):
    """Add the list's series that are not in the library yet.

    New series are monitored according to the list's ``should_monitor``.
    """
    import_list = _get_list_or_404(db, list_id)
    if not import_list.enable_automatic_add:
        raise HTTPException(status_code=409, detail="Automatic add is disabled for this list")

    now = datetime.utcnow()
    if import_list.last_sync_at is not None:
        next_sync = import_list.last_sync_at + timedelta(minutes=import_list.min_refresh_interval)
        if now < next_sync:
            raise HTTPException(
                status_code=409,
                detail=f"Import list was synced recently, next sync after {next_sync.isoformat()}",
            )

    monitor = import_list.should_monitor
    service = AddSeriesService(db, tvdb)
    added, skipped, failed = [], [], []

    for tvdb_id in dict.fromkeys(data.tvdb_ids):
        try:
            await service.add(tvdb_id, monitor=monitor)
        except SeriesExistsError:
            skipped.append(tvdb_id)
        except (CatalogUnavailableError, ValueError) as e:
            logger.warning("Import list '%s' could not add series %s: %s", import_list.name, tvdb_id, e)
            failed.append({"tvdb_id": tvdb_id, "error": str(e)})
        else:
            added.append(tvdb_id)

    import_list.last_sync_at = now
    import_list.last_sync_error = (
        "; ".join(f"{f['tvdb_id']}: {f['error']}" for f in failed) if failed else None
    )
    db.commit()

    logger.info(
        "Synced import list '%s': %d added, %d skipped, %d failed",
        import_list.name, len(added), len(skipped), len(failed),
    )
    return {"added": added, "skipped": skipped, "failed": failed}
