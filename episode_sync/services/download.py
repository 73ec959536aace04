"""Hands grabbed releases to the download client."""

import logging
from datetime import datetime
from typing import Optional

import httpx
from sqlalchemy.orm import Session

from ..config import settings
from ..models import PendingRelease

logger = logging.getLogger(__name__)


class DownloadService:
    """Service for sending queued releases to the download client."""

    def __init__(
        self,
        db: Session,
        client_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.db = db
        self.client_url = client_url if client_url is not None else settings.download_client_url
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=30.0)
        return self._client

    def find_pending(self, release_id: int) -> Optional[PendingRelease]:
        """Find a release that is still waiting in the queue."""
        return (
            self.db.query(PendingRelease)
            .filter(PendingRelease.id == release_id, PendingRelease.status == "pending")
            .first()
        )

    async def download_report(self, release: PendingRelease):
        """Send a release to the download client and mark it grabbed."""
        if not self.client_url:
            raise ValueError("Download client not configured")

        client = await self._get_client()
        try:
            response = await client.post(
                self.client_url,
                json={
                    "name": release.title,
                    "url": release.download_url,
                    "series_id": release.series_id,
                    "episode_id": release.episode_id,
                },
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            release.status = "failed"
            release.error_message = str(e)
            self.db.commit()
            logger.error("Failed to send '%s' to download client: %s", release.title, e)
            raise

        release.status = "grabbed"
        release.error_message = None
        release.grabbed_at = datetime.utcnow()
        self.db.commit()
        logger.info("Grabbed '%s'", release.title)
