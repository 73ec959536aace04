"""Pending release model for the grab queue."""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, DateTime, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class PendingRelease(Base):
    """A release held in the queue until it is grabbed."""

    __tablename__ = "pending_releases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    series_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("series.id", ondelete="CASCADE"), nullable=True
    )
    episode_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("episodes.id", ondelete="SET NULL"), nullable=True
    )

    # Release name as published by the indexer
    title: Mapped[str] = mapped_column(String(1024), nullable=False)
    download_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    indexer: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    status: Mapped[str] = mapped_column(String(50), default="pending")
    # Status values: pending, grabbed, failed

    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    grabbed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<PendingRelease(id={self.id}, title='{self.title}', status='{self.status}')>"

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "series_id": self.series_id,
            "episode_id": self.episode_id,
            "title": self.title,
            "download_url": self.download_url,
            "indexer": self.indexer,
            "status": self.status,
            "error_message": self.error_message,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "grabbed_at": self.grabbed_at.isoformat() if self.grabbed_at else None,
        }
