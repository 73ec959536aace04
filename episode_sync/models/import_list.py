"""Import list model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, Boolean, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class ImportList(Base):
    """A source of series to add to the library automatically."""

    __tablename__ = "import_lists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    list_type: Mapped[str] = mapped_column(String(50), default="other")
    # Type values: program, plex, trakt, simkl, other, advanced

    enable_automatic_add: Mapped[bool] = mapped_column(Boolean, default=True)
    should_monitor: Mapped[str] = mapped_column(String(50), default="all")
    quality_profile_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    root_folder_path: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    # Minutes that must pass between two syncs
    min_refresh_interval: Mapped[int] = mapped_column(Integer, default=360)

    last_sync_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    last_sync_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<ImportList(id={self.id}, name='{self.name}', type='{self.list_type}')>"

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "name": self.name,
            "list_type": self.list_type,
            "enable_automatic_add": self.enable_automatic_add,
            "should_monitor": self.should_monitor,
            "quality_profile_id": self.quality_profile_id,
            "root_folder_path": self.root_folder_path,
            "min_refresh_interval": self.min_refresh_interval,
            "last_sync_at": self.last_sync_at.isoformat() if self.last_sync_at else None,
            "last_sync_error": self.last_sync_error,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
