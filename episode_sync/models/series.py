"""Series and season models."""

from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import String, Integer, Boolean, DateTime, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database import Base

if TYPE_CHECKING:
    from .episode import Episode


class Series(Base):
    """TV series model."""

    __tablename__ = "series"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tvdb_id: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    overview: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Nominal episode runtime in minutes
    runtime: Mapped[int] = mapped_column(Integer, default=30, nullable=False)

    status: Mapped[str] = mapped_column(String(50), default="unknown")
    # Status values: continuing, ended, upcoming, unknown

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    last_updated: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )
    last_info_sync: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    seasons: Mapped[list["Season"]] = relationship(
        "Season",
        back_populates="series",
        cascade="all, delete-orphan",
        order_by="Season.season_number",
    )
    episodes: Mapped[list["Episode"]] = relationship(
        "Episode", back_populates="series", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Series(id={self.id}, title='{self.title}', tvdb_id={self.tvdb_id})>"

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "tvdb_id": self.tvdb_id,
            "title": self.title,
            "overview": self.overview,
            "runtime": self.runtime,
            "status": self.status,
            "seasons": [season.to_dict() for season in self.seasons],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
            "last_info_sync": self.last_info_sync.isoformat() if self.last_info_sync else None,
        }


class Season(Base):
    """Season of a series, carrying the user's monitoring choice."""

    __tablename__ = "seasons"
    __table_args__ = (UniqueConstraint("series_id", "season_number"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    series_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("series.id", ondelete="CASCADE"), nullable=False
    )
    # 0 is reserved for specials
    season_number: Mapped[int] = mapped_column(Integer, nullable=False)
    # None means the user never set it
    monitored: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)

    series: Mapped["Series"] = relationship("Series", back_populates="seasons")

    def __repr__(self) -> str:
        return f"<Season(series_id={self.series_id}, season={self.season_number}, monitored={self.monitored})>"

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "season_number": self.season_number,
            "monitored": self.monitored,
        }
