"""Episode model for TV episodes."""

from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import String, Integer, Boolean, DateTime, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database import Base

if TYPE_CHECKING:
    from .series import Series


class Episode(Base):
    """TV Episode model."""

    __tablename__ = "episodes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    series_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("series.id", ondelete="CASCADE"), nullable=False
    )

    # Episode info
    season_number: Mapped[int] = mapped_column(Integer, nullable=False)
    episode_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    overview: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    air_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True, index=True)
    # Stored as naive UTC
    air_date_utc: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    monitored: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
    last_updated: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    # Relationships
    series: Mapped["Series"] = relationship("Series", back_populates="episodes")
    performers: Mapped[list["EpisodePerformer"]] = relationship(
        "EpisodePerformer",
        back_populates="episode",
        cascade="all, delete-orphan",
        order_by="EpisodePerformer.position",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Episode(id={self.id}, series_id={self.series_id}, {self.episode_code})>"

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "series_id": self.series_id,
            "season_number": self.season_number,
            "episode_number": self.episode_number,
            "title": self.title,
            "overview": self.overview,
            "air_date": self.air_date,
            "air_date_utc": self.air_date_utc.isoformat() + "Z" if self.air_date_utc else None,
            "monitored": self.monitored,
            "performers": [p.name for p in self.performers],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
        }

    @property
    def episode_code(self) -> str:
        """Get episode code like S01E01."""
        return f"S{self.season_number:02d}E{self.episode_number:02d}"


class EpisodePerformer(Base):
    """A performer credited on an episode."""

    __tablename__ = "episode_performers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    episode_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("episodes.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    episode: Mapped["Episode"] = relationship("Episode", back_populates="performers")

    def __repr__(self) -> str:
        return f"<EpisodePerformer(episode_id={self.episode_id}, name='{self.name}')>"
