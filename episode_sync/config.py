"""Configuration management for episode-sync."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment or config file."""

    # Database
    database_url: str = ""

    # TVDB API
    tvdb_api_key: str = ""
    # Timezone the catalog's airsTime values are expressed in
    catalog_timezone: str = "UTC"
    # Used when the catalog reports no runtime for a series
    default_runtime: int = 30

    # Download client that receives grabbed releases
    download_client_url: str = ""

    # Server
    host: str = "0.0.0.0"
    port: int = 8096
    debug: bool = False
    log_level: str = "INFO"

    class Config:
        env_prefix = "EPISODE_SYNC_"
        env_file = ".env"


# Global settings instance
settings = Settings()


def get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_dir = get_project_root() / "data"
    data_dir.mkdir(exist_ok=True)
    return data_dir


def get_database_url() -> str:
    """Get the configured database URL, defaulting to a SQLite file in the data dir."""
    if settings.database_url:
        return settings.database_url
    return f"sqlite:///{get_data_dir() / 'episode-sync.db'}"
