"""Shared fixtures: in-memory database, fake TVDB and download client."""

import json
import re
from datetime import datetime, timezone

import httpx
import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from episode_sync import models  # noqa: F401
from episode_sync.database import Base, get_db
from episode_sync.main import app
from episode_sync.models import Series
from episode_sync.routers.queue import get_download_service
from episode_sync.routers.series import get_tvdb_service
from episode_sync.services.download import DownloadService
from episode_sync.services.snapshot import EpisodeInfo, Performer
from episode_sync.services.tvdb import TVDBService

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
DOWNLOAD_URL = "http://downloader.test/api/add"


def make_episode(season, number, **kwargs) -> EpisodeInfo:
    """Build an episode snapshot; performers may be given as plain names."""
    performers = kwargs.pop("performers", ())
    kwargs.setdefault("series_id", 1)
    kwargs.setdefault("title", f"Episode {number}")
    return EpisodeInfo(
        season_number=season,
        episode_number=number,
        performers=tuple(Performer(p) if isinstance(p, str) else p for p in performers),
        **kwargs,
    )


class FakeCatalog:
    """Serves TVDB v4 responses from in-memory series and episode dicts."""

    def __init__(self):
        self.series: dict[int, dict] = {}
        self.episodes: dict[int, list[dict]] = {}
        self.fail = False
        self.page_size = 100
        self.requests: list[httpx.Request] = []

    def add_series(self, tvdb_id, name="My Family Pies", runtime=30, airs_time="20:00", status="Continuing"):
        self.series[tvdb_id] = {
            "id": tvdb_id,
            "name": name,
            "overview": f"{name} overview",
            "averageRuntime": runtime,
            "airsTime": airs_time,
            "status": {"name": status},
        }
        self.episodes.setdefault(tvdb_id, [])

    def add_episode(self, tvdb_id, season, number, aired, name=None, performers=()):
        self.episodes[tvdb_id].append({
            "seasonNumber": season,
            "number": number,
            "name": name if name is not None else f"Episode {number}",
            "aired": aired,
            "characters": [{"personName": p} for p in performers],
        })

    def remove_episode(self, tvdb_id, season, number):
        self.episodes[tvdb_id] = [
            ep for ep in self.episodes[tvdb_id]
            if (ep["seasonNumber"], ep["number"]) != (season, number)
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            return httpx.Response(503, json={"status": "failure"})

        path = request.url.path
        if path.endswith("/login"):
            return httpx.Response(200, json={"data": {"token": "test-token"}})

        match = re.match(r"^/v4/series/(\d+)/extended$", path)
        if match:
            series = self.series.get(int(match.group(1)))
            if series is None:
                return httpx.Response(404, json={"status": "failure"})
            return httpx.Response(200, json={"data": series})

        match = re.match(r"^/v4/series/(\d+)/episodes/official(?:/\w+)?$", path)
        if match:
            tvdb_id = int(match.group(1))
            if tvdb_id not in self.series:
                return httpx.Response(404, json={"status": "failure"})
            page = int(request.url.params.get("page", 0))
            episodes = self.episodes[tvdb_id]
            start = page * self.page_size
            chunk = episodes[start:start + self.page_size]
            next_page = page + 1 if start + self.page_size < len(episodes) else None
            return httpx.Response(200, json={
                "data": {"series": self.series[tvdb_id], "episodes": chunk},
                "links": {"next": next_page},
            })

        return httpx.Response(404, json={"status": "failure"})

    def service(self) -> TVDBService:
        client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return TVDBService(api_key="test-key", client=client, timezone_name="UTC")


class FakeDownloadClient:
    """Records releases posted to the download client."""

    def __init__(self):
        self.received: list[dict] = []
        self.status_code = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.status_code >= 400:
            return httpx.Response(self.status_code)
        self.received.append(json.loads(request.content))
        return httpx.Response(200, json={"status": True})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def series_row(db) -> Series:
    series = Series(tvdb_id=77, title="My Family Pies", runtime=30)
    db.add(series)
    db.commit()
    db.refresh(series)
    return series


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def downloader() -> FakeDownloadClient:
    return FakeDownloadClient()


@pytest.fixture
def client(session_factory, catalog, downloader):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    def override_download_service(db: Session = Depends(get_db)):
        return DownloadService(db, client_url=DOWNLOAD_URL, client=downloader.client())

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_tvdb_service] = catalog.service
    app.dependency_overrides[get_download_service] = override_download_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
