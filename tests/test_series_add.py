"""Tests for adding series with a monitor type."""

import asyncio

import pytest

from episode_sync.models import Episode, Season, Series
from episode_sync.services.episode_store import EpisodeStore
from episode_sync.services.series_add import AddSeriesService, SeriesExistsError, season_overrides

from .conftest import NOW


def given_catalog(catalog):
    catalog.add_series(77)
    catalog.add_episode(77, 0, 1, "2020-01-01")
    catalog.add_episode(77, 1, 1, "2020-01-05")
    catalog.add_episode(77, 1, 2, "2020-01-12")
    catalog.add_episode(77, 2, 1, "2021-01-05")
    catalog.add_episode(77, 2, 2, "2099-01-12")


def add(db, catalog, **kwargs):
    service = AddSeriesService(db, catalog.service())
    return asyncio.run(service.add(77, now=NOW, **kwargs))


def monitored_by_key(db):
    return {
        (ep.season_number, ep.episode_number): ep.monitored
        for ep in db.query(Episode).all()
    }


def test_season_overrides_for_each_monitor_type():
    seasons = [2, 0, 1, 1]

    assert season_overrides("default", seasons) == {}
    assert season_overrides("all", seasons) == {0: False, 1: True, 2: True}
    assert season_overrides("none", seasons) == {0: False, 1: False, 2: False}
    assert season_overrides("first_season", seasons) == {0: False, 1: True, 2: False}
    assert season_overrides("latest_season", seasons) == {0: False, 1: False, 2: True}


def test_season_overrides_with_only_specials():
    assert season_overrides("first_season", [0]) == {0: False}
    assert season_overrides("all", []) == {}


def test_season_overrides_rejects_unknown_monitor_type():
    with pytest.raises(ValueError):
        season_overrides("pilot", [1])


def test_add_with_default_monitoring_stores_no_season_flags(db, catalog):
    given_catalog(catalog)

    result = add(db, catalog)

    assert result.plan.summary()["inserted"] == 5
    assert db.query(Season).count() == 0
    assert all(monitored_by_key(db).values())


def test_add_with_none_unmonitors_even_future_episodes(db, catalog):
    given_catalog(catalog)

    result = add(db, catalog, monitor="none")

    assert not any(monitored_by_key(db).values())
    assert result.plan.warnings == []


def test_add_first_season_only(db, catalog):
    given_catalog(catalog)

    add(db, catalog, monitor="first_season")

    assert monitored_by_key(db) == {
        (0, 1): False,
        (1, 1): True,
        (1, 2): True,
        (2, 1): False,
        (2, 2): False,
    }
    series = db.query(Series).one()
    assert {s.season_number: s.monitored for s in series.seasons} == {0: False, 1: True, 2: False}


def test_explicit_seasons_win_over_monitor_type(db, catalog):
    given_catalog(catalog)

    add(db, catalog, monitor="none", seasons={2: True, 3: None})

    monitored = monitored_by_key(db)
    assert monitored[(1, 1)] is False
    assert monitored[(2, 1)] is True
    series = db.query(Series).one()
    assert {s.season_number: s.monitored for s in series.seasons} == {0: False, 1: False, 2: True, 3: None}


def test_add_existing_series_raises(db, catalog, series_row):
    given_catalog(catalog)

    with pytest.raises(SeriesExistsError):
        add(db, catalog)


def test_add_rejects_unknown_monitor_type_before_storing(db, catalog):
    given_catalog(catalog)

    with pytest.raises(ValueError):
        add(db, catalog, monitor="pilot")

    assert db.query(Series).count() == 0
    assert catalog.requests == []


def test_add_removes_series_when_storing_episodes_fails(db, catalog, monkeypatch):
    given_catalog(catalog)

    def broken_apply_plan(self, plan):
        raise RuntimeError("disk full")

    monkeypatch.setattr(EpisodeStore, "apply_plan", broken_apply_plan)

    with pytest.raises(RuntimeError):
        add(db, catalog, seasons={1: True})

    assert db.query(Series).count() == 0
    assert db.query(Season).count() == 0
