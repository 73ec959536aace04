"""Tests for finding episodes by air date."""

from episode_sync.services.air_date import EpisodeService, select_episode
from episode_sync.services.episode_store import EpisodeStore

from .conftest import make_episode

AIR_DATE = "2014-04-02"


def create_episode(season, number, performer=None, title=None, series_id=1):
    return make_episode(
        season,
        number,
        series_id=series_id,
        title=title,
        air_date=AIR_DATE,
        performers=[performer] if performer else [],
    )


def test_returns_none_when_no_episode():
    assert select_episode([], None) is None


def test_returns_single_episode_for_air_date():
    episode = create_episode(1, 1)

    assert select_episode([episode], None) == episode


def test_returns_special_when_only_episode_for_date():
    special = create_episode(0, 1)

    assert select_episode([special], "anything at all") == special


def test_picks_episode_by_performer():
    episode1 = create_episode(2023, 1, "Jenna Jay")
    episode2 = create_episode(2023, 2, "Jackie Bush")

    assert select_episode([episode1, episode2], " - Jenna Jay - [WEBDL-1080p]") == episode1
    assert select_episode([episode1, episode2], " - Jackie Bush - [WEBDL-1080p]") == episode2


def test_picks_episode_by_performer_and_title():
    episode1 = create_episode(2023, 1, "Jenna Jay", "Get Some")
    episode2 = create_episode(2023, 2, "Jenna Jay", "Good Times")

    candidates = [episode1, episode2]
    assert select_episode(candidates, " - Jenna Jay - Get Some - [WEBDL-1080p]") == episode1
    assert select_episode(candidates, " - Jenna Jay - Good Times - [WEBDL-1080p]") == episode2


def test_picks_episode_by_title_when_no_performer_matches():
    episode1 = create_episode(2023, 1, "Jenna Jay", "Get Some")
    episode2 = create_episode(2023, 2, "Jackie Bush", "Good Times")

    candidates = [episode1, episode2]
    assert select_episode(candidates, " - Get Some - [WEBDL-1080p]") == episode1
    assert select_episode(candidates, " - Good Times - [WEBDL-1080p]") == episode2


def test_normalizes_release_names_before_comparing():
    episode1 = create_episode(2023, 1, "Jenna Jay", "Get Some")
    episode2 = create_episode(2023, 2, "Jackie Bush", "Good Times")

    candidates = [episode1, episode2]
    assert select_episode(candidates, ".Jenna.Jay.Get.Some.XXX.720p.MP4-SEXALiTY") == episode1
    assert select_episode(candidates, ".Jackie.Bush.Good.Times.XXX.720p.MP4-SEXALiTY") == episode2
    assert select_episode(candidates, "JENNA_JAY-[get_some]") == episode1
    assert select_episode(candidates, "jackie--bush (good times)") == episode2


def test_performer_match_outranks_title_of_another_episode():
    episode1 = create_episode(2023, 1, "Jenna Jay", "Good Times")
    episode2 = create_episode(2023, 2, "Jackie Bush", "Get Some")

    assert select_episode([episode1, episode2], "Jenna.Jay.Get.Some.720p") == episode1


def test_matches_any_credited_performer():
    episode1 = make_episode(2023, 1, air_date=AIR_DATE, performers=["Jenna Jay", "Alex Gray"])
    episode2 = create_episode(2023, 2, "Jackie Bush")

    assert select_episode([episode1, episode2], "Alex.Gray.1080p") == episode1


def test_returns_none_when_performer_and_title_tie():
    episode1 = create_episode(2023, 1, "Jenna Jay", "Get Some")
    episode2 = create_episode(2023, 2, "Jenna Jay", "Get Some")

    assert select_episode([episode1, episode2], "Jenna Jay Get Some") is None


def test_returns_none_when_shared_performer_has_no_title_in_descriptor():
    episode1 = create_episode(2023, 1, "Jenna Jay", "Get Some")
    episode2 = create_episode(2023, 2, "Jenna Jay", "Good Times")

    assert select_episode([episode1, episode2], "Jenna.Jay.XXX.720p") is None


def test_returns_none_when_descriptor_mentions_neither_episode():
    episode1 = create_episode(2023, 1, "Jenna Jay", "Get Some")
    episode2 = create_episode(2023, 2, "Jackie Bush", "Good Times")

    assert select_episode([episode1, episode2], "Someone.Else.Other.Scene.720p") is None


def test_returns_none_without_descriptor_for_several_episodes():
    episode1 = create_episode(2023, 1, "Jenna Jay")
    episode2 = create_episode(2023, 2, "Jackie Bush")

    assert select_episode([episode1, episode2], None) is None
    assert select_episode([episode1, episode2], " .-_ ") is None


def test_episodes_without_performers_or_titles_never_match():
    episode1 = create_episode(2023, 1)
    episode2 = create_episode(2023, 2, "Jackie Bush")

    assert select_episode([episode1, episode2], "Jackie Bush") == episode2
    assert select_episode([episode1, episode2], "Unrelated") is None


def test_episode_service_looks_up_stored_candidates(db, series_row):
    store = EpisodeStore(db)
    store.insert_many([
        create_episode(2023, 1, "Jenna Jay", "Get Some", series_id=series_row.id),
        create_episode(2023, 2, "Jackie Bush", "Good Times", series_id=series_row.id),
        make_episode(2023, 3, series_id=series_row.id, air_date="2014-04-03"),
    ])
    db.commit()

    service = EpisodeService(store)

    found = service.find_episode(series_row.id, AIR_DATE, "Jackie.Bush.720p")
    assert found is not None
    assert (found.season_number, found.episode_number) == (2023, 2)
    assert found.id is not None

    single = service.find_episode(series_row.id, "2014-04-03")
    assert single.episode_number == 3

    assert service.find_episode(series_row.id, AIR_DATE) is None
    assert service.find_episode(series_row.id, "2001-01-01", "Jenna Jay") is None
