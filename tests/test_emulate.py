from datetime import datetime, timedelta, timezone

import pytest

from pura.emulate import EmulateCommand, EmulateError, group_by_season, group_by_year
from pura.episode import Episode, EpisodeType
from pura.options import AppOptions
from pura.paths import PathProvider
from pura.podcast import Podcast, PodcastType
from pura.podcasts import PodcastProvider


def make_episode(episode_id, season, year, number=1):
    return Episode(
        id=episode_id,
        title=f"Episode {episode_id}",
        description="Aenean sit amet sem quis velit viverra vestibulum.",
        audio_url=f"https://example.com/audio/{episode_id}.mp3",
        audio_file_size=1024,
        audio_content_type="audio/mpeg",
        duration=None,
        image_url=None,
        explicit=False,
        episode_type=EpisodeType.parse("full"),
        season=season,
        number=number,
        published_at=datetime(year, 3, 4, 5, 6, 7, tzinfo=timezone(timedelta(hours=1))),
    )


def make_podcast(episodes):
    return Podcast(
        id="test",
        guid="29e09be7-ee09-4671-9130-0da5b958e9a2",
        title="Podcast Title",
        description="Sed ac volutpat tortor.",
        image_url=None,
        language="en-us",
        category=None,
        sub_category=None,
        explicit=False,
        author=None,
        link="https://example.com/",
        podcast_type=PodcastType.EPISODIC,
        copyright=None,
        created_at=None,
        episodes=episodes,
    )


@pytest.fixture
def episodes():
    return [
        make_episode("a", 1, 2020, 1),
        make_episode("b", 1, 2021, 2),
        make_episode("c", 2, 2020, 3),
    ]


@pytest.fixture
def setup(tmp_path):
    options = AppOptions(
        cache_dir=tmp_path / "cache",
        output_dir=tmp_path / "output",
        server_base="https://cdn.example.com/",
    )
    paths = PathProvider(options)
    store_dir = tmp_path / "cache" / "podcasts"
    store_dir.mkdir(parents=True)
    podcasts = PodcastProvider(store_dir)
    return EmulateCommand(podcasts, paths), paths, podcasts


def test_group_by_season(episodes):
    groups = group_by_season(episodes)
    assert sorted(groups) == [1, 2]
    assert [e.id for e in groups[1]] == ["a", "b"]
    assert [e.id for e in groups[2]] == ["c"]


def test_group_by_season_without_season():
    groups = group_by_season([make_episode("x", None, 2020)])
    assert list(groups) == [None]


def test_group_by_year(episodes):
    groups = group_by_year(episodes)
    assert sorted(groups) == [2020, 2021]
    assert [e.id for e in groups[2020]] == ["a", "c"]
    assert [e.id for e in groups[2021]] == ["b"]


def test_save_feeds_writes_every_feed(setup, episodes):
    command, paths, _ = setup
    podcast = make_podcast(episodes)
    result = command.save_feeds(podcast)
    expected = [
        paths.output_path_for_rss("test", None, None),
        paths.output_path_for_rss("test", 1, None),
        paths.output_path_for_rss("test", 1, 2020),
        paths.output_path_for_rss("test", 1, 2021),
        paths.output_path_for_rss("test", 2, None),
        paths.output_path_for_rss("test", 2, 2020),
    ]
    assert result == expected
    assert all(path.is_file() for path in result)


def test_feeds_hold_matching_episodes(setup, episodes):
    command, paths, _ = setup
    command.save_feeds(make_podcast(episodes))
    full = Podcast.from_rss(paths.output_path_for_rss("test", None, None).read_bytes())
    assert sorted(e.id for e in full.episodes) == ["a", "b", "c"]
    season_year = Podcast.from_rss(paths.output_path_for_rss("test", 1, 2021).read_bytes())
    assert [e.id for e in season_year.episodes] == ["b"]


def test_enclosures_point_at_local_audio(setup, episodes):
    command, paths, _ = setup
    podcast = make_podcast(episodes)
    command.save_feeds(podcast)
    feed = Podcast.from_rss(paths.output_path_for_rss("test", None, None).read_bytes())
    by_id = {episode.id: episode for episode in podcast.episodes}
    for episode in feed.episodes:
        expected = paths.url_for_audio("test", by_id[episode.id])
        assert episode.audio_url == str(expected)
        assert episode.audio_url.startswith("https://cdn.example.com/test/")


def test_execute_reads_stored_podcast(setup, episodes):
    command, paths, podcasts = setup
    podcasts.put(make_podcast(episodes))
    result = command.execute("test")
    assert len(result) == 6
    assert result[0] == paths.output_path_for_rss("test", None, None)


def test_execute_missing_podcast(setup):
    command, _, _ = setup
    with pytest.raises(EmulateError) as info:
        command.execute("missing")
    assert str(info.value).startswith("Failed to create RSS feeds\nUnable to get podcast")


def test_write_failure(tmp_path, episodes):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    options = AppOptions(cache_dir=tmp_path, output_dir=blocker)
    command = EmulateCommand(PodcastProvider(tmp_path), PathProvider(options))
    with pytest.raises(EmulateError) as info:
        command.save_feeds(make_podcast(episodes))
    assert "Unable to write RSS" in str(info.value)