import xml.etree.ElementTree as ET
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from pura.episode import (
    ITUNES_NAMESPACE,
    ConversionError,
    Episode,
    EpisodeType,
    format_season,
)


def itunes(tag):
    return f"{{{ITUNES_NAMESPACE}}}{tag}"


@pytest.fixture
def episode():
    return Episode(
        id="550e8400-e29b-41d4-a716-446655440000",
        title="Lorem ipsum dolor sit amet",
        description="Aenean sit amet sem quis velit viverra vestibulum.",
        image_url="https://example.com/image.jpg",
        audio_url="https://example.com/season-1/episode-1.mp3",
        episode_type=EpisodeType.FULL,
        season=2,
        number=3,
        audio_file_size=1024,
        audio_content_type="audio/mpeg",
        published_at=datetime(1970, 1, 1, tzinfo=timezone.utc),
        duration=None,
        explicit=False,
    )


def test_get_file_stem(episode):
    assert episode.file_stem() == "1970-01-01 0003 Lorem ipsum dolor sit amet"
    assert str(episode) == episode.file_stem()


def test_file_stem_without_number(episode):
    episode.number = None
    assert episode.file_stem() == "1970-01-01 ____ Lorem ipsum dolor sit amet"


def test_file_stem_sanitizes_title(episode):
    episode.title = ' Part 1/2: "Intro" '
    assert episode.file_stem() == "1970-01-01 0003 Part 1-2 Intro"


def test_formatted_season(episode):
    assert episode.formatted_season() == "S02"
    assert format_season(None) == "S00"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("full", EpisodeType.FULL),
        ("trailer", EpisodeType.TRAILER),
        ("bonus", EpisodeType.BONUS),
        ("anything", EpisodeType.BONUS),
    ],
)
def test_episode_type_parse(value, expected):
    assert EpisodeType.parse(value) is expected


def test_dict_round_trip(episode):
    data = episode.to_dict()
    assert data["episode_type"] == "Full"
    assert data["published_at"] == "1970-01-01T00:00:00+00:00"
    assert Episode.from_dict(data) == episode


def test_from_dict_missing_field(episode):
    data = episode.to_dict()
    del data["title"]
    with pytest.raises(ConversionError) as info:
        Episode.from_dict(data)
    assert info.value.field == "title"


def test_rss_item_fields(episode):
    item = episode.to_rss_item()
    assert item.findtext("guid") == episode.id
    assert item.find("guid").get("isPermaLink") == "false"
    assert item.findtext("pubDate") == "Thu, 01 Jan 1970 00:00:00 +0000"
    assert item.find("enclosure").get("length") == "1024"
    assert item.findtext(itunes("episodeType")) == "full"
    assert item.findtext(itunes("season")) == "2"
    assert item.findtext(itunes("explicit")) == "false"
    assert item.find(itunes("duration")) is None


def test_rss_round_trip(episode):
    episode.duration = 90
    item = ET.fromstring(ET.tostring(episode.to_rss_item()))
    assert Episode.from_rss_item(item) == episode


def test_rss_round_trip_trailer(episode):
    trailer = replace(episode, episode_type=EpisodeType.TRAILER, number=None, image_url=None)
    assert Episode.from_rss_item(trailer.to_rss_item()) == trailer


def test_missing_enclosure(episode):
    item = episode.to_rss_item()
    item.remove(item.find("enclosure"))
    with pytest.raises(ConversionError) as info:
        Episode.from_rss_item(item)
    assert info.value.field == "enclosure"


def test_missing_itunes(episode):
    item = episode.to_rss_item()
    for child in [c for c in item if c.tag.startswith("{")]:
        item.remove(child)
    with pytest.raises(ConversionError) as info:
        Episode.from_rss_item(item)
    assert info.value.field == "itunes"


def test_invalid_length(episode):
    item = episode.to_rss_item()
    item.find("enclosure").set("length", "abc")
    with pytest.raises(ConversionError) as info:
        Episode.from_rss_item(item)
    assert info.value.field == "audio file size"


def test_invalid_audio_url(episode):
    item = episode.to_rss_item()
    item.find("enclosure").set("url", "not a url")
    with pytest.raises(ConversionError) as info:
        Episode.from_rss_item(item)
    assert info.value.field == "audio url"


def test_invalid_date(episode):
    item = episode.to_rss_item()
    item.find("pubDate").text = "garbage"
    with pytest.raises(ConversionError) as info:
        Episode.from_rss_item(item)
    assert info.value.field == "published at"


def test_unparseable_optional_values_are_dropped(episode):
    item = episode.to_rss_item()
    ET.SubElement(item, itunes("duration")).text = "01:02:03"
    item.find(itunes("season")).text = "two"
    item.find(itunes("image")).set("href", "relative/image.jpg")
    result = Episode.from_rss_item(item)
    assert result.duration is None
    assert result.season is None
    assert result.image_url is None
    assert result.number == 3