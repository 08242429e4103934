"""Records returned by the Simplecast API and their conversion to podcasts."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pura.episode import (
    ConversionError,
    Episode,
    EpisodeType,
    _parse_timestamp,
    _parse_url,
)
from pura.podcast import Podcast, PodcastType

_FRACTION = re.compile(r"(\.\d{6})\d+")


def _optional(data: Any, key: str) -> Any:
    if not isinstance(data, dict):
        raise ConversionError(key, "expected an object")
    return data.get(key)


def _require(data: Any, key: str) -> Any:
    if not isinstance(data, dict):
        raise ConversionError(key, "expected an object")
    if key not in data:
        raise ConversionError(key)
    value = data[key]
    if value is None:
        raise ConversionError(key, "expected a value, found null")
    return value


def _as_string(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ConversionError(key, f"expected a string, found {type(value).__name__}")
    return value


def _as_unsigned(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConversionError(key, f"expected an unsigned integer, found {value!r}")
    return value


def _as_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ConversionError(key, f"expected a boolean, found {value!r}")
    return value


def _as_url(value: Any, key: str) -> str:
    text = _as_string(value, key)
    try:
        return _parse_url(text)
    except ValueError as error:
        raise ConversionError(key, str(error)) from error


def _as_offset_datetime(value: Any, key: str) -> datetime:
    text = _as_string(value, key)
    try:
        return _parse_timestamp(text)
    except ValueError as error:
        raise ConversionError(key, str(error)) from error


def _as_naive_datetime(value: Any, key: str) -> datetime:
    text = _as_string(value, key).strip()
    try:
        parsed = datetime.fromisoformat(_FRACTION.sub(r"\1", text))
    except ValueError as error:
        raise ConversionError(key, str(error)) from error
    if parsed.tzinfo is not None:
        raise ConversionError(key, "expected a date and time without an offset")
    return parsed


def _str(data: Any, key: str) -> str:
    return _as_string(_require(data, key), key)


def _opt_str(data: Any, key: str) -> str | None:
    value = _optional(data, key)
    return None if value is None else _as_string(value, key)


def _uint(data: Any, key: str) -> int:
    return _as_unsigned(_require(data, key), key)


def _opt_uint(data: Any, key: str) -> int | None:
    value = _optional(data, key)
    return None if value is None else _as_unsigned(value, key)


def _bool(data: Any, key: str) -> bool:
    return _as_bool(_require(data, key), key)


def _url(data: Any, key: str) -> str:
    return _as_url(_require(data, key), key)


def _opt_url(data: Any, key: str) -> str | None:
    value = _optional(data, key)
    return None if value is None else _as_url(value, key)


def _list(data: Any, key: str) -> list[Any]:
    value = _require(data, key)
    if not isinstance(value, list):
        raise ConversionError(key, "expected a list")
    return value


@dataclass
class SimplecastAudioFile:
    url: str
    size: int
    path_tc: str
    path: str
    name: str
    href: str

    @classmethod
    def from_dict(cls, data: Any) -> SimplecastAudioFile:
        return cls(
            url=_str(data, "url"),
            size=_uint(data, "size"),
            path_tc=_str(data, "path_tc"),
            path=_str(data, "path"),
            name=_str(data, "name"),
            href=_url(data, "href"),
        )


@dataclass
class SimplecastSeason:
    href: str
    number: int
    next_episode_number: int

    @classmethod
    def from_dict(cls, data: Any) -> SimplecastSeason:
        return cls(
            href=_url(data, "href"),
            number=_uint(data, "number"),
            next_episode_number=_uint(data, "next_episode_number"),
        )


@dataclass
class SimplecastCount:
    count: int

    @classmethod
    def from_dict(cls, data: Any) -> SimplecastCount:
        return cls(count=_uint(data, "count"))


@dataclass
class SimplecastSite:
    subdomain: str
    external_website: str

    @classmethod
    def from_dict(cls, data: Any) -> SimplecastSite:
        return cls(
            subdomain=_str(data, "subdomain"),
            external_website=_url(data, "external_website"),
        )


@dataclass
class SimplecastAuthor:
    name: str

    @classmethod
    def from_dict(cls, data: Any) -> SimplecastAuthor:
        return cls(name=_str(data, "name"))


@dataclass
class SimplecastAuthors:
    collection: list[SimplecastAuthor] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> SimplecastAuthors:
        return cls(
            collection=[SimplecastAuthor.from_dict(item) for item in _list(data, "collection")]
        )


@dataclass
class SimplecastEpisodePodcast:
    href: str
    title: str
    image_url: str | None
    id: str
    episodes: SimplecastCount
    created_at: datetime

    @classmethod
    def from_dict(cls, data: Any) -> SimplecastEpisodePodcast:
        return cls(
            href=_url(data, "href"),
            title=_str(data, "title"),
            image_url=_opt_url(data, "image_url"),
            id=_str(data, "id"),
            episodes=SimplecastCount.from_dict(_require(data, "episodes")),
            created_at=_as_naive_datetime(_require(data, "created_at"), "created_at"),
        )


@dataclass
class SimplecastEpisode:
    """Full metadata of one episode."""

    long_description: str
    audio_status: str
    image_url: str | None
    episode_type: str
    token: str
    description: str
    slug: str
    number: int | None
    audio_file: SimplecastAudioFile
    audio_content_type: str
    duration: int | None
    season: SimplecastSeason
    title: str
    episode_url: str
    audio_file_size: int
    published_at: datetime
    href: str
    audio_file_path: str
    enclosure_url: str
    authors: SimplecastAuthors
    id: str
    is_explicit: bool
    podcast: SimplecastEpisodePodcast

    @classmethod
    def from_dict(cls, data: Any) -> SimplecastEpisode:
        """Read an episode from decoded JSON, raising ConversionError if invalid."""
        return cls(
            long_description=_str(data, "long_description"),
            audio_status=_str(data, "audio_status"),
            image_url=_opt_url(data, "image_url"),
            episode_type=_str(data, "type"),
            token=_str(data, "token"),
            description=_str(data, "description"),
            slug=_str(data, "slug"),
            number=_opt_uint(data, "number"),
            audio_file=SimplecastAudioFile.from_dict(_require(data, "audio_file")),
            audio_content_type=_str(data, "audio_content_type"),
            duration=_opt_uint(data, "duration"),
            season=SimplecastSeason.from_dict(_require(data, "season")),
            title=_str(data, "title"),
            episode_url=_str(data, "episode_url"),
            audio_file_size=_uint(data, "audio_file_size"),
            published_at=_as_offset_datetime(_require(data, "published_at"), "published_at"),
            href=_url(data, "href"),
            audio_file_path=_str(data, "audio_file_path"),
            enclosure_url=_url(data, "enclosure_url"),
            authors=SimplecastAuthors.from_dict(_require(data, "authors")),
            id=_str(data, "id"),
            is_explicit=_bool(data, "is_explicit"),
            podcast=SimplecastEpisodePodcast.from_dict(_require(data, "podcast")),
        )

    def to_episode(self) -> Episode:
        return Episode(
            id=self.id,
            title=self.title,
            description=self.description,
            audio_url=self.enclosure_url,
            audio_file_size=self.audio_file_size,
            audio_content_type=self.audio_content_type,
            duration=self.duration,
            image_url=self.image_url,
            explicit=self.is_explicit,
            episode_type=EpisodeType.parse(self.episode_type),
            season=self.season.number,
            number=self.number,
            published_at=self.published_at,
        )


@dataclass
class SimplecastLink:
    href: str

    @classmethod
    def from_dict(cls, data: Any) -> SimplecastLink:
        return cls(href=_url(data, "href"))


@dataclass
class SimplecastPages:
    total: int
    previous: SimplecastLink | None
    next: SimplecastLink | None
    limit: int
    current: int

    @classmethod
    def from_dict(cls, data: Any) -> SimplecastPages:
        previous = _optional(data, "previous")
        following = _optional(data, "next")
        return cls(
            total=_uint(data, "total"),
            previous=None if previous is None else SimplecastLink.from_dict(previous),
            next=None if following is None else SimplecastLink.from_dict(following),
            limit=_uint(data, "limit"),
            current=_uint(data, "current"),
        )


@dataclass
class SimplecastPlaylistEpisode:
    """Summary of an episode as listed in a playlist."""

    episode_type: str
    title: str
    season_number: int | None
    number: int | None
    image_url: str | None
    id: str
    enclosure_url: str
    duration: int

    @classmethod
    def from_dict(cls, data: Any) -> SimplecastPlaylistEpisode:
        return cls(
            episode_type=_str(data, "type"),
            title=_str(data, "title"),
            season_number=_opt_uint(data, "season_number"),
            number=_opt_uint(data, "number"),
            image_url=_opt_url(data, "image_url"),
            id=_str(data, "id"),
            enclosure_url=_url(data, "enclosure_url"),
            duration=_uint(data, "duration"),
        )


@dataclass
class SimplecastEpisodes:
    pages: SimplecastPages
    collection: list[SimplecastPlaylistEpisode]

    @classmethod
    def from_dict(cls, data: Any) -> SimplecastEpisodes:
        return cls(
            pages=SimplecastPages.from_dict(_require(data, "pages")),
            collection=[
                SimplecastPlaylistEpisode.from_dict(item)
                for item in _list(data, "collection")
            ],
        )


@dataclass
class SimplecastPlaylist:
    """One page of a podcast's playlist."""

    href: str
    playlist_type: str
    title: str
    image_url: str
    feed_url: str
    episodes: SimplecastEpisodes

    @classmethod
    def from_dict(cls, data: Any) -> SimplecastPlaylist:
        return cls(
            href=_url(data, "href"),
            playlist_type=_str(data, "type"),
            title=_str(data, "title"),
            image_url=_url(data, "image_url"),
            feed_url=_url(data, "feed_url"),
            episodes=SimplecastEpisodes.from_dict(_require(data, "episodes")),
        )


@dataclass
class SimplecastPodcast:
    """Metadata of a podcast."""

    id: str
    title: str
    description: str
    podcast_type: str
    site: SimplecastSite
    language: str
    authors: SimplecastAuthors
    copyright: str | None
    image_url: str | None
    published_at: datetime
    created_at: datetime
    is_explicit: bool

    @classmethod
    def from_dict(cls, data: Any) -> SimplecastPodcast:
        return cls(
            id=_str(data, "id"),
            title=_str(data, "title"),
            description=_str(data, "description"),
            podcast_type=_str(data, "type"),
            site=SimplecastSite.from_dict(_require(data, "site")),
            language=_str(data, "language"),
            authors=SimplecastAuthors.from_dict(_require(data, "authors")),
            copyright=_opt_str(data, "copyright"),
            image_url=_opt_url(data, "image_url"),
            published_at=_as_offset_datetime(_require(data, "published_at"), "published_at"),
            created_at=_as_naive_datetime(_require(data, "created_at"), "created_at"),
            is_explicit=_bool(data, "is_explicit"),
        )

    def to_podcast(self) -> Podcast:
        """Convert to a podcast without episodes."""
        return Podcast(
            id=self.id,
            guid=self.id,
            title=self.title,
            description=self.description,
            image_url=self.image_url,
            language=self.language,
            category=None,
            sub_category=None,
            explicit=self.is_explicit,
            author=self.authors.collection[0].name if self.authors.collection else None,
            link=self.site.external_website,
            podcast_type=PodcastType.parse(self.podcast_type),
            copyright=self.copyright,
            created_at=self.created_at,
            episodes=[],
        )