"""Podcast episode model and its RSS and storage forms."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from enum import Enum
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from pura.sanitizer import sanitize

ITUNES_NAMESPACE = "http://www.itunes.com/dtds/podcast-1.0.dtd"
ET.register_namespace("itunes", ITUNES_NAMESPACE)

_U64_MAX = 2**64 - 1
_SCHEME = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*:")
_HOSTED_SCHEMES = frozenset(("http", "https", "ftp", "ws", "wss"))
_FRACTION = re.compile(r"(\.\d{6})\d+")


def _itunes(tag: str) -> str:
    return f"{{{ITUNES_NAMESPACE}}}{tag}"


class ConversionError(Exception):
    """A field was missing or could not be converted."""

    def __init__(self, field: str, detail: str | None = None) -> None:
        self.field = field
        self.detail = detail
        if detail is None:
            message = f"Required: {field}"
        else:
            message = f"Invalid {field}: {detail}"
        super().__init__(message)


def _parse_url(value: str) -> str:
    value = value.strip()
    if not _SCHEME.match(value):
        raise ValueError("relative URL without a base")
    parts = urlsplit(value)
    scheme = parts.scheme.lower()
    if scheme in _HOSTED_SCHEMES and not parts.hostname:
        raise ValueError("empty host")
    if (scheme in _HOSTED_SCHEMES or scheme == "file") and not parts.path:
        parts = parts._replace(path="/")
    return urlunsplit(parts)


def _parse_unsigned(value: str) -> int:
    if not re.fullmatch(r"\+?[0-9]+", value):
        raise ValueError(f"invalid digit found in string: {value!r}")
    number = int(value)
    if number > _U64_MAX:
        raise ValueError("number too large to fit in target type")
    return number


def _parse_optional_unsigned(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return _parse_unsigned(value)
    except ValueError:
        return None


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(_FRACTION.sub(r"\1", text))
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp has no offset: {value}")
    return parsed


def format_season(season: int | None) -> str:
    """Format a season number as S00."""
    return f"S{season or 0:02}"


class EpisodeType(Enum):
    """Kind of episode."""

    FULL = "Full"
    TRAILER = "Trailer"
    BONUS = "Bonus"

    @classmethod
    def parse(cls, value: str) -> EpisodeType:
        """Read a feed value; anything unknown counts as bonus."""
        if value == "full":
            return cls.FULL
        if value == "trailer":
            return cls.TRAILER
        return cls.BONUS


@dataclass
class Episode:
    """A single podcast episode."""

    id: str
    title: str
    description: str
    audio_url: str
    audio_file_size: int
    audio_content_type: str
    duration: int | None
    image_url: str | None
    explicit: bool
    episode_type: EpisodeType
    season: int | None
    number: int | None
    published_at: datetime

    def file_stem(self) -> str:
        """File name stem: date, padded number and sanitized title."""
        date = self.published_at.strftime("%Y-%m-%d")
        number = f"{self.number:04}" if self.number is not None else "____"
        title = sanitize(self.title).strip()
        return f"{date} {number} {title}"

    def formatted_season(self) -> str:
        return format_season(self.season)

    def __str__(self) -> str:
        return self.file_stem()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "audio_url": self.audio_url,
            "audio_file_size": self.audio_file_size,
            "audio_content_type": self.audio_content_type,
            "duration": self.duration,
            "image_url": self.image_url,
            "explicit": self.explicit,
            "episode_type": self.episode_type.value,
            "season": self.season,
            "number": self.number,
            "published_at": self.published_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Episode:
        try:
            episode_type = EpisodeType(data["episode_type"])
            published_at = _parse_timestamp(data["published_at"])
            return cls(
                id=str(data["id"]),
                title=str(data["title"]),
                description=str(data["description"]),
                audio_url=str(data["audio_url"]),
                audio_file_size=int(data["audio_file_size"]),
                audio_content_type=str(data["audio_content_type"]),
                duration=data.get("duration"),
                image_url=data.get("image_url"),
                explicit=bool(data["explicit"]),
                episode_type=episode_type,
                season=data.get("season"),
                number=data.get("number"),
                published_at=published_at,
            )
        except KeyError as error:
            raise ConversionError(str(error.args[0])) from error
        except ValueError as error:
            raise ConversionError("episode", str(error)) from error

    def to_rss_item(self) -> ET.Element:
        """Build an RSS item element with iTunes extensions."""
        item = ET.Element("item")
        ET.SubElement(item, "title").text = self.title
        ET.SubElement(item, "link").text = self.audio_url
        ET.SubElement(item, "description").text = self.description
        ET.SubElement(
            item,
            "enclosure",
            {
                "url": self.audio_url,
                "length": str(self.audio_file_size),
                "type": self.audio_content_type,
            },
        )
        guid = ET.SubElement(item, "guid", {"isPermaLink": "false"})
        guid.text = self.id
        ET.SubElement(item, "pubDate").text = format_datetime(self.published_at)
        if self.duration is not None:
            ET.SubElement(item, _itunes("duration")).text = str(self.duration)
        ET.SubElement(item, _itunes("explicit")).text = str(self.explicit).lower()
        if self.image_url is not None:
            ET.SubElement(item, _itunes("image"), {"href": self.image_url})
        ET.SubElement(item, _itunes("summary")).text = self.description
        if self.number is not None:
            ET.SubElement(item, _itunes("episode")).text = str(self.number)
        if self.season is not None:
            ET.SubElement(item, _itunes("season")).text = str(self.season)
        ET.SubElement(item, _itunes("episodeType")).text = self.episode_type.value.lower()
        return item

    @classmethod
    def from_rss_item(cls, item: ET.Element) -> Episode:
        """Read an episode from an RSS item element."""
        enclosure = item.find("enclosure")
        if enclosure is None:
            raise ConversionError("enclosure")
        if not any(str(child.tag).startswith(f"{{{ITUNES_NAMESPACE}}}") for child in item):
            raise ConversionError("itunes")
        pub_date = item.findtext("pubDate")
        if pub_date is None:
            raise ConversionError("published_at")
        guid = item.findtext("guid")
        if guid is None:
            raise ConversionError("id")
        title = item.findtext("title")
        if title is None:
            raise ConversionError("title")
        try:
            audio_url = _parse_url(enclosure.get("url", ""))
        except ValueError as error:
            raise ConversionError("audio url", str(error)) from error
        try:
            audio_file_size = _parse_unsigned(enclosure.get("length", ""))
        except ValueError as error:
            raise ConversionError("audio file size", str(error)) from error

        image_url = None
        image = item.find(_itunes("image"))
        if image is not None and image.get("href") is not None:
            try:
                image_url = _parse_url(image.get("href", ""))
            except ValueError:
                image_url = None

        try:
            published_at = parsedate_to_datetime(pub_date)
        except (TypeError, ValueError, IndexError) as error:
            raise ConversionError("published at", str(error)) from error
        if published_at.tzinfo is None:
            published_at = published_at.replace(tzinfo=timezone.utc)

        return cls(
            id=guid,
            title=title,
            description=item.findtext("description") or "",
            audio_url=audio_url,
            audio_file_size=audio_file_size,
            audio_content_type=enclosure.get("type", ""),
            duration=_parse_optional_unsigned(item.findtext(_itunes("duration"))),
            image_url=image_url,
            explicit=(item.findtext(_itunes("explicit")) or "") == "true",
            episode_type=EpisodeType.parse(item.findtext(_itunes("episodeType")) or "full"),
            season=_parse_optional_unsigned(item.findtext(_itunes("season"))),
            number=_parse_optional_unsigned(item.findtext(_itunes("episode"))),
            published_at=published_at,
        )