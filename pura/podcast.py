"""Podcast model and its RSS and storage forms."""

from __future__ import annotations

import string
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pura.episode import ITUNES_NAMESPACE, ConversionError, Episode, _parse_url

_ALLOWED_ID_CHARS = frozenset(string.ascii_lowercase + string.digits + "-")
_XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'


def _itunes(tag: str) -> str:
    return f"{{{ITUNES_NAMESPACE}}}{tag}"


def validate_id(podcast_id: str) -> str:
    """Check that a podcast ID holds only lowercase letters, digits and hyphens."""
    if not podcast_id:
        raise ValueError("Value must not be empty")
    if all(char in _ALLOWED_ID_CHARS for char in podcast_id):
        return podcast_id
    raise ValueError("Podcast ID must contain only lowercase letters and hyphens")


class PodcastType(Enum):
    """Whether episodes are consumed in any order or in sequence."""

    EPISODIC = "Episodic"
    SERIAL = "Serial"

    @classmethod
    def parse(cls, value: str) -> PodcastType:
        """Read a feed value; anything but serial counts as episodic."""
        return cls.SERIAL if value == "serial" else cls.EPISODIC


def _parse_created_at(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).strip())


@dataclass
class Podcast:
    """A podcast channel and its episodes."""

    id: str
    guid: str
    title: str
    description: str
    image_url: str | None
    language: str
    category: str | None
    sub_category: str | None
    explicit: bool
    author: str | None
    link: str
    podcast_type: PodcastType
    copyright: str | None
    created_at: datetime | None = None
    episodes: list[Episode] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "guid": self.guid,
            "title": self.title,
            "description": self.description,
            "image_url": self.image_url,
            "language": self.language,
            "category": self.category,
            "sub_category": self.sub_category,
            "explicit": self.explicit,
            "author": self.author,
            "link": self.link,
            "podcast_type": self.podcast_type.value,
            "copyright": self.copyright,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "episodes": [episode.to_dict() for episode in self.episodes],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Podcast:
        try:
            return cls(
                id=str(data["id"]),
                guid=str(data["guid"]),
                title=str(data["title"]),
                description=str(data["description"]),
                image_url=data.get("image_url"),
                language=str(data["language"]),
                category=data.get("category"),
                sub_category=data.get("sub_category"),
                explicit=bool(data["explicit"]),
                author=data.get("author"),
                link=str(data["link"]),
                podcast_type=PodcastType(data["podcast_type"]),
                copyright=data.get("copyright"),
                created_at=_parse_created_at(data.get("created_at")),
                episodes=[Episode.from_dict(item) for item in data.get("episodes") or []],
            )
        except KeyError as error:
            raise ConversionError(str(error.args[0])) from error
        except (TypeError, ValueError) as error:
            raise ConversionError("podcast", str(error)) from error

    def to_rss(self) -> str:
        """Render the podcast as an RSS 2.0 document with iTunes extensions."""
        rss = ET.Element("rss", {"version": "2.0"})
        channel = ET.SubElement(rss, "channel")
        ET.SubElement(channel, "title").text = self.title
        ET.SubElement(channel, "link").text = self.link
        ET.SubElement(channel, "description").text = self.description
        ET.SubElement(channel, "language").text = self.language
        if self.copyright is not None:
            ET.SubElement(channel, "copyright").text = self.copyright
        if self.author is not None:
            ET.SubElement(channel, _itunes("author")).text = self.author
        if self.image_url is not None:
            ET.SubElement(channel, _itunes("image"), {"href": self.image_url})
        ET.SubElement(channel, _itunes("explicit")).text = str(self.explicit).lower()
        ET.SubElement(channel, _itunes("summary")).text = self.description
        ET.SubElement(channel, _itunes("type")).text = self.podcast_type.value.lower()
        for episode in self.episodes:
            channel.append(episode.to_rss_item())
        return _XML_DECLARATION + ET.tostring(rss, encoding="unicode")

    @classmethod
    def from_rss(cls, xml: str | bytes) -> Podcast:
        """Read a podcast from an RSS document.

        Malformed XML raises ``xml.etree.ElementTree.ParseError``.
        """
        root = ET.fromstring(xml)
        channel = root if root.tag == "channel" else root.find("channel")
        if channel is None:
            raise ConversionError("channel")
        if not any(str(child.tag).startswith(f"{{{ITUNES_NAMESPACE}}}") for child in channel):
            raise ConversionError("itunes")

        image_url = None
        image = channel.find(_itunes("image"))
        if image is not None and image.get("href") is not None:
            try:
                image_url = _parse_url(image.get("href", ""))
            except ValueError:
                image_url = None

        categories = [
            element.get("text", "") for element in channel.findall(_itunes("category"))
        ]
        try:
            link = _parse_url(channel.findtext("link") or "")
        except ValueError as error:
            raise ConversionError("link", str(error)) from error

        return cls(
            id="",
            guid="",
            title=channel.findtext("title") or "",
            description=channel.findtext("description") or "",
            image_url=image_url,
            language=channel.findtext("language") or "",
            category=categories[0] if categories else None,
            sub_category=categories[1] if len(categories) > 1 else None,
            explicit=(channel.findtext(_itunes("explicit")) or "") == "true",
            author=channel.findtext(_itunes("author")),
            link=link,
            podcast_type=PodcastType.parse(channel.findtext(_itunes("type")) or ""),
            copyright=channel.findtext("copyright"),
            created_at=None,
            episodes=[Episode.from_rss_item(item) for item in channel.findall("item")],
        )