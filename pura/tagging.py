"""Cover art resizing and ID3 tagging of downloaded audio files."""

from __future__ import annotations

import io
import os
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from pura.episode import Episode
from pura.podcast import Podcast

MIME_JPEG = "image/jpeg"
MIME_PNG = "image/png"
IMAGE_SIZE = 720
COVER_FRONT = 3

_ID3_VERSION = b"\x04\x00"
_UTF8 = b"\x03"
_COMMENT_LANGUAGE = b"XXX"
_PADDING = 1024
_ID3V1_SIZE = 128
_APE_FOOTER_SIZE = 32
_APE_HAS_HEADER = 0x80000000
_ID3V2_FOOTER_FLAG = 0x10


@dataclass(frozen=True)
class Picture:
    """An embedded picture, such as front cover art."""

    mime_type: str
    data: bytes
    picture_type: int = COVER_FRONT
    description: str = ""


class ResizeError(Exception):
    """An image could not be read, resized or encoded."""


def resize_image(path: str | os.PathLike, mime_type: str) -> bytes:
    """Scale an image to a square of IMAGE_SIZE pixels and encode it as the MIME type."""
    try:
        with Image.open(path) as source:
            source.load()
            resized = source.resize((IMAGE_SIZE, IMAGE_SIZE), Image.Resampling.NEAREST)
    except UnidentifiedImageError as error:
        raise ResizeError(f"An image error occurred: {error}") from error
    except OSError as error:
        raise ResizeError(f"An I/O error occurred: {error}") from error
    except (SyntaxError, ValueError) as error:
        raise ResizeError(f"An image error occurred: {error}") from error

    if mime_type == MIME_PNG:
        image_format = "PNG"
    elif mime_type == MIME_JPEG:
        image_format = "JPEG"
        if resized.mode not in ("RGB", "L", "CMYK"):
            resized = resized.convert("RGB")
    else:
        raise ResizeError(f"Unable to encode image type: {mime_type}")

    buffer = io.BytesIO()
    try:
        resized.save(buffer, format=image_format)
    except (OSError, ValueError) as error:
        raise ResizeError(f"An image error occurred: {error}") from error
    return buffer.getvalue()


def _syncsafe(value: int) -> bytes:
    if value < 0 or value >= 1 << 28:
        raise ValueError(f"ID3v2 size out of range: {value}")
    return bytes(((value >> 21) & 0x7F, (value >> 14) & 0x7F, (value >> 7) & 0x7F, value & 0x7F))


def _read_syncsafe(data: bytes) -> int:
    if any(byte & 0x80 for byte in data):
        raise ValueError("Malformed ID3v2 tag size")
    return (data[0] << 21) | (data[1] << 14) | (data[2] << 7) | data[3]


def _id3v2_end(data: bytes) -> int:
    """Offset of the first byte after any ID3v2 tags at the start of the data."""
    position = 0
    while data[position : position + 3] == b"ID3" and len(data) >= position + 10:
        flags = data[position + 5]
        size = _read_syncsafe(data[position + 6 : position + 10])
        position += 10 + size + (10 if flags & _ID3V2_FOOTER_FLAG else 0)
        if position > len(data):
            raise ValueError("ID3v2 tag is larger than the file")
    return position


def _ape_size(data: bytes, start: int, end: int) -> int:
    """Size of an APE tag ending at the given offset, or zero if there is none."""
    if end - start < _APE_FOOTER_SIZE:
        return 0
    footer = end - _APE_FOOTER_SIZE
    if data[footer : footer + 8] != b"APETAGEX":
        return 0
    size = int.from_bytes(data[footer + 12 : footer + 16], "little")
    flags = int.from_bytes(data[footer + 20 : footer + 24], "little")
    total = size + (_APE_FOOTER_SIZE if flags & _APE_HAS_HEADER else 0)
    if total < _APE_FOOTER_SIZE or total > end - start:
        raise ValueError("Malformed APE tag")
    return total


def strip_tags(path: str | os.PathLike) -> None:
    """Remove APE, ID3v1 and ID3v2 tags from an audio file."""
    path = Path(path)
    data = path.read_bytes()
    start = _id3v2_end(data)
    end = len(data)
    while True:
        if end - start >= _ID3V1_SIZE and data[end - _ID3V1_SIZE : end - _ID3V1_SIZE + 3] == b"TAG":
            end -= _ID3V1_SIZE
            continue
        ape = _ape_size(data, start, end)
        if ape:
            end -= ape
            continue
        break
    if start or end != len(data):
        path.write_bytes(data[start:end])


def _frame(frame_id: str, body: bytes) -> bytes:
    return frame_id.encode("ascii") + _syncsafe(len(body)) + b"\x00\x00" + body


def _text_frame(frame_id: str, text: str) -> bytes:
    return _frame(frame_id, _UTF8 + text.encode("utf-8"))


def _comment_frame(text: str) -> bytes:
    return _frame("COMM", _UTF8 + _COMMENT_LANGUAGE + b"\x00" + text.encode("utf-8"))


def _picture_frame(picture: Picture) -> bytes:
    body = (
        _UTF8
        + picture.mime_type.encode("latin-1")
        + b"\x00"
        + bytes((picture.picture_type,))
        + picture.description.encode("utf-8")
        + b"\x00"
        + picture.data
    )
    return _frame("APIC", body)


def build_id3_tag(podcast: Podcast, episode: Episode, cover: Picture | None = None) -> bytes:
    """Encode an ID3v2.4 tag describing the episode."""
    texts = [
        ("TIT2", episode.title.strip()),
        ("TPE1", podcast.title),
    ]
    if episode.season is not None:
        texts.append(("TALB", f"Season {episode.season}"))
    texts.append(("TPOS", str(episode.season or 0)))
    texts.append(("TDRC", str(episode.published_at.year)))
    if episode.number is not None:
        texts.append(("TRCK", str(episode.number)))
    frames = [_text_frame(frame_id, text) for frame_id, text in texts if text]
    if episode.description:
        frames.append(_comment_frame(episode.description))
    if cover is not None:
        frames.append(_picture_frame(cover))
    body = b"".join(frames) + bytes(_PADDING)
    return b"ID3" + _ID3_VERSION + b"\x00" + _syncsafe(len(body)) + body


def set_episode_tags(
    podcast: Podcast,
    episode: Episode,
    path: str | os.PathLike,
    cover: Picture | None = None,
) -> None:
    """Replace every tag in the audio file with a fresh ID3v2 tag."""
    path = Path(path)
    strip_tags(path)
    tag = build_id3_tag(podcast, episode, cover)
    audio = path.read_bytes()
    path.write_bytes(tag + audio)