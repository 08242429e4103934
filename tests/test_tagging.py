import io
from datetime import datetime, timezone

import pytest
from PIL import Image

from pura.episode import Episode, EpisodeType
from pura.podcast import Podcast, PodcastType
from pura.tagging import (
    IMAGE_SIZE,
    MIME_JPEG,
    MIME_PNG,
    Picture,
    ResizeError,
    build_id3_tag,
    resize_image,
    set_episode_tags,
    strip_tags,
)

AUDIO = b"\xff\xfb\x90\x00" + b"audio-frames" * 10


def make_episode(season=2, number=3, title="  Lorem ipsum  "):
    return Episode(
        id="550e8400-e29b-41d4-a716-446655440000",
        title=title,
        description="Aenean sit amet sem quis velit viverra vestibulum.",
        audio_url="https://example.com/season-1/episode-1.mp3",
        audio_file_size=1024,
        audio_content_type="audio/mpeg",
        duration=None,
        image_url=None,
        explicit=False,
        episode_type=EpisodeType.parse("full"),
        season=season,
        number=number,
        published_at=datetime(1970, 1, 1, tzinfo=timezone.utc),
    )


def make_podcast():
    return Podcast(
        id="test",
        guid="29e09be7-ee09-4671-9130-0da5b958e9a2",
        title="Podcast Title",
        description="Podcast description",
        image_url=None,
        language="en-us",
        category=None,
        sub_category=None,
        explicit=False,
        author=None,
        link="https://example.com/",
        podcast_type=PodcastType.EPISODIC,
        copyright=None,
    )


def syncsafe(data):
    return (data[0] << 21) | (data[1] << 14) | (data[2] << 7) | data[3]


def parse_frames(tag):
    size = syncsafe(tag[6:10])
    body = tag[10 : 10 + size]
    frames = {}
    position = 0
    while position + 10 <= len(body) and body[position : position + 4] != b"\x00\x00\x00\x00":
        frame_id = body[position : position + 4].decode("ascii")
        frame_size = syncsafe(body[position + 4 : position + 8])
        frames[frame_id] = body[position + 10 : position + 10 + frame_size]
        position += 10 + frame_size
    return frames


def text(frames, frame_id):
    body = frames[frame_id]
    assert body[0] == 3
    return body[1:].decode("utf-8")


def ape_tag(with_header=True):
    items = b"\x05\x00\x00\x00\x00\x00\x00\x00Title\x00Hello"
    size = len(items) + 32
    flags = 0x80000000 if with_header else 0
    footer = (
        b"APETAGEX"
        + (2000).to_bytes(4, "little")
        + size.to_bytes(4, "little")
        + (1).to_bytes(4, "little")
        + flags.to_bytes(4, "little")
        + bytes(8)
    )
    header = footer[:20] + (flags | 0x20000000).to_bytes(4, "little") + bytes(8)
    return (header if with_header else b"") + items + footer


def id3v1_tag():
    return b"TAG" + b"Old title".ljust(30, b"\x00") + bytes(95)


def write_image(path, mode, image_format):
    Image.new(mode, (100, 50), color=(10, 20, 30, 255)[: len(mode)]).save(path, format=image_format)
    return path


def test_build_id3_tag_header_declares_body_size():
    tag = build_id3_tag(make_podcast(), make_episode())
    assert tag[:5] == b"ID3\x04\x00"
    assert syncsafe(tag[6:10]) == len(tag) - 10


def test_build_id3_tag_frames():
    episode = make_episode()
    frames = parse_frames(build_id3_tag(make_podcast(), episode))
    assert text(frames, "TIT2") == "Lorem ipsum"
    assert text(frames, "TPE1") == "Podcast Title"
    assert text(frames, "TALB") == "Season 2"
    assert text(frames, "TPOS") == "2"
    assert text(frames, "TDRC") == str(episode.published_at.year)
    assert text(frames, "TRCK") == "3"
    comment = frames["COMM"]
    assert comment[:5] == b"\x03XXX\x00"
    assert comment[5:].decode("utf-8") == episode.description
    assert "APIC" not in frames


def test_build_id3_tag_without_season_or_number():
    frames = parse_frames(build_id3_tag(make_podcast(), make_episode(season=None, number=None)))
    assert "TALB" not in frames
    assert "TRCK" not in frames
    assert text(frames, "TPOS") == "0"


def test_build_id3_tag_with_cover():
    cover = Picture(MIME_JPEG, b"\xff\xd8jpeg-bytes")
    frames = parse_frames(build_id3_tag(make_podcast(), make_episode(), cover))
    expected = b"\x03" + MIME_JPEG.encode() + b"\x00" + b"\x03" + b"\x00" + cover.data
    assert frames["APIC"] == expected


def test_strip_tags_removes_every_tag(tmp_path):
    path = tmp_path / "episode.mp3"
    old = build_id3_tag(make_podcast(), make_episode())
    path.write_bytes(old + AUDIO + ape_tag() + id3v1_tag())
    strip_tags(path)
    assert path.read_bytes() == AUDIO


def test_strip_tags_removes_ape_without_header(tmp_path):
    path = tmp_path / "episode.mp3"
    path.write_bytes(AUDIO + ape_tag(with_header=False))
    strip_tags(path)
    assert path.read_bytes() == AUDIO


def test_strip_tags_leaves_untagged_file(tmp_path):
    path = tmp_path / "episode.mp3"
    path.write_bytes(AUDIO)
    strip_tags(path)
    assert path.read_bytes() == AUDIO


def test_strip_tags_rejects_oversized_id3v2(tmp_path):
    path = tmp_path / "episode.mp3"
    path.write_bytes(b"ID3\x04\x00\x00\x00\x00\x7f\x7f" + AUDIO)
    with pytest.raises(ValueError):
        strip_tags(path)


def test_set_episode_tags_replaces_existing_tags(tmp_path):
    path = tmp_path / "episode.mp3"
    podcast = make_podcast()
    path.write_bytes(build_id3_tag(podcast, make_episode(title="Old")) + AUDIO + id3v1_tag())

    set_episode_tags(podcast, make_episode(title="New"), path)

    data = path.read_bytes()
    size = syncsafe(data[6:10])
    assert text(parse_frames(data), "TIT2") == "New"
    assert data[10 + size :] == AUDIO
    strip_tags(path)
    assert path.read_bytes() == AUDIO


def test_resize_image_png(tmp_path):
    source = write_image(tmp_path / "image.png", "RGBA", "PNG")
    result = resize_image(source, MIME_PNG)
    with Image.open(io.BytesIO(result)) as image:
        assert image.format == "PNG"
        assert image.size == (IMAGE_SIZE, IMAGE_SIZE)


def test_resize_image_jpeg_from_rgba(tmp_path):
    source = write_image(tmp_path / "image.png", "RGBA", "PNG")
    result = resize_image(source, MIME_JPEG)
    with Image.open(io.BytesIO(result)) as image:
        assert image.format == "JPEG"
        assert image.size == (IMAGE_SIZE, IMAGE_SIZE)


def test_resize_image_unsupported_mime(tmp_path):
    source = write_image(tmp_path / "image.png", "RGB", "PNG")
    with pytest.raises(ResizeError, match="Unable to encode image type: image/gif"):
        resize_image(source, "image/gif")


def test_resize_image_missing_file(tmp_path):
    with pytest.raises(ResizeError, match="An I/O error occurred"):
        resize_image(tmp_path / "missing.png", MIME_PNG)


def test_resize_image_not_an_image(tmp_path):
    path = tmp_path / "image.jpg"
    path.write_bytes(b"not an image")
    with pytest.raises(ResizeError, match="An image error occurred"):
        resize_image(path, MIME_JPEG)