"""Locations of cached and produced files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import quote, urljoin

from pura.episode import Episode, format_season
from pura.options import AppOptions
from pura.urls import get_extension
from pura.validation import PathValidationError, ValidationErrors, validate_directory

DEFAULT_CACHE_DIR = "cache"
DEFAULT_OUTPUT_DIR = "output"
HTTP_DIR = "http"
PODCASTS_DIR = "podcasts"
HEAD_EXTENSION = "head"
HTML_EXTENSION = "html"
JSON_EXTENSION = "json"
JPG_EXTENSION = "jpg"
JPEG_EXTENSION = "jpeg"
PNG_EXTENSION = "png"
MP3_EXTENSION = "mp3"
XML_EXTENSION = "xml"
RSS_FILE_NAME = "feed.xml"

_PATH_ESCAPES = frozenset(' "<>`{}')


def _with_extension(name: str, extension: str) -> str:
    """Replace the text after the last dot of a file name, as a file stem would."""
    if name != "..":
        index = name.rfind(".")
        if index > 0:
            name = name[:index]
    return f"{name}.{extension}" if extension else name


def _encode_path(path: str) -> str:
    return "".join(
        quote(char, safe="")
        if char in _PATH_ESCAPES or ord(char) < 0x20 or ord(char) > 0x7E
        else char
        for char in path
    )


@dataclass
class PathProvider:
    """Work out directories and file paths from the application options."""

    options: AppOptions = field(default_factory=AppOptions)

    def cache_dir(self) -> Path:
        if self.options.cache_dir is not None:
            return Path(self.options.cache_dir)
        return Path(DEFAULT_CACHE_DIR)

    def http_dir(self) -> Path:
        return self.cache_dir() / HTTP_DIR

    def podcast_dir(self) -> Path:
        return self.cache_dir() / PODCASTS_DIR

    def output_dir(self) -> Path:
        if self.options.output_dir is not None:
            return Path(self.options.output_dir)
        return Path(DEFAULT_OUTPUT_DIR)

    def _sub_path_for_audio(self, podcast_id: str, episode: Episode) -> Path:
        extension = get_extension(episode.audio_url) or MP3_EXTENSION
        file_name = _with_extension(episode.file_stem(), extension)
        return (
            Path(podcast_id)
            / episode.formatted_season()
            / str(episode.published_at.year)
            / file_name
        )

    def output_path_for_audio(self, podcast_id: str, episode: Episode) -> Path:
        return self.output_dir() / self._sub_path_for_audio(podcast_id, episode)

    def url_for_audio(self, podcast_id: str, episode: Episode) -> str | None:
        """URL of the audio file under the server base, or a file URL without one."""
        base = self.options.server_base
        if base is not None:
            path = self._sub_path_for_audio(podcast_id, episode).as_posix()
            return urljoin(base, _encode_path(path))
        try:
            path = Path.cwd() / self.output_path_for_audio(podcast_id, episode)
            return path.as_uri()
        except (OSError, ValueError):
            return None

    def output_path_for_rss(
        self, podcast_id: str, season: int | None = None, year: int | None = None
    ) -> Path:
        if not podcast_id:
            raise ValueError("podcast id should not be empty")
        path = self.output_dir() / podcast_id
        if season is None and year is None:
            return path / RSS_FILE_NAME
        year_dir = str(year) if year is not None else ""
        return path / format_season(season) / year_dir / RSS_FILE_NAME

    def validate(self) -> None:
        """Check every directory exists, raising ValidationErrors listing the failures."""
        errors = ValidationErrors()
        dirs = (
            ("Cache directory", self.cache_dir()),
            ("HTTP cache directory", self.http_dir()),
            ("Podcasts cache directory", self.podcast_dir()),
            ("Output directory", self.output_dir()),
        )
        for name, directory in dirs:
            try:
                validate_directory(name, directory)
            except PathValidationError as error:
                errors.append(error)
        errors.raise_if_any()