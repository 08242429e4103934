"""Storage of scraped podcasts as YAML files."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from pura.episode import ConversionError
from pura.paths import PathProvider, _with_extension
from pura.podcast import Podcast


class DatabaseError(Exception):
    """A podcast could not be read or written."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)


class PodcastNotFoundError(DatabaseError):
    """No podcast is stored under the requested ID."""

    def __init__(self, podcast_id: str) -> None:
        self.podcast_id = podcast_id
        super().__init__(f"Podcast not found: {podcast_id}")


class PodcastProvider:
    """Read and write podcasts in a directory of YAML files."""

    def __init__(self, directory: str | os.PathLike | None = None) -> None:
        self.directory = (
            Path(directory) if directory is not None else PathProvider().podcast_dir()
        )

    def _path(self, podcast_id: str) -> Path:
        return self.directory / _with_extension(podcast_id, "yml")

    def get(self, podcast_id: str) -> Podcast:
        path = self._path(podcast_id)
        if not path.exists():
            raise PodcastNotFoundError(podcast_id)
        try:
            with path.open(encoding="utf-8") as file:
                data = yaml.safe_load(file)
        except OSError as error:
            raise DatabaseError(f"An I/O error occurred.\nPath: {path}\n{error}", path) from error
        except yaml.YAMLError as error:
            raise _deserialization_error(path, error) from error
        if not isinstance(data, dict):
            raise _deserialization_error(path, "expected a mapping")
        try:
            return Podcast.from_dict(data)
        except (ConversionError, TypeError, ValueError, AttributeError) as error:
            raise _deserialization_error(path, error) from error

    def put(self, podcast: Podcast) -> None:
        path = self._path(podcast.id)
        try:
            with path.open("w", encoding="utf-8") as file:
                yaml.safe_dump(podcast.to_dict(), file, sort_keys=False, allow_unicode=True)
        except OSError as error:
            raise DatabaseError(f"An I/O error occurred.\nPath: {path}\n{error}", path) from error
        except yaml.YAMLError as error:
            raise DatabaseError(
                f"A serialization error occurred.\nPath: {path}\n{error}", path
            ) from error


def _deserialization_error(path: Path, error: object) -> DatabaseError:
    return DatabaseError(f"A deserialization error occurred.\nPath: {path}\n{error}", path)