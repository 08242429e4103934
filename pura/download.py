"""Download the audio of scraped episodes and tag the files."""

from __future__ import annotations

import logging
import shutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from pura.episode import Episode
from pura.fs import create_parent_dir
from pura.http import HttpClient, HttpError
from pura.logs import TRACE
from pura.paths import (
    JPEG_EXTENSION,
    JPG_EXTENSION,
    MP3_EXTENSION,
    PNG_EXTENSION,
    PathProvider,
)
from pura.podcast import Podcast
from pura.podcasts import DatabaseError, PodcastProvider
from pura.tagging import (
    MIME_JPEG,
    MIME_PNG,
    Picture,
    ResizeError,
    resize_image,
    set_episode_tags,
)
from pura.urls import get_extension

logger = logging.getLogger(__name__)

CONCURRENCY = 8


class DownloadError(Exception):
    """The download could not start."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to download\n{reason}")


class ProcessError(Exception):
    """One episode could not be downloaded, copied or tagged."""

    def __init__(self, message: str, episode_id: str, path: Path | None = None) -> None:
        self.episode_id = episode_id
        self.path = path
        super().__init__(message)


class DownloadCommand:
    """Download, copy and tag every episode of a scraped podcast."""

    def __init__(
        self, paths: PathProvider, http: HttpClient, podcasts: PodcastProvider
    ) -> None:
        self.paths = paths
        self.http = http
        self.podcasts = podcasts

    def execute(self, podcast_id: str, year: int | None = None) -> list[Episode]:
        """Process episodes not yet in the output, optionally of one year only.

        Returns the episodes that were processed; failures are logged and skipped.
        """
        try:
            podcast = self.podcasts.get(podcast_id)
        except DatabaseError as error:
            raise DownloadError(f"Unable to get podcast\n{error}") from error
        results = self._process_episodes(podcast, year)
        downloaded = [result for result in results if isinstance(result, Episode)]
        failed = len(results) - len(downloaded)
        logger.info("Downloaded audio files for %d episodes", len(downloaded))
        if failed:
            logger.warning("Skipped %d episodes due to failures", failed)
        return downloaded

    def _is_pending(self, podcast: Podcast, episode: Episode, year: int | None) -> bool:
        if year is not None and episode.published_at.year != year:
            return False
        if self.paths.output_path_for_audio(podcast.id, episode).exists():
            logger.log(TRACE, "Skipping existing episode: %s", episode.file_stem())
            return False
        return True

    def _process_episodes(
        self, podcast: Podcast, year: int | None
    ) -> list[Episode | ProcessError]:
        episodes = [
            episode for episode in podcast.episodes if self._is_pending(podcast, episode, year)
        ]
        logger.debug("Downloading audio files for %d episodes", len(episodes))
        if not episodes:
            return []
        with ThreadPoolExecutor(max_workers=CONCURRENCY) as executor:
            return list(
                executor.map(lambda episode: self._try_process(podcast, episode), episodes)
            )

    def _try_process(self, podcast: Podcast, episode: Episode) -> Episode | ProcessError:
        try:
            return self.process_episode(podcast, episode)
        except ProcessError as error:
            logger.warning("%s", error)
            return error

    def process_episode(self, podcast: Podcast, episode: Episode) -> Episode:
        """Download the audio and cover, copy the audio to the output and tag it."""
        source = self._download_episode(episode)
        audio_path = self._copy_episode(podcast.id, episode, source)
        cover = self._download_image(episode)
        try:
            set_episode_tags(podcast, episode, audio_path, cover)
        except (OSError, ValueError) as error:
            stem = episode.file_stem()
            raise ProcessError(
                f"A tag error occurred while processing episode: {stem}\n"
                f"Path: {audio_path}\n{error}",
                stem,
                audio_path,
            ) from error
        return episode

    def _download_episode(self, episode: Episode) -> Path:
        try:
            return self.http.get(episode.audio_url, MP3_EXTENSION)
        except HttpError as error:
            stem = episode.file_stem()
            raise ProcessError(
                f"Unable to download audio for episode: {stem}\n{error}", stem
            ) from error

    def _copy_episode(self, podcast_id: str, episode: Episode, source: Path) -> Path:
        destination = self.paths.output_path_for_audio(podcast_id, episode)
        stem = episode.file_stem()
        try:
            create_parent_dir(destination)
        except OSError as error:
            raise ProcessError(_io_message(stem, destination.parent, error), stem, destination.parent) from error
        logger.log(
            TRACE, "Copying %s\nSource: %s\nTarget: %s", stem, source, destination
        )
        try:
            shutil.copyfile(source, destination)
        except OSError as error:
            raise ProcessError(_io_message(stem, source, error), stem, source) from error
        return destination

    def _download_image(self, episode: Episode) -> Picture | None:
        url = episode.image_url
        if url is None:
            return None
        stem = episode.file_stem()
        logger.log(TRACE, "Downloading image for episode: %s", stem)
        extension = get_extension(url)
        lowered = extension.lower()
        if lowered in (JPG_EXTENSION, JPEG_EXTENSION):
            mime_type = MIME_JPEG
        elif lowered == PNG_EXTENSION:
            mime_type = MIME_PNG
        else:
            logger.warning(
                "Unable to determine mimetype of image for episode: %s \nURL: %s", stem, url
            )
            mime_type = MIME_JPEG
        try:
            path = self.http.get(url, extension)
        except (HttpError, ValueError) as error:
            raise ProcessError(
                f"Unable to download image for episode: {stem}\n{error}", stem
            ) from error
        logger.log(TRACE, "Resizing image for episode: %s", stem)
        try:
            data = resize_image(path, mime_type)
        except ResizeError as error:
            raise ProcessError(
                f"Unable to resize image for episode: {stem}\n{error}", stem, path
            ) from error
        logger.log(TRACE, "Resized image for episode: %s", stem)
        return Picture(mime_type, data)


def _io_message(stem: str, path: Path, error: OSError) -> str:
    return f"An I/O error occurred while processing episode: {stem}\nPath: {path}\n{error}"