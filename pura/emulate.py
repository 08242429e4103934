"""Write emulated RSS feeds of a scraped podcast, pointing at the local audio."""

from __future__ import annotations

import dataclasses
import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from pura.episode import ITUNES_NAMESPACE, Episode
from pura.fs import create_parent_dir
from pura.paths import PathProvider
from pura.podcast import _XML_DECLARATION, Podcast
from pura.podcasts import DatabaseError, PodcastProvider

logger = logging.getLogger(__name__)

ET.register_namespace("itunes", ITUNES_NAMESPACE)


class EmulateError(Exception):
    """The RSS feeds could not be created."""

    def __init__(self, reason: str, path: Path | None = None) -> None:
        self.reason = reason
        self.path = path
        super().__init__(f"Failed to create RSS feeds\n{reason}")


def group_by_season(episodes: list[Episode]) -> dict[int | None, list[Episode]]:
    """Group episodes by season number, keeping their order within each group."""
    groups: dict[int | None, list[Episode]] = {}
    for episode in episodes:
        groups.setdefault(episode.season, []).append(episode)
    return groups


def group_by_year(episodes: list[Episode]) -> dict[int, list[Episode]]:
    """Group episodes by the year they were published."""
    groups: dict[int, list[Episode]] = {}
    for episode in episodes:
        groups.setdefault(episode.published_at.year, []).append(episode)
    return groups


class EmulateCommand:
    """Create one feed for the podcast, one per season and one per season and year."""

    def __init__(self, podcasts: PodcastProvider, paths: PathProvider) -> None:
        self.podcasts = podcasts
        self.paths = paths

    def execute(self, podcast_id: str) -> list[Path]:
        """Write every feed of the stored podcast and return their paths."""
        try:
            podcast = self.podcasts.get(podcast_id)
        except DatabaseError as error:
            raise EmulateError(f"Unable to get podcast\n{error}") from error
        feeds = self.save_feeds(podcast)
        logger.info("Created %d rss feeds", len(feeds))
        return feeds

    def save_feeds(self, podcast: Podcast) -> list[Path]:
        """Write the full feed followed by the season and year feeds."""
        paths = [self._save_feed(podcast, None, None)]
        for season, episodes in group_by_season(podcast.episodes).items():
            season_podcast = dataclasses.replace(podcast, episodes=episodes)
            paths.append(self._save_feed(season_podcast, season, None))
            for year, year_episodes in group_by_year(episodes).items():
                year_podcast = dataclasses.replace(podcast, episodes=year_episodes)
                paths.append(self._save_feed(year_podcast, season, year))
        return paths

    def _render(self, podcast: Podcast) -> str:
        root = ET.fromstring(podcast.to_rss().encode("utf-8"))
        by_id: dict[str, Episode] = {}
        for episode in podcast.episodes:
            by_id.setdefault(episode.id, episode)
        for item in root.iter("item"):
            guid = item.findtext("guid")
            enclosure = item.find("enclosure")
            if guid is None or enclosure is None:
                continue
            episode = by_id.get(guid.strip())
            if episode is None:
                continue
            url = self.paths.url_for_audio(podcast.id, episode)
            if url is None:
                continue
            enclosure.set("url", str(url))
        return _XML_DECLARATION + ET.tostring(root, encoding="unicode")

    def _save_feed(self, podcast: Podcast, season: int | None, year: int | None) -> Path:
        xml = self._render(podcast)
        path = self.paths.output_path_for_rss(podcast.id, season, year)
        try:
            create_parent_dir(path)
        except OSError as error:
            raise EmulateError(
                f"Unable to write RSS\nPath: {path.parent}\n{error}", path.parent
            ) from error
        try:
            path.write_text(xml, encoding="utf-8")
        except OSError as error:
            raise EmulateError(f"Unable to write RSS\nPath: {path}\n{error}", path) from error
        return path