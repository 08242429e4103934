"""Scrape a podcast from a page that embeds a Simplecast player."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, TypeVar
from urllib.parse import urlsplit

from bs4 import BeautifulSoup

from pura.episode import ConversionError, _parse_url
from pura.http import HttpClient, HttpError
from pura.logs import TRACE
from pura.paths import JSON_EXTENSION
from pura.podcast import Podcast
from pura.simplecast import (
    SimplecastEpisode,
    SimplecastPlaylist,
    SimplecastPlaylistEpisode,
    SimplecastPodcast,
)

logger = logging.getLogger(__name__)

API_BASE = "https://api.simplecast.com"
PLAYER_HOSTS = frozenset(("player.simplecast.com", "embed.simplecast.com"))
CONCURRENCY = 8

_T = TypeVar("_T")


class ScrapeSimplecastError(Exception):
    """The Simplecast podcast could not be scraped."""

    def __init__(self, reason: str, *, url: str | None = None, item_id: str | None = None) -> None:
        self.reason = reason
        self.url = url
        self.item_id = item_id
        super().__init__(f"Failed to scrape\n{reason}")


def _iframe_attrs(html: BeautifulSoup, attr: str) -> list[str]:
    values = []
    for element in html.find_all("iframe"):
        value = element.get(attr)
        if value is None:
            continue
        values.append(value if isinstance(value, str) else " ".join(value))
    return values


def find_player_id(html: BeautifulSoup) -> str | None:
    """Return the episode ID of the first embedded Simplecast player, if any."""
    candidates = _iframe_attrs(html, "src") + _iframe_attrs(html, "data-src")
    for candidate in candidates:
        if not candidate:
            continue
        try:
            url = _parse_url(candidate)
        except ValueError as error:
            logger.warning("Unable to parse URL: %s\n%s", candidate, error)
            continue
        parts = urlsplit(url)
        if parts.hostname not in PLAYER_HOSTS:
            continue
        path = parts.path
        if not path.startswith("/"):
            continue
        return path[1:].split("/", 1)[0]
    return None


class SimplecastScraper:
    """Collect podcast and episode metadata from the Simplecast API."""

    def __init__(self, http: HttpClient) -> None:
        self.http = http

    def scrape(self, podcast_id: str, url: str) -> Podcast:
        """Scrape the podcast whose player is embedded in the page at the URL."""
        player_id = self._get_player_id(url)
        episode = self._get_episode(player_id)
        podcast = self._get_podcast(episode)
        playlist = self._get_playlist(episode)
        logger.info("Found %d episodes of %s", len(playlist), episode.podcast.title)
        episodes = self._get_episodes(playlist)
        skipped = len(playlist) - len(episodes)
        if skipped > 0:
            logger.warning("Skipped %d episodes due to failures", skipped)
        result = podcast.to_podcast()
        result.id = podcast_id
        result.episodes = [item.to_episode() for item in episodes]
        return result

    def _fetch(self, url: str, parse: Callable[[Any], _T]) -> _T:
        data = self.http.get_json(url)
        try:
            return parse(data)
        except ConversionError as error:
            path = self.http.cache_path(url, JSON_EXTENSION)
            self.http.remove(url, JSON_EXTENSION)
            raise HttpError(
                f"A deserialization error occurred.\nPath: {path}\n{error}",
                url=url,
                path=path,
            ) from error

    def _get_player_id(self, url: str) -> str:
        try:
            html = self.http.get_html(url)
        except HttpError as error:
            raise ScrapeSimplecastError(f"Unable to get page\n{error}", url=url) from error
        player_id = find_player_id(html)
        if player_id is None:
            raise ScrapeSimplecastError(
                f"Page does not contain a Simplecast Player\nURL: {url}", url=url
            )
        logger.log(TRACE, "Found Simplecast player with episode id: %s", player_id)
        return player_id

    def _get_episode(self, episode_id: str) -> SimplecastEpisode:
        url = f"{API_BASE}/episodes/{episode_id}"
        try:
            return self._fetch(url, SimplecastEpisode.from_dict)
        except HttpError as error:
            raise ScrapeSimplecastError(
                f"Unable to get episode: {episode_id}\n{error}", url=url, item_id=episode_id
            ) from error

    def _get_podcast(self, episode: SimplecastEpisode) -> SimplecastPodcast:
        logger.debug("Fetching podcast for %s", episode.podcast.title)
        podcast_id = episode.podcast.id
        url = f"{API_BASE}/podcasts/{podcast_id}"
        try:
            return self._fetch(url, SimplecastPodcast.from_dict)
        except HttpError as error:
            raise ScrapeSimplecastError(
                f"Unable to get playlist: {podcast_id}\n{error}", url=url, item_id=podcast_id
            ) from error

    def _get_playlist(self, episode: SimplecastEpisode) -> list[SimplecastPlaylistEpisode]:
        logger.debug("Fetching playlist for %s", episode.podcast.title)
        podcast_id = episode.podcast.id
        url: str | None = f"{API_BASE}/podcasts/{podcast_id}/playlist"
        episodes: list[SimplecastPlaylistEpisode] = []
        while url is not None:
            try:
                playlist = self._fetch(url, SimplecastPlaylist.from_dict)
            except HttpError as error:
                raise ScrapeSimplecastError(
                    f"Unable to get playlist: {podcast_id}\n{error}",
                    url=url,
                    item_id=podcast_id,
                ) from error
            episodes.extend(playlist.episodes.collection)
            following = playlist.episodes.pages.next
            url = following.href if following is not None else None
        return episodes

    def _try_get_episode(self, item: SimplecastPlaylistEpisode) -> SimplecastEpisode | None:
        try:
            return self._get_episode(item.id)
        except ScrapeSimplecastError as error:
            logger.warning("Failed to get episode %s", item.id)
            logger.debug("%s", error)
            return None

    def _get_episodes(
        self, playlist: list[SimplecastPlaylistEpisode]
    ) -> list[SimplecastEpisode]:
        logger.debug("Fetching metadata for %d episodes", len(playlist))
        if not playlist:
            return []
        with ThreadPoolExecutor(max_workers=CONCURRENCY) as executor:
            results = list(executor.map(self._try_get_episode, playlist))
        return [episode for episode in results if episode is not None]