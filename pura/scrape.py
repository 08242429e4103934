"""Scrape a podcast from an RSS feed or a website and store it."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

from pura.episode import ConversionError
from pura.http import HttpClient, HttpError
from pura.paths import XML_EXTENSION
from pura.podcast import Podcast
from pura.podcasts import DatabaseError, PodcastProvider
from pura.simplecast_scrape import ScrapeSimplecastError, SimplecastScraper

logger = logging.getLogger(__name__)

XML_CONTENT_TYPE = "application/xml"


class ScrapeRssError(Exception):
    """The RSS feed could not be fetched, read or converted."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to scrape\n{reason}")


class ScrapeError(Exception):
    """The podcast could not be scraped or saved."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to scrape\n{reason}")


class ScrapeCommand:
    """Fetch a podcast and its episodes, then store them."""

    def __init__(self, http: HttpClient, podcasts: PodcastProvider) -> None:
        self.http = http
        self.podcasts = podcasts

    def execute(self, podcast_id: str, url: str) -> Podcast:
        """Scrape the URL as RSS or as a Simplecast page and save the result."""
        try:
            content_type = self.http.head(url)
        except HttpError as error:
            raise ScrapeError(f"Unable to get content type:\n{error}") from error
        if content_type == XML_CONTENT_TYPE:
            try:
                podcast = self.execute_rss(podcast_id, url)
            except ScrapeRssError as error:
                raise ScrapeError(str(error)) from error
        else:
            try:
                podcast = SimplecastScraper(self.http).scrape(podcast_id, url)
            except ScrapeSimplecastError as error:
                raise ScrapeError(str(error)) from error
        logger.info("Fetched %d episodes", len(podcast.episodes))
        try:
            self.podcasts.put(podcast)
        except DatabaseError as error:
            raise ScrapeError(f"Unable to save: {error}") from error
        return podcast

    def execute_rss(self, podcast_id: str, url: str) -> Podcast:
        """Read a podcast from the RSS feed at the URL."""
        try:
            path = self.http.get(url, XML_EXTENSION)
        except HttpError as error:
            raise ScrapeRssError(f"Unable to get feed:\n{error}") from error
        try:
            contents = path.read_bytes()
        except OSError as error:
            raise ScrapeRssError(
                f"An I/O error occurred while processing episode: {podcast_id}\n"
                f"Path: {path}\n{error}"
            ) from error
        try:
            podcast = Podcast.from_rss(contents)
        except ET.ParseError as error:
            raise ScrapeRssError(f"Unable to parse RSS\n{error}") from error
        except ConversionError as error:
            raise ScrapeRssError(f"Unable to convert RSS\n{error}") from error
        podcast.id = podcast_id
        return podcast