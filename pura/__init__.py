"""Scrape podcasts from RSS feeds or Simplecast pages, download and tag their audio, and write emulated RSS feeds."""

__version__ = "0.1.0"