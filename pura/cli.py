"""Command line entry point."""

from __future__ import annotations

import argparse
import logging
import sys

from pura.download import DownloadCommand, DownloadError
from pura.emulate import EmulateCommand, EmulateError
from pura.episode import _parse_url
from pura.logs import init_logging
from pura.podcast import validate_id
from pura.provider import ServiceError, ServiceProvider
from pura.scrape import ScrapeCommand, ScrapeError

logger = logging.getLogger(__name__)

_ID_HELP = "ID of the downloaded podcast. Must be alphanumeric and hyphenated"


def _podcast_id(value: str) -> str:
    try:
        return validate_id(value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(str(error)) from error


def _url(value: str) -> str:
    try:
        return _parse_url(value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(f"invalid URL: {value}") from error


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with its scrape, download and emulate commands."""
    parser = argparse.ArgumentParser(
        prog="pura", description="Scrape, download and emulate podcast feeds."
    )
    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    scrape = commands.add_parser(
        "scrape", help="Scrape a podcast from an RSS feed or website."
    )
    scrape.add_argument("podcast_id", type=_podcast_id, help=_ID_HELP)
    scrape.add_argument("url", type=_url, help="URL of the RSS feed or website")

    download = commands.add_parser(
        "download", help="Download episodes of a scraped podcast."
    )
    download.add_argument("podcast_id", type=_podcast_id, help=_ID_HELP)
    download.add_argument("year", type=int, nargs="?", default=None, help="Optional year filter")

    emulate = commands.add_parser(
        "emulate", help="Create emulated RSS of a scraped podcast."
    )
    emulate.add_argument("podcast_id", type=_podcast_id, help=_ID_HELP)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run a command and return the process exit status."""
    init_logging(logging.DEBUG)
    args = build_parser().parse_args(argv)
    try:
        services = ServiceProvider.create()
    except ServiceError as error:
        logger.error("%s", error)
        return 1
    try:
        if args.command == "scrape":
            ScrapeCommand(services.http, services.podcasts).execute(args.podcast_id, args.url)
        elif args.command == "download":
            DownloadCommand(services.paths, services.http, services.podcasts).execute(
                args.podcast_id, args.year
            )
        else:
            EmulateCommand(services.podcasts, services.paths).execute(args.podcast_id)
    except (ScrapeError, DownloadError, EmulateError) as error:
        logger.error("%s", error)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())