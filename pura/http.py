"""HTTP client that caches every response on disk."""

from __future__ import annotations

import ipaddress
import json
import logging
import os
from http import HTTPStatus
from pathlib import Path
from typing import Any
from urllib.parse import quote, urlsplit

import requests
from bs4 import BeautifulSoup

from pura.logs import TRACE
from pura.paths import (
    HEAD_EXTENSION,
    HTML_EXTENSION,
    JSON_EXTENSION,
    PathProvider,
    _with_extension,
)

logger = logging.getLogger(__name__)

UNKNOWN_DOMAIN = "__unknown"
ROOT_SEGMENT = "__root"
_CHUNK_SIZE = 64 * 1024


class HttpError(Exception):
    """A request, response or cache file operation failed."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        path: Path | None = None,
        status: int | None = None,
    ) -> None:
        self.url = url
        self.path = path
        self.status = status
        super().__init__(message)


def _status_error(url: str, status: int) -> HttpError:
    try:
        reason = HTTPStatus(status).phrase
    except ValueError:
        reason = ""
    return HttpError(
        f"Unexpected response status: {status} {reason}\nURL: {url}",
        url=url,
        status=status,
    )


def _request_error(url: str, error: Exception) -> HttpError:
    return HttpError(f"A request error occurred.\nURL:{url}\n{error}", url=url)


def _response_io_error(url: str, error: Exception) -> HttpError:
    return HttpError(f"A response I/O error occurred.\nURL: {url}\n{error}", url=url)


def _io_error(path: Path, error: Exception) -> HttpError:
    return HttpError(f"An I/O error occurred.\nPath: {path}\n{error}", path=path)


def _domain(hostname: str | None) -> str:
    if not hostname:
        return UNKNOWN_DOMAIN
    try:
        ipaddress.ip_address(hostname)
    except ValueError:
        return hostname
    return UNKNOWN_DOMAIN


def _create_dir(path: Path) -> None:
    directory = path.parent
    if not directory.exists():
        logger.log(TRACE, "Creating cache directory: %s", directory)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            raise _io_error(directory, error) from error


def _content_type(response: requests.Response) -> str:
    value = response.headers.get("Content-Type")
    if value is None:
        return ""
    return value.split(";", 1)[0].strip().lower()


class HttpClient:
    """Make HTTP requests, keeping each response in a cache directory."""

    def __init__(self, directory: str | os.PathLike | None = None) -> None:
        self.directory = (
            Path(directory) if directory is not None else PathProvider().http_dir()
        )

    def cache_path(self, url: str, extension: str | None = None) -> Path:
        """Location of the cached response for a URL."""
        parts = urlsplit(str(url))
        segments = [segment for segment in parts.path.split("/") if segment]
        if not segments:
            segments = [ROOT_SEGMENT]
        path = self.directory.joinpath(_domain(parts.hostname), *segments)
        if parts.query:
            path = path.with_name(f"{path.name}-{quote(parts.query, safe='')}")
        if extension is not None:
            path = path.with_name(_with_extension(path.name, extension))
        return path

    def get(self, url: str, extension: str | None = None) -> Path:
        """Return the path of the cached body, downloading it on a cache miss."""
        path = self.cache_path(url, extension)
        if path.exists():
            logger.log(TRACE, "Cache HIT: %s", url)
        else:
            logger.log(TRACE, "Cache MISS: %s", url)
            self._download_to_cache(url, path)
        return path

    def head(self, url: str) -> str:
        """Return the content type of a URL, without parameters and lower case."""
        path = self.cache_path(url, HEAD_EXTENSION)
        if path.exists():
            logger.log(TRACE, "HEAD cache HIT: %s", url)
            try:
                return path.read_text(encoding="utf-8")
            except OSError as error:
                raise _io_error(path, error) from error
        logger.log(TRACE, "HEAD cache MISS: %s", url)
        return self._head_to_cache(url, path)

    def get_html(self, url: str) -> BeautifulSoup:
        path = self.get(url, HTML_EXTENSION)
        try:
            contents = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as error:
            raise _io_error(path, error) from error
        return BeautifulSoup(contents, "html.parser")

    def get_json(self, url: str) -> Any:
        """Return the decoded JSON body; an invalid cached body is removed."""
        path = self.get(url, JSON_EXTENSION)
        try:
            with path.open(encoding="utf-8") as file:
                return json.load(file)
        except OSError as error:
            raise _io_error(path, error) from error
        except ValueError as error:
            self.remove(url, JSON_EXTENSION)
            raise HttpError(
                f"A deserialization error occurred.\nPath: {path}\n{error}",
                url=url,
                path=path,
            ) from error

    def remove(self, url: str, extension: str | None = None) -> bool:
        """Delete a cached response; true if it existed and was removed."""
        path = self.cache_path(url, extension)
        if not path.exists():
            return False
        logger.log(TRACE, "Removing: %s", path)
        try:
            path.unlink()
        except OSError as error:
            logger.log(TRACE, "Failed to remove: %s", path)
            logger.log(TRACE, "%s", error)
            return False
        return True

    def _head_to_cache(self, url: str, path: Path) -> str:
        _create_dir(path)
        logger.log(TRACE, "HEAD %s to %s", url, path)
        try:
            response = requests.head(url, allow_redirects=True)
        except requests.RequestException as error:
            raise _request_error(url, error) from error
        content_type = _content_type(response)
        try:
            path.write_text(content_type, encoding="utf-8")
        except OSError as error:
            raise _io_error(path, error) from error
        return content_type

    def _download_to_cache(self, url: str, path: Path) -> None:
        _create_dir(path)
        logger.log(TRACE, "Downloading %s to %s", url, path)
        try:
            response = requests.get(url, stream=True)
        except requests.RequestException as error:
            raise _request_error(url, error) from error
        with response:
            if not response.ok:
                raise _status_error(url, response.status_code)
            try:
                file = path.open("wb")
            except OSError as error:
                raise _io_error(path, error) from error
            with file:
                chunks = response.iter_content(chunk_size=_CHUNK_SIZE)
                while True:
                    try:
                        chunk = next(chunks, None)
                    except requests.RequestException as error:
                        raise _response_io_error(url, error) from error
                    if chunk is None:
                        break
                    try:
                        file.write(chunk)
                    except OSError as error:
                        raise _io_error(path, error) from error