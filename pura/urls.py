"""Helpers for working with URLs."""

from urllib.parse import urlsplit


def get_extension(url: str) -> str:
    """Return the text after the last dot of the URL path.

    A path without a dot is returned whole.
    """
    path = urlsplit(str(url)).path or "/"
    return path.rsplit(".", 1)[-1]