"""Logging set-up for the command line."""

from __future__ import annotations

import logging
import sys

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

HANDLER_NAME = "pura"
EXCLUDED_LOGGERS = ("requests", "urllib3", "charset_normalizer", "bs4", "PIL")


class _ExcludeFilter(logging.Filter):
    def __init__(self, prefixes: tuple[str, ...]) -> None:
        super().__init__()
        self._prefixes = prefixes

    def filter(self, record: logging.LogRecord) -> bool:
        return not any(
            record.name == prefix or record.name.startswith(prefix + ".")
            for prefix in self._prefixes
        )


def _resolve_level(verbosity: int | str) -> int:
    if isinstance(verbosity, int):
        return verbosity
    level = logging.getLevelName(verbosity.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown verbosity: {verbosity}")
    return level


def init_logging(verbosity: int | str = logging.DEBUG) -> logging.Logger:
    """Configure the root logger, hiding noise from third-party libraries."""
    level = _resolve_level(verbosity)
    root = logging.getLogger()
    for handler in [h for h in root.handlers if h.name == HANDLER_NAME]:
        root.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.name = HANDLER_NAME
    handler.addFilter(_ExcludeFilter(EXCLUDED_LOGGERS))
    handler.setFormatter(logging.Formatter("%(levelname)-5s %(message)s"))
    root.addHandler(handler)
    root.setLevel(level)
    return root