"""File system helpers."""

import logging
import os
from pathlib import Path

from pura.logs import TRACE

logger = logging.getLogger(__name__)


def create_parent_dir(path: str | os.PathLike) -> Path:
    """Create the parent directory of a path if it does not exist and return it."""
    directory = Path(path).parent
    if not directory.exists():
        logger.log(TRACE, "Creating directory: %s", directory)
        directory.mkdir(parents=True, exist_ok=True)
    return directory