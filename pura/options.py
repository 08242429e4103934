"""Application options read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from pura.episode import _parse_url


@dataclass
class AppOptions:
    """Directories, server base and expected network identity."""

    cache_dir: Path | None = None
    output_dir: Path | None = None
    server_base: str | None = None
    expect_ip: str | None = None
    expect_country: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppOptions:
        """Read options from environment variables; empty values count as unset."""
        env = os.environ if environ is None else environ

        def read(name: str) -> str | None:
            value = env.get(name)
            return value if value else None

        cache_dir = read("CACHE_DIR")
        output_dir = read("OUTPUT_DIR")
        server_base = read("SERVER_BASE")
        if server_base is not None:
            try:
                server_base = _parse_url(server_base)
            except ValueError as error:
                raise ValueError(f"Invalid SERVER_BASE: {error}") from error
        return cls(
            cache_dir=Path(cache_dir) if cache_dir else None,
            output_dir=Path(output_dir) if output_dir else None,
            server_base=server_base,
            expect_ip=read("EXPECT_IP"),
            expect_country=read("EXPECT_COUNTRY"),
        )

    def validate(self) -> None:
        """Check the configured directories, raising ValidationErrors on failure."""
        from pura.paths import PathProvider

        PathProvider(self).validate()