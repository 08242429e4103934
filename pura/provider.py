"""Build the services that the commands share."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from pura.http import HttpClient
from pura.ipinfo import IpInfoProvider
from pura.options import AppOptions
from pura.paths import PathProvider
from pura.podcasts import PodcastProvider
from pura.validation import ValidationError, ValidationErrors


class ServiceError(Exception):
    """The services could not be set up."""

    def __init__(
        self,
        action: str,
        reason: str,
        errors: list[ValidationError] | None = None,
    ) -> None:
        self.action = action
        self.reason = reason
        self.errors = errors or []
        super().__init__(f"Failed to {action}\n{reason}")


@dataclass
class ServiceProvider:
    """Options, paths, HTTP client and podcast store, validated together."""

    options: AppOptions
    paths: PathProvider
    http: HttpClient
    podcasts: PodcastProvider

    @classmethod
    def create(cls, environ: Mapping[str, str] | None = None) -> ServiceProvider:
        """Read the configuration, validate it and check the network identity."""
        try:
            options = AppOptions.from_env(environ)
        except ValueError as error:
            raise ServiceError("read config", str(error)) from error
        try:
            options.validate()
        except ValidationErrors as errors:
            raise ServiceError("validate config", str(errors), list(errors)) from errors
        paths = PathProvider(options)
        http = HttpClient(paths.http_dir())
        try:
            IpInfoProvider(options, http).validate()
        except ValidationErrors as errors:
            raise ServiceError("validate IP", str(errors), list(errors)) from errors
        podcasts = PodcastProvider(paths.podcast_dir())
        return cls(options=options, paths=paths, http=http, podcasts=podcasts)