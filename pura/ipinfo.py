"""Check the external IP address and its geolocated country."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pura.http import HttpClient, HttpError
from pura.options import AppOptions
from pura.paths import JSON_EXTENSION
from pura.validation import (
    StringValidationError,
    ValidationError,
    ValidationErrors,
    expect_equal,
)

IPINFO_URL = "https://ipinfo.io"


@dataclass
class IpInfo:
    """What the lookup service reports about the current connection."""

    ip: str
    hostname: str
    city: str
    region: str
    country: str
    loc: str
    org: str
    postal: str
    timezone: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IpInfo:
        return cls(
            ip=str(data["ip"]),
            hostname=str(data["hostname"]),
            city=str(data["city"]),
            region=str(data["region"]),
            country=str(data["country"]),
            loc=str(data["loc"]),
            org=str(data["org"]),
            postal=str(data["postal"]),
            timezone=str(data["timezone"]),
        )

    def __str__(self) -> str:
        return f"{self.ip} ({self.city}, {self.region}, {self.country})"


class IpInfoProvider:
    """Compare the current IP address and country with the expected ones."""

    def __init__(
        self, options: AppOptions | None = None, http: HttpClient | None = None
    ) -> None:
        self.options = options if options is not None else AppOptions()
        self.http = http if http is not None else HttpClient()

    def _get(self) -> IpInfo:
        self.http.remove(IPINFO_URL, JSON_EXTENSION)
        data = self.http.get_json(IPINFO_URL)
        try:
            return IpInfo.from_dict(data)
        except (KeyError, TypeError) as error:
            path = self.http.cache_path(IPINFO_URL, JSON_EXTENSION)
            raise HttpError(
                f"A deserialization error occurred.\nPath: {path}\n{error}",
                url=IPINFO_URL,
                path=path,
            ) from error

    def validate(self) -> None:
        """Raise ValidationErrors if the connection is not the expected one."""
        if self.options.expect_ip is None and self.options.expect_country is None:
            return
        try:
            info = self._get()
        except HttpError as error:
            raise ValidationErrors([ValidationError(None, str(error))]) from error
        errors = ValidationErrors()
        checks = (
            ("IP address", self.options.expect_ip, info.ip),
            ("Geolocated country", self.options.expect_country, info.country),
        )
        for name, expected, actual in checks:
            if expected is None:
                continue
            try:
                expect_equal(name, expected, actual)
            except StringValidationError as error:
                errors.append(error)
        errors.raise_if_any()