"""Validated exporter configuration."""

from collections.abc import Iterable
from datetime import timedelta
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.config.constants import (
    DEFAULT_CATEGORIES,
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_METRICS_PATH,
    DEFAULT_PUPPETDB_URL,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_SCRAPE_INTERVAL,
    DEFAULT_UNREPORTED_NODE,
    MAX_PORT,
    VALID_URL_SCHEMES,
)
from src.config.durations import format_duration, parse_duration


def parse_categories(value: str | Iterable[str]) -> frozenset[str]:
    """Parse a category set from a comma-separated string or an iterable.

    Args:
        value: ``"resources,time"`` or an iterable of names.

    Returns:
        Frozen set of stripped, non-empty category names.

    Raises:
        ValueError: If no category remains after stripping.
    """
    items = value.split(",") if isinstance(value, str) else value
    categories = frozenset(item.strip() for item in items if item and item.strip())
    if not categories:
        msg = "at least one report metric category is required"
        raise ValueError(msg)
    return categories


def split_listen_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` into its parts.

    An empty host (``":9635"``) binds all interfaces.

    Args:
        address: Listen address.

    Returns:
        Tuple of (host, port).

    Raises:
        ValueError: If the port is missing or out of range.
    """
    host, sep, port_text = address.rpartition(":")
    if not sep or not port_text.isdigit():
        msg = f"listen address {address!r} must be of the form host:port"
        raise ValueError(msg)
    port = int(port_text)
    if not 0 < port <= MAX_PORT:
        msg = f"listen port {port} is out of range"
        raise ValueError(msg)
    return host.strip("[]") or "0.0.0.0", port  # noqa: S104


class ExporterConfig(BaseModel):
    """Effective configuration for one exporter process.

    Assembled once at startup and immutable for the process lifetime;
    in particular the category set fixes which gauge families exist.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    puppetdb_url: Annotated[str, Field(min_length=1)] = DEFAULT_PUPPETDB_URL
    cert_file: Path | None = None
    key_file: Path | None = None
    ca_file: Path | None = None
    ssl_skip_verify: bool = False
    request_timeout_seconds: Annotated[float, Field(gt=0.0, le=600.0)] = (
        DEFAULT_REQUEST_TIMEOUT_SECONDS
    )
    scrape_interval: timedelta = Field(
        default_factory=lambda: parse_duration(DEFAULT_SCRAPE_INTERVAL)
    )
    unreported_threshold: timedelta = Field(
        default_factory=lambda: parse_duration(DEFAULT_UNREPORTED_NODE)
    )
    categories: frozenset[str] = Field(
        default_factory=lambda: parse_categories(DEFAULT_CATEGORIES)
    )
    listen_address: str = DEFAULT_LISTEN_ADDRESS
    metrics_path: str = DEFAULT_METRICS_PATH
    verbose: bool = False

    @field_validator("puppetdb_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate that the PuppetDB URL uses HTTP or HTTPS."""
        if not v.startswith(VALID_URL_SCHEMES):
            msg = f"URL must start with http:// or https://, got {v!r}"
            raise ValueError(msg)
        return v.rstrip("/")

    @field_validator("scrape_interval", "unreported_threshold", mode="before")
    @classmethod
    def validate_duration(cls, v: object) -> object:
        """Accept Go-style duration strings."""
        if isinstance(v, str):
            return parse_duration(v)
        return v

    @field_validator("scrape_interval")
    @classmethod
    def validate_positive_interval(cls, v: timedelta) -> timedelta:
        """Ensure the scrape interval is not negative."""
        if v < timedelta(0):
            msg = "scrape interval must not be negative"
            raise ValueError(msg)
        return v

    @field_validator("categories", mode="before")
    @classmethod
    def validate_categories(cls, v: object) -> object:
        """Accept a comma-separated category list."""
        if isinstance(v, str | list | tuple | set | frozenset):
            return parse_categories(v)
        return v

    @field_validator("listen_address")
    @classmethod
    def validate_listen_address(cls, v: str) -> str:
        """Ensure the listen address is host:port."""
        split_listen_address(v)
        return v

    @field_validator("metrics_path")
    @classmethod
    def validate_metrics_path(cls, v: str) -> str:
        """Ensure the metrics path is absolute."""
        if not v.startswith("/"):
            msg = f"metrics path must start with '/', got {v!r}"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_client_certificate(self) -> "ExporterConfig":
        """Require client certificate and key to be given together."""
        if (self.cert_file is None) != (self.key_file is None):
            msg = "cert_file and key_file must be provided together"
            raise ValueError(msg)
        return self

    @property
    def listen_host(self) -> str:
        """Host part of the listen address."""
        return split_listen_address(self.listen_address)[0]

    @property
    def listen_port(self) -> int:
        """Port part of the listen address."""
        return split_listen_address(self.listen_address)[1]

    def to_display_dict(self) -> dict[str, str | bool | float | list[str] | None]:
        """Render the configuration for logging and the validate command.

        Returns:
            Dictionary with durations in Go notation and sorted categories.
        """
        return {
            "puppetdb_url": self.puppetdb_url,
            "cert_file": str(self.cert_file) if self.cert_file else None,
            "key_file": str(self.key_file) if self.key_file else None,
            "ca_file": str(self.ca_file) if self.ca_file else None,
            "ssl_skip_verify": self.ssl_skip_verify,
            "request_timeout_seconds": self.request_timeout_seconds,
            "scrape_interval": format_duration(self.scrape_interval),
            "unreported_threshold": format_duration(self.unreported_threshold),
            "categories": sorted(self.categories),
            "listen_address": self.listen_address,
            "metrics_path": self.metrics_path,
            "verbose": self.verbose,
        }
