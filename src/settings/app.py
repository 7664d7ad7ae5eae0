"""Application settings powered by Pydantic BaseSettings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Centralized environment configuration.

    Every field is optional; unset values fall back to the defaults of
    ``ExporterConfig``. Durations and categories are kept as raw strings
    and validated when the effective configuration is assembled.
    """

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    puppetdb_url: str | None = Field(default=None, validation_alias="PUPPETDB_URL")
    cert_file: str | None = Field(default=None, validation_alias="PUPPETDB_CERT_FILE")
    key_file: str | None = Field(default=None, validation_alias="PUPPETDB_KEY_FILE")
    ca_file: str | None = Field(default=None, validation_alias="PUPPETDB_CA_FILE")
    ssl_skip_verify: bool | None = Field(
        default=None, validation_alias="PUPPETDB_SSL_SKIP_VERIFY"
    )
    scrape_interval: str | None = Field(
        default=None, validation_alias="PUPPETDB_EXPORTER_SCRAPE_INTERVAL"
    )
    unreported_threshold: str | None = Field(
        default=None, validation_alias="PUPPETDB_EXPORTER_UNREPORTED_NODE"
    )
    categories: str | None = Field(
        default=None, validation_alias="PUPPETDB_EXPORTER_CATEGORIES"
    )
    listen_address: str | None = Field(
        default=None, validation_alias="PUPPETDB_EXPORTER_LISTEN_ADDRESS"
    )
    metrics_path: str | None = Field(
        default=None, validation_alias="PUPPETDB_EXPORTER_METRICS_PATH"
    )
    verbose: bool | None = Field(default=None, validation_alias="PUPPETDB_EXPORTER_VERBOSE")

    def as_config_values(self) -> dict[str, object]:
        """Return the settings that were actually provided."""
        return {k: v for k, v in self.model_dump().items() if v is not None}


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
