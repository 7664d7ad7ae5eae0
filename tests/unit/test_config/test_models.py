"""Unit tests for exporter configuration."""

from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from src.config.error_hints import format_validation_error, get_error_hint
from src.config.errors import ConfigError
from src.config.loader import load_config
from src.config.models import ExporterConfig, parse_categories
from src.settings.app import AppSettings


class TestExporterConfig:
    """Tests for ExporterConfig validation."""

    def test_defaults(self) -> None:
        """Defaults match the documented flag defaults."""
        config = ExporterConfig()

        assert config.puppetdb_url == "https://puppetdb:8081/pdb/query"
        assert config.scrape_interval == timedelta(seconds=5)
        assert config.unreported_threshold == timedelta(hours=2)
        assert config.categories == frozenset(
            {"resources", "time", "changes", "events"}
        )
        assert config.listen_host == "0.0.0.0"  # noqa: S104
        assert config.listen_port == 9635
        assert config.metrics_path == "/metrics"
        assert config.verbose is False

    def test_duration_strings_are_parsed(self) -> None:
        """Durations may be given as strings."""
        config = ExporterConfig(scrape_interval="1m", unreported_threshold="90m")

        assert config.scrape_interval == timedelta(minutes=1)
        assert config.unreported_threshold == timedelta(minutes=90)

    def test_invalid_duration_is_rejected(self) -> None:
        """Malformed durations fail validation."""
        with pytest.raises(ValidationError):
            ExporterConfig(unreported_threshold="two hours")

    def test_negative_interval_is_rejected(self) -> None:
        """Negative scrape intervals fail validation."""
        with pytest.raises(ValidationError):
            ExporterConfig(scrape_interval="-5s")

    def test_categories_from_string(self) -> None:
        """Comma-separated categories are split and stripped."""
        config = ExporterConfig(categories=" time, resources,,")

        assert config.categories == frozenset({"time", "resources"})

    def test_empty_categories_rejected(self) -> None:
        """An empty category set fails validation."""
        with pytest.raises(ValidationError):
            ExporterConfig(categories=" , ")

    def test_url_scheme_is_checked(self) -> None:
        """Only HTTP and HTTPS URLs are accepted."""
        with pytest.raises(ValidationError):
            ExporterConfig(puppetdb_url="ftp://puppetdb")

    def test_url_trailing_slash_is_stripped(self) -> None:
        """Trailing slashes are removed from the URL."""
        config = ExporterConfig(puppetdb_url="http://puppetdb:8080/pdb/query/")

        assert config.puppetdb_url == "http://puppetdb:8080/pdb/query"

    def test_cert_requires_key(self, tmp_path: Path) -> None:
        """A client certificate without key fails validation."""
        with pytest.raises(ValidationError):
            ExporterConfig(cert_file=tmp_path / "cert.pem")

    @pytest.mark.parametrize("address", ["9635", "host:", "host:99999", "host:port"])
    def test_invalid_listen_address(self, address: str) -> None:
        """Listen addresses must be host:port."""
        with pytest.raises(ValidationError):
            ExporterConfig(listen_address=address)

    def test_listen_address_with_host(self) -> None:
        """Host and port are split from the listen address."""
        config = ExporterConfig(listen_address="127.0.0.1:9100")

        assert config.listen_host == "127.0.0.1"
        assert config.listen_port == 9100

    def test_metrics_path_must_be_absolute(self) -> None:
        """Metrics path must start with a slash."""
        with pytest.raises(ValidationError):
            ExporterConfig(metrics_path="metrics")

    def test_display_dict_uses_duration_notation(self) -> None:
        """Display dict renders durations and sorted categories."""
        config = ExporterConfig(unreported_threshold="90m", categories="time,events")

        display = config.to_display_dict()

        assert display["unreported_threshold"] == "1h30m0s"
        assert display["scrape_interval"] == "5s"
        assert display["categories"] == ["events", "time"]

    def test_frozen(self) -> None:
        """Configuration is immutable."""
        config = ExporterConfig()

        with pytest.raises(ValidationError):
            config.verbose = True  # type: ignore[misc]


class TestParseCategories:
    """Tests for parse_categories."""

    def test_iterable(self) -> None:
        """Iterables are accepted."""
        assert parse_categories(["time", " time ", "events"]) == frozenset(
            {"time", "events"}
        )


class TestLoadConfig:
    """Tests for load_config precedence and error reporting."""

    def test_settings_are_applied(self) -> None:
        """Environment settings override defaults."""
        settings = AppSettings(
            _env_file=None,
            PUPPETDB_URL="http://puppetdb:8080/pdb/query",
            PUPPETDB_EXPORTER_CATEGORIES="time",
        )

        config = load_config(settings=settings)

        assert config.puppetdb_url == "http://puppetdb:8080/pdb/query"
        assert config.categories == frozenset({"time"})

    def test_overrides_win_over_settings(self) -> None:
        """CLI overrides take precedence over settings."""
        settings = AppSettings(_env_file=None, PUPPETDB_EXPORTER_UNREPORTED_NODE="1h")

        config = load_config(
            settings=settings, overrides={"unreported_threshold": "30m"}
        )

        assert config.unreported_threshold == timedelta(minutes=30)

    def test_none_overrides_are_ignored(self) -> None:
        """None values never override settings."""
        settings = AppSettings(_env_file=None, PUPPETDB_EXPORTER_SCRAPE_INTERVAL="1m")

        config = load_config(settings=settings, overrides={"scrape_interval": None})

        assert config.scrape_interval == timedelta(minutes=1)

    def test_environment_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Settings are read from environment variables."""
        monkeypatch.setenv("PUPPETDB_EXPORTER_CATEGORIES", "resources")
        monkeypatch.setenv("PUPPETDB_SSL_SKIP_VERIFY", "true")

        settings = AppSettings(_env_file=None)

        assert settings.categories == "resources"
        assert settings.ssl_skip_verify is True

    def test_invalid_config_raises_config_error(self) -> None:
        """Validation failures are reported as ConfigError with details."""
        with pytest.raises(ConfigError) as exc_info:
            load_config(overrides={"unreported_threshold": "soon"})

        errors = exc_info.value.errors
        assert len(errors) == 1
        assert errors[0]["loc"] == "unreported_threshold"
        assert "invalid duration" in errors[0]["msg"]

    @pytest.mark.parametrize("threshold", ["99999999999999h", "2562048h"])
    def test_out_of_range_threshold_raises_config_error(self, threshold: str) -> None:
        """Thresholds beyond the duration range are configuration errors."""
        with pytest.raises(ConfigError) as exc_info:
            load_config(overrides={"unreported_threshold": threshold})

        assert exc_info.value.errors[0]["loc"] == "unreported_threshold"


class TestErrorHints:
    """Tests for configuration error hints."""

    def test_field_hint(self) -> None:
        """Field-specific hints take precedence."""
        hint = get_error_hint("value_error", "unreported_threshold")

        assert "duration" in hint

    def test_format_with_hint(self) -> None:
        """Formatted errors include the hint on a second line."""
        formatted = format_validation_error(
            location="categories",
            message="Value error, at least one report metric category is required",
            error_type="value_error",
        )

        assert formatted.startswith("categories: Value error")
        assert "Hint: Use a comma-separated list" in formatted

    def test_format_without_hint(self) -> None:
        """Hints can be omitted."""
        formatted = format_validation_error(
            location="metrics_path",
            message="bad",
            error_type="value_error",
            include_hint=False,
        )

        assert formatted == "metrics_path: bad"
