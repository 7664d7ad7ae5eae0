"""Unit tests for gauge label helpers."""

import pytest

from src.exporter.labels import category_family, deactivated_label, format_metric_name


class TestFormatMetricName:
    """Tests for format_metric_name."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("total", "Total"),
            ("config_retrieval", "Config retrieval"),
            ("out_of_sync", "Out of sync"),
            ("fact generation", "Fact Generation"),
            ("  changed   resources ", "Changed Resources"),
            ("Failed", "Failed"),
            ("file_bucket", "File bucket"),
        ],
    )
    def test_formats_names(self, raw: str, expected: str) -> None:
        """Names are title-cased per word with underscores as spaces."""
        assert format_metric_name(raw) == expected


class TestLabelHelpers:
    """Tests for small label helpers."""

    def test_deactivated_label(self) -> None:
        """Deactivation renders as true/false."""
        assert deactivated_label(True) == "true"
        assert deactivated_label(False) == "false"

    def test_category_family(self) -> None:
        """Category families are prefixed with report_."""
        assert category_family("resources") == "report_resources"
