"""Unit tests for unreported-node classification."""

from datetime import UTC, datetime, timedelta

from src.status.classifier import classify, parse_report_timestamp, stale_reason
from src.status.models import (
    REASON_BLANK_TIMESTAMP,
    REASON_INVALID_TIMESTAMP,
    REASON_UNREPORTED_STATUS,
    UNREPORTED_STATUS,
)
from tests.helpers.factories import make_node
from tests.helpers.time import FIXED_NOW


THRESHOLD = timedelta(hours=2)


class TestParseReportTimestamp:
    """Tests for parse_report_timestamp."""

    def test_parses_fixed_layout(self) -> None:
        """Fixed layout parses to an aware UTC datetime."""
        parsed = parse_report_timestamp("2017-06-12T22:30:05Z")

        assert parsed == datetime(2017, 6, 12, 22, 30, 5, tzinfo=UTC)

    def test_accepts_fractional_seconds(self) -> None:
        """Fractional seconds after the seconds field are accepted."""
        parsed = parse_report_timestamp("2017-06-12T22:30:05.250Z")

        assert parsed == datetime(2017, 6, 12, 22, 30, 5, 250000, tzinfo=UTC)

    def test_accepts_nanosecond_fractions(self) -> None:
        """Up to nine fraction digits parse, truncated to microseconds."""
        parsed = parse_report_timestamp("2017-06-12T22:30:05.123456789Z")

        assert parsed == datetime(2017, 6, 12, 22, 30, 5, 123456, tzinfo=UTC)

    def test_rejects_single_digit_fields(self) -> None:
        """Every field must have its full width."""
        assert parse_report_timestamp("2017-6-12T2:30:05Z") is None
        assert parse_report_timestamp("2017-06-12T22:30:5Z") is None
        assert parse_report_timestamp("17-06-12T22:30:05Z") is None

    def test_rejects_malformed_fractions(self) -> None:
        """Empty or overlong fractions do not parse."""
        assert parse_report_timestamp("2017-06-12T22:30:05.Z") is None
        assert parse_report_timestamp("2017-06-12T22:30:05.1234567890Z") is None

    def test_rejects_out_of_range_fields(self) -> None:
        """Well-formed but impossible dates do not parse."""
        assert parse_report_timestamp("2017-13-12T22:30:05Z") is None
        assert parse_report_timestamp("2017-06-12T25:30:05Z") is None

    def test_rejects_other_layouts(self) -> None:
        """Layouts other than the fixed one do not parse."""
        assert parse_report_timestamp("2017-06-12 22:30:05") is None
        assert parse_report_timestamp("2017-06-12T22:30:05+00:00") is None
        assert parse_report_timestamp("yesterday") is None

    def test_blank_is_none(self) -> None:
        """Blank strings do not parse."""
        assert parse_report_timestamp("") is None


class TestClassify:
    """Tests for classify()."""

    def test_blank_timestamp(self) -> None:
        """Blank timestamp is unreported with the blank reason."""
        node = make_node(age=None)

        result = classify(node, THRESHOLD, FIXED_NOW)

        assert result.unreported is True
        assert result.status_label == UNREPORTED_STATUS
        assert result.reason == REASON_BLANK_TIMESTAMP
        assert result.report_time is None
        assert result.report_epoch_seconds == 0.0

    def test_blank_timestamp_with_empty_status_keeps_first_reason(self) -> None:
        """A blank timestamp wins over an empty status."""
        node = make_node(age=None, status="")

        result = classify(node, THRESHOLD, FIXED_NOW)

        assert result.reason == REASON_BLANK_TIMESTAMP

    def test_invalid_timestamp(self) -> None:
        """Unparsable timestamp is unreported with the invalid reason."""
        node = make_node(timestamp="13/06/2017 00:00")

        result = classify(node, THRESHOLD, FIXED_NOW)

        assert result.unreported is True
        assert result.status_label == UNREPORTED_STATUS
        assert result.reason == REASON_INVALID_TIMESTAMP
        assert result.report_epoch_seconds == 0.0

    def test_stale_timestamp(self) -> None:
        """A report one second past the threshold is stale."""
        node = make_node(age=THRESHOLD + timedelta(seconds=1))

        result = classify(node, THRESHOLD, FIXED_NOW)

        assert result.unreported is True
        assert result.status_label == UNREPORTED_STATUS
        assert result.reason == "Latest timestamp older than 2h0m0s"
        assert result.report_time == FIXED_NOW - THRESHOLD - timedelta(seconds=1)

    def test_report_exactly_at_threshold_is_fresh(self) -> None:
        """Staleness requires the report to be strictly older than the threshold."""
        node = make_node(age=THRESHOLD, status="unchanged")

        result = classify(node, THRESHOLD, FIXED_NOW)

        assert result.unreported is False
        assert result.status_label == "unchanged"

    def test_stale_timestamp_wins_over_empty_status(self) -> None:
        """Stale reason is kept even though the status is also empty."""
        node = make_node(age=timedelta(days=3), status="")

        result = classify(node, THRESHOLD, FIXED_NOW)

        assert result.reason == stale_reason(THRESHOLD)

    def test_fresh_report_with_empty_status(self) -> None:
        """Fresh report without status is unreported."""
        node = make_node(age=timedelta(minutes=5), status="")

        result = classify(node, THRESHOLD, FIXED_NOW)

        assert result.unreported is True
        assert result.status_label == UNREPORTED_STATUS
        assert result.reason == REASON_UNREPORTED_STATUS

    def test_fresh_report_keeps_status(self) -> None:
        """Fresh report with a status is reported under that status."""
        node = make_node(age=timedelta(0), status="changed")

        result = classify(node, THRESHOLD, FIXED_NOW)

        assert result.unreported is False
        assert result.status_label == "changed"
        assert result.reason == ""
        assert result.report_epoch_seconds == FIXED_NOW.timestamp()

    def test_deactivated_node_is_classified_identically(self) -> None:
        """Deactivation does not change the classification."""
        active = make_node(age=timedelta(days=1))
        deactivated = make_node(
            age=timedelta(days=1), deactivated="2017-06-01T00:00:00.000Z"
        )

        assert classify(active, THRESHOLD, FIXED_NOW) == classify(
            deactivated, THRESHOLD, FIXED_NOW
        )

    def test_failed_status_is_passed_through(self) -> None:
        """Raw report statuses other than changed/unchanged are kept."""
        node = make_node(status="failed")

        result = classify(node, THRESHOLD, FIXED_NOW)

        assert result.status_label == "failed"
        assert result.unreported is False

    def test_single_digit_fields_are_invalid(self) -> None:
        """Timestamps that do not use the full-width layout are invalid."""
        node = make_node(timestamp="2017-6-12T2:30:05Z")

        result = classify(node, THRESHOLD, FIXED_NOW)

        assert result.unreported is True
        assert result.reason == REASON_INVALID_TIMESTAMP

    def test_largest_threshold_does_not_overflow(self) -> None:
        """The largest configurable threshold keeps old reports fresh."""
        node = make_node(timestamp="1917-06-13T00:00:00Z", status="changed")

        result = classify(node, timedelta(hours=2562047), FIXED_NOW)

        assert result.unreported is False

    def test_far_future_report_does_not_overflow(self) -> None:
        """A report from the far future is fresh."""
        node = make_node(timestamp="9999-12-31T23:59:59Z", status="changed")

        result = classify(node, THRESHOLD, FIXED_NOW)

        assert result.unreported is False
        assert result.status_label == "changed"


class TestStaleReason:
    """Tests for the stale reason text."""

    def test_renders_threshold_in_duration_notation(self) -> None:
        """Threshold is rendered like the configured duration."""
        assert stale_reason(timedelta(minutes=90)) == (
            "Latest timestamp older than 1h30m0s"
        )
