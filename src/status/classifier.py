"""Unreported-node classification.

Turns one node's latest report metadata into a Classification. The
rules are evaluated in a fixed order and the first one that matches
decides the reason; later rules are still evaluated but never replace
an existing reason:

1. blank report timestamp
2. unparsable report timestamp
3. report timestamp older than the unreported threshold
4. empty report status

A node matching none of the rules keeps its raw report status.
Deactivation does not take part in classification.
"""

from datetime import UTC, datetime, timedelta

from src.config.durations import format_duration
from src.puppetdb.models import Node
from src.status.models import (
    REASON_BLANK_TIMESTAMP,
    REASON_INVALID_TIMESTAMP,
    REASON_STALE_TIMESTAMP,
    REASON_UNREPORTED_STATUS,
    REPORT_TIMESTAMP_FORMAT,
    REPORT_TIMESTAMP_PATTERN,
    UNREPORTED_STATUS,
    Classification,
)


def parse_report_timestamp(value: str) -> datetime | None:
    """Parse a PuppetDB report timestamp.

    Accepts ``YYYY-MM-DDTHH:MM:SSZ`` with two-digit fields, optionally with
    up to nine fractional second digits directly after the seconds field.
    Fractions are truncated to microseconds.

    Args:
        value: Raw timestamp string.

    Returns:
        Timezone-aware UTC datetime, or None if the value does not parse.
    """
    match = REPORT_TIMESTAMP_PATTERN.fullmatch(value)
    if match is None:
        return None
    try:
        parsed = datetime.strptime(match.group(1), REPORT_TIMESTAMP_FORMAT)
    except ValueError:
        return None
    fraction = match.group(2) or ""
    return parsed.replace(
        microsecond=int(fraction[:6].ljust(6, "0")), tzinfo=UTC
    )


def stale_reason(threshold: timedelta) -> str:
    """Reason text for a report older than ``threshold``."""
    return REASON_STALE_TIMESTAMP.format(threshold=format_duration(threshold))


def classify(
    node: Node,
    unreported_threshold: timedelta,
    now: datetime,
) -> Classification:
    """Classify a node's latest report.

    Args:
        node: Node with its latest report metadata.
        unreported_threshold: Maximum age of a report before the node
            counts as unreported.
        now: Current time (timezone-aware).

    Returns:
        The node's classification.
    """
    unreported = False
    reason = ""

    if not node.report_timestamp:
        reason = REASON_BLANK_TIMESTAMP
        unreported = True

    report_time = parse_report_timestamp(node.report_timestamp)
    if report_time is None:
        if not unreported:
            reason = REASON_INVALID_TIMESTAMP
        unreported = True

    # A missing timestamp is infinitely old
    if report_time is None or now - report_time > unreported_threshold:
        if not unreported:
            reason = stale_reason(unreported_threshold)
        unreported = True
    elif not node.latest_report_status:
        if not unreported:
            reason = REASON_UNREPORTED_STATUS
        unreported = True

    return Classification(
        status_label=UNREPORTED_STATUS if unreported else node.latest_report_status,
        unreported=unreported,
        reason=reason,
        report_time=report_time,
    )
