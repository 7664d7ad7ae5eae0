"""Shared, deterministic timestamps for tests."""

from datetime import UTC, datetime, timedelta


# Fixed "now" so report ages are deterministic across environments.
FIXED_NOW = datetime(2017, 6, 13, 0, 0, 0, tzinfo=UTC)


def report_timestamp(age: timedelta, now: datetime = FIXED_NOW) -> str:
    """Render a PuppetDB report timestamp ``age`` before ``now``."""
    return (now - age).strftime("%Y-%m-%dT%H:%M:%SZ")
