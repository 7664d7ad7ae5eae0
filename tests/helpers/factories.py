"""Builders for PuppetDB model fixtures."""

from datetime import timedelta

from src.puppetdb.models import Node, ReportMetric
from tests.helpers.time import report_timestamp


def make_node(  # noqa: PLR0913
    certname: str = "web01.example.com",
    age: timedelta | None = timedelta(minutes=10),
    status: str = "changed",
    environment: str = "production",
    report_hash: str = "",
    deactivated: str | None = None,
    timestamp: str | None = None,
) -> Node:
    """Create a node whose latest report is ``age`` old.

    ``timestamp`` overrides the rendered timestamp; ``age=None`` gives a
    node without report timestamp.
    """
    if timestamp is None:
        timestamp = report_timestamp(age) if age is not None else ""
    return Node(
        certname=certname,
        deactivated=deactivated,
        report_environment=environment,
        report_timestamp=timestamp,
        latest_report_status=status,
        latest_report_hash=report_hash,
    )


def make_metric(category: str, name: str, value: float) -> ReportMetric:
    """Create a report metric."""
    return ReportMetric(category=category, name=name, value=value)
