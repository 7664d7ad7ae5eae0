"""Gauge family names, label schemas and label value helpers."""

import re


STATUS_COUNT_FAMILY = "node_report_status_count"
REPORT_FAMILY = "report"
REPORT_CATEGORY_FAMILY = "report_{category}"

# Exposed metric name prefixes
STATUS_COUNT_NAMESPACE = "puppetdb"
REPORT_NAMESPACE = "puppet"

STATUS_COUNT_LABELS: tuple[str, ...] = ("status",)
REPORT_LABELS: tuple[str, ...] = (
    "environment",
    "host",
    "deactivated",
    "status",
    "reason",
)
REPORT_METRIC_LABELS: tuple[str, ...] = ("name", *REPORT_LABELS)

_WORD_START = re.compile(r"(^|[^0-9A-Za-z_])([a-z])")


def category_family(category: str) -> str:
    """Registry key of the gauge family for a report metric category."""
    return REPORT_CATEGORY_FAMILY.format(category=category)


def deactivated_label(deactivated: bool) -> str:
    """Label value of the ``deactivated`` label."""
    return "true" if deactivated else "false"


def format_metric_name(name: str) -> str:
    """Turn a report metric name into its ``name`` label value.

    Upper-cases the first letter of each word (words are runs of letters,
    digits and underscores), replaces underscores with spaces and collapses
    whitespace: ``"config_retrieval"`` becomes ``"Config retrieval"``.

    Args:
        name: Raw metric name from the report.

    Returns:
        Display name.
    """
    titled = _WORD_START.sub(lambda m: m.group(1) + m.group(2).upper(), name)
    return " ".join(titled.replace("_", " ").split())
