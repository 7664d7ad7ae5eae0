"""Node report status classification.

This module provides:
- classify() deriving the effective status and unreported reason of a node
- Classification, the immutable result of classify()
- The reason texts used in the ``reason`` label of exported gauges
"""

from src.status.classifier import classify, parse_report_timestamp, stale_reason
from src.status.models import (
    REASON_BLANK_TIMESTAMP,
    REASON_INVALID_TIMESTAMP,
    REASON_UNREPORTED_STATUS,
    UNREPORTED_STATUS,
    Classification,
)


__all__ = [
    "REASON_BLANK_TIMESTAMP",
    "REASON_INVALID_TIMESTAMP",
    "REASON_UNREPORTED_STATUS",
    "UNREPORTED_STATUS",
    "Classification",
    "classify",
    "parse_report_timestamp",
    "stale_reason",
]
