"""Models for node report status classification."""

import math
import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, model_validator


UNREPORTED_STATUS = "unreported"

# Layout of PuppetDB report timestamps, e.g. 2024-05-01T12:30:00Z, with
# optional fractional seconds of up to nanosecond precision
REPORT_TIMESTAMP_PATTERN = re.compile(
    r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d{1,9}))?Z",
    re.ASCII,
)
REPORT_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Unreported reasons, in evaluation order
REASON_BLANK_TIMESTAMP = "Timestamp string is blank"
REASON_INVALID_TIMESTAMP = "Invalid time parsed"
REASON_STALE_TIMESTAMP = "Latest timestamp older than {threshold}"
REASON_UNREPORTED_STATUS = "Unreported status"


class Classification(BaseModel):
    """Derived report status of a single node.

    Attributes:
        status_label: The node's raw report status, or ``"unreported"``.
        unreported: Whether no usable, fresh report exists.
        reason: Reason of the first unreported rule that matched; empty
            when the node is reported.
        report_time: Parsed report timestamp, None when blank or invalid.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_label: str
    unreported: bool
    reason: str = ""
    report_time: datetime | None = None

    @model_validator(mode="after")
    def validate_reason(self) -> "Classification":
        """Ensure a reason is present exactly when the node is unreported."""
        if self.unreported != bool(self.reason):
            msg = "reason must be set if and only if the node is unreported"
            raise ValueError(msg)
        if self.unreported and self.status_label != UNREPORTED_STATUS:
            msg = f"unreported nodes must carry the {UNREPORTED_STATUS!r} status"
            raise ValueError(msg)
        return self

    @property
    def report_epoch_seconds(self) -> float:
        """Report time as whole Unix seconds, 0 when the timestamp was unusable."""
        if self.report_time is None:
            return 0.0
        return float(math.floor(self.report_time.timestamp()))
