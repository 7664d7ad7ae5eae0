"""Data models for PuppetDB query responses."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Node(BaseModel):
    """A managed host as returned by the PuppetDB ``nodes`` endpoint.

    Only the fields the exporter consumes are modelled; anything else in
    the response is ignored. JSON nulls become empty strings so that
    "missing" and "empty" are handled by the same classification rules.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    certname: Annotated[str, Field(min_length=1)]
    deactivated: str | None = None
    report_environment: str = ""
    report_timestamp: str = ""
    latest_report_status: str = ""
    latest_report_hash: str = ""

    @field_validator(
        "report_environment",
        "report_timestamp",
        "latest_report_status",
        "latest_report_hash",
        mode="before",
    )
    @classmethod
    def null_to_empty(cls, v: object) -> object:
        """Normalise JSON null to an empty string."""
        return "" if v is None else v

    @property
    def is_deactivated(self) -> bool:
        """Whether PuppetDB has marked the node as deactivated."""
        return bool(self.deactivated)


class ReportMetric(BaseModel):
    """A single metric from a report's ``metrics`` endpoint."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    category: str
    name: str
    value: float
