"""Protocols for the inventory service consumed by the exporter."""

from typing import Protocol

from src.puppetdb.models import Node, ReportMetric


class InventoryClient(Protocol):
    """Read-only view of the inventory service.

    Implementations raise ``PuppetDBError`` (or a subclass) on failure.
    """

    def list_nodes(self) -> list[Node]:
        """Return every node known to the inventory service."""
        ...

    def list_report_metrics(self, report_hash: str) -> list[ReportMetric]:
        """Return the metrics of the report identified by ``report_hash``."""
        ...
