"""PuppetDB query API client and response models."""

from src.puppetdb.client import PuppetDBClient, PuppetDBOptions
from src.puppetdb.errors import (
    PuppetDBConnectionError,
    PuppetDBDecodeError,
    PuppetDBError,
    PuppetDBResponseError,
)
from src.puppetdb.models import Node, ReportMetric
from src.puppetdb.protocols import InventoryClient


__all__ = [
    "InventoryClient",
    "Node",
    "PuppetDBClient",
    "PuppetDBConnectionError",
    "PuppetDBDecodeError",
    "PuppetDBError",
    "PuppetDBOptions",
    "PuppetDBResponseError",
    "ReportMetric",
]
