"""HTTP client for the PuppetDB query API."""

import ssl
import time
from pathlib import Path
from types import TracebackType
from typing import Annotated, Self

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from src.config.constants import COMPONENT_PUPPETDB
from src.config.models import ExporterConfig
from src.puppetdb.errors import (
    PuppetDBConnectionError,
    PuppetDBDecodeError,
    PuppetDBResponseError,
)
from src.puppetdb.models import Node, ReportMetric


logger = structlog.get_logger()

NODES_PATH = "/v4/nodes"
REPORT_METRICS_PATH = "/v4/reports/{report_hash}/metrics"

_NODES_ADAPTER = TypeAdapter(list[Node])
_REPORT_METRICS_ADAPTER = TypeAdapter(list[ReportMetric])


class PuppetDBOptions(BaseModel):
    """Connection options for the PuppetDB client."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: Annotated[str, Field(min_length=1)]
    cert_file: Path | None = None
    key_file: Path | None = None
    ca_file: Path | None = None
    ssl_skip_verify: bool = False
    timeout_seconds: Annotated[float, Field(gt=0.0)] = 30.0

    @classmethod
    def from_config(cls, config: ExporterConfig) -> "PuppetDBOptions":
        """Build client options from the effective exporter configuration."""
        return cls(
            url=config.puppetdb_url,
            cert_file=config.cert_file,
            key_file=config.key_file,
            ca_file=config.ca_file,
            ssl_skip_verify=config.ssl_skip_verify,
            timeout_seconds=config.request_timeout_seconds,
        )

    def build_verify(self) -> ssl.SSLContext | bool:
        """Build the TLS verification setting for httpx.

        Returns:
            ``True`` for default verification, otherwise an SSL context
            carrying the CA bundle, the client certificate, or both.
        """
        if not (self.ssl_skip_verify or self.ca_file or self.cert_file):
            return True

        context = ssl.create_default_context(
            cafile=str(self.ca_file) if self.ca_file else None
        )
        if self.ssl_skip_verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        if self.cert_file and self.key_file:
            context.load_cert_chain(str(self.cert_file), str(self.key_file))
        return context


class PuppetDBClient:
    """Thin PuppetDB query API client.

    Provides the two queries the exporter needs:
    - all nodes with their latest report metadata
    - the metrics of a single report

    Every failure is raised as a PuppetDBError subclass.
    """

    def __init__(
        self,
        options: PuppetDBOptions,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            options: Connection options.
            transport: Optional httpx transport (used by tests).
        """
        self._options = options
        self._client = httpx.Client(
            base_url=options.url,
            timeout=options.timeout_seconds,
            verify=options.build_verify(),
            headers={"Accept": "application/json"},
            transport=transport,
        )
        self._log = logger.bind(component=COMPONENT_PUPPETDB)

    def list_nodes(self) -> list[Node]:
        """Fetch all nodes.

        Returns:
            Nodes in the order PuppetDB returned them.

        Raises:
            PuppetDBError: If the request or decoding fails.
        """
        payload = self._get_json(NODES_PATH)
        url = self._url(NODES_PATH)
        try:
            return _NODES_ADAPTER.validate_python(payload)
        except ValidationError as e:
            raise PuppetDBDecodeError(url, f"invalid node list: {e}") from e

    def list_report_metrics(self, report_hash: str) -> list[ReportMetric]:
        """Fetch the metrics of one report.

        Args:
            report_hash: Hash of the report, as found on the node.

        Returns:
            Report metrics.

        Raises:
            PuppetDBError: If the request or decoding fails.
        """
        path = REPORT_METRICS_PATH.format(report_hash=report_hash)
        payload = self._get_json(path)
        try:
            return _REPORT_METRICS_ADAPTER.validate_python(payload)
        except ValidationError as e:
            raise PuppetDBDecodeError(
                self._url(path), f"invalid report metrics: {e}"
            ) from e

    def _url(self, path: str) -> str:
        return f"{self._options.url}{path}"

    def _get_json(self, path: str) -> object:
        """Issue a GET request and decode the JSON array body.

        Args:
            path: Path relative to the configured base URL.

        Returns:
            Decoded JSON array.

        Raises:
            PuppetDBConnectionError: On transport failures.
            PuppetDBResponseError: On non-2xx responses.
            PuppetDBDecodeError: If the body is not a JSON array.
        """
        url = self._url(path)
        start_time_ns = time.perf_counter_ns()

        try:
            response = self._client.get(path)
        except httpx.HTTPError as e:
            self._log.warning("puppetdb_request_failed", url=url, error=str(e))
            raise PuppetDBConnectionError(url, str(e)) from e

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        self._log.debug(
            "puppetdb_request_complete",
            url=url,
            status_code=response.status_code,
            bytes=len(response.content),
            duration_ms=round(duration_ms, 2),
        )

        if not response.is_success:
            raise PuppetDBResponseError(url, response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise PuppetDBDecodeError(url, f"body is not JSON: {e}") from e

        if not isinstance(payload, list):
            raise PuppetDBDecodeError(
                url, f"expected a JSON array, got {type(payload).__name__}"
            )
        return payload

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
