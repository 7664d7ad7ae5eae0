"""Reconciliation loop: poll PuppetDB and rebuild the gauge families."""

import time
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import structlog

from src.config.constants import COMPONENT_EXPORTER
from src.exporter.gauges import GaugeRegistry, Observation
from src.exporter.labels import (
    REPORT_FAMILY,
    STATUS_COUNT_FAMILY,
    category_family,
    deactivated_label,
    format_metric_name,
)
from src.exporter.metrics import ScrapeMetrics
from src.exporter.state_machine import LoopState, LoopStateMachine
from src.observability.logging import bind_cycle_context, clear_cycle_context
from src.puppetdb.errors import PuppetDBError
from src.puppetdb.models import Node, ReportMetric
from src.puppetdb.protocols import InventoryClient
from src.status.classifier import classify
from src.status.models import UNREPORTED_STATUS, Classification


logger = structlog.get_logger()


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class CycleResult:
    """Outcome of one poll cycle."""

    cycle: int
    nodes_total: int = 0
    unreported_total: int = 0
    statuses: dict[str, int] = field(default_factory=dict)
    observations: dict[str, int] = field(default_factory=dict)
    nodes_fetch_failed: bool = False
    report_metrics_failures: int = 0
    duration_ms: float = 0.0


class ReconciliationLoop:
    """Periodically rebuilds every gauge family from PuppetDB.

    Each cycle fetches all nodes, classifies them, fetches report metrics
    for nodes with a latest report, and then replaces the samples of every
    family. Families are replaced in full, so label combinations that
    disappeared since the previous cycle are dropped.

    Fetch failures never stop the loop: a failed node list yields an empty
    cycle and a failed report metrics fetch yields no metrics for that node.
    """

    def __init__(  # noqa: PLR0913
        self,
        client: InventoryClient,
        gauges: GaugeRegistry,
        interval: timedelta,
        unreported_threshold: timedelta,
        verbose: bool = False,
        clock: Callable[[], datetime] = _utc_now,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the loop.

        Args:
            client: Inventory service client.
            gauges: Gauge registry created at startup.
            interval: Pause between cycles.
            unreported_threshold: Maximum report age before a node is unreported.
            verbose: Log the unreported reason of every unreported node.
            clock: Source of the current time.
            sleep: Sleep function taking seconds.
        """
        self._client = client
        self._gauges = gauges
        self._interval = interval
        self._unreported_threshold = unreported_threshold
        self._verbose = verbose
        self._clock = clock
        self._sleep = sleep
        self._state = LoopStateMachine()
        self._metrics = ScrapeMetrics()
        self._cycle = 0
        self._log = logger.bind(component=COMPONENT_EXPORTER)

    @property
    def state(self) -> LoopState:
        """Current loop state."""
        return self._state.state

    @property
    def metrics(self) -> ScrapeMetrics:
        """Counters of this loop."""
        return self._metrics

    def run(self, max_cycles: int | None = None) -> None:
        """Run poll cycles, sleeping ``interval`` between them.

        Args:
            max_cycles: Stop after this many cycles; run forever when None.
        """
        completed = 0
        self._log.info(
            "reconciliation_loop_started",
            interval_seconds=self._interval.total_seconds(),
            categories=sorted(self._gauges.categories),
        )
        while max_cycles is None or completed < max_cycles:
            self.run_cycle()
            completed += 1
            if max_cycles is None or completed < max_cycles:
                self._sleep(self._interval.total_seconds())

    def run_cycle(self) -> CycleResult:
        """Run a single poll cycle.

        Returns:
            Summary of the cycle.
        """
        self._cycle += 1
        result = CycleResult(cycle=self._cycle)
        start_time_ns = time.perf_counter_ns()

        self._state.to_polling()
        bind_cycle_context(self._cycle)
        try:
            self._log.debug("scrape_cycle_started")
            nodes = self._fetch_nodes(result)
            now = self._clock()

            statuses: Counter[str] = Counter()
            pending: dict[str, list[Observation]] = {
                key: [] for key in self._gauges.keys() if key != STATUS_COUNT_FAMILY
            }

            for node in nodes:
                classification = classify(node, self._unreported_threshold, now)
                self._tally(classification, statuses)
                if classification.unreported:
                    result.unreported_total += 1
                    if self._verbose:
                        self._log.debug(
                            "node_unreported",
                            certname=node.certname,
                            reason=classification.reason,
                        )
                self._observe_node(node, classification, pending, result)

            result.nodes_total = len(nodes)
            result.statuses = dict(statuses)
            self._publish(statuses, pending, result)

            result.duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
            self._metrics.record_cycle(
                nodes_processed=result.nodes_total,
                unreported_nodes=result.unreported_total,
                duration_ms=result.duration_ms,
            )
            self._log.info(
                "scrape_cycle_complete",
                nodes_total=result.nodes_total,
                unreported_total=result.unreported_total,
                statuses=result.statuses,
                report_metrics_failures=result.report_metrics_failures,
                duration_ms=round(result.duration_ms, 2),
                **self._metrics.to_dict(),
            )
        finally:
            clear_cycle_context()
            self._state.to_idle()

        return result

    def _fetch_nodes(self, result: CycleResult) -> list[Node]:
        try:
            return self._client.list_nodes()
        except PuppetDBError as e:
            result.nodes_fetch_failed = True
            self._metrics.record_nodes_fetch_failure()
            self._log.error("nodes_fetch_failed", error=str(e))
            return []

    def _fetch_report_metrics(
        self, node: Node, result: CycleResult
    ) -> list[ReportMetric]:
        try:
            return self._client.list_report_metrics(node.latest_report_hash)
        except PuppetDBError as e:
            result.report_metrics_failures += 1
            self._metrics.record_report_metrics_fetch_failure()
            self._log.warning(
                "report_metrics_fetch_failed",
                certname=node.certname,
                report_hash=node.latest_report_hash,
                error=str(e),
            )
            return []

    @staticmethod
    def _tally(classification: Classification, statuses: Counter[str]) -> None:
        # An unreported node lands in the "unreported" bucket through its
        # status label and once more through the unreported flag.
        statuses[classification.status_label] += 1
        if classification.unreported:
            statuses[UNREPORTED_STATUS] += 1

    def _observe_node(
        self,
        node: Node,
        classification: Classification,
        pending: dict[str, list[Observation]],
        result: CycleResult,
    ) -> None:
        labels = {
            "environment": node.report_environment,
            "host": node.certname,
            "deactivated": deactivated_label(node.is_deactivated),
            "status": classification.status_label,
            "reason": classification.reason,
        }
        pending[REPORT_FAMILY].append(
            Observation(labels=labels, value=classification.report_epoch_seconds)
        )

        if not node.latest_report_hash:
            return

        for metric in self._fetch_report_metrics(node, result):
            if metric.category not in self._gauges.categories:
                continue
            pending[category_family(metric.category)].append(
                Observation(
                    labels={"name": format_metric_name(metric.name), **labels},
                    value=metric.value,
                )
            )

    def _publish(
        self,
        statuses: Counter[str],
        pending: dict[str, list[Observation]],
        result: CycleResult,
    ) -> None:
        """Replace every family, including those with nothing to report."""
        result.observations[STATUS_COUNT_FAMILY] = self._gauges.family(
            STATUS_COUNT_FAMILY
        ).replace(
            Observation(labels={"status": status}, value=float(count))
            for status, count in statuses.items()
        )
        for key, observations in pending.items():
            result.observations[key] = self._gauges.family(key).replace(observations)
