"""Self-instrumentation counters for the reconciliation loop."""

from threading import Lock


class ScrapeMetrics:
    """Counters describing the exporter's own poll cycles.

    Owned by a single exporter instance and read from log statements;
    failures that the loop tolerates are counted here instead of being
    dropped.
    """

    def __init__(self) -> None:
        """Initialize all counters to zero."""
        self._lock = Lock()
        self._cycles_total = 0
        self._nodes_fetch_failures_total = 0
        self._report_metrics_fetch_failures_total = 0
        self._nodes_processed_total = 0
        self._unreported_nodes_last_cycle = 0
        self._last_cycle_duration_ms = 0.0

    def record_cycle(
        self,
        nodes_processed: int,
        unreported_nodes: int,
        duration_ms: float,
    ) -> None:
        """Record a finished poll cycle.

        Args:
            nodes_processed: Nodes classified in the cycle.
            unreported_nodes: Nodes classified as unreported.
            duration_ms: Wall-clock duration of the cycle.
        """
        with self._lock:
            self._cycles_total += 1
            self._nodes_processed_total += nodes_processed
            self._unreported_nodes_last_cycle = unreported_nodes
            self._last_cycle_duration_ms = duration_ms

    def record_nodes_fetch_failure(self) -> None:
        """Record a failed node list fetch."""
        with self._lock:
            self._nodes_fetch_failures_total += 1

    def record_report_metrics_fetch_failure(self) -> None:
        """Record a failed report metrics fetch."""
        with self._lock:
            self._report_metrics_fetch_failures_total += 1

    @property
    def cycles_total(self) -> int:
        """Number of completed poll cycles."""
        with self._lock:
            return self._cycles_total

    @property
    def nodes_fetch_failures_total(self) -> int:
        """Number of failed node list fetches."""
        with self._lock:
            return self._nodes_fetch_failures_total

    @property
    def report_metrics_fetch_failures_total(self) -> int:
        """Number of failed report metrics fetches."""
        with self._lock:
            return self._report_metrics_fetch_failures_total

    def to_dict(self) -> dict[str, float | int]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        with self._lock:
            return {
                "cycles_total": self._cycles_total,
                "nodes_fetch_failures_total": self._nodes_fetch_failures_total,
                "report_metrics_fetch_failures_total": (
                    self._report_metrics_fetch_failures_total
                ),
                "nodes_processed_total": self._nodes_processed_total,
                "unreported_nodes_last_cycle": self._unreported_nodes_last_cycle,
                "last_cycle_duration_ms": self._last_cycle_duration_ms,
            }
