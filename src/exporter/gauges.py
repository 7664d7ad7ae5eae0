"""Gauge families and the process-scoped gauge registry.

Each family is a prometheus_client custom collector holding a snapshot of
samples. Replacing a family's samples builds the new snapshot first and
swaps it in under the family lock, so a concurrent scrape observes either
the complete old set or the complete new set.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from threading import Lock

from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from src.exporter.labels import (
    REPORT_FAMILY,
    REPORT_LABELS,
    REPORT_METRIC_LABELS,
    REPORT_NAMESPACE,
    STATUS_COUNT_FAMILY,
    STATUS_COUNT_LABELS,
    STATUS_COUNT_NAMESPACE,
    category_family,
)


class LabelSchemaError(ValueError):
    """Raised when an observation does not fit its gauge family."""


@dataclass(frozen=True)
class Observation:
    """One gauge sample queued for a family.

    Attributes:
        labels: Label name to label value.
        value: Sample value.
    """

    labels: Mapping[str, str] = field(default_factory=dict)
    value: float = 0.0


class GaugeFamily(Collector):
    """A labelled gauge whose whole sample set is replaced at once."""

    def __init__(
        self,
        name: str,
        documentation: str,
        labelnames: Iterable[str],
    ) -> None:
        """Initialize the family.

        Args:
            name: Exposed metric name.
            documentation: Help text.
            labelnames: Fixed label schema.
        """
        self.name = name
        self.documentation = documentation
        self.labelnames: tuple[str, ...] = tuple(labelnames)
        self._samples: dict[tuple[str, ...], float] = {}
        self._lock = Lock()

    def _label_values(self, labels: Mapping[str, str]) -> tuple[str, ...]:
        if set(labels) != set(self.labelnames):
            msg = (
                f"labels {sorted(labels)} do not match the schema "
                f"{list(self.labelnames)} of {self.name}"
            )
            raise LabelSchemaError(msg)
        return tuple(str(labels[name]) for name in self.labelnames)

    def reset(self) -> None:
        """Drop every sample."""
        with self._lock:
            self._samples = {}

    def set(self, labels: Mapping[str, str], value: float) -> None:
        """Set a single sample.

        Args:
            labels: Label values, keyed by the family's label names.
            value: Sample value.

        Raises:
            LabelSchemaError: If the label keys differ from the schema.
        """
        key = self._label_values(labels)
        with self._lock:
            self._samples[key] = float(value)

    def replace(self, observations: Iterable[Observation]) -> int:
        """Replace all samples with ``observations`` in one step.

        Later observations with the same label values win.

        Args:
            observations: The complete new sample set.

        Returns:
            Number of distinct samples now exposed.

        Raises:
            LabelSchemaError: If any observation does not fit the schema;
                the previous samples are kept in that case.
        """
        staged: dict[tuple[str, ...], float] = {}
        for observation in observations:
            staged[self._label_values(observation.labels)] = float(observation.value)

        with self._lock:
            self._samples = staged
        return len(staged)

    def observations(self) -> list[Observation]:
        """Return a copy of the current samples as observations."""
        with self._lock:
            items = list(self._samples.items())
        return [
            Observation(labels=dict(zip(self.labelnames, key, strict=True)), value=value)
            for key, value in items
        ]

    def describe(self) -> Iterator[GaugeMetricFamily]:
        yield GaugeMetricFamily(
            self.name, self.documentation, labels=list(self.labelnames)
        )

    def collect(self) -> Iterator[GaugeMetricFamily]:
        with self._lock:
            items = list(self._samples.items())
        metric = GaugeMetricFamily(
            self.name, self.documentation, labels=list(self.labelnames)
        )
        for key, value in items:
            metric.add_metric(list(key), value)
        yield metric


class GaugeRegistry:
    """All gauge families of one exporter process.

    Families are created once from the configured category set and are
    never added or removed afterwards:
    - ``node_report_status_count`` (label: status)
    - ``report`` (labels: environment, host, deactivated, status, reason)
    - ``report_<category>`` per category (labels: name plus the report labels)
    """

    def __init__(
        self,
        categories: Iterable[str],
        registry: CollectorRegistry | None = None,
    ) -> None:
        """Create and register every gauge family.

        Args:
            categories: Configured report metric categories.
            registry: prometheus_client registry to expose the families on;
                a private registry is created when omitted.
        """
        self._registry = registry if registry is not None else CollectorRegistry()
        self._categories = frozenset(categories)
        self._families: dict[str, GaugeFamily] = {}

        self._add(
            STATUS_COUNT_FAMILY,
            GaugeFamily(
                f"{STATUS_COUNT_NAMESPACE}_{STATUS_COUNT_FAMILY}",
                "Total count of reports status by type",
                STATUS_COUNT_LABELS,
            ),
        )
        for category in sorted(self._categories):
            key = category_family(category)
            self._add(
                key,
                GaugeFamily(
                    f"{REPORT_NAMESPACE}_{key}",
                    f"Total count of {category} per status",
                    REPORT_METRIC_LABELS,
                ),
            )
        self._add(
            REPORT_FAMILY,
            GaugeFamily(
                f"{REPORT_NAMESPACE}_{REPORT_FAMILY}",
                "Timestamp of latest report",
                REPORT_LABELS,
            ),
        )

    def _add(self, key: str, family: GaugeFamily) -> None:
        self._registry.register(family)
        self._families[key] = family

    @property
    def registry(self) -> CollectorRegistry:
        """The prometheus_client registry the families are exposed on."""
        return self._registry

    @property
    def categories(self) -> frozenset[str]:
        """Configured report metric categories."""
        return self._categories

    def family(self, key: str) -> GaugeFamily:
        """Look up a family by registry key.

        Raises:
            LabelSchemaError: If no such family was registered.
        """
        try:
            return self._families[key]
        except KeyError:
            msg = f"unknown gauge family {key!r}"
            raise LabelSchemaError(msg) from None

    def keys(self) -> list[str]:
        """Registry keys of all families."""
        return list(self._families)

    def __contains__(self, key: object) -> bool:
        return key in self._families

    def exposition(self) -> bytes:
        """Render all families in the Prometheus text format."""
        return generate_latest(self._registry)
