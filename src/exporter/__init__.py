"""Gauge registry, exposition and the reconciliation loop."""

from src.exporter.gauges import (
    GaugeFamily,
    GaugeRegistry,
    LabelSchemaError,
    Observation,
)
from src.exporter.loop import CycleResult, ReconciliationLoop
from src.exporter.metrics import ScrapeMetrics
from src.exporter.state_machine import (
    LoopState,
    LoopStateMachine,
    LoopStateTransitionError,
)


__all__ = [
    "CycleResult",
    "GaugeFamily",
    "GaugeRegistry",
    "LabelSchemaError",
    "LoopState",
    "LoopStateMachine",
    "LoopStateTransitionError",
    "Observation",
    "ReconciliationLoop",
    "ScrapeMetrics",
]
