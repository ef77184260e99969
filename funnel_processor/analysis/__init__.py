"""Funnel metrics computations."""

from .engine import MetricsEngine
from .computations import ComputationRegistry, BaseComputation
from .funnel_computations import (
    TotalsComputation,
    FunnelComputation,
    DurationAveragesComputation,
    DecidedLeadsComputation,
    mean_or_none,
    store_visit_count,
)
from .dealer_metrics import aggregate_by_dealer, build_dealer_comparison, performance_indicator
from .period import extract_period

__all__ = [
    "MetricsEngine",
    "ComputationRegistry",
    "BaseComputation",
    "TotalsComputation",
    "FunnelComputation",
    "DurationAveragesComputation",
    "DecidedLeadsComputation",
    "mean_or_none",
    "store_visit_count",
    "aggregate_by_dealer",
    "build_dealer_comparison",
    "performance_indicator",
    "extract_period",
    "create_default_metrics_engine",
]


def create_default_metrics_engine() -> MetricsEngine:
    """Create a metrics engine with all computations pre-registered."""
    engine = MetricsEngine()

    # 1. Totals first (every later computation reads them)
    engine.add_computation(TotalsComputation())

    # 2. Conversion segments
    engine.add_computation(FunnelComputation())

    # 3. Day-count averages
    engine.add_computation(DurationAveragesComputation())

    # 4. Decided leads (depends on the billed flag counts)
    engine.add_computation(DecidedLeadsComputation())

    return engine
