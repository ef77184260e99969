"""Output models of the funnel pipeline.

All models are immutable and serialise with camelCase aliases, the shape
consumed by the dashboard front-end.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


def percentage(numerator: float, denominator: float) -> float:
    """numerator / denominator * 100, or 0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return numerator / denominator * 100


class FunnelMetricPair(_FrozenModel):
    """Entry and success volumes of one conversion segment.

    ``to`` may exceed ``from``: flag-derived counts are heuristic.
    """

    from_: int = Field(alias="from")
    to: int

    @property
    def conversion_rate(self) -> float:
        return percentage(self.to, self.from_)


class FunnelMetrics(_FrozenModel):
    leads_direct: FunnelMetricPair
    leads_with_test_drive: FunnelMetricPair
    test_drive_to_sale: FunnelMetricPair
    complete_journey: FunnelMetricPair
    visits_to_test_drive: FunnelMetricPair
    visits_to_billing: FunnelMetricPair


class AnalysisPeriod(_FrozenModel):
    start: Optional[date] = None
    end: Optional[date] = None


class RawSheetData(_FrozenModel):
    sheet1_data: List[Dict[str, Any]] = Field(default_factory=list)
    sheet2_data: List[Dict[str, Any]] = Field(default_factory=list)
    sheet3_data: List[Dict[str, Any]] = Field(default_factory=list)
    sheet4_data: List[Dict[str, Any]] = Field(default_factory=list)
    sheet5_data: List[Dict[str, Any]] = Field(default_factory=list)


class DealerMetrics(_FrozenModel):
    dealer_name: str
    leads: int = 0
    test_drives: int = 0
    sales: int = 0
    leads_to_test_drive_rate: float = 0.0
    test_drive_to_sales_rate: float = 0.0
    # "above", "below" or "neutral" against the baseline; None on the baseline itself
    leads_to_test_drive_indicator: Optional[str] = None
    test_drive_to_sales_indicator: Optional[str] = None


class DealerComparison(_FrozenModel):
    dealer_metrics: List[DealerMetrics] = Field(default_factory=list)
    baseline: DealerMetrics


class ProcessedResult(_FrozenModel):
    funnel_metrics: FunnelMetrics
    leads: int
    test_drives: int
    billed: int
    total_store_visits: float
    avg_lead_to_test_drive: Optional[float] = None
    avg_test_drive_to_billing: Optional[float] = None
    avg_lead_to_billing: Optional[float] = None
    avg_total_journey: Optional[float] = None
    decided_leads_count: int = 0
    decided_leads_percentage: float = 0.0
    billed_leads_count: int = 0
    period: AnalysisPeriod = Field(default_factory=AnalysisPeriod)
    dealers: List[str] = Field(default_factory=list)
    dealer_comparison: Optional[DealerComparison] = None
    raw_data: RawSheetData = Field(default_factory=RawSheetData)
