"""
Author: Cameron Murphy (Student ID: 1049678, GitHub: 0x1049678II)
Date: July 3rd 2025

Canonical statistics model for the dashboards.

Every upstream shape gets mapped onto these records by the normalizer, and the demo-data
synthesizer produces exactly the same records, so presentation code never has to care
which path built the numbers. All records are frozen and built fresh per request.
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from tourism_analytics.exceptions import FilterValidationException


class Period(Enum):
    """Reporting period selectable on every dashboard."""
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


class Role(Enum):
    """Roles assigned by the authentication layer."""
    AUTHORITY = "AUTHORITY"
    OWNER = "OWNER"


class Breakdown(Enum):
    """Revenue breakdown dimension."""
    CATEGORY = "category"
    ATTRACTION = "attraction"
    TIME = "time"


class DataOrigin(Enum):
    """Which code path produced a view model."""
    LIVE = "live"
    FALLBACK = "fallback"


class Priority(Enum):
    """Improvement opportunity priority."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def _parse_enum(enum_cls, field_name: str, value: Any):
    """Parse a filter value into an enum member, case-insensitively."""
    if isinstance(value, enum_cls):
        return value
    allowed = [member.value for member in enum_cls]
    for member in enum_cls:
        if isinstance(value, str) and member.value.lower() == value.strip().lower():
            return member
    raise FilterValidationException(field_name, value, allowed)


def _parse_positive_int(field_name: str, value: Any) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise FilterValidationException(field_name, value)
    if parsed <= 0:
        raise FilterValidationException(field_name, value)
    return parsed


@dataclass(frozen=True)
class Filters:
    """Inbound dashboard parameters, including the caller's role."""
    period: Period = Period.MONTH
    role: Optional[Role] = None
    attraction_id: Optional[int] = None
    breakdown: Optional[Breakdown] = None
    forecast_horizon: int = 6

    @classmethod
    def from_mapping(cls, params: Mapping[str, Any], role: Optional[str] = None) -> 'Filters':
        """
        Build filters from query-string style parameters.

        Args:
            params: Mapping with period, attractionId, breakdown and forecastHorizon keys
            role: Role name supplied by the authentication layer, if any

        Returns:
            Validated Filters

        Raises:
            FilterValidationException: If any value is not recognized
        """
        period = _parse_enum(Period, 'period', params.get('period') or Period.MONTH.value)

        breakdown = params.get('breakdown')
        attraction_id = params.get('attractionId', params.get('attraction_id'))
        horizon = params.get('forecastHorizon', params.get('forecast_horizon'))

        return cls(
            period=period,
            role=_parse_enum(Role, 'role', role) if role else None,
            attraction_id=_parse_positive_int('attractionId', attraction_id) if attraction_id not in (None, '') else None,
            breakdown=_parse_enum(Breakdown, 'breakdown', breakdown) if breakdown else None,
            forecast_horizon=_parse_positive_int('forecastHorizon', horizon) if horizon not in (None, '') else 6,
        )


@dataclass(frozen=True)
class CategoryStat:
    """Per-category totals."""
    category: str
    count: int
    total_visitors: int
    total_revenue: float
    avg_rating: float
    revenue_per_visitor: float
    growth_rate: Optional[float] = None


@dataclass(frozen=True)
class BenchmarkStat:
    """City figure for one metric next to the industry average and top performer."""
    metric: str
    industry_avg: float
    city_avg: float
    top_performer: float
    unit: str


@dataclass(frozen=True)
class BenchmarkDelta:
    """Where the city sits relative to a benchmark."""
    metric: str
    vs_industry: float
    vs_industry_pct: float
    gap_to_top: float
    gap_to_top_pct: float
    direction: str


@dataclass(frozen=True)
class ImprovementOpportunity:
    """An issue found at one attraction, with suggested fixes."""
    attraction_id: int
    attraction_name: str
    category: str
    issue: str
    description: str
    potential_impact: str
    recommendations: Tuple[str, ...]
    priority: Priority


@dataclass(frozen=True)
class ForecastScenario:
    """Optimistic/realistic/pessimistic projection for one period."""
    period: str
    optimistic: float
    realistic: float
    pessimistic: float
    confidence: float


@dataclass(frozen=True)
class AggregatedSummary:
    """Headline totals. `derived` is True when folded from category stats."""
    total_attractions: int
    avg_rating: float
    total_revenue: float
    total_visitors: int
    derived: bool = False


@dataclass(frozen=True)
class TopAttraction:
    name: str
    rating: float
    visits: int


@dataclass(frozen=True)
class RevenueInsights:
    peak_day: str
    peak_month: str
    revenue_growth: float
    visitor_increase: float
    top_revenue_attraction: str


@dataclass(frozen=True)
class DailyVisitors:
    day: str
    visitors: int


@dataclass(frozen=True)
class VisitorPatterns:
    busiest_day: str
    peak_hours: str
    avg_daily_visitors: int
    weekly_distribution: Tuple[DailyVisitors, ...]


@dataclass(frozen=True)
class Alert:
    id: str
    type: str
    title: str
    description: str


@dataclass(frozen=True)
class TrendFactor:
    factor: str
    impact: str
    description: str
    expected_change: float
    category: str


@dataclass(frozen=True)
class ForecastMetrics:
    next_month_visitors: int
    next_month_revenue: float
    quarterly_revenue: float
    seasonal_index: float
    accuracy_score: float
    growth_rate: float


@dataclass(frozen=True)
class ModelAccuracy:
    overall: float
    visitor_accuracy: float
    revenue_accuracy: float
    trend: str


@dataclass(frozen=True)
class PredictiveInsights:
    key_predictions: Tuple[str, ...]
    risk_factors: Tuple[str, ...]
    opportunities: Tuple[str, ...]


@dataclass(frozen=True)
class Segment:
    """One slice of a demographic breakdown."""
    label: str
    count: int
    percentage: float


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def _serialize(value: Any) -> Any:
    """Convert records to JSON-ready structures with camelCase keys."""
    if dataclasses.is_dataclass(value):
        return {_camel(f.name): _serialize(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    return value


@dataclass(frozen=True)
class ViewModel:
    """Presentation-ready bundle for one dashboard.

    `data_origin` tags the whole bundle; live and synthesized records are never mixed.
    """
    dashboard: str
    data_origin: DataOrigin
    filters: Filters

    @property
    def is_fallback(self) -> bool:
        return self.data_origin is DataOrigin.FALLBACK

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the presentation layer."""
        return _serialize(self)


@dataclass(frozen=True)
class CityOverviewView(ViewModel):
    summary: AggregatedSummary
    growth_rate: float
    category_stats: Tuple[CategoryStat, ...]
    top_attraction: TopAttraction
    revenue_insights: RevenueInsights
    visitor_patterns: VisitorPatterns
    alerts: Tuple[Alert, ...]
    top_category: Optional[str]
    category_revenue_share: Tuple[Segment, ...]


@dataclass(frozen=True)
class AttractionComparisonView(ViewModel):
    summary: AggregatedSummary
    category_stats: Tuple[CategoryStat, ...]
    benchmarks: Tuple[BenchmarkStat, ...]
    benchmark_deltas: Tuple[BenchmarkDelta, ...]
    opportunities: Tuple[ImprovementOpportunity, ...]
    top_performer: Optional[str]
    bottom_performer: Optional[str]


@dataclass(frozen=True)
class PredictiveAnalyticsView(ViewModel):
    forecast_metrics: ForecastMetrics
    revenue_scenarios: Tuple[ForecastScenario, ...]
    visitor_scenarios: Tuple[ForecastScenario, ...]
    trend_factors: Tuple[TrendFactor, ...]
    model_accuracy: ModelAccuracy
    insights: PredictiveInsights
    growth_trend: str


@dataclass(frozen=True)
class DemographicInsightsView(ViewModel):
    total_visitors: int
    growth_rate: float
    age_groups: Tuple[Segment, ...]
    genders: Tuple[Segment, ...]
    origins: Tuple[Segment, ...]
    visit_purposes: Tuple[Segment, ...]
    dominant_age_group: Optional[str]
    top_origin: Optional[str]
