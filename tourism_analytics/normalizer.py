"""
Author: Cameron Murphy (Student ID: 1049678, GitHub: 0x1049678II)
Date: July 5th 2025

Response normalization for metric source payloads.

Different versions of the metrics API disagree on field names (totalRevenue vs revenue vs
amount, averageRating vs avgRating, and so on). Rather than scatter `a or b or c` chains
through every dashboard, each entity gets a declarative alias table: for every canonical
field, the keys to try in order, the default to use when none is present, and how to
cast the value.

Rules:
    - The first alias holding a usable value wins. `None` and uncastable junk fall through.
    - When nothing matches, the documented default is used - None never reaches the
      metrics calculator.
    - A value the source supplies explicitly beats one we could compute ourselves
      (e.g. revenuePerVisitor), since the source may apply adjustments we can't see.
    - A required field landing on its default is logged as a PartialDataError at debug
      level. It is never raised.
"""

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import structlog

from tourism_analytics import metrics
from tourism_analytics.exceptions import ExceptionHandler, PartialDataError
from tourism_analytics.models import (
    AggregatedSummary, Alert, BenchmarkStat, CategoryStat, DailyVisitors,
    ForecastMetrics, ForecastScenario, ImprovementOpportunity, ModelAccuracy,
    PredictiveInsights, Priority, RevenueInsights, Segment, TopAttraction,
    TrendFactor, VisitorPatterns
)

logger = structlog.get_logger()

MISSING = object()


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        # Integers beyond float range
        return None
    return number if math.isfinite(number) else None


def _as_int(value: Any) -> Optional[int]:
    number = _as_float(value)
    return int(round(number)) if number is not None else None


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _as_str_list(value: Any) -> Optional[Tuple[str, ...]]:
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value if item is not None)
    return None


@dataclass(frozen=True)
class FieldRule:
    """How to resolve one canonical field from a raw payload."""
    aliases: Tuple[str, ...]
    default: Any
    cast: Callable[[Any], Any]
    required: bool = False


# Alias tables, one per entity type. Dotted aliases walk nested objects.
CATEGORY_FIELDS: Dict[str, FieldRule] = {
    'category': FieldRule(('name', 'category', 'categoryName'), 'Unknown', _as_str, required=True),
    'count': FieldRule(('attractionCount', 'count', 'attractions', 'totalAttractions'), 0, _as_int),
    'total_visitors': FieldRule(('totalVisitors', 'visitors', 'visits', 'visitorCount', 'uniqueVisitors'),
                                0, _as_int, required=True),
    'total_revenue': FieldRule(('totalRevenue', 'revenue', 'amount'), 0.0, _as_float, required=True),
    'avg_rating': FieldRule(('averageRating', 'avgRating', 'rating'), 0.0, _as_float),
    'revenue_per_visitor': FieldRule(('revenuePerVisitor', 'avgRevenuePerVisitor'), MISSING, _as_float),
    'growth_rate': FieldRule(('growthRate', 'growth'), None, _as_float),
}

BENCHMARK_FIELDS: Dict[str, FieldRule] = {
    'metric': FieldRule(('metricName', 'metric', 'name'), 'Unknown', _as_str, required=True),
    'industry_avg': FieldRule(('industryAverage', 'industryAvg'), 0.0, _as_float),
    'city_avg': FieldRule(('cityAverage', 'cityAvg', 'value'), 0.0, _as_float, required=True),
    'top_performer': FieldRule(('topPerformer', 'topPerformerValue', 'best'), 0.0, _as_float),
    'unit': FieldRule(('unit', 'units'), '', _as_str),
}

OPPORTUNITY_FIELDS: Dict[str, FieldRule] = {
    'attraction_id': FieldRule(('attractionId', 'attraction_id', 'id'), 0, _as_int),
    'attraction_name': FieldRule(('attractionName', 'name'), 'Unknown', _as_str, required=True),
    'category': FieldRule(('category', 'categoryName'), 'Unknown', _as_str),
    'issue': FieldRule(('issue', 'title'), '', _as_str, required=True),
    'description': FieldRule(('description', 'details'), '', _as_str),
    'potential_impact': FieldRule(('potentialImpact', 'impact'), '', _as_str),
    'recommendations': FieldRule(('recommendations', 'actions', 'suggestions'), (), _as_str_list),
    'priority': FieldRule(('priority', 'severity'), 'low', _as_str),
}

SCENARIO_FIELDS: Dict[str, FieldRule] = {
    'period': FieldRule(('period', 'month', 'label', 'date'), 'Unknown', _as_str, required=True),
    'optimistic': FieldRule(('optimistic', 'high', 'upper'), 0.0, _as_float, required=True),
    'realistic': FieldRule(('realistic', 'expected', 'forecast', 'value'), 0.0, _as_float, required=True),
    'pessimistic': FieldRule(('pessimistic', 'low', 'lower'), 0.0, _as_float, required=True),
    'confidence': FieldRule(('confidence', 'confidenceLevel'), 85.0, _as_float),
}

SUMMARY_FIELDS: Dict[str, FieldRule] = {
    'total_attractions': FieldRule(('totalAttractions', 'activeAttractions', 'attractionCount'), MISSING, _as_int),
    'avg_rating': FieldRule(('averageRating', 'avgRating', 'avgSatisfaction'), MISSING, _as_float),
    'total_revenue': FieldRule(('totalRevenue', 'revenue'), MISSING, _as_float),
    'total_visitors': FieldRule(('totalVisitors', 'visitors', 'totalVisits'), MISSING, _as_int),
}

TOP_ATTRACTION_FIELDS: Dict[str, FieldRule] = {
    'name': FieldRule(('name', 'attractionName'), 'N/A', _as_str),
    'rating': FieldRule(('rating', 'averageRating', 'avgRating'), 0.0, _as_float),
    'visits': FieldRule(('visits', 'totalVisits', 'visitCount', 'totalVisitors'), 0, _as_int),
}

REVENUE_FIELDS: Dict[str, FieldRule] = {
    'peak_day': FieldRule(('peakDay', 'busiestDay'), 'N/A', _as_str),
    'peak_month': FieldRule(('peakMonth',), 'N/A', _as_str),
    'revenue_growth': FieldRule(('growthRate', 'revenueGrowth', 'comparisons.revenueGrowth'), 0.0, _as_float),
    'top_revenue_attraction': FieldRule(('topPerformer.name', 'topAttraction.name', 'topPerformerName'),
                                        'N/A', _as_str),
}

VISITOR_TREND_FIELDS: Dict[str, FieldRule] = {
    'growth_rate': FieldRule(('growthRate', 'visitorGrowth', 'comparisons.visitsGrowth'), MISSING, _as_float),
    'busiest_day': FieldRule(('busiestDay', 'peakDay'), 'N/A', _as_str),
    'peak_hours': FieldRule(('peakHours',), 'N/A', _as_str),
    'avg_daily_visitors': FieldRule(('avgDailyVisitors', 'averageDailyVisitors'), MISSING, _as_int),
}

DAILY_VISITOR_FIELDS: Dict[str, FieldRule] = {
    'day': FieldRule(('day', 'date', 'label'), 'Unknown', _as_str),
    'visitors': FieldRule(('visitors', 'visits', 'count'), 0, _as_int),
}

ALERT_FIELDS: Dict[str, FieldRule] = {
    'id': FieldRule(('id', 'alertId'), '', _as_str),
    'type': FieldRule(('type', 'alertType', 'severity'), 'info', _as_str),
    'title': FieldRule(('title', 'name'), '', _as_str, required=True),
    'description': FieldRule(('description', 'message'), '', _as_str),
}

TREND_FACTOR_FIELDS: Dict[str, FieldRule] = {
    'factor': FieldRule(('name', 'factor'), 'Unknown', _as_str, required=True),
    'impact': FieldRule(('impact',), 'neutral', _as_str),
    'description': FieldRule(('description',), '', _as_str),
    'expected_change': FieldRule(('expectedChange', 'change'), 0.0, _as_float),
    'category': FieldRule(('category',), 'external', _as_str),
}

FORECAST_METRIC_FIELDS: Dict[str, FieldRule] = {
    'next_month_visitors': FieldRule(('forecastMetrics.nextMonthVisitors', 'nextMonthVisitors'),
                                     0, _as_int, required=True),
    'next_month_revenue': FieldRule(('forecastMetrics.nextMonthRevenue', 'nextMonthRevenue'),
                                    0.0, _as_float, required=True),
    'quarterly_revenue': FieldRule(('forecastMetrics.quarterlyRevenue', 'quarterlyRevenue'), 0.0, _as_float),
    'seasonal_index': FieldRule(('forecastMetrics.seasonalIndex', 'seasonalIndex'), 1.0, _as_float),
    'accuracy_score': FieldRule(('forecastMetrics.accuracyScore', 'accuracyScore'), 0.0, _as_float),
    'growth_rate': FieldRule(('forecastMetrics.growthRate', 'growthRate'), 0.0, _as_float),
}

ACCURACY_FIELDS: Dict[str, FieldRule] = {
    'overall': FieldRule(('overall', 'overallAccuracy'), 0.0, _as_float, required=True),
    'visitor_accuracy': FieldRule(('visitorAccuracy',), 0.0, _as_float),
    'revenue_accuracy': FieldRule(('revenueAccuracy',), 0.0, _as_float),
    'trend': FieldRule(('trend',), 'stable', _as_str),
}

INSIGHT_FIELDS: Dict[str, FieldRule] = {
    'key_predictions': FieldRule(('insights.keyPredictions', 'keyPredictions'), (), _as_str_list),
    'risk_factors': FieldRule(('insights.riskFactors', 'riskFactors'), (), _as_str_list),
    'opportunities': FieldRule(('insights.opportunities', 'opportunities'), (), _as_str_list),
}

DEMOGRAPHIC_FIELDS: Dict[str, FieldRule] = {
    'total_visitors': FieldRule(('totalVisits', 'uniqueVisitors', 'totalVisitors'), 0, _as_int, required=True),
    'growth_rate': FieldRule(('comparisons.visitsGrowth', 'comparisons.uniqueVisitorsGrowth', 'growthRate'),
                             0.0, _as_float),
}

SEGMENT_LABEL_ALIASES = ('label', 'range', 'gender', 'region', 'purpose', 'name')
SEGMENT_COUNT_ALIASES = ('count', 'visitors', 'value')

# Units used when a benchmark arrives without one, matched on the metric name
DEFAULT_UNITS = (
    ('revenue', ' USD'),
    ('rating', '/5'),
    ('satisfaction', '/5'),
    ('utilization', '%'),
    ('capacity', '%'),
    ('rate', '%'),
)
FALLBACK_UNIT = ' units'

TREND_IMPACTS = ('positive', 'negative', 'neutral')
ACCURACY_TRENDS = ('improving', 'stable', 'declining')
ALERT_TYPES = ('warning', 'success', 'info')


def lookup(raw: Any, alias: str) -> Any:
    """Resolve a possibly dotted alias against nested mappings."""
    current = raw
    for part in alias.split('.'):
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return current


def resolve(raw: Any, rule: FieldRule) -> Tuple[Any, bool]:
    """
    Resolve one field.

    Returns:
        (value, supplied) - supplied is False when the default was used
    """
    for alias in rule.aliases:
        value = rule.cast(lookup(raw, alias))
        if value is not None:
            return value, True
    return rule.default, False


def normalize_fields(entity: str, raw: Any, table: Dict[str, FieldRule]) -> Tuple[Dict[str, Any], set]:
    """
    Apply an alias table to a raw payload.

    Returns:
        (values, supplied_fields)
    """
    values = {}
    supplied = set()
    for field_name, rule in table.items():
        value, was_supplied = resolve(raw, rule)
        values[field_name] = value
        if was_supplied:
            supplied.add(field_name)
        elif rule.required:
            ExceptionHandler.log_exception(
                logger,
                PartialDataError(entity, field_name, list(rule.aliases), rule.default),
                level='debug'
            )
    return values, supplied


def extract_list(payload: Any, aliases: Sequence[str]) -> List[Any]:
    """Pull a list out of a payload, accepting a bare list too."""
    if isinstance(payload, list):
        return payload
    for alias in aliases:
        value = lookup(payload, alias)
        if isinstance(value, list):
            return value
    return []


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _one_of(value: str, allowed: Sequence[str], default: str) -> str:
    lowered = value.strip().lower()
    return lowered if lowered in allowed else default


def normalize_category_stat(raw: Any) -> CategoryStat:
    """Canonical category stats; revenue per visitor is computed only when not supplied."""
    values, _ = normalize_fields('CategoryStat', raw, CATEGORY_FIELDS)

    rpv = values['revenue_per_visitor']
    if rpv is MISSING:
        rpv = metrics.revenue_per_visitor(values['total_revenue'], values['total_visitors'])

    return CategoryStat(
        category=values['category'],
        count=max(values['count'], 0),
        total_visitors=max(values['total_visitors'], 0),
        total_revenue=values['total_revenue'],
        avg_rating=_clamp(values['avg_rating'], 0.0, 5.0),
        revenue_per_visitor=rpv,
        growth_rate=values['growth_rate']
    )


def default_unit(metric: str) -> str:
    """Rendering unit for a benchmark that came without one."""
    lowered = metric.lower()
    for keyword, unit in DEFAULT_UNITS:
        if keyword in lowered:
            return unit
    return FALLBACK_UNIT


def normalize_benchmark(raw: Any) -> BenchmarkStat:
    values, _ = normalize_fields('BenchmarkStat', raw, BENCHMARK_FIELDS)
    return BenchmarkStat(
        metric=values['metric'],
        industry_avg=values['industry_avg'],
        city_avg=values['city_avg'],
        top_performer=values['top_performer'],
        unit=values['unit'] or default_unit(values['metric'])
    )


def normalize_priority(value: str) -> Priority:
    """Coerce a priority string, unknown values become low."""
    try:
        return Priority(value.strip().lower())
    except ValueError:
        return Priority.LOW


def normalize_opportunity(raw: Any) -> ImprovementOpportunity:
    values, _ = normalize_fields('ImprovementOpportunity', raw, OPPORTUNITY_FIELDS)
    return ImprovementOpportunity(
        attraction_id=values['attraction_id'],
        attraction_name=values['attraction_name'],
        category=values['category'],
        issue=values['issue'],
        description=values['description'],
        potential_impact=values['potential_impact'],
        recommendations=tuple(values['recommendations']),
        priority=normalize_priority(values['priority'])
    )


def normalize_forecast_scenario(raw: Any) -> ForecastScenario:
    """
    Canonical forecast scenario.

    Out-of-order projections are re-sorted so pessimistic <= realistic <= optimistic;
    the raw values are kept, only their labels move.
    """
    values, _ = normalize_fields('ForecastScenario', raw, SCENARIO_FIELDS)
    scenario = ForecastScenario(
        period=values['period'],
        optimistic=values['optimistic'],
        realistic=values['realistic'],
        pessimistic=values['pessimistic'],
        confidence=_clamp(values['confidence'], 0.0, 100.0)
    )

    if not metrics.scenario_is_ordered(scenario):
        logger.warning("Forecast scenario out of order, reordering",
                       period=scenario.period,
                       optimistic=scenario.optimistic,
                       realistic=scenario.realistic,
                       pessimistic=scenario.pessimistic)
        scenario = metrics.ordered_scenario(scenario)

    return scenario


def normalize_summary(raw: Any, category_stats: Sequence[CategoryStat]) -> AggregatedSummary:
    """
    Headline totals.

    Fields the source supplies win; anything missing comes from the fold over the
    category stats. When the source supplies nothing the summary is marked derived.
    """
    values, supplied = normalize_fields('AggregatedSummary', raw, SUMMARY_FIELDS)
    folded = metrics.summarize_categories(category_stats)

    if not supplied:
        return folded

    def pick(field_name):
        return values[field_name] if field_name in supplied else getattr(folded, field_name)

    return AggregatedSummary(
        total_attractions=pick('total_attractions'),
        avg_rating=_clamp(pick('avg_rating'), 0.0, 5.0),
        total_revenue=pick('total_revenue'),
        total_visitors=pick('total_visitors'),
        derived=False
    )


def normalize_top_attraction(raw: Any) -> TopAttraction:
    values, _ = normalize_fields('TopAttraction', raw, TOP_ATTRACTION_FIELDS)
    return TopAttraction(
        name=values['name'],
        rating=_clamp(values['rating'], 0.0, 5.0),
        visits=values['visits']
    )


def visitor_series(raw: Any) -> List[float]:
    """Visitor counts from a visitor-trends payload, oldest first."""
    points = extract_list(raw, ('trends', 'series', 'dailyTrends', 'data'))
    for count_field in ('visitors', 'visits', 'count'):
        series = metrics.series_from(points, count_field)
        if series:
            return series
    return []


def visitor_growth_rate(raw: Any) -> float:
    """Supplied visitor growth rate, or the fitted trend of the visitor series."""
    value, supplied = resolve(raw, VISITOR_TREND_FIELDS['growth_rate'])
    if supplied:
        return value
    return metrics.trend_growth_rate(visitor_series(raw))


def normalize_revenue_insights(revenue_raw: Any, visitor_raw: Any) -> RevenueInsights:
    values, _ = normalize_fields('RevenueInsights', revenue_raw, REVENUE_FIELDS)
    return RevenueInsights(
        peak_day=values['peak_day'],
        peak_month=values['peak_month'],
        revenue_growth=values['revenue_growth'],
        visitor_increase=visitor_growth_rate(visitor_raw),
        top_revenue_attraction=values['top_revenue_attraction']
    )


def normalize_visitor_patterns(raw: Any) -> VisitorPatterns:
    values, supplied = normalize_fields('VisitorPatterns', raw, VISITOR_TREND_FIELDS)

    distribution = tuple(
        DailyVisitors(**normalize_fields('DailyVisitors', item, DAILY_VISITOR_FIELDS)[0])
        for item in extract_list(raw, ('weeklyDistribution', 'dailyBreakdown'))
    )

    if 'avg_daily_visitors' in supplied:
        avg_daily = values['avg_daily_visitors']
    else:
        series = visitor_series(raw) or [day.visitors for day in distribution]
        avg_daily = int(round(sum(series) / len(series))) if series else 0

    busiest = values['busiest_day']
    if 'busiest_day' not in supplied and distribution:
        busiest = metrics.top_by_field(distribution, 'visitors').day

    return VisitorPatterns(
        busiest_day=busiest,
        peak_hours=values['peak_hours'],
        avg_daily_visitors=avg_daily,
        weekly_distribution=distribution
    )


def normalize_alert(raw: Any, index: int) -> Alert:
    values, _ = normalize_fields('Alert', raw, ALERT_FIELDS)
    return Alert(
        id=values['id'] or str(index + 1),
        type=_one_of(values['type'], ALERT_TYPES, 'info'),
        title=values['title'],
        description=values['description']
    )


def normalize_trend_factor(raw: Any) -> TrendFactor:
    values, _ = normalize_fields('TrendFactor', raw, TREND_FACTOR_FIELDS)
    return TrendFactor(
        factor=values['factor'],
        impact=_one_of(values['impact'], TREND_IMPACTS, 'neutral'),
        description=values['description'],
        expected_change=values['expected_change'],
        category=values['category']
    )


def normalize_forecast_metrics(raw: Any, accuracy_raw: Any) -> ForecastMetrics:
    """Forecast headline numbers; the accuracy endpoint's overall score wins when present."""
    values, _ = normalize_fields('ForecastMetrics', raw, FORECAST_METRIC_FIELDS)
    overall, supplied = resolve(accuracy_raw, ACCURACY_FIELDS['overall'])
    return ForecastMetrics(
        next_month_visitors=values['next_month_visitors'],
        next_month_revenue=values['next_month_revenue'],
        quarterly_revenue=values['quarterly_revenue'],
        seasonal_index=values['seasonal_index'],
        accuracy_score=overall if supplied else values['accuracy_score'],
        growth_rate=values['growth_rate']
    )


def normalize_model_accuracy(raw: Any) -> ModelAccuracy:
    values, _ = normalize_fields('ModelAccuracy', raw, ACCURACY_FIELDS)
    return ModelAccuracy(
        overall=_clamp(values['overall'], 0.0, 100.0),
        visitor_accuracy=_clamp(values['visitor_accuracy'], 0.0, 100.0),
        revenue_accuracy=_clamp(values['revenue_accuracy'], 0.0, 100.0),
        trend=_one_of(values['trend'], ACCURACY_TRENDS, 'stable')
    )


def normalize_insights(raw: Any) -> PredictiveInsights:
    values, _ = normalize_fields('PredictiveInsights', raw, INSIGHT_FIELDS)
    return PredictiveInsights(**values)


def normalize_segments(raw: Any) -> Tuple[Segment, ...]:
    """
    Demographic breakdown as segments.

    Accepts either a {label: count} mapping or a list of objects. Percentages supplied
    by the source are kept; otherwise they are computed from the counts.
    """
    if isinstance(raw, Mapping):
        pairs = [(str(label), _as_int(count) or 0) for label, count in raw.items()]
        return metrics.with_segment_shares(pairs)

    if not isinstance(raw, list):
        return ()

    pairs = []
    supplied_shares = []
    for item in raw:
        label, _ = resolve(item, FieldRule(SEGMENT_LABEL_ALIASES, 'Unknown', _as_str))
        count, _ = resolve(item, FieldRule(SEGMENT_COUNT_ALIASES, 0, _as_int))
        share, _ = resolve(item, FieldRule(('percentage', 'share'), None, _as_float))
        pairs.append((label, count))
        supplied_shares.append(share)

    computed = metrics.with_segment_shares(pairs)
    return tuple(
        Segment(label=segment.label, count=segment.count,
                percentage=share if share is not None else segment.percentage)
        for segment, share in zip(computed, supplied_shares)
    )
