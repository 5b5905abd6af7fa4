"""
Author: Cameron Murphy (Student ID: 1049678, GitHub: 0x1049678II)
Date: July 4th 2025

Derived metrics for dashboard statistics.

Pure functions only - no I/O, no clocks, no randomness - so both the live assembly path
and the demo-data synthesizer can share them and every number on a dashboard is computed
the same way regardless of where it came from.
"""

from typing import Any, Iterable, List, Optional, Sequence, Tuple, TypeVar

import numpy as np
from scipy import stats

from tourism_analytics.models import (
    AggregatedSummary, BenchmarkDelta, BenchmarkStat, CategoryStat,
    ForecastScenario, Segment
)

T = TypeVar('T')


def revenue_per_visitor(revenue: float, visitors: int) -> float:
    """Revenue divided by visitors, with zero visitors treated as one."""
    return revenue / max(visitors, 1)


def percentage_share(part: float, whole: float) -> float:
    """Share of `whole` that `part` represents, 0 when whole is not positive."""
    return part / whole * 100 if whole > 0 else 0.0


def growth_sign(rate: float) -> str:
    """'up' for non-negative growth, 'down' otherwise."""
    return 'up' if rate >= 0 else 'down'


def top_by_field(records: Sequence[T], field: str) -> Optional[T]:
    """
    Record with the highest value of `field`.

    Ties go to the earliest record in input order; there is no secondary sort key.
    Returns None for an empty sequence.
    """
    best = None
    for record in records:
        if best is None or getattr(record, field) > getattr(best, field):
            best = record
    return best


def bottom_by_field(records: Sequence[T], field: str) -> Optional[T]:
    """Record with the lowest value of `field`, earliest wins on ties."""
    worst = None
    for record in records:
        if worst is None or getattr(record, field) < getattr(worst, field):
            worst = record
    return worst


def summarize_categories(category_stats: Sequence[CategoryStat]) -> AggregatedSummary:
    """
    Fold category stats into headline totals.

    The average rating is weighted by visitors. When no category has visitors it falls
    back to the plain mean, and an empty list gives 0.
    """
    total_visitors = sum(stat.total_visitors for stat in category_stats)
    total_revenue = sum(stat.total_revenue for stat in category_stats)
    total_attractions = sum(stat.count for stat in category_stats)

    if not category_stats:
        avg_rating = 0.0
    elif total_visitors > 0:
        avg_rating = float(np.average(
            [stat.avg_rating for stat in category_stats],
            weights=[stat.total_visitors for stat in category_stats]
        ))
    else:
        avg_rating = float(np.mean([stat.avg_rating for stat in category_stats]))

    return AggregatedSummary(
        total_attractions=total_attractions,
        avg_rating=round(avg_rating, 2),
        total_revenue=total_revenue,
        total_visitors=total_visitors,
        derived=True
    )


def revenue_shares(category_stats: Sequence[CategoryStat]) -> Tuple[Segment, ...]:
    """Each category's share of total revenue."""
    total = sum(stat.total_revenue for stat in category_stats)
    return tuple(
        Segment(
            label=stat.category,
            count=int(round(stat.total_revenue)),
            percentage=round(percentage_share(stat.total_revenue, total), 2)
        )
        for stat in category_stats
    )


def with_segment_shares(pairs: Iterable[Tuple[str, int]]) -> Tuple[Segment, ...]:
    """Turn (label, count) pairs into segments with percentage shares."""
    pairs = list(pairs)
    total = sum(count for _, count in pairs)
    return tuple(
        Segment(label=label, count=count, percentage=round(percentage_share(count, total), 2))
        for label, count in pairs
    )


def benchmark_delta(benchmark: BenchmarkStat) -> BenchmarkDelta:
    """City position relative to the industry average and the top performer."""
    vs_industry = benchmark.city_avg - benchmark.industry_avg
    gap_to_top = benchmark.top_performer - benchmark.city_avg

    return BenchmarkDelta(
        metric=benchmark.metric,
        vs_industry=round(vs_industry, 2),
        vs_industry_pct=round(percentage_share(vs_industry, benchmark.industry_avg), 2),
        gap_to_top=round(gap_to_top, 2),
        gap_to_top_pct=round(percentage_share(gap_to_top, benchmark.top_performer), 2),
        direction=growth_sign(vs_industry)
    )


def trend_growth_rate(values: Sequence[float]) -> float:
    """
    Growth rate of a series as percent of its mean per step.

    Uses a least-squares fit so a single noisy point doesn't flip the trend.

    Args:
        values: Ordered observations, oldest first

    Returns:
        Slope divided by the series mean, times 100. 0.0 for fewer than 3 points
        or a zero mean.
    """
    if len(values) < 3:
        return 0.0

    mean = float(np.mean(values))
    if mean == 0:
        return 0.0

    slope, _, _, _, _ = stats.linregress(list(range(len(values))), list(values))
    return round(float(slope) / mean * 100, 2)


def scenario_is_ordered(scenario: ForecastScenario) -> bool:
    """True when pessimistic <= realistic <= optimistic."""
    return scenario.pessimistic <= scenario.realistic <= scenario.optimistic


def ordered_scenario(scenario: ForecastScenario) -> ForecastScenario:
    """Reassign the three projections so they are in ascending order."""
    if scenario_is_ordered(scenario):
        return scenario
    low, mid, high = sorted([scenario.pessimistic, scenario.realistic, scenario.optimistic])
    return ForecastScenario(
        period=scenario.period,
        optimistic=high,
        realistic=mid,
        pessimistic=low,
        confidence=scenario.confidence
    )


def first_label(segments: Sequence[Segment]) -> Optional[str]:
    """Label of the largest segment by count."""
    top = top_by_field(segments, 'count')
    return top.label if top is not None else None


def label_of(record: Optional[Any], field: str = 'category') -> Optional[str]:
    """Read `field` from a record that may be missing."""
    return getattr(record, field) if record is not None else None


def series_from(points: Iterable[Any], field: str) -> List[float]:
    """Numeric series pulled from a list of records or dicts."""
    series = []
    for point in points:
        value = point.get(field) if isinstance(point, dict) else getattr(point, field, None)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            series.append(float(value))
    return series
