"""
Author: Cameron Murphy (Student ID: 1049678, GitHub: 0x1049678II)
Date: July 12th 2025

Test derived metric calculations.
"""

import math

import pytest

from tourism_analytics import metrics
from tourism_analytics.models import BenchmarkStat, CategoryStat, ForecastScenario, Segment


def make_stat(category, visitors, revenue, rating=4.0, count=1):
    return CategoryStat(
        category=category,
        count=count,
        total_visitors=visitors,
        total_revenue=revenue,
        avg_rating=rating,
        revenue_per_visitor=metrics.revenue_per_visitor(revenue, visitors)
    )


class TestRevenuePerVisitor:
    """Test revenue per visitor and share calculations."""

    def test_revenue_per_visitor(self):
        assert metrics.revenue_per_visitor(250000, 5000) == 50

    def test_zero_visitors_treated_as_one(self):
        result = metrics.revenue_per_visitor(1200.0, 0)
        assert result == 1200.0
        assert math.isfinite(result)

    def test_percentage_share(self):
        assert metrics.percentage_share(25, 200) == 12.5
        assert metrics.percentage_share(10, 0) == 0.0

    def test_growth_sign(self):
        assert metrics.growth_sign(3.2) == 'up'
        assert metrics.growth_sign(0) == 'up'
        assert metrics.growth_sign(-0.1) == 'down'


class TestRanking:
    """Test top and bottom performer selection."""

    def test_top_by_field(self):
        stats = [make_stat('Museums', 100, 1000), make_stat('Parks', 100, 3000), make_stat('Tours', 100, 2000)]
        assert metrics.top_by_field(stats, 'total_revenue').category == 'Parks'

    def test_top_by_field_ties_keep_input_order(self):
        stats = [make_stat('Museums', 100, 2000), make_stat('Parks', 100, 2000)]
        assert metrics.top_by_field(stats, 'total_revenue').category == 'Museums'
        assert metrics.bottom_by_field(stats, 'total_revenue').category == 'Museums'

    def test_empty_input(self):
        assert metrics.top_by_field([], 'total_revenue') is None
        assert metrics.bottom_by_field([], 'total_revenue') is None
        assert metrics.label_of(None) is None

    def test_bottom_by_field(self):
        stats = [make_stat('Museums', 100, 1000), make_stat('Parks', 100, 500)]
        assert metrics.bottom_by_field(stats, 'revenue_per_visitor').category == 'Parks'

    def test_first_label(self):
        segments = (Segment('18-24', 10, 10.0), Segment('25-34', 60, 60.0), Segment('35-44', 30, 30.0))
        assert metrics.first_label(segments) == '25-34'
        assert metrics.first_label(()) is None


class TestSummaries:
    """Test folding category stats into summaries."""

    def test_summary_is_fold_of_categories(self):
        stats = [
            make_stat('Museums', 5000, 250000, rating=4.5, count=10),
            make_stat('Parks', 15000, 150000, rating=4.1, count=20),
        ]
        summary = metrics.summarize_categories(stats)

        assert summary.total_attractions == 30
        assert summary.total_visitors == 20000
        assert summary.total_revenue == 400000
        assert summary.avg_rating == pytest.approx(4.2, abs=0.01)
        assert summary.derived is True

    def test_rating_plain_mean_without_visitors(self):
        stats = [make_stat('Museums', 0, 0, rating=4.0), make_stat('Parks', 0, 0, rating=3.0)]
        assert metrics.summarize_categories(stats).avg_rating == 3.5

    def test_empty_summary(self):
        summary = metrics.summarize_categories([])
        assert summary.total_attractions == 0
        assert summary.avg_rating == 0.0
        assert summary.total_revenue == 0

    def test_revenue_shares(self):
        stats = [make_stat('Museums', 10, 750), make_stat('Parks', 10, 250)]
        shares = metrics.revenue_shares(stats)
        assert [s.percentage for s in shares] == [75.0, 25.0]

    def test_segment_shares(self):
        segments = metrics.with_segment_shares([('Local', 3), ('Domestic', 1)])
        assert segments[0] == Segment('Local', 3, 75.0)
        assert segments[1].percentage == 25.0


class TestBenchmarksAndTrends:
    """Test benchmark deltas, trend fitting and scenario ordering."""

    def test_benchmark_delta(self):
        delta = metrics.benchmark_delta(BenchmarkStat('Revenue per Visitor', 40.0, 50.0, 60.0, ' USD'))

        assert delta.vs_industry == 10.0
        assert delta.vs_industry_pct == 25.0
        assert delta.gap_to_top == 10.0
        assert delta.gap_to_top_pct == pytest.approx(16.67, abs=0.01)
        assert delta.direction == 'up'

    def test_benchmark_delta_zero_industry(self):
        delta = metrics.benchmark_delta(BenchmarkStat('Capacity', 0.0, 70.0, 80.0, '%'))
        assert delta.vs_industry_pct == 0.0

    def test_benchmark_delta_below_industry(self):
        delta = metrics.benchmark_delta(BenchmarkStat('Satisfaction', 4.2, 3.9, 4.8, '/5'))
        assert delta.direction == 'down'

    def test_trend_growth_rate(self):
        assert metrics.trend_growth_rate([100, 110, 120]) == pytest.approx(9.09, abs=0.01)
        assert metrics.trend_growth_rate([120, 110, 100]) < 0

    def test_trend_growth_rate_short_or_zero_series(self):
        assert metrics.trend_growth_rate([100, 200]) == 0.0
        assert metrics.trend_growth_rate([0, 0, 0]) == 0.0

    def test_scenario_ordering(self):
        scenario = ForecastScenario('Jan', optimistic=90, realistic=100, pessimistic=80, confidence=85)
        assert not metrics.scenario_is_ordered(scenario)

        fixed = metrics.ordered_scenario(scenario)
        assert (fixed.pessimistic, fixed.realistic, fixed.optimistic) == (80, 90, 100)
        assert fixed.period == 'Jan'
        assert fixed.confidence == 85

    def test_series_from(self):
        points = [{'visitors': 10}, {'visitors': None}, {'visitors': 12.5}, {'other': 1}]
        assert metrics.series_from(points, 'visitors') == [10.0, 12.5]
