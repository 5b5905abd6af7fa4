"""
Author: Cameron Murphy (Student ID: 1049678, GitHub: 0x1049678II)
Date: July 12th 2025

Test response normalization across the shapes the metrics API has used.
"""

from unittest.mock import patch

import pytest

from tourism_analytics import metrics
from tourism_analytics import normalizer as norm
from tourism_analytics.models import Priority


class TestCategoryNormalization:
    """Test alias resolution for category stats."""

    def test_aliases_and_computed_revenue_per_visitor(self):
        stat = norm.normalize_category_stat({'name': 'Museums', 'visitors': 5000, 'revenue': 250000})

        assert stat.category == 'Museums'
        assert stat.total_visitors == 5000
        assert stat.total_revenue == 250000.0
        assert stat.revenue_per_visitor == 50.0

    def test_explicit_revenue_per_visitor_wins(self):
        stat = norm.normalize_category_stat({
            'category': 'Museums', 'totalVisitors': 5000, 'totalRevenue': 250000, 'revenuePerVisitor': 42.0
        })
        assert stat.revenue_per_visitor == 42.0

    def test_none_falls_through_to_next_alias(self):
        stat = norm.normalize_category_stat({'name': 'Parks', 'totalVisitors': None, 'visits': 30})
        assert stat.total_visitors == 30

    def test_numeric_strings_and_junk(self):
        stat = norm.normalize_category_stat({'name': 'Parks', 'totalRevenue': '1200.50', 'totalVisitors': 'lots'})
        assert stat.total_revenue == 1200.5
        assert stat.total_visitors == 0
        assert stat.revenue_per_visitor == 1200.5

    def test_non_finite_values_rejected(self):
        stat = norm.normalize_category_stat({'name': 'Parks', 'totalRevenue': 'nan', 'totalVisitors': 10})
        assert stat.total_revenue == 0.0
        assert stat.revenue_per_visitor == 0.0

    def test_integer_beyond_float_range_rejected(self):
        stat = norm.normalize_category_stat({'name': 'Parks', 'totalVisitors': 10 ** 400, 'totalRevenue': 900})
        assert stat.total_visitors == 0
        assert stat.total_revenue == 900.0

    def test_defaults_when_empty(self):
        stat = norm.normalize_category_stat({})
        assert stat.category == 'Unknown'
        assert stat.count == 0
        assert stat.total_visitors == 0
        assert stat.total_revenue == 0.0
        assert stat.growth_rate is None

    def test_missing_required_field_logged_not_raised(self):
        with patch('tourism_analytics.normalizer.logger') as mock_logger:
            norm.normalize_category_stat({'name': 'Museums'})

        logged = [call.kwargs for call in mock_logger.debug.call_args_list]
        assert any(entry['error_code'] == 'PARTIAL_DATA' and entry['details']['field'] == 'total_visitors'
                   for entry in logged)
        mock_logger.error.assert_not_called()

    def test_rating_clamped(self):
        assert norm.normalize_category_stat({'name': 'A', 'rating': 7}).avg_rating == 5.0
        assert norm.normalize_category_stat({'name': 'A', 'rating': -1}).avg_rating == 0.0


class TestBenchmarksAndOpportunities:
    """Test benchmark and improvement opportunity normalization."""

    @pytest.mark.parametrize('metric, unit', [
        ('Revenue per Visitor', ' USD'),
        ('Satisfaction Rating', '/5'),
        ('Capacity Utilization', '%'),
        ('Repeat Visits', ' units'),
    ])
    def test_default_units(self, metric, unit):
        benchmark = norm.normalize_benchmark({'metricName': metric, 'cityAverage': 10})
        assert benchmark.unit == unit

    def test_supplied_unit_kept(self):
        benchmark = norm.normalize_benchmark({
            'metric': 'Revenue per Visitor', 'industryAverage': 45.5, 'cityAverage': 50,
            'topPerformer': 70, 'unit': ' GBP'
        })
        assert benchmark.unit == ' GBP'
        assert benchmark.industry_avg == 45.5
        assert benchmark.top_performer == 70.0

    def test_priority_coercion(self):
        assert norm.normalize_priority('HIGH') is Priority.HIGH
        assert norm.normalize_priority(' Medium ') is Priority.MEDIUM
        assert norm.normalize_priority('urgent') is Priority.LOW

    def test_opportunity(self):
        opportunity = norm.normalize_opportunity({
            'attractionId': '12', 'attractionName': 'Old Town Fortress', 'category': 'Historical Sites',
            'issue': 'Low Satisfaction Rating', 'recommendations': ['Train staff', None], 'priority': 'high'
        })
        assert opportunity.attraction_id == 12
        assert opportunity.recommendations == ('Train staff',)
        assert opportunity.priority is Priority.HIGH
        assert opportunity.potential_impact == ''


class TestForecastNormalization:
    """Test forecast scenario and forecast metric normalization."""

    def test_scenario_aliases_and_default_confidence(self):
        scenario = norm.normalize_forecast_scenario({'month': 'Jan', 'high': 120, 'expected': 100, 'low': 80})
        assert scenario.period == 'Jan'
        assert scenario.confidence == 85.0
        assert metrics.scenario_is_ordered(scenario)

    def test_out_of_order_scenario_is_reordered_with_warning(self):
        with patch('tourism_analytics.normalizer.logger') as mock_logger:
            scenario = norm.normalize_forecast_scenario({
                'period': 'Feb', 'optimistic': 90, 'realistic': 100, 'pessimistic': 80, 'confidence': 150
            })

        assert (scenario.pessimistic, scenario.realistic, scenario.optimistic) == (80, 90, 100)
        assert scenario.confidence == 100.0
        mock_logger.warning.assert_called_once()

    def test_forecast_metrics_nested_and_accuracy_override(self):
        result = norm.normalize_forecast_metrics(
            {'forecastMetrics': {'nextMonthVisitors': 12000, 'nextMonthRevenue': 540000.0, 'accuracyScore': 80}},
            {'overall': 93.5}
        )
        assert result.next_month_visitors == 12000
        assert result.seasonal_index == 1.0
        assert result.accuracy_score == 93.5

    def test_forecast_metrics_without_accuracy(self):
        result = norm.normalize_forecast_metrics({'accuracyScore': 80}, {})
        assert result.accuracy_score == 80.0

    def test_model_accuracy_trend(self):
        accuracy = norm.normalize_model_accuracy({'overall': 91, 'trend': 'Sideways'})
        assert accuracy.trend == 'stable'


class TestSummaryNormalization:
    """Test summary precedence between source values and the category fold."""

    @pytest.fixture
    def stats(self):
        return (
            norm.normalize_category_stat({'name': 'Museums', 'attractionCount': 10, 'totalVisitors': 5000,
                                          'totalRevenue': 250000, 'averageRating': 4.5}),
            norm.normalize_category_stat({'name': 'Parks', 'attractionCount': 5, 'totalVisitors': 5000,
                                          'totalRevenue': 100000, 'averageRating': 4.1}),
        )

    def test_nothing_supplied_uses_fold(self, stats):
        summary = norm.normalize_summary({}, stats)
        assert summary == metrics.summarize_categories(stats)
        assert summary.derived is True

    def test_supplied_fields_win(self, stats):
        summary = norm.normalize_summary({'totalAttractions': 40}, stats)
        assert summary.total_attractions == 40
        assert summary.total_visitors == 10000
        assert summary.total_revenue == 350000
        assert summary.derived is False


class TestVisitorsAndSegments:
    """Test visitor patterns, extraction helpers and demographic segments."""

    def test_extract_list_accepts_bare_list(self):
        assert norm.extract_list([{'a': 1}], ('categories',)) == [{'a': 1}]
        assert norm.extract_list({'categoryStats': [1, 2]}, ('categories', 'categoryStats')) == [1, 2]
        assert norm.extract_list({'categories': 'nope'}, ('categories',)) == []

    def test_visitor_patterns_derived_from_distribution(self):
        patterns = norm.normalize_visitor_patterns({
            'weeklyDistribution': [{'day': 'Monday', 'visitors': 400}, {'day': 'Saturday', 'visitors': 800}]
        })
        assert patterns.busiest_day == 'Saturday'
        assert patterns.avg_daily_visitors == 600
        assert patterns.peak_hours == 'N/A'

    def test_visitor_growth_from_series(self):
        assert norm.visitor_growth_rate({'trends': [{'visits': 100}, {'visits': 110}, {'visits': 120}]}) == \
            pytest.approx(9.09, abs=0.01)
        assert norm.visitor_growth_rate({'growthRate': 3.5}) == 3.5

    def test_segments_from_mapping(self):
        segments = norm.normalize_segments({'18-24': 25, '25-34': 75})
        assert [(s.label, s.count, s.percentage) for s in segments] == [('18-24', 25, 25.0), ('25-34', 75, 75.0)]

    def test_segments_from_list_keep_supplied_percentages(self):
        segments = norm.normalize_segments([
            {'gender': 'Female', 'count': 51, 'percentage': 50.5},
            {'gender': 'Male', 'count': 49},
        ])
        assert segments[0].label == 'Female'
        assert segments[0].percentage == 50.5
        assert segments[1].percentage == 49.0

    def test_segments_from_unusable_shape(self):
        assert norm.normalize_segments('n/a') == ()

    def test_alert_defaults(self):
        alert = norm.normalize_alert({'title': 'Peak Season', 'type': 'CRITICAL'}, 2)
        assert alert.id == '3'
        assert alert.type == 'info'
