"""
Author: Cameron Murphy (Student ID: 1049678, GitHub: 0x1049678II)
Date: July 9th 2025

Dashboard recipes.

A recipe is everything the orchestrator needs to know about one dashboard: which role
may see live figures, which metric source calls to make, how to assemble their payloads
into a live view model, and how to synthesize the demo equivalent. Adding a dashboard
means adding a recipe here, not another fetch-and-fallback code path.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Mapping

from tourism_analytics import metrics
from tourism_analytics import normalizer as norm
from tourism_analytics.fallback import FallbackSynthesizer
from tourism_analytics.models import (
    AttractionComparisonView, CityOverviewView, DataOrigin, DemographicInsightsView,
    Filters, PredictiveAnalyticsView, Role, ViewModel
)
from tourism_analytics.services.metric_source import MetricSourceClient

CallFactory = Callable[[MetricSourceClient, Filters], Awaitable[Dict[str, Any]]]
Assembler = Callable[[Mapping[str, Any], Filters], ViewModel]
Synthesizer = Callable[[FallbackSynthesizer, Filters], ViewModel]

CATEGORY_LIST_ALIASES = ('categories', 'categoryStats', 'categoryPerformance', 'data')


@dataclass(frozen=True)
class DashboardRecipe:
    """
    One dashboard's fetch, assembly and fallback.

    Attributes:
        name: Dashboard identifier
        required_role: Role that may see live data
        calls: Ordered mapping of payload key to call factory
        assemble: Builds the live view from the `data` of each successful call
        synthesize: Builds the demo view
    """
    name: str
    required_role: Role
    calls: Mapping[str, CallFactory]
    assemble: Assembler
    synthesize: Synthesizer


def _category_stats(payload: Any):
    return tuple(norm.normalize_category_stat(item)
                 for item in norm.extract_list(payload, CATEGORY_LIST_ALIASES))


def assemble_city_overview(payloads: Mapping[str, Any], filters: Filters) -> CityOverviewView:
    """Live city overview from city metrics, categories, insights, revenue and visitor trends."""
    city = payloads['city_metrics']
    stats = _category_stats(payloads['category_performance'])
    summary = norm.normalize_summary(city, stats)

    growth_rate, supplied = norm.resolve(city, norm.VISITOR_TREND_FIELDS['growth_rate'])
    if not supplied:
        growth_rate = norm.visitor_growth_rate(payloads['visitor_trends'])

    top_category = metrics.top_by_field(stats, 'total_revenue')
    alerts = tuple(norm.normalize_alert(item, index) for index, item in
                   enumerate(norm.extract_list(payloads['tourism_insights'], ('alerts', 'insights'))))

    return CityOverviewView(
        dashboard='city_overview',
        data_origin=DataOrigin.LIVE,
        filters=filters,
        summary=summary,
        growth_rate=growth_rate,
        category_stats=stats,
        top_attraction=norm.normalize_top_attraction(norm.lookup(city, 'topAttraction')),
        revenue_insights=norm.normalize_revenue_insights(payloads['revenue'], payloads['visitor_trends']),
        visitor_patterns=norm.normalize_visitor_patterns(payloads['visitor_trends']),
        alerts=alerts,
        top_category=metrics.label_of(top_category),
        category_revenue_share=metrics.revenue_shares(stats)
    )


def assemble_attraction_comparison(payloads: Mapping[str, Any], filters: Filters) -> AttractionComparisonView:
    """Live comparison from categories, benchmarks, recommendations and city metrics."""
    stats = _category_stats(payloads['category_performance'])
    benchmarks = tuple(norm.normalize_benchmark(item) for item in
                       norm.extract_list(payloads['benchmarks'], ('benchmarks', 'metrics')))
    opportunities = tuple(norm.normalize_opportunity(item) for item in
                          norm.extract_list(payloads['recommendations'], ('recommendations', 'opportunities')))

    return AttractionComparisonView(
        dashboard='attraction_comparison',
        data_origin=DataOrigin.LIVE,
        filters=filters,
        summary=norm.normalize_summary(payloads['city_metrics'], stats),
        category_stats=stats,
        benchmarks=benchmarks,
        benchmark_deltas=tuple(metrics.benchmark_delta(b) for b in benchmarks),
        opportunities=opportunities,
        top_performer=metrics.label_of(metrics.top_by_field(stats, 'revenue_per_visitor')),
        bottom_performer=metrics.label_of(metrics.bottom_by_field(stats, 'revenue_per_visitor'))
    )


def assemble_predictive_analytics(payloads: Mapping[str, Any], filters: Filters) -> PredictiveAnalyticsView:
    """Live forecasts; the accuracy endpoint feeds the model accuracy panel."""
    predictive = payloads['predictive_analytics']
    accuracy = payloads['forecast_accuracy']

    forecast_metrics = norm.normalize_forecast_metrics(predictive, accuracy)
    return PredictiveAnalyticsView(
        dashboard='predictive_analytics',
        data_origin=DataOrigin.LIVE,
        filters=filters,
        forecast_metrics=forecast_metrics,
        revenue_scenarios=tuple(norm.normalize_forecast_scenario(item) for item in
                                norm.extract_list(predictive, ('revenueScenarios', 'revenueForecasts'))),
        visitor_scenarios=tuple(norm.normalize_forecast_scenario(item) for item in
                                norm.extract_list(predictive, ('visitorScenarios', 'visitorForecasts'))),
        trend_factors=tuple(norm.normalize_trend_factor(item) for item in
                            norm.extract_list(predictive, ('trendFactors', 'factors'))),
        model_accuracy=norm.normalize_model_accuracy(accuracy),
        insights=norm.normalize_insights(predictive),
        growth_trend=metrics.growth_sign(forecast_metrics.growth_rate)
    )


def assemble_demographic_insights(payloads: Mapping[str, Any], filters: Filters) -> DemographicInsightsView:
    """Live demographics, one segment list per breakdown."""
    data = payloads['demographics']
    values, _ = norm.normalize_fields('DemographicInsights', data, norm.DEMOGRAPHIC_FIELDS)

    def segments(*aliases):
        for alias in aliases:
            raw = norm.lookup(data, alias)
            if raw is not None:
                return norm.normalize_segments(raw)
        return ()

    age_groups = segments('demographics.age', 'ageGroups')
    origins = segments('demographics.location', 'demographics.origin', 'origins')

    return DemographicInsightsView(
        dashboard='demographic_insights',
        data_origin=DataOrigin.LIVE,
        filters=filters,
        total_visitors=values['total_visitors'],
        growth_rate=values['growth_rate'],
        age_groups=age_groups,
        genders=segments('demographics.gender', 'genders'),
        origins=origins,
        visit_purposes=segments('demographics.purpose', 'visitPurposes'),
        dominant_age_group=metrics.first_label(age_groups),
        top_origin=metrics.first_label(origins)
    )


RECIPES: Dict[str, DashboardRecipe] = {
    'city_overview': DashboardRecipe(
        name='city_overview',
        required_role=Role.AUTHORITY,
        calls={
            'city_metrics': lambda source, filters: source.get_city_metrics(filters),
            'category_performance': lambda source, filters: source.get_category_performance(filters),
            'tourism_insights': lambda source, filters: source.get_tourism_insights(filters),
            'revenue': lambda source, filters: source.get_city_revenue(filters),
            'visitor_trends': lambda source, filters: source.get_visitor_trends(filters),
        },
        assemble=assemble_city_overview,
        synthesize=lambda synthesizer, filters: synthesizer.city_overview(filters)
    ),
    'attraction_comparison': DashboardRecipe(
        name='attraction_comparison',
        required_role=Role.AUTHORITY,
        calls={
            'category_performance': lambda source, filters: source.get_category_performance(filters),
            'benchmarks': lambda source, filters: source.get_performance_benchmarks(filters),
            'recommendations': lambda source, filters: source.get_improvement_recommendations(filters),
            'city_metrics': lambda source, filters: source.get_city_metrics(filters),
        },
        assemble=assemble_attraction_comparison,
        synthesize=lambda synthesizer, filters: synthesizer.attraction_comparison(filters)
    ),
    'predictive_analytics': DashboardRecipe(
        name='predictive_analytics',
        required_role=Role.AUTHORITY,
        calls={
            'predictive_analytics': lambda source, filters: source.get_predictive_analytics(filters),
            'forecast_accuracy': lambda source, filters: source.get_forecast_accuracy(filters),
        },
        assemble=assemble_predictive_analytics,
        synthesize=lambda synthesizer, filters: synthesizer.predictive_analytics(filters)
    ),
    'demographic_insights': DashboardRecipe(
        name='demographic_insights',
        required_role=Role.AUTHORITY,
        calls={
            'demographics': lambda source, filters: source.get_demographics(filters),
        },
        assemble=assemble_demographic_insights,
        synthesize=lambda synthesizer, filters: synthesizer.demographic_insights(filters)
    ),
}
