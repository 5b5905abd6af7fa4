"""
Author: Cameron Murphy (Student ID: 1049678, GitHub: 0x1049678II)
Date: July 7th 2025

Demo data synthesizer for dashboards.

When live data can't be used - the caller isn't signed in with the right role, or any
upstream call failed - the dashboard still has to render something sensible. This module
builds complete view models from a fixed catalogue of attraction categories with a bit of
random jitter on top, so the demo doesn't look frozen.

The synthetic data keeps every invariant the live path keeps: revenue per visitor comes
from the same calculator, the summary is the fold of the synthesized categories, forecast
bands are ordered, and demographic counts add up to the total. All randomness goes through
one numpy Generator, so a fixed seed gives identical output every time.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import structlog

from config.settings import Config
from tourism_analytics import metrics
from tourism_analytics.models import (
    Alert, AttractionComparisonView, BenchmarkStat, CategoryStat, CityOverviewView,
    DailyVisitors, DataOrigin, DemographicInsightsView, Filters, ForecastMetrics,
    ForecastScenario, ImprovementOpportunity, ModelAccuracy, Period,
    PredictiveAnalyticsView, PredictiveInsights, Priority, RevenueInsights, Segment,
    TopAttraction, TrendFactor, VisitorPatterns
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class CategorySeed:
    """Baseline figures for one demo category (monthly)."""
    name: str
    base_revenue: int
    base_visits: int
    attractions: int


DEMO_CATEGORIES: Tuple[CategorySeed, ...] = (
    CategorySeed('Museums', 250000, 4500, 18),
    CategorySeed('Parks & Gardens', 180000, 6200, 24),
    CategorySeed('Historical Sites', 320000, 3800, 15),
    CategorySeed('Entertainment', 290000, 5100, 21),
    CategorySeed('Cultural Centers', 210000, 3400, 12),
    CategorySeed('Tours & Experiences', 380000, 2900, 27),
)

DEMO_ATTRACTIONS = {
    'Museums': 'Central Art Museum',
    'Parks & Gardens': 'Riverside Botanical Gardens',
    'Historical Sites': 'Old Town Fortress',
    'Entertainment': 'Harbour Light Theatre',
    'Cultural Centers': 'Heritage Cultural Centre',
    'Tours & Experiences': 'City Walking Tours',
}

# Jitter spreads, added on top of the baselines
REVENUE_SPREAD = 50000
VISITS_SPREAD = 1000

PERIOD_SCALE = {
    Period.WEEK: 0.25,
    Period.MONTH: 1.0,
    Period.QUARTER: 3.0,
    Period.YEAR: 12.0,
}

WEEKDAY_BASELINE = (
    ('Monday', 800), ('Tuesday', 750), ('Wednesday', 820), ('Thursday', 890),
    ('Friday', 1100), ('Saturday', 1350), ('Sunday', 1200),
)

INDUSTRY_BENCHMARKS = {
    'revenue_per_visitor': 45.50,
    'satisfaction_rating': 4.2,
    'capacity_utilization': 75.0,
}

AGE_WEIGHTS = (('18-24', 0.18), ('25-34', 0.29), ('35-44', 0.22), ('45-54', 0.16), ('55+', 0.15))
GENDER_WEIGHTS = (('Female', 0.51), ('Male', 0.47), ('Other', 0.02))
ORIGIN_WEIGHTS = (('Local', 0.38), ('Domestic', 0.34), ('Europe', 0.14), ('North America', 0.08), ('Asia', 0.06))
PURPOSE_WEIGHTS = (('Leisure', 0.45), ('Business', 0.25), ('Education', 0.20), ('Cultural Events', 0.07), ('Other', 0.03))

DEMO_ALERTS = (
    Alert('1', 'success', 'Revenue Target Exceeded', 'Monthly revenue goals exceeded by 12%'),
    Alert('2', 'info', 'Peak Season Alert', 'Summer tourism season showing strong performance'),
    Alert('3', 'warning', 'High Capacity', 'Some attractions approaching capacity limits'),
)

DEMO_TREND_FACTORS = (
    TrendFactor('Weather Impact', 'positive',
                'Favorable weather conditions expected to increase visitors by 15%', 15, 'weather'),
    TrendFactor('Event Calendar', 'positive',
                '3 major events scheduled, potential 25% visitor spike', 25, 'events'),
    TrendFactor('Economic Indicators', 'positive',
                'Strong economic outlook supporting tourism growth', 8, 'economic'),
    TrendFactor('Seasonal Patterns', 'positive',
                'Peak season approaching, 40% increase expected', 40, 'seasonal'),
)

DEMO_INSIGHTS = PredictiveInsights(
    key_predictions=(
        "Tourism growth expected to accelerate in next quarter",
        "Revenue projections show steady increase over previous year",
        "Peak season demand will approach capacity at top attractions",
    ),
    risk_factors=(
        "Weather dependency remains high",
        "Economic uncertainty may impact international visitors",
    ),
    opportunities=(
        "Digital marketing initiatives showing strong ROI",
        "New attraction categories gaining traction",
    ),
)

PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}
MAX_OPPORTUNITIES = 8


class FallbackSynthesizer:
    """
    Builds demo view models from a seeded random source.

    Args:
        rng: numpy Generator to draw from. Takes precedence over `seed`.
        seed: Seed for a fresh Generator. Defaults to Config.FALLBACK_SEED; None means
            fresh entropy, so the demo varies between requests.
        catalogue: Category baselines to build from.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None,
                 catalogue: Sequence[CategorySeed] = DEMO_CATEGORIES):
        if rng is None:
            seed = seed if seed is not None else Config.FALLBACK_SEED
            rng = np.random.default_rng(seed)
        self.rng = rng
        self.catalogue = tuple(catalogue)

        logger.debug("Fallback synthesizer created", seed=seed, categories=len(self.catalogue))

    def _jitter(self, spread: float) -> float:
        return float(self.rng.uniform(0, spread))

    def _jitter_int(self, spread: int) -> int:
        return int(self.rng.integers(0, spread))

    def _allocate(self, total: int, weights: Sequence[Tuple[str, float]]) -> Tuple[Segment, ...]:
        """Split `total` across labelled weights so the counts add up exactly."""
        probs = np.array([weight for _, weight in weights])
        counts = self.rng.multinomial(total, probs / probs.sum())
        return metrics.with_segment_shares(
            (label, int(count)) for (label, _), count in zip(weights, counts)
        )

    def category_stats(self, period: Period = Period.MONTH) -> Tuple[CategoryStat, ...]:
        """One CategoryStat per catalogue entry, scaled to the period."""
        scale = PERIOD_SCALE[period]
        stats = []
        for seed in self.catalogue:
            revenue = round((seed.base_revenue + self._jitter_int(REVENUE_SPREAD)) * scale, 2)
            visitors = int(round((seed.base_visits + self._jitter_int(VISITS_SPREAD)) * scale))
            stats.append(CategoryStat(
                category=seed.name,
                count=seed.attractions + self._jitter_int(5),
                total_visitors=visitors,
                total_revenue=revenue,
                avg_rating=round(4.0 + self._jitter(1.0), 2),
                revenue_per_visitor=metrics.revenue_per_visitor(revenue, visitors),
                growth_rate=round(5 + self._jitter(15), 1)
            ))
        return tuple(stats)

    def _weekly_distribution(self) -> Tuple[DailyVisitors, ...]:
        return tuple(
            DailyVisitors(day, base + self._jitter_int(100))
            for day, base in WEEKDAY_BASELINE
        )

    def city_overview(self, filters: Filters) -> CityOverviewView:
        """Demo city overview."""
        stats = self.category_stats(filters.period)
        summary = metrics.summarize_categories(stats)
        scale = PERIOD_SCALE[filters.period]

        top_category = metrics.top_by_field(stats, 'total_revenue')
        top_attraction = TopAttraction(
            name=DEMO_ATTRACTIONS.get(top_category.category, 'Central Art Museum') if top_category else 'N/A',
            rating=4.7,
            visits=int(round((3200 + self._jitter_int(500)) * scale))
        )

        distribution = self._weekly_distribution()
        busiest = metrics.top_by_field(distribution, 'visitors')

        growth_rate = float(np.average(
            [stat.growth_rate for stat in stats],
            weights=[max(stat.total_visitors, 1) for stat in stats]
        ))

        return CityOverviewView(
            dashboard='city_overview',
            data_origin=DataOrigin.FALLBACK,
            filters=filters,
            summary=summary,
            growth_rate=round(growth_rate, 1),
            category_stats=stats,
            top_attraction=top_attraction,
            revenue_insights=RevenueInsights(
                peak_day='Saturday',
                peak_month='July',
                revenue_growth=round(14.2 + self._jitter(5), 1),
                visitor_increase=round(8.7 + self._jitter(6), 1),
                top_revenue_attraction=top_attraction.name
            ),
            visitor_patterns=VisitorPatterns(
                busiest_day=busiest.day,
                peak_hours='10AM - 4PM',
                avg_daily_visitors=int(round(sum(d.visitors for d in distribution) / len(distribution))),
                weekly_distribution=distribution
            ),
            alerts=DEMO_ALERTS,
            top_category=metrics.label_of(top_category),
            category_revenue_share=metrics.revenue_shares(stats)
        )

    def benchmarks(self, stats: Sequence[CategoryStat]) -> Tuple[BenchmarkStat, ...]:
        """Benchmark trio derived from the synthesized categories."""
        summary = metrics.summarize_categories(stats)
        city_rpv = metrics.revenue_per_visitor(summary.total_revenue, summary.total_visitors)
        utilization = 60 + self._jitter(30)

        industry = INDUSTRY_BENCHMARKS
        return (
            BenchmarkStat('Revenue per Visitor', industry['revenue_per_visitor'], round(city_rpv, 2),
                          round(max(city_rpv * 1.2, industry['revenue_per_visitor'] * 1.1), 2), ' USD'),
            BenchmarkStat('Satisfaction Rating', industry['satisfaction_rating'], summary.avg_rating,
                          round(min(max(summary.avg_rating * 1.1, industry['satisfaction_rating'] * 1.05), 5.0), 2),
                          '/5'),
            BenchmarkStat('Capacity Utilization', industry['capacity_utilization'], round(utilization, 2),
                          round(min(max(utilization * 1.1, industry['capacity_utilization'] * 1.05), 100.0), 2),
                          '%'),
        )

    def opportunities(self, stats: Sequence[CategoryStat]) -> Tuple[ImprovementOpportunity, ...]:
        """Run the improvement rules over one demo attraction per category."""
        found: List[Tuple[ImprovementOpportunity, float]] = []

        for attraction_id, stat in enumerate(stats, start=1):
            name = DEMO_ATTRACTIONS.get(stat.category, f"{stat.category} Attraction")
            rating = round(2.8 + self._jitter(2.0), 1)
            visits = 3 + self._jitter_int(58)
            rpv = round(10 + self._jitter(50), 2)
            found.extend(_improvement_rules(attraction_id, name, stat.category, rating, visits, rpv))

        found.sort(key=lambda item: (PRIORITY_ORDER[item[0].priority], -item[1]))
        return tuple(opportunity for opportunity, _ in found[:MAX_OPPORTUNITIES])

    def attraction_comparison(self, filters: Filters) -> AttractionComparisonView:
        """Demo attraction comparison."""
        stats = self.category_stats(filters.period)
        benchmarks = self.benchmarks(stats)

        return AttractionComparisonView(
            dashboard='attraction_comparison',
            data_origin=DataOrigin.FALLBACK,
            filters=filters,
            summary=metrics.summarize_categories(stats),
            category_stats=stats,
            benchmarks=benchmarks,
            benchmark_deltas=tuple(metrics.benchmark_delta(b) for b in benchmarks),
            opportunities=self.opportunities(stats),
            top_performer=metrics.label_of(metrics.top_by_field(stats, 'revenue_per_visitor')),
            bottom_performer=metrics.label_of(metrics.bottom_by_field(stats, 'revenue_per_visitor'))
        )

    def scenarios(self, baseline: float, horizon: int, label: str,
                  precision: int = 2) -> Tuple[ForecastScenario, ...]:
        """
        Compounding forecast with a band that widens further out.

        Args:
            baseline: Current-period value to project from
            horizon: Number of periods to project
            label: Period label prefix
            precision: Decimal places to round projections to
        """
        scenarios = []
        value = baseline
        for step in range(horizon):
            value *= 1 + 0.01 + self._jitter(0.03)
            # Widens with distance, capped so the pessimistic case stays positive
            band = min(0.5, 0.05 + 0.02 * step)
            scenarios.append(ForecastScenario(
                period=f"{label} {step + 1}",
                optimistic=round(value * (1 + band), precision),
                realistic=round(value, precision),
                pessimistic=round(value * (1 - band), precision),
                confidence=round(max(50.0, 92.0 - 4 * step - self._jitter(2)), 1)
            ))
        return tuple(scenarios)

    def predictive_analytics(self, filters: Filters) -> PredictiveAnalyticsView:
        """Demo forecasts, projected from a synthesized city baseline."""
        stats = self.category_stats(filters.period)
        summary = metrics.summarize_categories(stats)
        label = filters.period.value.title()
        horizon = filters.forecast_horizon

        revenue_scenarios = self.scenarios(summary.total_revenue, horizon, label)
        visitor_scenarios = self.scenarios(summary.total_visitors, horizon, label, precision=0)

        overall = round(90 + self._jitter(6), 1)
        accuracy = ModelAccuracy(
            overall=overall,
            visitor_accuracy=round(overall - self._jitter(1.5), 1),
            revenue_accuracy=round(min(overall + self._jitter(1.5), 100.0), 1),
            trend='improving'
        )

        growth_rate = metrics.trend_growth_rate([s.realistic for s in visitor_scenarios])
        forecast_metrics = ForecastMetrics(
            next_month_visitors=int(visitor_scenarios[0].realistic) if visitor_scenarios else 0,
            next_month_revenue=revenue_scenarios[0].realistic if revenue_scenarios else 0.0,
            quarterly_revenue=round(sum(s.realistic for s in revenue_scenarios[:3]), 2),
            seasonal_index=round(1.0 + self._jitter(0.3), 2),
            accuracy_score=accuracy.overall,
            growth_rate=growth_rate
        )

        return PredictiveAnalyticsView(
            dashboard='predictive_analytics',
            data_origin=DataOrigin.FALLBACK,
            filters=filters,
            forecast_metrics=forecast_metrics,
            revenue_scenarios=revenue_scenarios,
            visitor_scenarios=visitor_scenarios,
            trend_factors=DEMO_TREND_FACTORS,
            model_accuracy=accuracy,
            insights=DEMO_INSIGHTS,
            growth_trend=metrics.growth_sign(growth_rate)
        )

    def demographic_insights(self, filters: Filters) -> DemographicInsightsView:
        """Demo demographics; every breakdown sums to the same visitor total."""
        total = int(round((28400 + self._jitter_int(5000)) * PERIOD_SCALE[filters.period]))
        age_groups = self._allocate(total, AGE_WEIGHTS)
        origins = self._allocate(total, ORIGIN_WEIGHTS)

        return DemographicInsightsView(
            dashboard='demographic_insights',
            data_origin=DataOrigin.FALLBACK,
            filters=filters,
            total_visitors=total,
            growth_rate=round(8.7 + self._jitter(6), 1),
            age_groups=age_groups,
            genders=self._allocate(total, GENDER_WEIGHTS),
            origins=origins,
            visit_purposes=self._allocate(total, PURPOSE_WEIGHTS),
            dominant_age_group=metrics.first_label(age_groups),
            top_origin=metrics.first_label(origins)
        )


def _improvement_rules(attraction_id: int, name: str, category: str, rating: float,
                       visits: int, rpv: float) -> List[Tuple[ImprovementOpportunity, float]]:
    """Issue rules for one attraction, each paired with its impact score."""
    found = []

    def add(issue, description, impact, recommendations, priority, score):
        found.append((ImprovementOpportunity(
            attraction_id=attraction_id,
            attraction_name=name,
            category=category,
            issue=issue,
            description=description,
            potential_impact=impact,
            recommendations=recommendations,
            priority=priority
        ), score))

    if rating < 3.5:
        add('Low Satisfaction Rating',
            f"Current rating of {rating:.1f}/5 is below recommended threshold",
            f"+{(4.0 - rating) * visits * 0.1:.0f} additional visitors",
            ('Improve service quality and visitor experience',
             'Address common complaints from visitor feedback',
             'Invest in staff training and facility upgrades'),
            Priority.HIGH if rating < 3.0 else Priority.MEDIUM,
            (4.0 - rating) * 0.3)

    if rpv < 25 and visits > 5:
        add('Low Revenue per Visitor',
            f"Revenue per visitor (${rpv:.2f}) below market average",
            f"+${(30 - rpv) * visits:.0f} monthly revenue",
            ('Introduce premium experiences or add-ons',
             'Optimize pricing strategy',
             'Create package deals with other attractions'),
            Priority.HIGH if rpv < 15 else Priority.MEDIUM,
            (30 - rpv) * 0.02)

    if visits < 10:
        add('Low Visitor Volume',
            f"Only {visits} visits in the last 30 days",
            f"+{round(visits * 1.5)} potential monthly visitors",
            ('Increase marketing and promotional activities',
             'Partner with travel agencies and tour operators'),
            Priority.HIGH if visits < 5 else Priority.MEDIUM,
            (25 - visits) * 0.04)

    if rating > 4.0 and visits > 20:
        add('Expansion Opportunity',
            f"High-performing attraction with {rating:.1f}/5 rating and {visits} recent visits",
            f"+{round(visits * 0.3)} visitors through capacity expansion",
            ('Consider expanding capacity or operating hours',
             'Create VIP or premium tier offerings'),
            Priority.LOW,
            visits * 0.01)

    return found
