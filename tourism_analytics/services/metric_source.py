"""
Author: Cameron Murphy (Student ID: 1049678, GitHub: 0x1049678II)
Date: July 8th 2025

Async client for the tourism metrics API.

One coroutine per upstream concern - city metrics, category performance, benchmarks,
improvement recommendations, revenue, visitor trends, demographics and forecasts. Each
either returns the API's envelope ({"success": ..., "data": ..., "message": ...}) or
raises an UpstreamError. There are no retries here: a failed call fails immediately and
the orchestrator decides what to do about it.

The client uses aiohttp for non-blocking requests and works as an async context manager,
so the HTTP session is always closed properly.

Usage:
    async with MetricSourceClient() as client:
        envelope = await client.get_city_metrics(Filters(period=Period.MONTH))
"""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

import aiohttp
import structlog
from cachetools import TTLCache

from config.settings import Config
from tourism_analytics.exceptions import (
    AsyncTimeoutException, ExceptionHandler, InvalidConfigurationException,
    MetricSourceConnectionException
)
from tourism_analytics.models import Filters

logger = structlog.get_logger()

API_PREFIX = '/api/authority'

Params = List[Tuple[str, str]]


def build_params(filters: Filters, **options: Any) -> Params:
    """
    Query parameters in the form the metrics API expects.

    `period` is always sent; booleans are only sent when true, as "true"; lists
    become repeated keys; None is skipped.
    """
    params: Params = [('period', filters.period.value)]
    for key, value in options.items():
        if value is None or value is False:
            continue
        if value is True:
            params.append((key, 'true'))
        elif isinstance(value, (list, tuple)):
            params.extend((key, str(item)) for item in value)
        else:
            params.append((key, str(value)))
    return params


class MetricSourceClient:
    """
    Typed access to each upstream metrics endpoint.

    Attributes:
        base_url: Metrics API base URL
        token: Bearer token sent with every request, if configured
        response_cache: Optional TTL memo of successful envelopes (disabled when ttl is 0)
        session: aiohttp session, created on context entry
    """

    def __init__(self, base_url: str = None, token: str = None, cache_ttl: int = None,
                 session: Optional[aiohttp.ClientSession] = None):
        self.base_url = (base_url or Config.METRICS_API_BASE_URL or '').rstrip('/')
        if not self.base_url.startswith(('http://', 'https://')):
            raise InvalidConfigurationException('METRICS_API_BASE_URL', self.base_url, "must be an http(s) URL")
        self.token = token if token is not None else Config.METRICS_API_TOKEN

        ttl = Config.METRIC_CACHE_TTL if cache_ttl is None else cache_ttl
        if ttl < 0:
            raise InvalidConfigurationException('METRIC_CACHE_TTL', ttl, "cannot be negative")
        self.response_cache: Optional[TTLCache] = (
            TTLCache(maxsize=Config.METRIC_CACHE_SIZE, ttl=ttl) if ttl > 0 else None
        )

        self.session = session
        self._owns_session = session is None
        self.requests_made = 0
        self.cache_hits = 0

        logger.info("Metric source client initialized", base_url=self.base_url,
                    cache_enabled=self.response_cache is not None)

    async def __aenter__(self):
        """Async context manager entry."""
        if self.session is None:
            timeout = aiohttp.ClientTimeout(total=Config.REQUEST_TIMEOUT)
            connector = aiohttp.TCPConnector(limit=Config.MAX_CONCURRENT_REQUESTS)
            headers = {'User-Agent': 'Tourism-Analytics-Engine/1.0', 'Accept': 'application/json'}
            if self.token:
                headers['Authorization'] = f"Bearer {self.token}"

            self.session = aiohttp.ClientSession(timeout=timeout, connector=connector, headers=headers)
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.session and self._owns_session:
            await self.session.close()
            self.session = None

    async def _request(self, source: str, endpoint: str, params: Params) -> Dict[str, Any]:
        """Issue one GET and return the envelope, raising UpstreamError on failure."""
        if not self.session:
            raise MetricSourceConnectionException(source, None, "Session not initialized")

        cache_key = (endpoint, tuple(params))
        if self.response_cache is not None and cache_key in self.response_cache:
            self.cache_hits += 1
            logger.debug("Metric response retrieved from cache", source=source)
            return self.response_cache[cache_key]

        url = f"{self.base_url}{API_PREFIX}/{endpoint}"
        self.requests_made += 1

        try:
            async with self.session.get(url, params=params) as response:
                if response.status != 200:
                    response_text = await response.text()
                    ExceptionHandler.raise_for_status(response.status, source, endpoint, response_text)

                envelope = await response.json(content_type=None)
        except asyncio.TimeoutError:
            raise AsyncTimeoutException(source, Config.REQUEST_TIMEOUT)
        except aiohttp.ClientError as e:
            raise MetricSourceConnectionException(source, None, str(e))
        except ValueError as e:
            raise MetricSourceConnectionException(source, None, f"Invalid JSON: {e}")

        if not isinstance(envelope, dict):
            raise MetricSourceConnectionException(source, None, "Response body is not a JSON object")

        logger.info("Metric request completed", source=source, endpoint=endpoint,
                    success=envelope.get('success'))

        if self.response_cache is not None and envelope.get('success') is True:
            self.response_cache[cache_key] = envelope

        return envelope

    async def get_city_metrics(self, filters: Filters, include_comparisons: bool = True) -> Dict[str, Any]:
        """City-wide headline metrics across all attractions."""
        params = build_params(filters, includeComparisons=include_comparisons)
        return await self._request('city metrics', 'city-metrics', params)

    async def get_category_performance(self, filters: Filters,
                                       include_comparisons: bool = True) -> Dict[str, Any]:
        """Per-category visitor, revenue and rating totals."""
        params = build_params(filters, includeComparisons=include_comparisons)
        return await self._request('category performance', 'category-performance', params)

    async def get_tourism_insights(self, filters: Filters, include_forecasts: bool = True) -> Dict[str, Any]:
        """Alerts and trend insights."""
        params = build_params(filters, includeForecasts=include_forecasts)
        return await self._request('tourism insights', 'tourism-insights', params)

    async def get_performance_benchmarks(self, filters: Filters, metrics: List[str] = None,
                                         include_industry_data: bool = True) -> Dict[str, Any]:
        """City averages against industry averages and the top performer."""
        metrics = metrics or ['revenue_per_visitor', 'satisfaction_rating', 'capacity_utilization']
        params = build_params(filters, metrics=metrics, includeIndustryData=include_industry_data)
        return await self._request('benchmarks', 'benchmarks', params)

    async def get_improvement_recommendations(self, filters: Filters, include_ai_insights: bool = True,
                                              min_impact_threshold: float = 0.1) -> Dict[str, Any]:
        """Attraction-level issues with suggested fixes."""
        params = build_params(filters, includeAIInsights=include_ai_insights,
                              minImpactThreshold=min_impact_threshold)
        return await self._request('improvement recommendations', 'improvement-recommendations', params)

    async def get_city_revenue(self, filters: Filters, include_comparisons: bool = True) -> Dict[str, Any]:
        """Revenue analysis, broken down by the filter's breakdown (category by default)."""
        breakdown = filters.breakdown.value if filters.breakdown else 'category'
        params = build_params(filters, breakdown=breakdown, includeComparisons=include_comparisons)
        return await self._request('revenue analysis', 'revenue', params)

    async def get_visitor_trends(self, filters: Filters, group_by: str = 'day',
                                 include_revenue: bool = True) -> Dict[str, Any]:
        """Visitor counts over time."""
        params = build_params(filters, groupBy=group_by, includeRevenue=include_revenue,
                              includeComparisons=True)
        return await self._request('visitor trends', 'visitor-trends', params)

    async def get_demographics(self, filters: Filters, breakdown: str = 'all') -> Dict[str, Any]:
        """Visitor age, gender and origin breakdowns."""
        params = build_params(filters, breakdown=breakdown, includeComparisons=True)
        return await self._request('demographics', 'demographics', params)

    async def get_predictive_analytics(self, filters: Filters) -> Dict[str, Any]:
        """Forecast metrics, scenarios and trend factors."""
        params = build_params(filters, includeForecasts=True, forecastPeriod=filters.forecast_horizon,
                              attractionId=filters.attraction_id)
        return await self._request('predictive analytics', 'predictive-analytics', params)

    async def get_forecast_accuracy(self, filters: Filters) -> Dict[str, Any]:
        """Accuracy of past forecasts."""
        return await self._request('forecast accuracy', 'forecast-accuracy', build_params(filters))

    def get_service_statistics(self) -> Dict[str, Any]:
        """Get client statistics for monitoring."""
        return {
            'requests_made': self.requests_made,
            'cache': {
                'enabled': self.response_cache is not None,
                'size': len(self.response_cache) if self.response_cache is not None else 0,
                'maxsize': self.response_cache.maxsize if self.response_cache is not None else 0,
                'ttl': self.response_cache.ttl if self.response_cache is not None else 0,
                'hits': self.cache_hits
            },
            'session_status': {
                'session_active': self.session is not None and not self.session.closed
            }
        }
