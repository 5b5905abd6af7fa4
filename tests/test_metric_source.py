"""
Author: Cameron Murphy (Student ID: 1049678, GitHub: 0x1049678II)
Date: July 13th 2025

Test the metric source client against a fake aiohttp session.
"""

import asyncio

import pytest

from tourism_analytics.exceptions import (
    AsyncTimeoutException, InvalidConfigurationException, MetricNotFoundException,
    MetricSourceConnectionException, RateLimitExceededException, UpstreamAuthException, UpstreamError
)
from tourism_analytics.models import Breakdown, Filters, Period
from tourism_analytics.services.metric_source import MetricSourceClient, build_params


class FakeResponse:
    """Minimal stand-in for aiohttp.ClientResponse."""

    def __init__(self, status=200, body=None, text=''):
        self.status = status
        self.body = body
        self._text = text

    async def json(self, content_type=None):
        if isinstance(self.body, Exception):
            raise self.body
        return self.body

    async def text(self):
        return self._text


class FakeRequest:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error

    async def __aenter__(self):
        if self.error:
            raise self.error
        return self.response

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class FakeSession:
    """Records GET calls and replays queued responses."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []
        self.closed = False

    def get(self, url, params=None):
        self.calls.append((url, params))
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            return FakeRequest(error=outcome)
        return FakeRequest(response=outcome)


def make_client(session, cache_ttl=0):
    return MetricSourceClient(base_url='http://metrics.test/', token='secret', cache_ttl=cache_ttl, session=session)


class TestBuildParams:
    """Test query parameter encoding."""

    def test_period_always_first(self):
        assert build_params(Filters(period=Period.YEAR)) == [('period', 'year')]

    def test_booleans_lists_and_none(self):
        params = build_params(Filters(), includeComparisons=True, includeForecasts=False,
                              metrics=['revenue_per_visitor', 'satisfaction_rating'], attractionId=None)
        assert params == [
            ('period', 'month'),
            ('includeComparisons', 'true'),
            ('metrics', 'revenue_per_visitor'),
            ('metrics', 'satisfaction_rating'),
        ]


class TestMetricSourceClient:
    """Test requests, status mapping and caching."""

    @pytest.fixture
    def envelope(self):
        return {'success': True, 'data': {'totalVisitors': 1200}}

    @pytest.mark.asyncio
    async def test_get_city_metrics(self, envelope):
        session = FakeSession(FakeResponse(body=envelope))
        client = make_client(session)

        result = await client.get_city_metrics(Filters(period=Period.QUARTER))

        assert result == envelope
        url, params = session.calls[0]
        assert url == 'http://metrics.test/api/authority/city-metrics'
        assert params == [('period', 'quarter'), ('includeComparisons', 'true')]
        assert client.requests_made == 1

    @pytest.mark.asyncio
    async def test_endpoint_paths(self, envelope):
        session = FakeSession(FakeResponse(body=envelope))
        client = make_client(session)
        filters = Filters()

        await client.get_category_performance(filters)
        await client.get_tourism_insights(filters)
        await client.get_performance_benchmarks(filters)
        await client.get_improvement_recommendations(filters)
        await client.get_city_revenue(filters)
        await client.get_visitor_trends(filters)
        await client.get_demographics(filters)
        await client.get_predictive_analytics(filters)
        await client.get_forecast_accuracy(filters)

        paths = [url.rsplit('/api/authority/', 1)[1] for url, _ in session.calls]
        assert paths == [
            'category-performance', 'tourism-insights', 'benchmarks', 'improvement-recommendations',
            'revenue', 'visitor-trends', 'demographics', 'predictive-analytics', 'forecast-accuracy'
        ]

    @pytest.mark.asyncio
    async def test_revenue_breakdown_from_filters(self, envelope):
        session = FakeSession(FakeResponse(body=envelope))
        client = make_client(session)

        await client.get_city_revenue(Filters())
        await client.get_city_revenue(Filters(breakdown=Breakdown.ATTRACTION))

        assert ('breakdown', 'category') in session.calls[0][1]
        assert ('breakdown', 'attraction') in session.calls[1][1]

    @pytest.mark.asyncio
    async def test_predictive_params(self, envelope):
        session = FakeSession(FakeResponse(body=envelope))
        client = make_client(session)

        await client.get_predictive_analytics(Filters(attraction_id=9, forecast_horizon=3))

        params = session.calls[0][1]
        assert ('forecastPeriod', '3') in params
        assert ('attractionId', '9') in params

    @pytest.mark.asyncio
    @pytest.mark.parametrize('status, expected', [
        (401, UpstreamAuthException),
        (403, UpstreamAuthException),
        (404, MetricNotFoundException),
        (429, RateLimitExceededException),
        (500, MetricSourceConnectionException),
        (503, MetricSourceConnectionException),
    ])
    async def test_status_mapping(self, status, expected):
        client = make_client(FakeSession(FakeResponse(status=status, text='upstream says no')))

        with pytest.raises(expected) as exc_info:
            await client.get_city_metrics(Filters())

        assert isinstance(exc_info.value, UpstreamError)
        assert exc_info.value.source == 'city metrics'

    @pytest.mark.asyncio
    async def test_server_error_details(self):
        client = make_client(FakeSession(FakeResponse(status=502, text='bad gateway')))

        with pytest.raises(MetricSourceConnectionException) as exc_info:
            await client.get_demographics(Filters())

        assert exc_info.value.details['status_code'] == 502
        assert exc_info.value.details['response'] == 'bad gateway'

    @pytest.mark.asyncio
    async def test_timeout(self):
        client = make_client(FakeSession(asyncio.TimeoutError()))

        with pytest.raises(AsyncTimeoutException):
            await client.get_visitor_trends(Filters())

    @pytest.mark.asyncio
    async def test_non_object_body_rejected(self):
        client = make_client(FakeSession(FakeResponse(body=[1, 2, 3])))

        with pytest.raises(MetricSourceConnectionException):
            await client.get_city_metrics(Filters())

    @pytest.mark.asyncio
    async def test_invalid_json_rejected(self):
        client = make_client(FakeSession(FakeResponse(body=ValueError('Expecting value'))))

        with pytest.raises(MetricSourceConnectionException) as exc_info:
            await client.get_city_metrics(Filters())

        assert 'Invalid JSON' in exc_info.value.details['response']

    @pytest.mark.asyncio
    async def test_unsuccessful_envelope_returned_as_is(self):
        body = {'success': False, 'message': 'Database unavailable'}
        client = make_client(FakeSession(FakeResponse(body=body)))

        assert await client.get_city_metrics(Filters()) == body

    @pytest.mark.asyncio
    async def test_no_session(self):
        client = MetricSourceClient(base_url='http://metrics.test', cache_ttl=0)

        with pytest.raises(MetricSourceConnectionException):
            await client.get_city_metrics(Filters())

    @pytest.mark.asyncio
    async def test_cache_disabled_by_default(self, envelope):
        session = FakeSession(FakeResponse(body=envelope))
        client = make_client(session)

        await client.get_city_metrics(Filters())
        await client.get_city_metrics(Filters())

        assert client.response_cache is None
        assert len(session.calls) == 2

    @pytest.mark.asyncio
    async def test_cache_memoizes_successful_envelopes(self, envelope):
        session = FakeSession(FakeResponse(body=envelope))
        client = make_client(session, cache_ttl=60)

        await client.get_city_metrics(Filters())
        await client.get_city_metrics(Filters())
        await client.get_city_metrics(Filters(period=Period.YEAR))

        assert len(session.calls) == 2
        stats = client.get_service_statistics()
        assert stats['cache']['hits'] == 1
        assert stats['cache']['size'] == 2
        assert stats['requests_made'] == 2

    @pytest.mark.asyncio
    async def test_cache_skips_unsuccessful_envelopes(self):
        session = FakeSession(FakeResponse(body={'success': False, 'message': 'try later'}))
        client = make_client(session, cache_ttl=60)

        await client.get_city_metrics(Filters())
        await client.get_city_metrics(Filters())

        assert len(session.calls) == 2

    @pytest.mark.asyncio
    async def test_context_manager_session(self):
        async with MetricSourceClient(base_url='http://metrics.test', token='abc', cache_ttl=0) as client:
            assert client.session.headers['Authorization'] == 'Bearer abc'
            assert client.get_service_statistics()['session_status']['session_active'] is True

        assert client.session is None

    @pytest.mark.asyncio
    async def test_injected_session_not_closed(self):
        session = FakeSession(FakeResponse(body={'success': True}))

        async with make_client(session) as client:
            await client.get_forecast_accuracy(Filters())

        assert client.session is session
        assert session.closed is False


class TestClientConfiguration:
    """Test that a misconfigured client fails at construction."""

    @pytest.mark.parametrize('base_url', ['metrics.test', 'ftp://metrics.test'])
    def test_base_url_must_be_http(self, base_url):
        with pytest.raises(InvalidConfigurationException) as exc_info:
            MetricSourceClient(base_url=base_url, cache_ttl=0)

        assert exc_info.value.error_code == 'INVALID_CONFIGURATION'
        assert exc_info.value.details['config_key'] == 'METRICS_API_BASE_URL'

    def test_negative_cache_ttl_rejected(self):
        with pytest.raises(InvalidConfigurationException) as exc_info:
            MetricSourceClient(base_url='https://metrics.test', cache_ttl=-5)

        assert exc_info.value.details['config_key'] == 'METRIC_CACHE_TTL'

    def test_trailing_slash_trimmed(self):
        client = MetricSourceClient(base_url='https://metrics.test/', cache_ttl=0)
        assert client.base_url == 'https://metrics.test'
