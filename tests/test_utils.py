"""
Author: Cameron Murphy (Student ID: 1049678, GitHub: 0x1049678II)
Date: July 14th 2025

Test the async helpers.
"""

import asyncio
from unittest.mock import patch

import pytest

from tourism_analytics.utils import format_response_time, gather_named, performance_monitor


class TestGatherNamed:
    """Test joining named calls."""

    @pytest.mark.asyncio
    async def test_results_keep_their_names(self):
        async def value(v):
            return v

        results = await gather_named({'revenue': value(1), 'trends': value(2)})

        assert results == {'revenue': 1, 'trends': 2}

    @pytest.mark.asyncio
    async def test_failure_reported_by_name(self):
        async def value():
            return 'ok'

        async def fail():
            raise ValueError('bad payload')

        with patch('tourism_analytics.utils.logger') as mock_logger:
            results = await gather_named({'revenue': value(), 'trends': fail()})

        assert results['revenue'] == 'ok'
        assert isinstance(results['trends'], ValueError)
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.kwargs['failed'] == {'trends': 'ValueError'}


class TestPerformanceMonitor:
    """Test the timing decorator."""

    @pytest.mark.asyncio
    async def test_success_logged(self):
        @performance_monitor()
        async def refresh():
            return 'view'

        with patch('tourism_analytics.utils.logger') as mock_logger:
            assert await refresh() == 'view'

        kwargs = mock_logger.info.call_args.kwargs
        assert kwargs['success'] is True
        assert kwargs['outcome'] == 'ok'
        assert kwargs['error_type'] is None

    @pytest.mark.asyncio
    async def test_error_logged_with_type(self):
        @performance_monitor()
        async def refresh():
            raise KeyError('city')

        with patch('tourism_analytics.utils.logger') as mock_logger:
            with pytest.raises(KeyError):
                await refresh()

        kwargs = mock_logger.info.call_args.kwargs
        assert kwargs['success'] is False
        assert kwargs['outcome'] == 'error'
        assert kwargs['error_type'] == 'KeyError'

    @pytest.mark.asyncio
    async def test_cancellation_logged(self):
        @performance_monitor()
        async def refresh():
            await asyncio.sleep(10)

        with patch('tourism_analytics.utils.logger') as mock_logger:
            task = asyncio.ensure_future(refresh())
            await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        kwargs = mock_logger.info.call_args.kwargs
        assert kwargs['success'] is False
        assert kwargs['outcome'] == 'cancelled'
        assert kwargs['error_type'] == 'CancelledError'

    @pytest.mark.asyncio
    async def test_logging_can_be_disabled(self):
        @performance_monitor(log_performance=False)
        async def refresh():
            return 1

        with patch('tourism_analytics.utils.logger') as mock_logger:
            await refresh()

        mock_logger.info.assert_not_called()


@pytest.mark.parametrize('seconds, expected', [
    (0.0004, '400us'),
    (0.25, '250.0ms'),
    (3.5, '3.50s'),
])
def test_format_response_time(seconds, expected):
    assert format_response_time(seconds) == expected
