"""
Author: Cameron Murphy (Student ID: 1049678, GitHub: 0x1049678II)
Date: July 8th 2025

Async helpers for the analytics engine.

`gather_named` joins a dashboard's metric calls and reports which of them failed, and
`performance_monitor` times each refresh, including ones that are cancelled.
"""

import asyncio
import functools
import time
from typing import Any, Awaitable, Callable, Dict, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar('T')


async def gather_named(calls: Dict[str, Awaitable[Any]]) -> Dict[str, Any]:
    """
    Run named awaitables concurrently and join all of them.

    A failing call never cancels its siblings; its exception is returned in its slot.
    Cancelling the gather itself still propagates.

    Args:
        calls: Mapping of call name to awaitable

    Returns:
        Mapping of call name to result or the exception it raised
    """
    names = list(calls)
    results = await asyncio.gather(*calls.values(), return_exceptions=True)

    failed = {
        name: type(result).__name__
        for name, result in zip(names, results)
        if isinstance(result, BaseException)
    }
    if failed:
        logger.warning("Concurrent calls failed", failed=failed, total=len(names))

    return dict(zip(names, results))


def performance_monitor(log_performance: bool = True):
    """
    Decorator timing an async operation.

    Logs one "Async operation performance" event per call with the outcome:
    "ok", "cancelled" or "error", and the error type when there is one.

    Args:
        log_performance: Whether to log the timing event
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            started = time.perf_counter()
            outcome = 'error'
            error_type = None

            try:
                result = await func(*args, **kwargs)
                outcome = 'ok'
                return result
            except asyncio.CancelledError:
                outcome = 'cancelled'
                error_type = 'CancelledError'
                raise
            except BaseException as e:
                error_type = type(e).__name__
                raise
            finally:
                if log_performance:
                    logger.info(
                        "Async operation performance",
                        function=func.__qualname__,
                        execution_time=format_response_time(time.perf_counter() - started),
                        success=outcome == 'ok',
                        outcome=outcome,
                        error_type=error_type
                    )

        return wrapper
    return decorator


def format_response_time(seconds: float) -> str:
    """Render a duration in the largest unit that keeps it readable."""
    if seconds >= 1:
        return f"{seconds:.2f}s"
    if seconds >= 0.001:
        return f"{seconds * 1000:.1f}ms"
    return f"{seconds * 1_000_000:.0f}us"
