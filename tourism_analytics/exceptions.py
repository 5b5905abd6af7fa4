"""
Author: Cameron Murphy (Student ID: 1049678, GitHub: 0x1049678II)
Date: July 2nd 2025

Custom exception classes for the tourism analytics engine.

Exception hierarchy for the failure modes of dashboard aggregation. Most of these never
reach the presentation layer - the orchestrator turns them into demo data plus an error
banner - but they still carry enough detail to make the logs useful.
"""

from typing import Any, Dict, List, Optional


class AnalyticsException(Exception):
    """Base exception for all analytics engine errors."""

    def __init__(self, message: str, error_code: str = None, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            'error': self.error_code,
            'message': self.message,
            'details': self.details
        }


class AuthorizationError(AnalyticsException):
    """Raised when the caller lacks the role a dashboard requires."""

    def __init__(self, dashboard: str, required_role: str, actual_role: Optional[str]):
        message = (f"Dashboard '{dashboard}' requires role {required_role}, "
                   f"caller has {actual_role or 'no role'}")
        details = {'dashboard': dashboard, 'required_role': required_role, 'actual_role': actual_role}
        super().__init__(message, 'AUTHORIZATION_ERROR', details)


class UpstreamError(AnalyticsException):
    """Base exception for metric source failures."""

    def __init__(self, source: str, message: str = None, error_code: str = 'UPSTREAM_ERROR',
                 details: Dict[str, Any] = None):
        details = dict(details or {})
        details.setdefault('source', source)
        super().__init__(message or f"Metric source '{source}' failed", error_code, details)
        self.source = source


class MetricSourceConnectionException(UpstreamError):
    """Raised when unable to reach the metrics API."""

    def __init__(self, source: str, status_code: Optional[int] = None, response_text: Optional[str] = None):
        message = f"Failed to fetch {source}"
        details: Dict[str, Any] = {}
        if status_code:
            message += f" (Status: {status_code})"
            details['status_code'] = status_code
        if response_text:
            details['response'] = response_text[:200]  # Limit response text
        super().__init__(source, message, 'METRIC_SOURCE_CONNECTION_ERROR', details)


class UpstreamAuthException(UpstreamError):
    """Raised when the metrics API rejects our credentials."""

    def __init__(self, source: str, status_code: int):
        message = f"Metrics API refused {source} (Status: {status_code})"
        super().__init__(source, message, 'UPSTREAM_AUTH_ERROR', {'status_code': status_code})


class MetricNotFoundException(UpstreamError):
    """Raised when a metric endpoint does not exist."""

    def __init__(self, source: str, endpoint: str):
        message = f"Metric endpoint for {source} not found: {endpoint}"
        super().__init__(source, message, 'METRIC_NOT_FOUND', {'endpoint': endpoint})


class RateLimitExceededException(UpstreamError):
    """Raised when the metrics API rate limit is exceeded."""

    def __init__(self, source: str, retry_after: Optional[str] = None):
        message = f"Rate limit exceeded for {source}"
        details = {}
        if retry_after:
            details['retry_after'] = retry_after
        super().__init__(source, message, 'RATE_LIMIT_EXCEEDED', details)


class AsyncTimeoutException(UpstreamError):
    """Raised when a metric request times out."""

    def __init__(self, source: str, timeout: int):
        message = f"Request for {source} timed out after {timeout} seconds"
        super().__init__(source, message, 'ASYNC_TIMEOUT', {'timeout': timeout})


class UnsuccessfulResponseException(UpstreamError):
    """Raised when a metric source answers with success: false."""

    def __init__(self, source: str, upstream_message: Optional[str] = None):
        message = f"{source}: {upstream_message or 'Unknown error'}"
        super().__init__(source, message, 'UNSUCCESSFUL_RESPONSE',
                         {'upstream_message': upstream_message})


class AssemblyException(UpstreamError):
    """Raised when live payloads cannot be assembled into a view model."""

    def __init__(self, dashboard: str, reason: str):
        message = f"Could not assemble {dashboard} from live data: {reason}"
        super().__init__(dashboard, message, 'ASSEMBLY_ERROR', {'reason': reason})


class PartialDataError(AnalyticsException):
    """A required field fell back to its default because no alias was present.

    Logged by the normalizer, never raised.
    """

    def __init__(self, entity: str, field_name: str, aliases: List[str], default: Any):
        message = f"{entity}.{field_name} missing from source, using default {default!r}"
        details = {'entity': entity, 'field': field_name, 'aliases': aliases, 'default': default}
        super().__init__(message, 'PARTIAL_DATA', details)


class ValidationException(AnalyticsException):
    """Base exception for validation errors."""
    pass


class FilterValidationException(ValidationException):
    """Raised when inbound dashboard filters are invalid."""

    def __init__(self, field_name: str, value: Any, allowed: Optional[List[str]] = None):
        message = f"Invalid value for filter '{field_name}': {value!r}"
        details: Dict[str, Any] = {'field': field_name, 'value': str(value)}
        if allowed:
            details['allowed'] = allowed
        super().__init__(message, 'FILTER_VALIDATION_ERROR', details)


class UnknownDashboardException(ValidationException):
    """Raised when a dashboard name has no recipe."""

    def __init__(self, dashboard: str, available: List[str]):
        message = f"Unknown dashboard '{dashboard}'"
        super().__init__(message, 'UNKNOWN_DASHBOARD', {'dashboard': dashboard, 'available': available})


class ConfigurationException(AnalyticsException):
    """Base exception for configuration errors."""
    pass


class InvalidConfigurationException(ConfigurationException):
    """Raised when configuration is invalid."""

    def __init__(self, config_key: str, config_value: Any, reason: str):
        message = f"Invalid configuration for '{config_key}': {reason}"
        details = {'config_key': config_key, 'config_value': str(config_value), 'reason': reason}
        super().__init__(message, 'INVALID_CONFIGURATION', details)


# Exception handling utilities
class ExceptionHandler:
    """Utility class for handling exceptions consistently."""

    @staticmethod
    def raise_for_status(status_code: int, source: str, endpoint: str, response_text: str = None):
        """Map a non-200 metrics API status onto the upstream taxonomy."""
        if status_code in (401, 403):
            raise UpstreamAuthException(source, status_code)
        elif status_code == 404:
            raise MetricNotFoundException(source, endpoint)
        elif status_code == 429:
            raise RateLimitExceededException(source)
        else:
            raise MetricSourceConnectionException(source, status_code, response_text)

    @staticmethod
    def log_exception(logger, exception: AnalyticsException, context: Dict[str, Any] = None,
                      level: str = 'error'):
        """Log exception with structured context."""
        log_data = {
            'exception_type': exception.__class__.__name__,
            'error_code': exception.error_code,
            'message': exception.message,
            'details': exception.details
        }
        if context:
            log_data['context'] = context

        getattr(logger, level)("Analytics exception occurred", **log_data)

    @staticmethod
    def get_user_friendly_message(exception: AnalyticsException) -> str:
        """Convert technical exception to a banner message."""
        user_friendly_messages = {
            'AUTHORIZATION_ERROR': "Sign in as a tourism authority to see live figures. Showing demo data.",
            'UPSTREAM_AUTH_ERROR': "The analytics service rejected our credentials. Showing demo data.",
            'RATE_LIMIT_EXCEEDED': "The analytics service is busy right now. Showing demo data.",
            'ASYNC_TIMEOUT': "The analytics service is taking too long to respond. Showing demo data.",
            'METRIC_SOURCE_CONNECTION_ERROR': "We couldn't reach the analytics service. Showing demo data.",
            'UNSUCCESSFUL_RESPONSE': "Some analytics are unavailable right now. Showing demo data.",
            'ASSEMBLY_ERROR': "The analytics service returned data we couldn't read. Showing demo data.",
        }

        return user_friendly_messages.get(
            exception.error_code,
            "Something went wrong loading live analytics. Showing demo data."
        )
