"""
Author: Cameron Murphy (Student ID: 1049678, GitHub: 0x1049678II)
Date: July 2nd 2025

Configuration management for the tourism analytics engine.

Centralized configuration system supporting multiple environments with sensible defaults.
Manages the metrics API connection, request timeouts, response caching and the
seed used by the demo-data synthesizer.
"""

import os
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _optional_int(value: Optional[str]) -> Optional[int]:
    """Parse an optional integer environment value."""
    if value is None or value.strip() == '':
        return None
    return int(value)


class Config:
    """Base configuration with environment variable support."""

    # Flask configuration
    SECRET_KEY = os.getenv('SECRET_KEY', 'tourism-analytics-secret-key-2025')
    DEBUG = os.getenv('FLASK_DEBUG', 'False').lower() in ['true', '1', 'yes']

    # Metrics API
    METRICS_API_BASE_URL = os.getenv('METRICS_API_BASE_URL', 'http://localhost:5001')
    METRICS_API_TOKEN = os.getenv('METRICS_API_TOKEN')

    # Async configuration
    MAX_CONCURRENT_REQUESTS = int(os.getenv('MAX_CONCURRENT_REQUESTS', '10'))
    REQUEST_TIMEOUT = int(os.getenv('REQUEST_TIMEOUT', '30'))  # seconds

    # Response memoization, 0 disables it
    METRIC_CACHE_TTL = int(os.getenv('METRIC_CACHE_TTL', '0'))  # seconds
    METRIC_CACHE_SIZE = int(os.getenv('METRIC_CACHE_SIZE', '128'))

    # Demo data
    FALLBACK_SEED = _optional_int(os.getenv('FALLBACK_SEED'))

    # Caching for the HTTP adapter
    CACHE_TYPE = os.getenv('CACHE_TYPE', 'SimpleCache')
    DASHBOARD_LIST_CACHE_TTL = int(os.getenv('DASHBOARD_LIST_CACHE_TTL', '3600'))  # 1 hour

    # Logging configuration
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FORMAT = os.getenv('LOG_FORMAT', 'json')

    @classmethod
    def validate_config(cls) -> Dict[str, Any]:
        """Validate configuration and return status."""
        issues: List[str] = []
        warnings: List[str] = []

        if not cls.METRICS_API_BASE_URL:
            issues.append("METRICS_API_BASE_URL is required")
        elif not cls.METRICS_API_BASE_URL.startswith(('http://', 'https://')):
            issues.append("METRICS_API_BASE_URL must be an http(s) URL")

        if not cls.METRICS_API_TOKEN:
            warnings.append("METRICS_API_TOKEN not set - requests will be sent without credentials")

        if cls.REQUEST_TIMEOUT <= 0:
            issues.append("REQUEST_TIMEOUT must be positive")

        if cls.MAX_CONCURRENT_REQUESTS <= 0:
            issues.append("MAX_CONCURRENT_REQUESTS must be positive")

        if cls.METRIC_CACHE_TTL < 0:
            issues.append("METRIC_CACHE_TTL cannot be negative")
        elif cls.METRIC_CACHE_TTL > 0:
            warnings.append(f"Metric responses are memoized for {cls.METRIC_CACHE_TTL}s")

        return {
            'valid': len(issues) == 0,
            'issues': issues,
            'warnings': warnings
        }


class DevelopmentConfig(Config):
    """Development-specific configuration."""
    DEBUG = True
    LOG_LEVEL = 'DEBUG'


class ProductionConfig(Config):
    """Production-specific configuration."""
    DEBUG = False
    LOG_LEVEL = 'INFO'

    # Two widgets asking for the same city metrics share one upstream call
    METRIC_CACHE_TTL = 60


class TestingConfig(Config):
    """Testing-specific configuration."""
    TESTING = True
    DEBUG = True
    CACHE_TYPE = 'NullCache'
    METRICS_API_BASE_URL = 'http://metrics.test'
    METRICS_API_TOKEN = 'test_metrics_token'
    METRIC_CACHE_TTL = 0
    FALLBACK_SEED = 42


# Configuration selector
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(config_name: str = None) -> type[Config]:
    """Get configuration class based on environment."""
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'default')

    return config.get(config_name, DevelopmentConfig)
