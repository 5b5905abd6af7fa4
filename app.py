"""
Author: Cameron Murphy (Student ID: 1049678, GitHub: 0x1049678II)
Date: July 11th 2025

Main entry point for the tourism analytics engine.

A thin Flask adapter in front of the analytics engine. The dashboards call
GET /dashboards/<name> with their filters as query parameters; the caller's role comes in
the X-User-Role header set by the authentication proxy.

The app bridges synchronous Flask and the async engine by creating a new event loop per
request, so each request gets its own HTTP session.
"""

import asyncio
import logging
import time

from structlog import get_logger, configure, processors, stdlib
from flask import Flask, request, jsonify
from flask_caching import Cache
from flask_cors import CORS

from config.settings import get_config
from tourism_analytics.exceptions import ConfigurationException, ValidationException
from tourism_analytics.fallback import FallbackSynthesizer
from tourism_analytics.models import Filters
from tourism_analytics.orchestrator import AnalyticsEngine
from tourism_analytics.recipes import RECIPES
from tourism_analytics.services.metric_source import MetricSourceClient

settings = get_config()

logging.basicConfig(format="%(message)s", level=settings.LOG_LEVEL)

# Configure structured logging
configure(
    processors=[
        stdlib.filter_by_level,
        stdlib.add_logger_name,
        stdlib.add_log_level,
        stdlib.PositionalArgumentsFormatter(),
        processors.TimeStamper(fmt="iso"),
        processors.StackInfoRenderer(),
        processors.format_exc_info,
        processors.JSONRenderer() if settings.LOG_FORMAT == 'json' else processors.KeyValueRenderer()
    ],
    wrapper_class=stdlib.BoundLogger,
    logger_factory=stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = get_logger()

app = Flask(__name__)
app.config.from_object(settings)

# Initialize extensions
cors = CORS(app)
cache = Cache(app)


def build_engine() -> AnalyticsEngine:
    """Create an engine wired to the configured metrics API."""
    seed = app.config.get('FALLBACK_SEED')
    source = MetricSourceClient(
        base_url=app.config['METRICS_API_BASE_URL'],
        token=app.config['METRICS_API_TOKEN'],
        cache_ttl=app.config['METRIC_CACHE_TTL']
    )
    return AnalyticsEngine(source=source, synthesizer_factory=lambda: FallbackSynthesizer(seed=seed))


def run_dashboard(dashboard: str, filters: Filters):
    """Refresh one dashboard on a fresh event loop."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    async def refresh_dashboard():
        async with build_engine() as engine:
            view_model = await engine.refresh(dashboard, filters)
            return view_model, engine.last_error(dashboard), engine.banner(dashboard)

    try:
        return loop.run_until_complete(refresh_dashboard())
    finally:
        loop.close()


@app.route('/health')
def health_check():
    """Health check endpoint."""
    config_status = settings.validate_config()
    return jsonify({
        "status": "healthy" if config_status['valid'] else "degraded",
        "service": "Tourism Analytics Engine",
        "config": config_status
    })


@app.route('/dashboards')
@cache.cached(timeout=settings.DASHBOARD_LIST_CACHE_TTL)
def list_dashboards():
    """List the dashboards and the role each needs for live data."""
    return jsonify({
        "dashboards": [
            {"name": name, "requiredRole": recipe.required_role.value, "calls": len(recipe.calls)}
            for name, recipe in RECIPES.items()
        ],
        "count": len(RECIPES)
    })


@app.route('/dashboards/<dashboard>')
def get_dashboard(dashboard: str):
    """Build a dashboard view model for the given filters."""
    if dashboard not in RECIPES:
        return jsonify({
            "status": "error",
            "error": f"Dashboard '{dashboard}' is not available. Check /dashboards for valid options."
        }), 404

    try:
        filters = Filters.from_mapping(request.args, role=request.headers.get('X-User-Role'))
    except ValidationException as e:
        logger.warning("Invalid dashboard filters", dashboard=dashboard, error=e.message)
        return jsonify({"status": "error", **e.to_dict()}), 400

    logger.info("Dashboard request received", dashboard=dashboard,
                period=filters.period.value, role=filters.role.value if filters.role else None)

    try:
        view_model, last_error, banner = run_dashboard(dashboard, filters)
    except ConfigurationException as e:
        logger.error("Engine misconfigured", dashboard=dashboard, error=e.message)
        return jsonify({"status": "error", **e.to_dict()}), 500
    except Exception as e:
        logger.error("Unexpected error in dashboard endpoint", dashboard=dashboard, error=str(e))
        return jsonify({
            "status": "error",
            "error": "An unexpected error occurred"
        }), 500

    return jsonify({
        "status": "success",
        "viewModel": view_model.to_dict(),
        "lastError": last_error,
        "banner": banner,
        "timestamp": time.time()
    })


@app.errorhandler(404)
def not_found(error):
    return jsonify({"error": "Endpoint not found"}), 404


@app.errorhandler(500)
def internal_error(error):
    return jsonify({"error": "Internal server error"}), 500


def main():
    """Console entry point."""
    config_status = settings.validate_config()
    for warning in config_status['warnings']:
        logger.warning("Configuration warning", warning=warning)
    if not config_status['valid']:
        logger.error("Invalid configuration", issues=config_status['issues'])

    app.run(
        host='0.0.0.0',
        port=5000,
        debug=settings.DEBUG,
        threaded=True
    )


if __name__ == '__main__':
    main()
