"""
Author: Cameron Murphy (Student ID: 1049678, GitHub: 0x1049678II)
Date: July 10th 2025

Aggregation orchestrator for the analytics dashboards.

For each refresh the orchestrator:
    1. Checks the caller's role before touching the network.
    2. Issues every metric source call for the dashboard concurrently and waits for all.
    3. Assembles a live view model when every call succeeded.
    4. Otherwise synthesizes a complete demo view model - never a mix of the two.

Errors never escape `refresh`: the dashboard always gets something renderable, and
`last_error` and `banner` tell it whether to show an error banner. If the filters change while a
request is still in flight, only the latest request's result is committed.

Usage:
    async with AnalyticsEngine() as engine:
        view = await engine.refresh('city_overview', Filters(role=Role.AUTHORITY))
        banner = engine.banner('city_overview')
"""

import asyncio
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

import structlog

from tourism_analytics.exceptions import (
    AssemblyException, AuthorizationError, ExceptionHandler,
    UnknownDashboardException, UnsuccessfulResponseException, UpstreamError
)
from tourism_analytics.fallback import FallbackSynthesizer
from tourism_analytics.models import Filters, ViewModel
from tourism_analytics.recipes import RECIPES, DashboardRecipe
from tourism_analytics.services.metric_source import MetricSourceClient
from tourism_analytics.utils import gather_named, performance_monitor

logger = structlog.get_logger()

SynthesizerFactory = Callable[[], FallbackSynthesizer]


class OrchestratorState(Enum):
    """Lifecycle of one refresh."""
    IDLE = "idle"
    FETCHING_LIVE = "fetching_live"
    SUCCEEDED = "succeeded"
    FAILED_AUTH = "failed_auth"
    FAILED_UPSTREAM = "failed_upstream"
    ASSEMBLING = "assembling"
    SYNTHESIZING = "synthesizing"
    READY = "ready"


class AggregationOrchestrator:
    """
    Runs one dashboard's recipe against a metric source.

    Attributes:
        recipe: Dashboard recipe to run
        source: Metric source client
        synthesizer_factory: Called once per fallback to get a synthesizer
        state: State of the latest request
        view_model: Latest committed view model
        last_error: Upstream message for the latest committed request, if live data was
            expected but could not be fetched
        last_exception: The upstream error behind `last_error`
    """

    def __init__(self, recipe: DashboardRecipe, source: MetricSourceClient,
                 synthesizer_factory: SynthesizerFactory = FallbackSynthesizer):
        self.recipe = recipe
        self.source = source
        self.synthesizer_factory = synthesizer_factory

        self.state = OrchestratorState.IDLE
        self.view_model: Optional[ViewModel] = None
        self.last_error: Optional[str] = None
        self.last_exception: Optional[UpstreamError] = None

        self._sequence = 0
        self._committed_sequence = 0
        self._abandoned_sequence = 0
        self._committed = asyncio.Condition()

    @property
    def is_stale(self) -> bool:
        """True while a newer request than the committed one is in flight."""
        return self._sequence not in (self._committed_sequence, self._abandoned_sequence)

    def _transition(self, sequence: int, state: OrchestratorState):
        # Superseded requests keep running but no longer drive the visible state
        if sequence != self._sequence:
            return
        logger.debug("Orchestrator state change", dashboard=self.recipe.name,
                     sequence=sequence, state=state.value)
        self.state = state

    @performance_monitor()
    async def refresh(self, filters: Filters) -> ViewModel:
        """
        Build the dashboard's view model for the given filters.

        Args:
            filters: Dashboard filters, including the caller's role

        Returns:
            A live view model when authorized and every upstream call succeeded,
            otherwise a demo view model. If a newer refresh started meanwhile, the
            view model that refresh commits.
        """
        self._sequence += 1
        sequence = self._sequence

        try:
            view_model, error = await self._build(sequence, filters)
        except BaseException:
            await self._abandon(sequence)
            raise

        return await self._commit(sequence, view_model, error)

    async def _build(self, sequence: int, filters: Filters) -> Tuple[ViewModel, Optional[UpstreamError]]:
        """Run the recipe, returning the view model and the upstream error behind a fallback."""
        self._transition(sequence, OrchestratorState.IDLE)

        try:
            self._check_role(filters)
        except AuthorizationError as e:
            ExceptionHandler.log_exception(logger, e, {'sequence': sequence}, level='info')
            self._transition(sequence, OrchestratorState.FAILED_AUTH)
            return self._synthesize(sequence, filters), None

        self._transition(sequence, OrchestratorState.FETCHING_LIVE)
        try:
            payloads = await self._fetch_live(filters)
            self._transition(sequence, OrchestratorState.SUCCEEDED)
            self._transition(sequence, OrchestratorState.ASSEMBLING)
            view_model = self._assemble(payloads, filters)
        except UpstreamError as e:
            ExceptionHandler.log_exception(logger, e, {'dashboard': self.recipe.name, 'sequence': sequence})
            self._transition(sequence, OrchestratorState.FAILED_UPSTREAM)
            return self._synthesize(sequence, filters), e

        return view_model, None

    def _check_role(self, filters: Filters):
        if filters.role is not self.recipe.required_role:
            raise AuthorizationError(
                self.recipe.name,
                self.recipe.required_role.value,
                filters.role.value if filters.role else None
            )

    async def _fetch_live(self, filters: Filters) -> Dict[str, Any]:
        """
        Run every call in the recipe concurrently.

        Returns:
            Mapping of call name to the `data` of its envelope

        Raises:
            UpstreamError: The first failure in recipe order, once all calls settled
        """
        results = await gather_named({
            name: factory(self.source, filters) for name, factory in self.recipe.calls.items()
        })

        payloads: Dict[str, Any] = {}
        failures: List[UpstreamError] = []
        for name, result in results.items():
            if isinstance(result, UpstreamError):
                failures.append(result)
            elif isinstance(result, BaseException):
                failures.append(UpstreamError(name, f"{name}: {result}", details={'error_type': type(result).__name__}))
            elif not isinstance(result, dict) or result.get('success') is not True:
                message = result.get('message') if isinstance(result, dict) else None
                failures.append(UnsuccessfulResponseException(name, message))
            else:
                data = result.get('data')
                payloads[name] = data if data is not None else {}

        if failures:
            logger.warning("Live fetch failed", dashboard=self.recipe.name,
                           failed=[failure.source for failure in failures],
                           succeeded=list(payloads))
            raise failures[0]

        return payloads

    def _assemble(self, payloads: Dict[str, Any], filters: Filters) -> ViewModel:
        try:
            return self.recipe.assemble(payloads, filters)
        except (ArithmeticError, AttributeError, KeyError, TypeError, ValueError) as e:
            raise AssemblyException(self.recipe.name, f"{type(e).__name__}: {e}")

    def _synthesize(self, sequence: int, filters: Filters) -> ViewModel:
        self._transition(sequence, OrchestratorState.SYNTHESIZING)
        return self.recipe.synthesize(self.synthesizer_factory(), filters)

    def _store(self, sequence: int, view_model: ViewModel, error: Optional[UpstreamError]):
        self.view_model = view_model
        self.last_exception = error
        self.last_error = error.message if error else None
        self._committed_sequence = sequence

    async def _commit(self, sequence: int, view_model: ViewModel,
                      error: Optional[UpstreamError]) -> ViewModel:
        """Commit the result if it is the latest, otherwise wait for the latest."""
        async with self._committed:
            if sequence == self._sequence:
                self._store(sequence, view_model, error)
                self._transition(sequence, OrchestratorState.READY)
                self._committed.notify_all()
                logger.info("Dashboard ready", dashboard=self.recipe.name, sequence=sequence,
                            data_origin=view_model.data_origin.value,
                            last_error=self.last_error)
                return view_model

            logger.info("Discarding superseded result", dashboard=self.recipe.name,
                        sequence=sequence, latest=self._sequence)
            await self._committed.wait_for(lambda: not self.is_stale)

            if self._committed_sequence != self._sequence and sequence > self._committed_sequence:
                # The newest request was abandoned, so the newest finished one stands
                self._store(sequence, view_model, error)
                self.state = OrchestratorState.READY
                logger.info("Dashboard ready after abandoned refresh", dashboard=self.recipe.name,
                            sequence=sequence, abandoned=self._abandoned_sequence,
                            data_origin=view_model.data_origin.value)
            return self.view_model

    async def _abandon(self, sequence: int):
        """Release requests waiting on a latest request that will never commit."""
        async with self._committed:
            if sequence != self._sequence:
                return
            self._abandoned_sequence = sequence
            self.state = OrchestratorState.READY if self.view_model is not None else OrchestratorState.IDLE
            logger.warning("Refresh abandoned before commit", dashboard=self.recipe.name, sequence=sequence)
            self._committed.notify_all()

    @property
    def banner(self) -> Optional[str]:
        """User-facing text for the latest committed upstream failure, if any."""
        if self.last_exception is None:
            return None
        return ExceptionHandler.get_user_friendly_message(self.last_exception)


class AnalyticsEngine:
    """
    Entry point for the presentation layer.

    Owns one metric source client and one orchestrator per dashboard recipe.

    Args:
        source: Metric source client. A default client is created when omitted.
        synthesizer_factory: Creates the demo-data synthesizer used on fallback.
        recipes: Dashboard recipes by name.
    """

    def __init__(self, source: MetricSourceClient = None, synthesizer_factory: SynthesizerFactory = None,
                 recipes: Dict[str, DashboardRecipe] = None):
        self.source = source or MetricSourceClient()
        self.synthesizer_factory = synthesizer_factory or FallbackSynthesizer
        self.recipes = recipes if recipes is not None else RECIPES
        self.orchestrators = {
            name: AggregationOrchestrator(recipe, self.source, self.synthesizer_factory)
            for name, recipe in self.recipes.items()
        }

    async def __aenter__(self):
        """Async context manager entry."""
        await self.source.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.source.__aexit__(exc_type, exc_val, exc_tb)

    def available_dashboards(self) -> List[str]:
        return list(self.orchestrators)

    def orchestrator(self, dashboard: str) -> AggregationOrchestrator:
        try:
            return self.orchestrators[dashboard]
        except KeyError:
            raise UnknownDashboardException(dashboard, self.available_dashboards())

    async def refresh(self, dashboard: str, filters: Filters = None) -> ViewModel:
        """Refresh one dashboard. Raises UnknownDashboardException for unknown names."""
        return await self.orchestrator(dashboard).refresh(filters or Filters())

    def last_error(self, dashboard: str) -> Optional[str]:
        return self.orchestrator(dashboard).last_error

    def banner(self, dashboard: str) -> Optional[str]:
        return self.orchestrator(dashboard).banner
