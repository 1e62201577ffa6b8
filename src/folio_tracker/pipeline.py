"""
End-to-end portfolio chart computation.

Runs the four stages in order:

    raw quotes -> normalize_quotes -> allocate_shares -> value_timeline
               -> assemble_series

Each call builds every intermediate structure fresh, so repeated runs on the
same input give identical results. Any stage error aborts the run; no partial
chart is returned.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from folio_tracker.config import TrackerSettings
from folio_tracker.data.normalize import detect_payload_shape, normalize_quotes
from folio_tracker.data.providers.base import QuoteProvider
from folio_tracker.errors import TrackerError
from folio_tracker.logging.decision_log import DecisionLogger
from folio_tracker.models import (
    AllocationPlan,
    OutputSeries,
    PortfolioSummary,
    ShareCount,
    ValuationPoint,
)
from folio_tracker.portfolio.allocate import allocate_shares
from folio_tracker.portfolio.valuation import summarize_valuation, value_timeline
from folio_tracker.reporting.series import assemble_series


logger = logging.getLogger(__name__)


@dataclass
class ChartResult:
    """
    Everything one pipeline run produced.

    Attributes:
        series: Output series, one per symbol plus the total
        points: Full-precision valuation timeline
        shares: Share allocation used
        summary: Final values (None when there is no data)
    """
    series: list[OutputSeries]
    points: list[ValuationPoint]
    shares: ShareCount
    summary: Optional[PortfolioSummary]


def build_portfolio_chart(
    plan: AllocationPlan,
    payload: Any,
    settings: Optional[TrackerSettings] = None,
    decision_logger: Optional[DecisionLogger] = None,
) -> ChartResult:
    """
    Compute the portfolio chart for a plan from a raw quote payload.

    Args:
        plan: Allocation plan
        payload: Raw quote payload in any supported provider layout
        settings: Presentation and allocation settings (defaults if None)
        decision_logger: Optional audit logger for each stage

    Returns:
        ChartResult

    Raises:
        TrackerError: DataFormatError, AllocationError or
            InternalConsistencyError from the failing stage
    """
    settings = settings or TrackerSettings()

    try:
        series = normalize_quotes(payload, plan.symbols)
        if decision_logger:
            decision_logger.log_quotes_normalized(
                plan.plan_id, series, detect_payload_shape(payload).value
            )

        shares = allocate_shares(
            plan, series, allow_over_allocation=settings.allow_over_allocation
        )
        if decision_logger:
            decision_logger.log_shares_allocated(plan, shares)

        points = value_timeline(series, shares)
        if decision_logger:
            decision_logger.log_valuation_calculated(plan.plan_id, points)

        output = assemble_series(
            points,
            plan.symbols,
            series_type=settings.series_type,
            total_name=settings.total_series_name,
            precision=settings.display_precision,
        )
        if decision_logger:
            decision_logger.log_chart_assembled(plan.plan_id, output)
    except TrackerError as e:
        logger.error(f"Portfolio chart for plan {plan.plan_id} failed: {e}")
        if decision_logger:
            decision_logger.log_run_failed(plan.plan_id, e)
        raise

    logger.info(
        f"Valued plan {plan.plan_id}: {len(plan.symbols)} symbols, {len(points)} dates"
    )

    return ChartResult(
        series=output,
        points=points,
        shares=shares,
        summary=summarize_valuation(points, plan),
    )


def fetch_and_build_chart(
    plan: AllocationPlan,
    provider: QuoteProvider,
    end_date: Optional[date] = None,
    settings: Optional[TrackerSettings] = None,
    decision_logger: Optional[DecisionLogger] = None,
) -> ChartResult:
    """
    Fetch quotes from a provider for the plan's period, then build the chart.

    Args:
        plan: Allocation plan
        provider: Quote provider
        end_date: Last date to fetch (defaults to today)
        settings: Presentation and allocation settings
        decision_logger: Optional audit logger

    Returns:
        ChartResult

    Raises:
        TrackerError: DataProviderError from the fetch, or any stage error
    """
    end_date = end_date or date.today()
    logger.info(
        f"Fetching {', '.join(plan.symbols)} from {provider.name} "
        f"for {plan.start_date} to {end_date}"
    )

    try:
        payload = provider.fetch_quotes(plan.symbols, plan.start_date, end_date)
    except TrackerError as e:
        if decision_logger:
            decision_logger.log_run_failed(plan.plan_id, e)
        raise

    return build_portfolio_chart(
        plan, payload, settings=settings, decision_logger=decision_logger
    )
