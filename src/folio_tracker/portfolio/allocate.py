"""
Share allocation from an initial lump sum.

Converts an allocation plan into the number of shares held per symbol. The
purchase price of each asset is the closing price at the earliest date
present in that symbol's series. When the provider's lookback window does
not reach the plan's start date, that earliest date is later than the start
date; the holding records the date actually used and a warning is logged.
"""

import logging
from decimal import Decimal

from folio_tracker.errors import AllocationError
from folio_tracker.models import AllocationPlan, Holding, SeriesMap, ShareCount


logger = logging.getLogger(__name__)


def allocate_shares(
    plan: AllocationPlan,
    series: SeriesMap,
    allow_over_allocation: bool = True,
) -> ShareCount:
    """
    Compute shares held per symbol from the plan and normalized quotes.

    shares = (initial_amount * portion) / earliest_close

    Portions are never renormalized. Portions summing above 1 are logged as
    a warning, or rejected when allow_over_allocation is False.

    Args:
        plan: Allocation plan with initial amount and portions
        series: Normalized quote series keyed by symbol
        allow_over_allocation: Accept plans whose portions sum above 1

    Returns:
        ShareCount with one Holding per plan asset

    Raises:
        AllocationError: If a plan symbol has no quotes, or the plan is
            over-allocated and over-allocation is not allowed, or the plan
            fails validate_plan
    """
    errors = validate_plan(plan)
    if errors:
        raise AllocationError("; ".join(errors))

    for message in check_plan(plan):
        if not allow_over_allocation:
            raise AllocationError(message)
        logger.warning(message)

    missing = [s for s in plan.symbols if s not in series or series[s].is_empty]
    if missing:
        raise AllocationError(
            f"No quote data to price the initial purchase of: {', '.join(missing)}"
        )

    holdings = {}
    for asset in plan.assets:
        first = series[asset.symbol].earliest
        if first.close <= Decimal("0"):
            raise AllocationError(
                f"Earliest price for {asset.symbol} is not positive: {first.close}"
            )

        if first.date != plan.start_date:
            logger.warning(
                f"{asset.symbol}: earliest available quote is {first.date}, "
                f"using it as purchase price instead of {plan.start_date}"
            )

        amount = plan.initial_amount * asset.portion
        holdings[asset.symbol] = Holding(
            symbol=asset.symbol,
            portion=asset.portion,
            amount_invested=amount,
            purchase_date=first.date,
            purchase_price=first.close,
            shares=amount / first.close,
        )

    return ShareCount(holdings=holdings)


def check_plan(plan: AllocationPlan) -> list[str]:
    """
    Check a plan for conditions that are allowed but worth flagging.

    Args:
        plan: Allocation plan

    Returns:
        List of warning messages (empty if none)
    """
    warnings = []

    total = plan.total_portion
    if total > Decimal("1"):
        warnings.append(
            f"Plan portions sum to {total}, more than 100% of the initial amount"
        )

    return warnings


def validate_plan(plan: AllocationPlan) -> list[str]:
    """
    Validate a plan's own invariants.

    Args:
        plan: Allocation plan

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if plan.initial_amount <= Decimal("0"):
        errors.append("Initial amount must be positive")

    if not plan.assets:
        errors.append("Plan has no assets")

    negative = [a.symbol for a in plan.assets if a.portion < Decimal("0")]
    if negative:
        errors.append(f"Negative portions for: {negative}")

    symbols = plan.symbols
    duplicates = sorted(set(s for s in symbols if symbols.count(s) > 1))
    if duplicates:
        errors.append(f"Duplicate symbols in plan: {duplicates}")

    return errors
