"""
Portfolio valuation over time.

Walks the union of all quote dates once, in ascending order, carrying each
holding's last known value forward across dates where that symbol has no
quote. Before a symbol's first quote its value is zero, which makes "holding
not started yet" and "data gap" indistinguishable. All arithmetic keeps full
Decimal precision; rounding happens only when output series are assembled.
"""

from decimal import Decimal
from typing import Optional

from folio_tracker.errors import InternalConsistencyError
from folio_tracker.models import (
    AllocationPlan,
    PortfolioSummary,
    SeriesMap,
    ShareCount,
    ValuationPoint,
)


def value_timeline(
    series: SeriesMap,
    shares: ShareCount,
) -> list[ValuationPoint]:
    """
    Value every holding and the total portfolio on each timeline date.

    The timeline is the sorted union of dates across all series. Dates where
    no symbol has data never appear; dates where only some symbols have data
    use carried-forward values for the others.

    Args:
        series: Normalized quote series keyed by symbol
        shares: Shares held per symbol

    Returns:
        One ValuationPoint per distinct date, strictly ascending

    Raises:
        InternalConsistencyError: If a symbol with quotes has no share count
    """
    symbols = list(series)

    unallocated = [s for s in symbols if not series[s].is_empty and s not in shares]
    if unallocated:
        raise InternalConsistencyError(
            f"Shares were not allocated for symbols with quotes: {unallocated}"
        )

    # symbol -> {date: close}
    closes_by_date = {
        symbol: {point.date: point.close for point in series[symbol].points}
        for symbol in symbols
    }
    timeline = sorted(set().union(*(closes.keys() for closes in closes_by_date.values())))

    current_values = {symbol: Decimal("0") for symbol in symbols}
    points = []

    for on_date in timeline:
        for symbol in symbols:
            close = closes_by_date[symbol].get(on_date)
            if close is not None:
                current_values[symbol] = shares.shares_for(symbol) * close

        points.append(
            ValuationPoint(
                date=on_date,
                per_symbol_value=dict(current_values),
                total_value=sum(current_values.values(), Decimal("0")),
            )
        )

    return points


def summarize_valuation(
    points: list[ValuationPoint],
    plan: AllocationPlan,
) -> Optional[PortfolioSummary]:
    """
    Summarize the final state of a valuation timeline.

    Args:
        points: Valuation timeline
        plan: Allocation plan the timeline was computed for

    Returns:
        PortfolioSummary for the last date, or None for an empty timeline
    """
    if not points:
        return None

    last = points[-1]
    final_by_symbol = {
        symbol: last.per_symbol_value.get(symbol, Decimal("0"))
        for symbol in plan.symbols
    }

    return PortfolioSummary(
        as_of=last.date,
        initial_amount=plan.initial_amount,
        final_total=last.total_value,
        final_by_symbol=final_by_symbol,
        total_return=calculate_total_return(last.total_value, plan.initial_amount),
    )


def calculate_total_return(
    final_value: Decimal,
    initial_amount: Decimal,
) -> Decimal:
    """
    Calculate simple return relative to the initial amount.

    Returns:
        Return as decimal (e.g., 0.05 for 5%)
    """
    if initial_amount == Decimal("0"):
        return Decimal("0")

    return (final_value - initial_amount) / initial_amount
