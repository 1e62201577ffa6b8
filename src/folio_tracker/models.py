"""
Core data models for the portfolio tracker.

This module defines the data structures passed between the pipeline stages:
allocation plans, normalized quote series, share counts, valuation points
and the chart-ready output series.
All monetary values, prices, portions and share quantities use Decimal.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class ActionType(Enum):
    """Types of logged actions for the decision log."""
    PLAN_LOADED = "PLAN_LOADED"
    QUOTES_NORMALIZED = "QUOTES_NORMALIZED"
    SHARES_ALLOCATED = "SHARES_ALLOCATED"
    VALUATION_CALCULATED = "VALUATION_CALCULATED"
    CHART_ASSEMBLED = "CHART_ASSEMBLED"
    RUN_FAILED = "RUN_FAILED"


@dataclass(frozen=True)
class PlanAsset:
    """
    One line of an allocation plan.

    Attributes:
        symbol: Ticker symbol
        portion: Fraction of the initial amount invested in the symbol (0-1)
    """
    symbol: str
    portion: Decimal

    def __post_init__(self):
        # Symbols compare case-insensitively against provider payloads
        object.__setattr__(self, "symbol", str(self.symbol).upper().strip())


@dataclass
class AllocationPlan:
    """
    How a lump sum was divided among symbols on a start date.

    Attributes:
        initial_amount: Lump sum invested
        start_date: Date the investment was made
        assets: Symbols and their portions, in display order
        plan_id: Identifier used in the decision log
    """
    initial_amount: Decimal
    start_date: date
    assets: list[PlanAsset]
    plan_id: str = "default"

    @property
    def symbols(self) -> list[str]:
        """Plan symbols in plan order."""
        return [asset.symbol for asset in self.assets]

    @property
    def total_portion(self) -> Decimal:
        """Sum of all portions (normally exactly 1)."""
        return sum((asset.portion for asset in self.assets), Decimal("0"))


@dataclass(frozen=True)
class QuotePoint:
    """
    Closing price for a symbol on a date.

    Attributes:
        date: Trading date
        close: Closing price (always > 0)
    """
    date: date
    close: Decimal


@dataclass(frozen=True)
class SymbolSeries:
    """
    Normalized quote history for a single symbol.

    Points are sorted ascending by date with no duplicate dates.

    Attributes:
        symbol: Ticker symbol
        points: Quote points in ascending date order
    """
    symbol: str
    points: tuple[QuotePoint, ...]

    def __len__(self) -> int:
        return len(self.points)

    @property
    def is_empty(self) -> bool:
        return not self.points

    @property
    def earliest(self) -> Optional[QuotePoint]:
        """First available quote, or None for an empty series."""
        return self.points[0] if self.points else None

    @property
    def latest(self) -> Optional[QuotePoint]:
        """Most recent quote, or None for an empty series."""
        return self.points[-1] if self.points else None

    @property
    def dates(self) -> list[date]:
        return [point.date for point in self.points]

    def price_on(self, on_date: date) -> Optional[Decimal]:
        """Closing price on exactly this date, or None if there is no quote."""
        for point in self.points:
            if point.date == on_date:
                return point.close
        return None


# symbol -> normalized series
SeriesMap = dict[str, SymbolSeries]


@dataclass(frozen=True)
class Holding:
    """
    Shares bought for one plan asset.

    The purchase price is the earliest available close in the symbol's
    series, so purchase_date can be later than the plan start date when the
    provider's lookback window does not reach back that far.

    Attributes:
        symbol: Ticker symbol
        portion: Plan portion for the symbol
        amount_invested: initial_amount * portion
        purchase_date: Date of the quote used as purchase price
        purchase_price: Earliest available closing price
        shares: amount_invested / purchase_price (unrounded)
    """
    symbol: str
    portion: Decimal
    amount_invested: Decimal
    purchase_date: date
    purchase_price: Decimal
    shares: Decimal


@dataclass
class ShareCount:
    """
    Number of shares held per symbol for one computation run.

    Attributes:
        holdings: Holding details keyed by symbol
    """
    holdings: dict[str, Holding] = field(default_factory=dict)

    def __contains__(self, symbol: str) -> bool:
        return symbol in self.holdings

    def __len__(self) -> int:
        return len(self.holdings)

    @property
    def symbols(self) -> list[str]:
        return list(self.holdings)

    def shares_for(self, symbol: str) -> Decimal:
        """Shares held for a symbol. Raises KeyError for unknown symbols."""
        return self.holdings[symbol].shares

    def as_dict(self) -> dict[str, Decimal]:
        return {symbol: h.shares for symbol, h in self.holdings.items()}


@dataclass(frozen=True)
class ValuationPoint:
    """
    Portfolio value on one date of the timeline.

    Attributes:
        date: Timeline date
        per_symbol_value: Carried-forward value of each holding
        total_value: Sum of per_symbol_value
    """
    date: date
    per_symbol_value: dict[str, Decimal]
    total_value: Decimal


@dataclass(frozen=True)
class SeriesPoint:
    """Chart point: ISO date string and fixed-precision value string."""
    x: str
    y: str


@dataclass
class OutputSeries:
    """
    Named series ready for the presentation layer.

    Attributes:
        name: Display name (a symbol, or the total series name)
        type: Opaque chart type label, passed through unchanged
        data: Points in strictly ascending date order
    """
    name: str
    type: str
    data: list[SeriesPoint] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.type,
            "data": [{"x": p.x, "y": p.y} for p in self.data],
        }


@dataclass
class PortfolioSummary:
    """
    Final values of a valuation run.

    Attributes:
        as_of: Last date of the timeline
        initial_amount: Lump sum from the plan
        final_total: Total portfolio value on as_of
        final_by_symbol: Holding values on as_of, in plan order
        total_return: (final_total - initial_amount) / initial_amount
    """
    as_of: date
    initial_amount: Decimal
    final_total: Decimal
    final_by_symbol: dict[str, Decimal]
    total_return: Decimal


@dataclass
class DecisionLogEntry:
    """
    Entry for the append-only decision log.

    Attributes:
        timestamp: When the action occurred
        action_type: Type of action
        plan_id: Allocation plan involved (if applicable)
        details: JSON-serializable details dictionary
    """
    timestamp: datetime
    action_type: ActionType
    plan_id: Optional[str]
    details: dict

    @classmethod
    def create(
        cls,
        action_type: ActionType,
        plan_id: Optional[str],
        details: dict,
    ) -> "DecisionLogEntry":
        """Factory method with auto-generated timestamp."""
        return cls(
            timestamp=datetime.now(),
            action_type=action_type,
            plan_id=plan_id,
            details=details,
        )
