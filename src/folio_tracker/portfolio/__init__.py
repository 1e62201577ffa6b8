"""
Portfolio module for the portfolio tracker.

Provides share allocation from an initial lump sum and valuation of the
holdings over time.
"""

from folio_tracker.portfolio.allocate import (
    allocate_shares,
    check_plan,
    validate_plan,
)
from folio_tracker.portfolio.valuation import (
    value_timeline,
    summarize_valuation,
    calculate_total_return,
)

__all__ = [
    "allocate_shares",
    "check_plan",
    "validate_plan",
    "value_timeline",
    "summarize_valuation",
    "calculate_total_return",
]
