"""
Reporting module for the portfolio tracker.

Assembles valuation timelines into chart-ready output series.
"""

from folio_tracker.reporting.series import (
    assemble_series,
    format_value,
    to_chart_payload,
)

__all__ = [
    "assemble_series",
    "format_value",
    "to_chart_payload",
]
