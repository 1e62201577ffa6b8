"""
Decision logging module for the portfolio tracker.

Provides append-only decision logging for audit and reproducibility.
"""

from folio_tracker.logging.decision_log import (
    DecisionLogger,
    DecimalEncoder,
    log_action,
    get_logger,
)

__all__ = [
    "DecisionLogger",
    "DecimalEncoder",
    "log_action",
    "get_logger",
]
