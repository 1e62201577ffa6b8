"""
Append-only decision logging for the portfolio tracker.

Each pipeline stage can record what it did (plan loaded, quotes normalized,
shares allocated, timeline valued, chart assembled, run failed) so that a
chart can be traced back to its inputs.
"""

import json
from datetime import datetime, date
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from folio_tracker.models import (
    ActionType,
    AllocationPlan,
    DecisionLogEntry,
    OutputSeries,
    SeriesMap,
    ShareCount,
    ValuationPoint,
)


class DecisionLogger:
    """
    Append-only decision logger.

    Writes all decisions to a JSONL file for audit purposes.
    Each line is a complete JSON object representing one action.
    """

    def __init__(self, log_path: str | Path):
        """
        Initialize the decision logger.

        Args:
            log_path: Path to the log file (will be created if not exists)
        """
        self.log_path = Path(log_path)
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, entry: DecisionLogEntry) -> None:
        """
        Write a decision log entry.

        Args:
            entry: DecisionLogEntry to write
        """
        record = {
            "timestamp": entry.timestamp.isoformat(),
            "action_type": entry.action_type.value,
            "plan_id": entry.plan_id,
            "details": entry.details,
        }

        with open(self.log_path, "a") as f:
            f.write(json.dumps(record, cls=DecimalEncoder) + "\n")

    def _log(self, action_type: ActionType, plan_id: Optional[str], details: dict) -> None:
        self.log(DecisionLogEntry.create(action_type, plan_id, details))

    def log_plan_loaded(self, plan: AllocationPlan, source: str) -> None:
        """Log the allocation plan a run starts from."""
        self._log(ActionType.PLAN_LOADED, plan.plan_id, {
            "source": source,
            "initial_amount": str(plan.initial_amount),
            "start_date": plan.start_date.isoformat(),
            "assets": {a.symbol: str(a.portion) for a in plan.assets},
            "total_portion": str(plan.total_portion),
        })

    def log_quotes_normalized(
        self,
        plan_id: Optional[str],
        series: SeriesMap,
        shape: str,
    ) -> None:
        """Log per-symbol quote coverage after normalization."""
        self._log(ActionType.QUOTES_NORMALIZED, plan_id, {
            "payload_shape": shape,
            "symbols": {
                symbol: {
                    "points": len(s),
                    "first_date": s.earliest.date if s.earliest else None,
                    "last_date": s.latest.date if s.latest else None,
                }
                for symbol, s in series.items()
            },
        })

    def log_shares_allocated(self, plan: AllocationPlan, shares: ShareCount) -> None:
        """
        Log share allocation, including the purchase date actually used
        for each holding.
        """
        self._log(ActionType.SHARES_ALLOCATED, plan.plan_id, {
            "start_date": plan.start_date.isoformat(),
            "holdings": {
                symbol: {
                    "shares": h.shares,
                    "purchase_price": h.purchase_price,
                    "purchase_date": h.purchase_date,
                    "amount_invested": h.amount_invested,
                }
                for symbol, h in shares.holdings.items()
            },
        })

    def log_valuation_calculated(
        self,
        plan_id: Optional[str],
        points: list[ValuationPoint],
    ) -> None:
        """Log the extent and final value of a valuation timeline."""
        details: dict[str, Any] = {"num_dates": len(points)}
        if points:
            details.update({
                "first_date": points[0].date,
                "last_date": points[-1].date,
                "final_total_value": points[-1].total_value,
            })
        self._log(ActionType.VALUATION_CALCULATED, plan_id, details)

    def log_chart_assembled(
        self,
        plan_id: Optional[str],
        series: list[OutputSeries],
    ) -> None:
        """Log the assembled output series."""
        self._log(ActionType.CHART_ASSEMBLED, plan_id, {
            "series": [s.name for s in series],
            "points_per_series": len(series[0].data) if series else 0,
        })

    def log_run_failed(self, plan_id: Optional[str], error: Exception) -> None:
        """Log a pipeline failure."""
        self._log(ActionType.RUN_FAILED, plan_id, {
            "error_type": type(error).__name__,
            "error": str(error),
        })

    def read_log(self) -> list[DecisionLogEntry]:
        """
        Read all entries from the log file.

        Returns:
            List of DecisionLogEntry objects
        """
        if not self.log_path.exists():
            return []

        entries = []
        with open(self.log_path, "r") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                record = json.loads(line)
                entries.append(
                    DecisionLogEntry(
                        timestamp=datetime.fromisoformat(record["timestamp"]),
                        action_type=ActionType(record["action_type"]),
                        plan_id=record.get("plan_id"),
                        details=record.get("details", {}),
                    )
                )

        return entries

    def filter_by_plan(self, plan_id: str) -> list[DecisionLogEntry]:
        """Get log entries for a specific allocation plan."""
        return [e for e in self.read_log() if e.plan_id == plan_id]

    def filter_by_action_type(self, action_type: ActionType) -> list[DecisionLogEntry]:
        """Get log entries of a specific action type."""
        return [e for e in self.read_log() if e.action_type == action_type]


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal and date types."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, (date, datetime)):
            return obj.isoformat()
        return super().default(obj)


# Global logger instance (initialized on first use)
_global_logger: Optional[DecisionLogger] = None


def get_logger(log_path: Optional[str | Path] = None) -> DecisionLogger:
    """
    Get or create the global decision logger.

    Args:
        log_path: Optional path to initialize logger (required on first call)

    Returns:
        DecisionLogger instance
    """
    global _global_logger

    if _global_logger is None:
        if log_path is None:
            log_path = "output/decision_log.jsonl"
        _global_logger = DecisionLogger(log_path)
    elif log_path is not None:
        # Allow reinitializing with new path
        _global_logger = DecisionLogger(log_path)

    return _global_logger


def log_action(
    action_type: ActionType,
    plan_id: Optional[str],
    details: dict,
    log_path: Optional[str | Path] = None,
) -> None:
    """
    Convenience function to log an action.

    Args:
        action_type: Type of action
        plan_id: Allocation plan identifier (optional)
        details: Action details dictionary
        log_path: Optional path to log file
    """
    logger = get_logger(log_path)
    logger.log(DecisionLogEntry.create(action_type, plan_id, details))
