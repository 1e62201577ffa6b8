"""
Data loading and saving functions for quote files and chart output.

Handles ingestion of quote payloads from JSON (provider responses saved to
disk) and CSV (flat date/symbol/close tables), and writing the assembled
chart series as JSON.
"""

import json
from pathlib import Path
from typing import Any

import pandas as pd

from folio_tracker.data.schemas import QUOTES_SCHEMA
from folio_tracker.models import OutputSeries
from folio_tracker.errors import TrackerError


class DataLoadError(TrackerError):
    """Raised when data cannot be loaded or is invalid."""
    pass


def load_quotes_json(file_path: str | Path) -> Any:
    """
    Load a raw quote payload from a JSON file.

    The payload is returned as-is; shape detection and validation happen in
    the quote normalizer.

    Args:
        file_path: Path to a JSON file holding a provider response

    Returns:
        Parsed JSON payload

    Raises:
        DataLoadError: If the file cannot be read or is not valid JSON
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise DataLoadError(f"Quote file not found: {file_path}")

    try:
        with open(file_path, "r") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise DataLoadError(f"Invalid JSON in quote file {file_path}: {e}")
    except OSError as e:
        raise DataLoadError(f"Error reading quote file {file_path}: {e}")


def load_quotes_csv(file_path: str | Path) -> list[dict]:
    """
    Load flat quote records from a CSV file.

    Args:
        file_path: Path to CSV file with columns: date, symbol, close

    Returns:
        List of {date, symbol, close} records in file order, suitable for
        the FLAT_RECORDS payload layout

    Raises:
        DataLoadError: If file cannot be loaded or is missing columns
    """
    file_path = Path(file_path)
    df = _load_csv(file_path)

    df = df.dropna(subset=QUOTES_SCHEMA.required_columns)
    columns = [c for c in QUOTES_SCHEMA.all_columns if c in df.columns]

    records = []
    for row in df[columns].to_dict(orient="records"):
        record = {
            "date": str(row["date"]).strip(),
            "symbol": str(row["symbol"]).strip(),
            "close": row["close"],
        }
        if "adjusted_close" in row and not pd.isna(row["adjusted_close"]):
            record["adjusted_close"] = row["adjusted_close"]
        records.append(record)

    return records


def save_chart_payload(series: list[OutputSeries], file_path: str | Path) -> None:
    """
    Save assembled chart series to a JSON file.

    Args:
        series: Output series from the series assembler
        file_path: Output path
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    with open(file_path, "w") as f:
        json.dump([s.to_dict() for s in series], f, indent=2)


def _load_csv(file_path: Path) -> pd.DataFrame:
    """
    Load and validate a quote CSV file.

    Raises:
        DataLoadError: If file doesn't exist or fails validation
    """
    if not file_path.exists():
        raise DataLoadError(f"File not found: {file_path}")

    try:
        # Keep prices as text so Decimal parsing sees the file's digits
        df = pd.read_csv(file_path, dtype=str)
    except Exception as e:
        raise DataLoadError(f"Error reading CSV file {file_path}: {e}")

    df.columns = [c.strip().lower() for c in df.columns]

    is_valid, missing = QUOTES_SCHEMA.validate_columns(list(df.columns))
    if not is_valid:
        raise DataLoadError(
            f"Missing required columns in {QUOTES_SCHEMA.name}: {missing}"
        )

    return df
