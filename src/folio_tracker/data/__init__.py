"""
Quote ingestion for the portfolio tracker.

Provides loading of saved quote payloads and normalization of provider
payloads into per-symbol series.
"""

from folio_tracker.data.loaders import (
    DataLoadError,
    load_quotes_json,
    load_quotes_csv,
    save_chart_payload,
)
from folio_tracker.data.normalize import (
    PayloadShape,
    ParsedPayload,
    detect_payload_shape,
    parse_payload,
    normalize_quotes,
)
from folio_tracker.data.schemas import QUOTES_SCHEMA, TIME_SERIES_VALUES_SCHEMA

__all__ = [
    "DataLoadError",
    "load_quotes_json",
    "load_quotes_csv",
    "save_chart_payload",
    "PayloadShape",
    "ParsedPayload",
    "detect_payload_shape",
    "parse_payload",
    "normalize_quotes",
    "QUOTES_SCHEMA",
    "TIME_SERIES_VALUES_SCHEMA",
]
