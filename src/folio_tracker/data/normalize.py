"""
Quote normalization.

Converts provider-specific quote payloads into one SymbolSeries per symbol,
sorted ascending by date with duplicate dates collapsed (last write wins).

Two provider layouts are recognised, plus the single-symbol variant of the
second one:

- FLAT_RECORDS: a list of {date, symbol, close} records mixed across symbols
  (EOD style feeds; adjusted_close is preferred over close when present)
- PER_SYMBOL: {symbol: {status, values: [{datetime, close}, ...]}} with values
  in descending date order (Twelve Data batch response)
- SINGLE_SYMBOL: {meta: {symbol}, status, values} (Twelve Data response when
  exactly one symbol is requested)
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, Optional

import pandas as pd

from folio_tracker.data.schemas import QUOTES_SCHEMA, TIME_SERIES_VALUES_SCHEMA
from folio_tracker.errors import DataFormatError
from folio_tracker.models import QuotePoint, SeriesMap, SymbolSeries


STATUS_OK = "ok"


class PayloadShape(Enum):
    """Recognised provider payload layouts."""
    FLAT_RECORDS = "FLAT_RECORDS"
    PER_SYMBOL = "PER_SYMBOL"
    SINGLE_SYMBOL = "SINGLE_SYMBOL"


@dataclass(frozen=True)
class QuoteRecord:
    """A single parsed quote, before ordering and deduplication."""
    symbol: str
    date: date
    close: Decimal


@dataclass
class ParsedPayload:
    """
    Result of the shape-detection parse step.

    Attributes:
        shape: Detected payload layout
        records: Parsed quotes in payload order
        present: Symbols the payload contains an entry for
        failed: Symbols whose entry reports a non-success status, with the
            provider's status or message
    """
    shape: PayloadShape
    records: list[QuoteRecord] = field(default_factory=list)
    present: set[str] = field(default_factory=set)
    failed: dict[str, str] = field(default_factory=dict)


def detect_payload_shape(payload: Any) -> PayloadShape:
    """
    Detect the layout of a provider payload.

    Args:
        payload: Raw payload as returned by the quote provider

    Returns:
        The detected PayloadShape

    Raises:
        DataFormatError: If the payload matches no known layout, or is a
            provider-level error object
    """
    if isinstance(payload, list):
        return PayloadShape.FLAT_RECORDS

    if not isinstance(payload, dict):
        raise DataFormatError(
            f"Unsupported quote payload type: {type(payload).__name__}"
        )

    if "values" in payload and ("meta" in payload or "status" in payload):
        return PayloadShape.SINGLE_SYMBOL

    if isinstance(payload.get("status"), str) and ("code" in payload or "message" in payload):
        raise DataFormatError(
            f"Quote provider returned an error: "
            f"{payload.get('message', payload['status'])}"
        )

    if all(isinstance(entry, dict) for entry in payload.values()):
        return PayloadShape.PER_SYMBOL

    raise DataFormatError("Unrecognised quote payload layout")


def parse_payload(
    payload: Any,
    symbols: Optional[Iterable[str]] = None,
) -> ParsedPayload:
    """
    Parse a provider payload into flat quote records.

    Args:
        payload: Raw payload as returned by the quote provider
        symbols: If given, only these symbols are parsed; other symbols in
            the payload are ignored

    Returns:
        ParsedPayload tagged with the detected shape

    Raises:
        DataFormatError: If the layout is unknown or a required field of a
            parsed record is missing or unparseable
    """
    shape = detect_payload_shape(payload)
    wanted = {_clean_symbol(s) for s in symbols} if symbols is not None else None
    parsed = ParsedPayload(shape=shape)

    if shape == PayloadShape.FLAT_RECORDS:
        _parse_flat_records(payload, wanted, parsed)
    elif shape == PayloadShape.SINGLE_SYMBOL:
        meta = payload.get("meta")
        if not isinstance(meta, dict) or not meta.get("symbol"):
            raise DataFormatError("Single-symbol payload is missing meta.symbol")
        _parse_symbol_entry(_clean_symbol(meta["symbol"]), payload, wanted, parsed)
    else:
        for symbol, entry in payload.items():
            _parse_symbol_entry(_clean_symbol(symbol), entry, wanted, parsed)

    return parsed


def normalize_quotes(
    payload: Any,
    symbols: Optional[Iterable[str]] = None,
) -> SeriesMap:
    """
    Normalize a provider payload into ascending per-symbol series.

    Args:
        payload: Raw payload as returned by the quote provider
        symbols: Symbols that must be present; None normalizes every symbol
            in the payload

    Returns:
        Mapping of symbol to SymbolSeries, in requested symbol order

    Raises:
        DataFormatError: If a requested symbol is absent or reports a
            non-success status, or any required field is missing/unparseable
    """
    requested = [_clean_symbol(s) for s in symbols] if symbols is not None else None
    parsed = parse_payload(payload, requested)

    if requested is None:
        requested = sorted(parsed.present)

    failed = [s for s in requested if s in parsed.failed]
    if failed:
        details = ", ".join(f"{s} ({parsed.failed[s]})" for s in failed)
        raise DataFormatError(f"Quote data unavailable for: {details}")

    missing = [s for s in requested if s not in parsed.present]
    if missing:
        raise DataFormatError(f"No quote data returned for: {', '.join(missing)}")

    frame = pd.DataFrame(
        [(r.symbol, r.date, r.close) for r in parsed.records],
        columns=["symbol", "date", "close"],
    )
    # Later records win on duplicate dates, then order ascending
    frame = frame.drop_duplicates(subset=["symbol", "date"], keep="last")
    frame = frame.sort_values(["symbol", "date"], kind="mergesort")

    grouped = {
        symbol: tuple(
            QuotePoint(date=row.date, close=row.close)
            for row in group.itertuples(index=False)
        )
        for symbol, group in frame.groupby("symbol", sort=False)
    }

    return {
        symbol: SymbolSeries(symbol=symbol, points=grouped.get(symbol, ()))
        for symbol in requested
    }


def _parse_flat_records(
    payload: list,
    wanted: Optional[set[str]],
    parsed: ParsedPayload,
) -> None:
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise DataFormatError(f"Quote record {index} is not an object")

        if not item.get("symbol"):
            raise DataFormatError(f"Quote record {index} is missing 'symbol'")
        symbol = _clean_symbol(item["symbol"])
        if wanted is not None and symbol not in wanted:
            continue

        price = item.get("adjusted_close")
        if price is None:
            _, missing = QUOTES_SCHEMA.validate_columns(list(item))
            if missing:
                raise DataFormatError(
                    f"Quote record {index} for {symbol} is missing: {', '.join(missing)}"
                )
            price = item["close"]
        elif "date" not in item:
            raise DataFormatError(f"Quote record {index} for {symbol} is missing: date")

        parsed.present.add(symbol)
        parsed.records.append(
            QuoteRecord(
                symbol=symbol,
                date=_parse_quote_date(item["date"], symbol),
                close=_parse_close(price, symbol),
            )
        )


def _parse_symbol_entry(
    symbol: str,
    entry: Any,
    wanted: Optional[set[str]],
    parsed: ParsedPayload,
) -> None:
    if wanted is not None and symbol not in wanted:
        return

    if not isinstance(entry, dict):
        raise DataFormatError(f"Quote entry for {symbol} is not an object")

    parsed.present.add(symbol)

    status = entry.get("status")
    if status != STATUS_OK:
        parsed.failed[symbol] = str(entry.get("message") or status or "missing status")
        return

    values = entry.get("values")
    if not isinstance(values, list):
        raise DataFormatError(f"Quote entry for {symbol} has no 'values' list")

    for index, item in enumerate(values):
        if not isinstance(item, dict):
            raise DataFormatError(f"{symbol} value {index} is not an object")
        _, missing = TIME_SERIES_VALUES_SCHEMA.validate_columns(list(item))
        if missing:
            raise DataFormatError(
                f"{symbol} value {index} is missing: {', '.join(missing)}"
            )
        parsed.records.append(
            QuoteRecord(
                symbol=symbol,
                date=_parse_quote_date(item["datetime"], symbol),
                close=_parse_close(item["close"], symbol),
            )
        )


def _clean_symbol(symbol: Any) -> str:
    return str(symbol).upper().strip()


def _parse_quote_date(value: Any, symbol: str) -> date:
    """Parse a quote date; timestamps are truncated to their date."""
    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass

        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            pass

    raise DataFormatError(f"Invalid quote date for {symbol}: {value!r}")


def _parse_close(value: Any, symbol: str) -> Decimal:
    """Parse a closing price, which must be a finite positive number."""
    if value is None or isinstance(value, bool):
        raise DataFormatError(f"Invalid closing price for {symbol}: {value!r}")

    try:
        price = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise DataFormatError(f"Invalid closing price for {symbol}: {value!r}")

    if not price.is_finite() or price <= Decimal("0"):
        raise DataFormatError(f"Closing price for {symbol} must be positive: {value!r}")

    return price
