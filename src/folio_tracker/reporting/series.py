"""
Chart series assembly.

Reshapes a valuation timeline into named output series: one per symbol plus
a synthetic total series. This is the only place values are rounded; they
leave as fixed-precision strings, with dates as ISO strings.
"""

from decimal import Decimal, ROUND_HALF_UP

from folio_tracker.models import OutputSeries, SeriesPoint, ValuationPoint


DEFAULT_SERIES_TYPE = "area"
DEFAULT_TOTAL_NAME = "Total"
DEFAULT_PRECISION = 2


def assemble_series(
    points: list[ValuationPoint],
    symbols: list[str],
    series_type: str = DEFAULT_SERIES_TYPE,
    total_name: str = DEFAULT_TOTAL_NAME,
    precision: int = DEFAULT_PRECISION,
) -> list[OutputSeries]:
    """
    Build output series from a valuation timeline.

    Every series has one point per timeline date, so the series line up
    date for date. An empty timeline yields series with no points.

    Args:
        points: Valuation timeline, ascending by date
        symbols: Symbols to emit, in display order
        series_type: Chart type label, passed through unchanged
        total_name: Name of the total series
        precision: Decimal places of the formatted values

    Returns:
        One OutputSeries per symbol followed by the total series
    """
    by_symbol = {symbol: OutputSeries(name=symbol, type=series_type) for symbol in symbols}
    total = OutputSeries(name=total_name, type=series_type)

    for point in points:
        x = point.date.isoformat()
        for symbol in symbols:
            value = point.per_symbol_value.get(symbol, Decimal("0"))
            by_symbol[symbol].data.append(SeriesPoint(x=x, y=format_value(value, precision)))
        total.data.append(SeriesPoint(x=x, y=format_value(point.total_value, precision)))

    return [by_symbol[symbol] for symbol in symbols] + [total]


def format_value(value: Decimal, precision: int = DEFAULT_PRECISION) -> str:
    """
    Round half-up and format with exactly `precision` decimal places.

    Examples:
        >>> format_value(Decimal("1500"))
        '1500.00'
        >>> format_value(Decimal("2.345"))
        '2.35'
    """
    quantum = Decimal(1).scaleb(-precision)
    return f"{value.quantize(quantum, rounding=ROUND_HALF_UP):f}"


def to_chart_payload(series: list[OutputSeries]) -> list[dict]:
    """Convert output series to the {name, type, data: [{x, y}]} dicts used by charts."""
    return [s.to_dict() for s in series]
