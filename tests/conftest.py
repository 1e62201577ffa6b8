"""
Pytest fixtures for the portfolio tracker tests.

Provides common test data and utilities used across test modules.
"""

import tempfile
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from folio_tracker.models import AllocationPlan, PlanAsset, QuotePoint, SymbolSeries


D1 = date(2024, 1, 2)
D2 = date(2024, 1, 3)
D3 = date(2024, 1, 4)


def make_series(symbol: str, *points: tuple[date, str]) -> SymbolSeries:
    """Build an ascending SymbolSeries from (date, close) pairs."""
    return SymbolSeries(
        symbol=symbol,
        points=tuple(QuotePoint(date=d, close=Decimal(c)) for d, c in points),
    )


@pytest.fixture
def single_asset_plan() -> AllocationPlan:
    """$1,000 fully invested in X."""
    return AllocationPlan(
        initial_amount=Decimal("1000"),
        start_date=D1,
        assets=[PlanAsset(symbol="X", portion=Decimal("1.0"))],
        plan_id="SINGLE",
    )


@pytest.fixture
def two_asset_plan() -> AllocationPlan:
    """$200 split evenly between X and Y."""
    return AllocationPlan(
        initial_amount=Decimal("200"),
        start_date=D1,
        assets=[
            PlanAsset(symbol="X", portion=Decimal("0.5")),
            PlanAsset(symbol="Y", portion=Decimal("0.5")),
        ],
        plan_id="PAIR",
    )


@pytest.fixture
def two_asset_series() -> dict[str, SymbolSeries]:
    """X quoted on D1 and D2, Y only on D1."""
    return {
        "X": make_series("X", (D1, "100"), (D2, "200")),
        "Y": make_series("Y", (D1, "50")),
    }


@pytest.fixture
def sample_plan() -> AllocationPlan:
    """Three-symbol plan matching config/sample_plan.yaml."""
    return AllocationPlan(
        initial_amount=Decimal("32500.00"),
        start_date=date(2023, 1, 1),
        assets=[
            PlanAsset(symbol="AAPL", portion=Decimal("0.20")),
            PlanAsset(symbol="GOOG", portion=Decimal("0.50")),
            PlanAsset(symbol="MSFT", portion=Decimal("0.30")),
        ],
        plan_id="sample",
    )


@pytest.fixture
def twelvedata_batch_payload() -> dict:
    """
    Twelve Data time_series response for several symbols.

    Values are in descending date order, prices are strings.
    """
    return {
        "X": {
            "meta": {"symbol": "X", "interval": "1day", "currency": "USD"},
            "values": [
                {"datetime": "2024-01-03", "open": "190.0", "close": "200.00"},
                {"datetime": "2024-01-02", "open": "99.0", "close": "100.00"},
            ],
            "status": "ok",
        },
        "Y": {
            "meta": {"symbol": "Y", "interval": "1day", "currency": "USD"},
            "values": [
                {"datetime": "2024-01-02", "open": "49.0", "close": "50.00"},
            ],
            "status": "ok",
        },
    }


@pytest.fixture
def twelvedata_single_payload() -> dict:
    """Twelve Data time_series response when one symbol is requested."""
    return {
        "meta": {"symbol": "X", "interval": "1day", "currency": "USD"},
        "values": [
            {"datetime": "2024-01-03", "close": "150.00"},
            {"datetime": "2024-01-02", "close": "100.00"},
        ],
        "status": "ok",
    }


@pytest.fixture
def flat_records_payload() -> list[dict]:
    """Flat date/symbol/close records mixed across symbols, unsorted."""
    return [
        {"date": "2024-01-03", "symbol": "X", "close": 200.0},
        {"date": "2024-01-02", "symbol": "Y", "close": 50.0},
        {"date": "2024-01-02", "symbol": "X", "close": 100.0},
    ]


@pytest.fixture
def twelvedata_error_payload() -> dict:
    """Twelve Data whole-request error body."""
    return {
        "code": 401,
        "message": "**apikey** parameter is incorrect or not specified.",
        "status": "error",
    }


@pytest.fixture
def sample_quotes_path() -> Path:
    """Path to the sample quote file shipped in config/."""
    return Path(__file__).parent.parent / "config" / "sample_quotes.json"


@pytest.fixture
def sample_plan_path() -> Path:
    """Path to the sample plan shipped in config/."""
    return Path(__file__).parent.parent / "config" / "sample_plan.yaml"


@pytest.fixture
def temp_output_dir() -> Path:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_twelvedata_response():
    """
    Factory fixture for creating mock Twelve Data API responses.

    Usage:
        def test_something(mock_twelvedata_response):
            response = mock_twelvedata_response(status_code=200, json_data={...})
    """
    from unittest.mock import MagicMock

    import requests

    def _create_response(status_code: int = 200, json_data=None, raise_for_status=False):
        mock_response = MagicMock()
        mock_response.status_code = status_code
        mock_response.json.return_value = json_data if json_data is not None else {}

        if raise_for_status:
            mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError(
                f"{status_code} Server Error"
            )
        else:
            mock_response.raise_for_status.return_value = None

        return mock_response

    return _create_response
