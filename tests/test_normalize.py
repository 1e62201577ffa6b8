"""
Tests for quote payload normalization.
"""

from datetime import date
from decimal import Decimal

import pytest

from folio_tracker.data.normalize import (
    PayloadShape,
    detect_payload_shape,
    normalize_quotes,
    parse_payload,
)
from folio_tracker.errors import DataFormatError


class TestDetectPayloadShape:
    """Tests for the detect_payload_shape function."""

    def test_flat_records(self, flat_records_payload):
        assert detect_payload_shape(flat_records_payload) == PayloadShape.FLAT_RECORDS

    def test_per_symbol(self, twelvedata_batch_payload):
        assert detect_payload_shape(twelvedata_batch_payload) == PayloadShape.PER_SYMBOL

    def test_single_symbol(self, twelvedata_single_payload):
        assert detect_payload_shape(twelvedata_single_payload) == PayloadShape.SINGLE_SYMBOL

    def test_provider_error_object_raises(self, twelvedata_error_payload):
        with pytest.raises(DataFormatError) as exc_info:
            detect_payload_shape(twelvedata_error_payload)

        assert "apikey" in str(exc_info.value)

    @pytest.mark.parametrize("payload", [None, "AAPL", 42, {"X": [1, 2]}])
    def test_unknown_layout_raises(self, payload):
        with pytest.raises(DataFormatError):
            detect_payload_shape(payload)


class TestParsePayload:
    """Tests for the parse_payload function."""

    def test_tags_shape_and_collects_records(self, twelvedata_batch_payload):
        parsed = parse_payload(twelvedata_batch_payload)

        assert parsed.shape == PayloadShape.PER_SYMBOL
        assert parsed.present == {"X", "Y"}
        assert len(parsed.records) == 3
        assert parsed.failed == {}

    def test_records_non_ok_status_as_failed(self, twelvedata_batch_payload):
        twelvedata_batch_payload["Y"] = {
            "code": 404,
            "message": "symbol not found",
            "status": "error",
        }

        parsed = parse_payload(twelvedata_batch_payload)

        assert parsed.failed == {"Y": "symbol not found"}

    def test_ignores_unrequested_symbols(self, flat_records_payload):
        parsed = parse_payload(flat_records_payload, ["X"])

        assert parsed.present == {"X"}
        assert all(r.symbol == "X" for r in parsed.records)


class TestNormalizeQuotes:
    """Tests for the normalize_quotes function."""

    def test_per_symbol_resorted_ascending(self, twelvedata_batch_payload):
        series = normalize_quotes(twelvedata_batch_payload, ["X", "Y"])

        assert series["X"].dates == [date(2024, 1, 2), date(2024, 1, 3)]
        assert series["X"].earliest.close == Decimal("100.00")
        assert series["X"].latest.close == Decimal("200.00")
        assert series["Y"].dates == [date(2024, 1, 2)]

    def test_flat_records_split_by_symbol(self, flat_records_payload):
        series = normalize_quotes(flat_records_payload, ["X", "Y"])

        assert list(series) == ["X", "Y"]
        assert series["X"].dates == [date(2024, 1, 2), date(2024, 1, 3)]
        assert series["Y"].price_on(date(2024, 1, 2)) == Decimal("50.0")

    def test_single_symbol_payload(self, twelvedata_single_payload):
        series = normalize_quotes(twelvedata_single_payload, ["X"])

        assert series["X"].dates == [date(2024, 1, 2), date(2024, 1, 3)]

    def test_same_result_for_both_layouts(
        self, twelvedata_batch_payload, flat_records_payload
    ):
        from_batch = normalize_quotes(twelvedata_batch_payload, ["X", "Y"])
        from_flat = normalize_quotes(flat_records_payload, ["X", "Y"])

        for symbol in ("X", "Y"):
            assert from_batch[symbol].dates == from_flat[symbol].dates
            assert [p.close for p in from_batch[symbol].points] == [
                p.close for p in from_flat[symbol].points
            ]

    def test_duplicate_dates_last_write_wins(self):
        payload = [
            {"date": "2024-01-02", "symbol": "X", "close": "100"},
            {"date": "2024-01-03", "symbol": "X", "close": "110"},
            {"date": "2024-01-02", "symbol": "X", "close": "105"},
        ]

        series = normalize_quotes(payload, ["X"])

        assert len(series["X"]) == 2
        assert series["X"].price_on(date(2024, 1, 2)) == Decimal("105")

    def test_adjusted_close_preferred(self):
        payload = [
            {"date": "2024-01-02", "symbol": "X", "close": "100", "adjusted_close": "50"},
        ]

        series = normalize_quotes(payload, ["X"])

        assert series["X"].earliest.close == Decimal("50")

    def test_timestamps_truncated_to_date(self):
        payload = {
            "meta": {"symbol": "X"},
            "values": [{"datetime": "2024-01-02 15:30:00", "close": "10"}],
            "status": "ok",
        }

        series = normalize_quotes(payload, ["X"])

        assert series["X"].dates == [date(2024, 1, 2)]

    def test_utc_timestamps_accepted(self):
        payload = [
            {"date": "2024-01-02T00:00:00Z", "symbol": "X", "close": "10"},
            {"date": "2024-01-03T00:00:00.000Z", "symbol": "X", "close": "11"},
        ]

        series = normalize_quotes(payload, ["X"])

        assert series["X"].dates == [date(2024, 1, 2), date(2024, 1, 3)]

    def test_symbols_matched_case_insensitively(self, flat_records_payload):
        series = normalize_quotes(flat_records_payload, ["x"])

        assert list(series) == ["X"]

    def test_all_symbols_when_none_requested(self, twelvedata_batch_payload):
        series = normalize_quotes(twelvedata_batch_payload)

        assert set(series) == {"X", "Y"}

    def test_present_symbol_with_no_values_gives_empty_series(self):
        payload = {"X": {"status": "ok", "values": []}}

        series = normalize_quotes(payload, ["X"])

        assert series["X"].is_empty

    def test_missing_symbol_raises(self, twelvedata_batch_payload):
        with pytest.raises(DataFormatError) as exc_info:
            normalize_quotes(twelvedata_batch_payload, ["X", "Z"])

        assert "Z" in str(exc_info.value)

    def test_missing_symbol_in_flat_records_raises(self, flat_records_payload):
        with pytest.raises(DataFormatError):
            normalize_quotes(flat_records_payload, ["X", "Z"])

    def test_non_ok_status_raises(self, twelvedata_batch_payload):
        twelvedata_batch_payload["Y"]["status"] = "error"

        with pytest.raises(DataFormatError) as exc_info:
            normalize_quotes(twelvedata_batch_payload, ["X", "Y"])

        assert "Y" in str(exc_info.value)

    def test_failed_symbol_not_requested_is_ignored(self, twelvedata_batch_payload):
        twelvedata_batch_payload["Y"]["status"] = "error"

        series = normalize_quotes(twelvedata_batch_payload, ["X"])

        assert list(series) == ["X"]

    def test_missing_close_raises(self):
        payload = {"X": {"status": "ok", "values": [{"datetime": "2024-01-02"}]}}

        with pytest.raises(DataFormatError) as exc_info:
            normalize_quotes(payload, ["X"])

        assert "close" in str(exc_info.value)

    def test_missing_date_in_flat_record_raises(self):
        with pytest.raises(DataFormatError):
            normalize_quotes([{"symbol": "X", "close": 10}], ["X"])

    @pytest.mark.parametrize("close", ["abc", "0", "-5", None, "NaN"])
    def test_invalid_close_raises(self, close):
        payload = [{"date": "2024-01-02", "symbol": "X", "close": close}]

        with pytest.raises(DataFormatError):
            normalize_quotes(payload, ["X"])

    def test_invalid_date_raises(self):
        payload = [{"date": "01/02/2024", "symbol": "X", "close": 10}]

        with pytest.raises(DataFormatError):
            normalize_quotes(payload, ["X"])

    def test_does_not_mutate_payload(self, twelvedata_batch_payload):
        first_dates = [v["datetime"] for v in twelvedata_batch_payload["X"]["values"]]

        normalize_quotes(twelvedata_batch_payload, ["X", "Y"])

        assert [v["datetime"] for v in twelvedata_batch_payload["X"]["values"]] == first_dates
