"""
Twelve Data quote provider.

Uses the Twelve Data time_series endpoint
(https://twelvedata.com/docs#time-series) to fetch closing prices for one or
more symbols in a single request. Interday prices from Twelve Data are
split-adjusted.
"""

from datetime import date
from typing import Any, Optional

import requests

from folio_tracker.config import ConfigurationError, get_twelvedata_api_key
from folio_tracker.data.providers.base import QuoteProvider, DataProviderError


class TwelveDataProvider(QuoteProvider):
    """
    Quote provider backed by the Twelve Data REST API.

    One HTTP request per fetch, no retries. The response is returned
    unmodified: a per-symbol mapping when several symbols are requested, a
    single {meta, values, status} object for one symbol.
    """

    BASE_URL = "https://api.twelvedata.com"
    TIME_SERIES_ENDPOINT = "{base}/time_series"

    REQUEST_TIMEOUT = 30  # seconds

    def __init__(
        self,
        api_key: Optional[str] = None,
        interval: str = "1month",
    ):
        """
        Initialize the Twelve Data provider.

        Args:
            api_key: Twelve Data API key (defaults to loading from config sources)
            interval: Bar interval, e.g. "1day" or "1month"

        Raises:
            DataProviderError: If no API key is provided or configured
        """
        if api_key:
            self._api_key = api_key
        else:
            try:
                self._api_key = get_twelvedata_api_key()
            except ConfigurationError as e:
                raise DataProviderError(str(e))

        self._interval = interval

    @property
    def name(self) -> str:
        return "Twelve Data"

    def fetch_quotes(
        self,
        symbols: list[str],
        start_date: date,
        end_date: date,
    ) -> Any:
        """
        Fetch closing prices for symbols between two dates.

        Uses endpoint:
        https://api.twelvedata.com/time_series?symbol={a,b}&interval={i}&start_date={s}&end_date={e}&apikey={key}

        Args:
            symbols: List of ticker symbols
            start_date: Start date (inclusive)
            end_date: End date (inclusive)

        Returns:
            Raw JSON payload

        Raises:
            DataProviderError: On HTTP failure, invalid JSON, or a
                provider-level error response
        """
        if not symbols:
            raise DataProviderError("No symbols requested")

        symbols = [s.upper().strip() for s in symbols]
        url = self.TIME_SERIES_ENDPOINT.format(base=self.BASE_URL)
        params = {
            "symbol": ",".join(symbols),
            "interval": self._interval,
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
            "apikey": self._api_key,
            "format": "JSON",
        }

        try:
            response = requests.get(url, params=params, timeout=self.REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.exceptions.Timeout:
            raise DataProviderError("Twelve Data request timed out")
        except requests.exceptions.RequestException as e:
            raise DataProviderError(f"Twelve Data request failed: {e}")

        try:
            data = response.json()
        except ValueError as e:
            raise DataProviderError(f"Invalid JSON response from Twelve Data: {e}")

        # Whole-request failures come back as HTTP 200 with an error body
        if isinstance(data, dict) and data.get("status") == "error" and "values" not in data:
            raise DataProviderError(
                f"Twelve Data API error: {data.get('message', 'unknown error')}"
            )

        return data


def get_twelvedata_provider(
    api_key: Optional[str] = None,
    interval: str = "1month",
) -> QuoteProvider:
    """
    Get a Twelve Data provider instance.

    Args:
        api_key: Twelve Data API key (defaults to configured key)
        interval: Bar interval

    Returns:
        QuoteProvider instance

    Raises:
        DataProviderError: If API key is not available
    """
    return TwelveDataProvider(api_key=api_key, interval=interval)
