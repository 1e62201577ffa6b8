"""
Quote provider that serves a saved payload from disk.

Used for development and demos without an API key: the file holds a provider
response captured earlier (any layout the quote normalizer understands).
"""

from datetime import date
from pathlib import Path
from typing import Any

from folio_tracker.data.loaders import DataLoadError, load_quotes_csv, load_quotes_json
from folio_tracker.data.providers.base import QuoteProvider, DataProviderError


class SampleDataProvider(QuoteProvider):
    """Serves quotes from a JSON or CSV file instead of the network."""

    def __init__(self, file_path: str | Path):
        self._file_path = Path(file_path)
        self._payload: Any = None

    @property
    def name(self) -> str:
        return f"Sample data ({self._file_path.name})"

    def fetch_quotes(
        self,
        symbols: list[str],
        start_date: date,
        end_date: date,
    ) -> Any:
        """
        Return the saved payload restricted to the requested symbols.

        The date range is not applied; the file is served as recorded.
        Symbols missing from the file are left out so that the normalizer
        reports them. Saved provider error bodies are returned unfiltered.
        """
        payload = self._load()
        wanted = {s.upper().strip() for s in symbols}

        if isinstance(payload, list):
            return [
                record for record in payload
                if isinstance(record, dict)
                and str(record.get("symbol", "")).upper().strip() in wanted
            ]

        if isinstance(payload, dict) and "values" not in payload and "status" not in payload:
            return {
                symbol: entry for symbol, entry in payload.items()
                if symbol.upper().strip() in wanted
            }

        return payload

    def _load(self) -> Any:
        if self._payload is None:
            try:
                if self._file_path.suffix.lower() == ".csv":
                    self._payload = load_quotes_csv(self._file_path)
                else:
                    self._payload = load_quotes_json(self._file_path)
            except DataLoadError as e:
                raise DataProviderError(str(e))
        return self._payload
