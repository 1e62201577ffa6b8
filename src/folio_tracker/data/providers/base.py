"""
Abstract base class for quote providers.

Defines the interface the pipeline uses to obtain raw quote payloads,
enabling pluggable sources (live API, saved sample data).
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any

from folio_tracker.errors import TrackerError


class DataProviderError(TrackerError):
    """Raised when a quote provider cannot deliver data."""
    pass


class QuoteProvider(ABC):
    """
    Abstract base class for quote providers.

    Providers return the raw payload exactly as the upstream source shapes
    it; the quote normalizer is responsible for interpreting it.
    """

    @abstractmethod
    def fetch_quotes(
        self,
        symbols: list[str],
        start_date: date,
        end_date: date,
    ) -> Any:
        """
        Fetch closing prices for symbols.

        Args:
            symbols: List of ticker symbols
            start_date: Start date (inclusive)
            end_date: End date (inclusive)

        Returns:
            Raw provider payload

        Raises:
            DataProviderError: If data cannot be fetched
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this provider."""
        pass
