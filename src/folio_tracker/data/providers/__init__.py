"""
Quote providers for raw price payloads.

Provides a pluggable interface for fetching quotes from the Twelve Data API
or from saved sample files.
"""

from folio_tracker.data.providers.base import QuoteProvider, DataProviderError
from folio_tracker.data.providers.sample_provider import SampleDataProvider
from folio_tracker.data.providers.twelvedata_provider import (
    TwelveDataProvider,
    get_twelvedata_provider,
)

__all__ = [
    "QuoteProvider",
    "DataProviderError",
    "SampleDataProvider",
    "TwelveDataProvider",
    "get_twelvedata_provider",
]
