"""
Exception taxonomy for the portfolio tracker.

Every error raised by the package derives from TrackerError so that the
presentation layer can map any failure onto one generic user message.
"""

from dataclasses import dataclass
from typing import Optional


GENERIC_ERROR_MESSAGE = "Sorry, but something went wrong."
DATA_UNAVAILABLE_HINT = (
    "Data could not be retrieved for one or more symbols in your portfolio."
)
ALLOCATION_HINT = "Check the symbols and portions in your allocation plan."
CONFIGURATION_HINT = "Check the allocation plan file and API key settings."


class TrackerError(Exception):
    """Base class for all portfolio tracker errors."""
    pass


class DataFormatError(TrackerError):
    """Raised when a provider payload is malformed or missing for a symbol."""
    pass


class AllocationError(TrackerError):
    """Raised when shares cannot be computed from the plan and the quote data."""
    pass


class InternalConsistencyError(TrackerError):
    """Raised when an invariant between pipeline stages is violated."""
    pass


@dataclass(frozen=True)
class UserMessage:
    """
    User-visible rendering of an error.

    Attributes:
        message: Generic message shown for every failure
        hint: Optional remediation hint
    """
    message: str
    hint: Optional[str] = None

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} {self.hint}"
        return self.message


def user_message_for(error: Exception) -> UserMessage:
    """
    Map an exception to the message shown to the user.

    Args:
        error: Any exception surfaced by the pipeline

    Returns:
        UserMessage with the generic message and a hint where one applies
    """
    # Imported here to avoid a cycle: both modules import TrackerError
    from folio_tracker.config import ConfigurationError
    from folio_tracker.data.providers.base import DataProviderError

    if isinstance(error, (DataFormatError, DataProviderError)):
        return UserMessage(GENERIC_ERROR_MESSAGE, DATA_UNAVAILABLE_HINT)
    if isinstance(error, AllocationError):
        return UserMessage(GENERIC_ERROR_MESSAGE, ALLOCATION_HINT)
    if isinstance(error, ConfigurationError):
        return UserMessage(GENERIC_ERROR_MESSAGE, CONFIGURATION_HINT)
    return UserMessage(GENERIC_ERROR_MESSAGE)
