"""
Data schemas for quote records.

Defines the expected columns of flat quote records, whether they come from a
provider payload or from a CSV file.
"""

from dataclasses import dataclass


@dataclass
class ColumnSchema:
    """Schema definition for a single column."""
    name: str
    required: bool = True


@dataclass
class FileSchema:
    """Schema definition for a file or record set."""
    name: str
    columns: list[ColumnSchema]
    description: str

    @property
    def required_columns(self) -> list[str]:
        """Get list of required column names."""
        return [c.name for c in self.columns if c.required]

    @property
    def all_columns(self) -> list[str]:
        """Get list of all column names."""
        return [c.name for c in self.columns]

    def validate_columns(self, columns: list[str]) -> tuple[bool, list[str]]:
        """
        Validate that a record or dataframe has the required columns.

        Args:
            columns: Column names (or record keys) to check

        Returns:
            Tuple of (is_valid, list of missing columns)
        """
        missing = [col for col in self.required_columns if col not in columns]
        return len(missing) == 0, missing


# Flat quote records: one row per (symbol, date)
QUOTES_SCHEMA = FileSchema(
    name="quotes",
    description="Closing prices by symbol and date",
    columns=[
        ColumnSchema(name="date", required=True),
        ColumnSchema(name="symbol", required=True),
        ColumnSchema(name="close", required=True),
        ColumnSchema(name="adjusted_close", required=False),
    ],
)

# Twelve Data time_series "values" entries
TIME_SERIES_VALUES_SCHEMA = FileSchema(
    name="time_series_values",
    description="Per-symbol time series entries in descending date order",
    columns=[
        ColumnSchema(name="datetime", required=True),
        ColumnSchema(name="close", required=True),
        ColumnSchema(name="open", required=False),
        ColumnSchema(name="high", required=False),
        ColumnSchema(name="low", required=False),
        ColumnSchema(name="volume", required=False),
    ],
)
