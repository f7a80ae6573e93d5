"""Errors raised while seeding the database."""

from typing import Optional


class SeedError(Exception):
    """Base class for every error that should abort a seeding run."""


class ConfigurationError(SeedError):
    """Missing or invalid configuration (connection string, sizes)."""


class BackendConnectionError(SeedError):
    """The database could not be reached at startup."""


class BatchInsertError(SeedError):
    """
    A bulk insert statement failed.

    The run is aborted on the first failed batch. Rows from earlier batches
    stay in the database, so the tables must be reset before re-running.
    """

    def __init__(self, table: str, batch_index: Optional[int], batch_size: int, reason: str):
        self.table = table
        self.batch_index = batch_index
        self.batch_size = batch_size
        position = f"batch {batch_index}" if batch_index is not None else "batch"
        super().__init__(
            f"Failed to insert {position} ({batch_size} rows) into '{table}': {reason}"
        )


class DataQualityError(SeedError):
    """Post-load verification found rows that break the generator's invariants."""
