"""Utility functions package."""

from .batching import (
    iter_batches,
    count_batches,
)

from .db_utils import (
    DatabaseBackend,
    create_backend,
    create_db_engine,
    create_schema,
    mask_url,
    metadata,
    TABLES,
)

__all__ = [
    # Batching
    "iter_batches",
    "count_batches",
    # Database
    "DatabaseBackend",
    "create_backend",
    "create_db_engine",
    "create_schema",
    "mask_url",
    "metadata",
    "TABLES",
]
