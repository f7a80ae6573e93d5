"""Helpers for splitting a row total into bulk insert batches."""

from typing import Iterator, Tuple


def iter_batches(total: int, batch_size: int) -> Iterator[Tuple[int, int]]:
    """
    Yield (offset, size) for each batch covering `total` rows.

    Every batch holds `batch_size` rows except possibly the last one,
    which holds whatever is left. A total of 0 yields nothing.

    Args:
        total: Number of rows to produce
        batch_size: Maximum rows per batch

    Raises:
        ValueError: If total is negative or batch_size is not positive
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    if total < 0:
        raise ValueError(f"total must be >= 0, got {total}")

    for offset in range(0, total, batch_size):
        yield offset, min(batch_size, total - offset)


def count_batches(total: int, batch_size: int) -> int:
    """Number of batches iter_batches() yields: ceil(total / batch_size)."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    return -(-total // batch_size)
