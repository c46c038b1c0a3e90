"""
Module: batch_helpers.py
Description: Utility functions for batch sends.

Key Components:
- iter_batches(): Accumulate an iterable into complete groups plus a remainder
- MAX_BATCH_SIZE: Entry limit of one batch call

Dependencies: typing
"""

from typing import Iterable, Iterator, List, TypeVar

T = TypeVar('T')

# Maximum number of entries the service accepts in one batch call
MAX_BATCH_SIZE = 10


def iter_batches(items: Iterable[T], batch_size: int = MAX_BATCH_SIZE) -> Iterator[List[T]]:
    """
    Accumulate items and yield every complete group, then the remainder.

    Each group is yielded as soon as it is complete, so the input can be
    a generator of unknown length. The item that completes a group is
    part of that group.

    Args:
        items: Items to group
        batch_size: Size of each complete group

    Yields:
        Lists of at most batch_size items, never empty

    Raises:
        ValueError: If batch_size is not positive

    Example:
        >>> list(iter_batches([1, 2, 3, 4, 5], 2))
        [[1, 2], [3, 4], [5]]
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")

    batch: List[T] = []
    for item in items:
        batch.append(item)
        if len(batch) == batch_size:
            yield batch
            batch = []
    if batch:
        yield batch
