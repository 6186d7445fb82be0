"""Chunked batch writer.

Executes a list of statements against a store in fixed-size groups.
Each group is one atomic ``execute_batch`` call; groups run strictly in
sequence and in input order.

The write is NOT atomic across groups: when a group fails, every earlier
group stays committed and the failure propagates to the caller.

Usage:
    from db_snapshot.transfer.batch import write_batch

    groups = await write_batch(store, statements, chunk_size=50)
"""

import logging
from collections.abc import Iterator

from db_snapshot.stores.base import RelationalStore, Statement

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 50


def chunked(statements: list[Statement], chunk_size: int) -> Iterator[list[Statement]]:
    """Yield consecutive groups of at most ``chunk_size`` statements."""
    for start in range(0, len(statements), chunk_size):
        yield statements[start:start + chunk_size]


async def write_batch(
    store: RelationalStore,
    statements: list[Statement],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """Execute statements in sequential atomic groups.

    Args:
        store: Store implementing ``RelationalStore``.
        statements: Statements in the order they must be applied.
        chunk_size: Maximum statements per atomic group.

    Returns:
        Number of groups executed (``0`` for an empty list).

    Raises:
        ValueError: If ``chunk_size`` is less than 1.
        Exception: Whatever the store raised for the failing group.

    Example:
        # 51 statements -> 2 groups (50 + 1)
        groups = await write_batch(store, statements, chunk_size=50)
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")

    groups = 0
    for group in chunked(statements, chunk_size):
        await store.execute_batch(group, mode="write")
        groups += 1
        logger.debug("Committed group %d (%d statements)", groups, len(group))
    return groups
