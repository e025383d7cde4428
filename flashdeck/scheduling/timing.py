"""
Day-granularity timing for a collection.

All Review due values are day indices counted from the collection's creation
stamp, so "today" is simply the number of whole days since that stamp.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from flashdeck.db.database import SqliteStorage
from flashdeck.db.repository import get_creation_stamp, set_creation_stamp
from flashdeck.errors import NotFoundError

SECONDS_PER_DAY = 86_400


@dataclass(frozen=True)
class SchedTimingToday:
    now: int  # Seconds since epoch
    days_elapsed: int  # Whole days since the creation stamp
    next_day_at: int  # Day index at which today rolls over


def timing_for_timestamp(storage: SqliteStorage, now: int) -> SchedTimingToday:
    """
    Build the timing context for ``now``.

    A missing creation stamp is initialized to ``now`` and persisted. A clock
    that reads earlier than the stamp clamps ``days_elapsed`` to zero.

    Raises:
        StorageError: If the stamp cannot be read or written
    """
    try:
        creation_stamp = get_creation_stamp(storage)
    except NotFoundError:
        logger.info(f"No creation stamp found, initializing collection epoch to {now}")
        set_creation_stamp(storage, now)
        creation_stamp = now

    days_elapsed = (now - creation_stamp) // SECONDS_PER_DAY
    if days_elapsed < 0:
        logger.warning(
            f"Clock is behind the collection creation stamp "
            f"(now={now}, creation_stamp={creation_stamp}); treating today as day 0"
        )
        days_elapsed = 0

    return SchedTimingToday(
        now=now,
        days_elapsed=days_elapsed,
        next_day_at=days_elapsed + 1,
    )
