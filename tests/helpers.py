"""Test doubles shared by the test modules."""
import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock


class InMemoryCounterStore:
    """Counter store with the same contract as MongoCounterStore.

    The read and the write happen without an await in between, so on a
    single event loop each increment is atomic, like the server-side update.
    """

    def __init__(self, counters=None):
        self.counters = dict(counters or {})
        self.calls = 0

    async def increment(self, key, delta=1, default=1000):
        await asyncio.sleep(0)  # let concurrent callers interleave
        self.calls += 1
        value = self.counters.get(key, default) + delta
        self.counters[key] = value
        return value


def fixed_clock(year=2025):
    return lambda: datetime(year, 6, 15, 12, 0, 0)


def future_date(days):
    return (datetime.now(timezone.utc) + timedelta(days=days)).date().isoformat()


def find_chain(result):
    """Mock of a Beanie FindMany supporting .sort().skip().limit().to_list()."""
    query = MagicMock()
    query.sort.return_value = query
    query.skip.return_value = query
    query.limit.return_value = query
    query.to_list = AsyncMock(return_value=result)
    return query


def find_one_update(result):
    """Mock of ``find_one(...).update(...)`` resolving to ``result`` (None when nothing matched)."""
    query = MagicMock()
    query.update = AsyncMock(return_value=result)
    return query
