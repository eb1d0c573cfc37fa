# yatra/core/sequence.py
"""
Booking number allocation.

Booking numbers look like ``JY-2025-001001``: a fixed prefix, the calendar
year at allocation time and the next value of a persistent counter, padded
to six digits. The counter is one ever-increasing sequence; it is NOT reset
when the year changes, so ``JY-2026-004312`` may follow ``JY-2025-004311``.

Uniqueness relies entirely on the store's atomic increment. Nothing here
locks, and a failed or timed out increment surfaces as
``StorageUnavailable``.
"""
from datetime import datetime
from typing import Callable, Optional

from loguru import logger

from yatra.core import config
from yatra.db.counters import MongoCounterStore


def format_booking_number(prefix: str, year: int, seq: int, width: int = 6) -> str:
    """``format_booking_number("JY", 2025, 7)`` -> ``"JY-2025-000007"``. Padding never truncates."""
    return f"{prefix}-{year}-{str(seq).zfill(width)}"


class BookingNumberAllocator:
    """Issues booking numbers from a counter store.

    ``store`` must provide ``async increment(key, delta=1, default=...) -> int``
    returning the post-increment value atomically.
    """

    def __init__(
        self,
        store,
        prefix: str = "JY",
        sequence_name: str = "bookingNumber",
        start: int = 1000,
        width: int = 6,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.prefix = prefix
        self.sequence_name = sequence_name
        self.start = start
        self.width = width
        self.clock = clock or datetime.now

    async def next_value(self) -> int:
        return await self.store.increment(self.sequence_name, delta=1, default=self.start)

    async def allocate_booking_number(self) -> str:
        year = self.clock().year
        seq = await self.next_value()
        booking_number = format_booking_number(self.prefix, year, seq, self.width)
        logger.debug(f"Allocated booking number {booking_number}")
        return booking_number


def get_booking_number_allocator() -> BookingNumberAllocator:
    """FastAPI dependency building the allocator from configuration."""
    return BookingNumberAllocator(
        MongoCounterStore(),
        prefix=config.BOOKING_NUMBER_PREFIX,
        sequence_name=config.BOOKING_NUMBER_SEQUENCE,
        start=config.BOOKING_NUMBER_START,
        width=config.BOOKING_NUMBER_WIDTH,
    )
