# yatra/models/counter.py
from beanie import Document
from pydantic import Field


class Counter(Document):
    """Named sequence. ``_id`` is the sequence name, ``seq`` the last value handed out."""
    id: str = Field(..., description="Sequence name, e.g. 'bookingNumber'")
    seq: int = 1000

    class Settings:
        name = "counters"
