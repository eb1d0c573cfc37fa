"""
Shared fixtures.

Nothing here talks to MongoDB: the counter store is replaced by an
in-memory implementation of the same atomic increment contract, and Beanie
documents are "detached" by patching their collection getter so they can be
constructed without ``init_beanie``.
"""
import os
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

# Settings are read at import time, so they must be in place before any yatra import
os.environ["MONGODB_URL"] = "mongodb://localhost:27017/yatra_test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_ENABLED"] = "false"
for _name in ("DATABASE_NAME", "BOOKING_NUMBER_PREFIX", "BOOKING_NUMBER_SEQUENCE", "BOOKING_NUMBER_START", "BOOKING_NUMBER_WIDTH"):
    os.environ.pop(_name, None)

import pytest
import pytest_asyncio
from beanie import PydanticObjectId
from httpx import ASGITransport, AsyncClient

from tests.helpers import InMemoryCounterStore, fixed_clock, future_date
from yatra.core.sequence import BookingNumberAllocator, get_booking_number_allocator
from yatra.models.booking import Booking
from yatra.models.counter import Counter
from yatra.models.enum import BookingStatus, HomestayStatus, ListingType, PropertyType
from yatra.models.guide import Guide
from yatra.models.homestay import Homestay
from yatra.models.product import Product


@pytest.fixture
def counter_store():
    return InMemoryCounterStore()


@pytest.fixture
def allocator(counter_store):
    return BookingNumberAllocator(counter_store, prefix="JY", sequence_name="bookingNumber", start=1000, clock=fixed_clock(2025))


@pytest.fixture
def detached_documents():
    """Allow building documents without a database connection."""
    patches = [
        patch.object(model, "get_pymongo_collection", MagicMock(return_value=MagicMock()))
        for model in (Homestay, Guide, Product, Booking, Counter)
    ]
    for p in patches:
        p.start()
    yield
    for p in patches:
        p.stop()


@pytest.fixture
def inserted(detached_documents):
    """Patch ``insert`` on every writable document; returns the list of inserted documents."""
    saved = []

    async def fake_insert(self, *args, **kwargs):
        self.id = PydanticObjectId()
        saved.append(self)
        return self

    patches = [patch.object(model, "insert", fake_insert) for model in (Homestay, Guide, Product, Booking)]
    for p in patches:
        p.start()
    yield saved
    for p in patches:
        p.stop()


@pytest.fixture
def applied_updates(detached_documents):
    """Patch ``set`` on every writable document to apply the update locally."""
    updates = []

    async def fake_set(self, expression, *args, **kwargs):
        updates.append(expression)
        for key, value in expression.items():
            setattr(self, key, value)
        return self

    patches = [patch.object(model, "set", fake_set) for model in (Homestay, Guide, Product, Booking)]
    for p in patches:
        p.start()
    yield updates
    for p in patches:
        p.stop()


@pytest.fixture
def homestay_data():
    return {
        "title": "Hilltop Cottage",
        "description": "Quiet stay near the falls",
        "property_type": PropertyType.ENTIRE.value,
        "location": {"address": "12 Falls Road", "district": "Ranchi"},
        "pricing": {"base_price": 1800, "cleaning_fee": 200},
        "capacity": {"guests": 4, "bedrooms": 2, "beds": 2, "bathrooms": 1},
        "amenities": ["wifi"],
        "images": ["https://example.com/cottage.jpg"],
    }


@pytest.fixture
def make_homestay(detached_documents, homestay_data):
    def _make(**overrides):
        data = {**homestay_data, **overrides}
        data.setdefault("status", HomestayStatus.ACTIVE)
        return Homestay(id=PydanticObjectId(), **data)
    return _make


@pytest.fixture
def guide_data():
    return {
        "name": "Ravi Oraon",
        "bio": "Trekking guide for the Netarhat plateau",
        "specializations": ["Trekking", "Birdwatching"],
        "languages": ["Hindi", "English"],
        "experience": "8 years",
        "location": {"district": "Latehar"},
        "pricing": {"half_day": 800, "full_day": 1500},
    }


@pytest.fixture
def make_guide(detached_documents, guide_data):
    def _make(**overrides):
        return Guide(id=PydanticObjectId(), **{**guide_data, **overrides})
    return _make


@pytest.fixture
def product_data():
    return {
        "title": "Dokra Horse",
        "description": "Bell metal figurine cast by hand",
        "category": "Handicrafts",
        "price": {"amount": 1200, "original_amount": 1500, "discount": 20},
        "stock": 5,
        "images": ["https://example.com/dokra.jpg"],
    }


@pytest.fixture
def make_product(detached_documents, product_data):
    def _make(**overrides):
        return Product(id=PydanticObjectId(), **{**product_data, **overrides})
    return _make


@pytest.fixture
def booking_payload():
    return {
        "listing_type": ListingType.HOMESTAY.value,
        "listing_id": str(PydanticObjectId()),
        "check_in": future_date(10),
        "check_out": future_date(12),
        "guests": {"adults": 2, "children": 1},
        "guest_details": {"name": "  Asha Munda ", "email": "Asha@Example.com", "phone": "9876543210"},
        "special_requests": "Late arrival",
        "pricing": {"base_price": 3600, "service_fee": 100, "total": 3700},
    }


@pytest.fixture
def make_booking(detached_documents):
    def _make(**overrides):
        data = {
            "booking_number": "JY-2025-001001",
            "listing_type": ListingType.HOMESTAY,
            "listing_id": str(PydanticObjectId()),
            "check_in": datetime.now(timezone.utc) + timedelta(days=10),
            "check_out": datetime.now(timezone.utc) + timedelta(days=12),
            "guests": {"adults": 2},
            "guest_details": {"name": "Asha Munda", "email": "asha@example.com", "phone": "9876543210"},
            "pricing": {"base_price": 3600, "total": 3600},
            "status": BookingStatus.PENDING,
        }
        data.update(overrides)
        return Booking(id=PydanticObjectId(), **data)
    return _make


@pytest_asyncio.fixture
async def test_client(allocator):
    """HTTP client against the app, with the booking allocator backed by the in-memory store."""
    from yatra.main import app

    app.dependency_overrides[get_booking_number_allocator] = lambda: allocator
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
