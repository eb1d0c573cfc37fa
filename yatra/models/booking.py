# yatra/models/booking.py
import re
from datetime import datetime, timezone
from typing import Annotated, Optional

from beanie import Document
from pydantic import AfterValidator, BaseModel, EmailStr, Field, StringConstraints, ValidationInfo, field_validator
from pymongo import ASCENDING, DESCENDING, IndexModel

from .common import ApiModel, ObjectIdStr, PaginationQuery
from .enum import BookingStatus, ListingType
from .homestay import utc_now

# YYYY-MM-DD or ISO 8601 with optional milliseconds and Z
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}:\d{2}(\.\d{3})?Z?)?$")

# bookings that can still be cancelled
CANCELLABLE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


def parse_booking_date(value: str, label: str = "date") -> datetime:
    """Parse a check-in/check-out string. Naive values are taken as UTC."""
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValueError(f"Invalid {label} date format")
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValueError(f"Invalid {label} date format") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def start_of_today() -> datetime:
    return datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)


class GuestCount(BaseModel):
    adults: int = Field(..., ge=1, description="At least 1 adult")
    children: int = Field(default=0, ge=0)


class GuestDetails(BaseModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    email: Annotated[EmailStr, AfterValidator(str.lower)]
    phone: str = Field(..., min_length=10, max_length=15)


class BookingPricing(BaseModel):
    base_price: float = Field(..., ge=0)
    cleaning_fee: Optional[float] = Field(None, ge=0)
    service_fee: Optional[float] = Field(None, ge=0)
    taxes: Optional[float] = Field(None, ge=0)
    total: float = Field(..., ge=0)


class Booking(Document):
    """A reservation of a homestay or a guide, identified publicly by ``booking_number``."""
    booking_number: str
    listing_type: ListingType
    listing_id: str
    check_in: datetime
    check_out: datetime
    guests: GuestCount
    guest_details: GuestDetails
    special_requests: Optional[str] = None
    pricing: BookingPricing
    status: BookingStatus = BookingStatus.PENDING
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "bookings"
        indexes = [
            IndexModel([("booking_number", ASCENDING)], name="booking_number_unique_index", unique=True),
            IndexModel([("listing_type", ASCENDING), ("listing_id", ASCENDING)], name="booking_listing_index"),
            IndexModel([("status", ASCENDING)], name="booking_status_index"),
            IndexModel([("created_at", DESCENDING)], name="booking_created_at_index"),
        ]

    # --- API schemas ---
    class Create(ApiModel):
        listing_type: ListingType
        listing_id: ObjectIdStr
        check_in: str
        check_out: str
        guests: GuestCount
        guest_details: GuestDetails
        special_requests: Optional[str] = Field(None, max_length=1000)
        pricing: BookingPricing

        @field_validator("check_in")
        @classmethod
        def validate_check_in(cls, value: str) -> str:
            if parse_booking_date(value, "check-in") < start_of_today():
                raise ValueError("Check-in date must be today or in the future")
            return value

        @field_validator("check_out")
        @classmethod
        def validate_check_out(cls, value: str, info: ValidationInfo) -> str:
            check_out = parse_booking_date(value, "check-out")
            check_in = info.data.get("check_in")
            # check_in is absent from info.data when it failed its own validation
            if check_in and check_out <= parse_booking_date(check_in, "check-in"):
                raise ValueError("Check-out must be after check-in")
            return value

    class Cancel(ApiModel):
        reason: Optional[str] = Field(None, max_length=500)

    class Query(PaginationQuery):
        status: Optional[BookingStatus] = None

    class Response(ApiModel):
        id: str
        booking_number: str
        listing_type: ListingType
        listing_id: str
        check_in: datetime
        check_out: datetime
        guests: GuestCount
        guest_details: GuestDetails
        special_requests: Optional[str] = None
        pricing: BookingPricing
        status: BookingStatus
        cancellation_reason: Optional[str] = None
        cancelled_at: Optional[datetime] = None
        created_at: datetime
        updated_at: datetime
