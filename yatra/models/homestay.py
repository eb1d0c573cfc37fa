# yatra/models/homestay.py
from datetime import datetime, timezone
from typing import Annotated, Any, List, Optional

from beanie import Document
from pydantic import AfterValidator, BaseModel, Field, HttpUrl, StringConstraints, field_validator
from pymongo import ASCENDING, DESCENDING, IndexModel

from .common import ApiModel, Coordinates, PaginationQuery, reject_null
from .enum import HomestayStatus, PropertyType

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
Text = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
ImageUrl = Annotated[HttpUrl, AfterValidator(str)]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Location(BaseModel):
    address: str = Field(..., min_length=1, max_length=500)
    district: str = Field(..., min_length=1, max_length=100)
    state: str = "Jharkhand"
    coordinates: Optional[Coordinates] = None


class HomestayPricing(BaseModel):
    base_price: float = Field(..., ge=100, description="Nightly price, at least 100")
    cleaning_fee: Optional[float] = Field(None, ge=0)
    weekend_price: Optional[float] = Field(None, ge=0)


class Capacity(BaseModel):
    guests: int = Field(..., ge=1)
    bedrooms: int = Field(..., ge=0)
    beds: int = Field(..., ge=1)
    bathrooms: int = Field(..., ge=0)


class Homestay(Document):
    """Accommodation listing that can be booked."""
    title: str = Field(..., max_length=200)
    description: str
    property_type: PropertyType
    location: Location
    pricing: HomestayPricing
    capacity: Capacity
    amenities: List[str] = Field(default_factory=list)
    house_rules: Optional[List[str]] = None
    images: List[str] = Field(default_factory=list)
    status: HomestayStatus = HomestayStatus.ACTIVE

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "homestays"
        indexes = [
            IndexModel([("status", ASCENDING)], name="homestay_status_index"),
            IndexModel([("location.district", ASCENDING)], name="homestay_district_index"),
            IndexModel([("pricing.base_price", ASCENDING)], name="homestay_base_price_index"),
            IndexModel([("created_at", DESCENDING)], name="homestay_created_at_index"),
        ]

    # --- API schemas ---
    class Create(ApiModel):
        title: Title
        description: Text
        property_type: PropertyType
        location: Location
        pricing: HomestayPricing
        capacity: Capacity
        amenities: List[str] = Field(default_factory=list)
        house_rules: Optional[List[str]] = None
        images: List[ImageUrl] = Field(default_factory=list)

    class Update(ApiModel):
        """Partial update; only fields that were sent are applied."""
        title: Optional[Title] = None
        description: Optional[Text] = None
        property_type: Optional[PropertyType] = None
        location: Optional[Location] = None
        pricing: Optional[HomestayPricing] = None
        capacity: Optional[Capacity] = None
        amenities: Optional[List[str]] = None
        house_rules: Optional[List[str]] = None
        images: Optional[List[ImageUrl]] = None
        status: Optional[HomestayStatus] = None

        # house_rules is nullable on the document; everything else is required there
        @field_validator(
            "title", "description", "property_type", "location", "pricing",
            "capacity", "amenities", "images", "status",
            mode="before",
        )
        @classmethod
        def no_null_for_required(cls, value: Any) -> Any:
            return reject_null(value)

    class Query(PaginationQuery):
        district: Optional[str] = None
        # camelCase spellings are accepted too
        min_price: Optional[int] = Field(None, alias="minPrice")
        max_price: Optional[int] = Field(None, alias="maxPrice")

        @field_validator("min_price", "max_price", mode="before")
        @classmethod
        def parse_price(cls, value: Any) -> Optional[int]:
            # unparseable bounds are ignored
            if value is None or value == "":
                return None
            try:
                return int(value)
            except (TypeError, ValueError):
                return None

    class Response(ApiModel):
        id: str
        title: str
        description: str
        property_type: PropertyType
        location: Location
        pricing: HomestayPricing
        capacity: Capacity
        amenities: List[str]
        house_rules: Optional[List[str]] = None
        images: List[str]
        status: HomestayStatus
        created_at: datetime
        updated_at: datetime
