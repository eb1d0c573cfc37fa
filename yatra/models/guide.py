# yatra/models/guide.py
from datetime import datetime
from typing import Annotated, Any, List, Optional

from beanie import Document
from pydantic import BaseModel, Field, StringConstraints, field_validator
from pymongo import ASCENDING, IndexModel

from .common import ApiModel, PaginationQuery, reject_null
from .enum import GuideAvailability
from .homestay import Text, utc_now

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


class GuideLocation(BaseModel):
    district: str = Field(..., min_length=1, max_length=100)
    state: str = "Jharkhand"


class GuidePricing(BaseModel):
    half_day: float = Field(..., ge=0)
    full_day: float = Field(..., ge=0)
    multi_day: Optional[float] = Field(None, ge=0)
    workshop: Optional[float] = Field(None, ge=0)


class Guide(Document):
    """Local guide offering tours or workshops."""
    name: str = Field(..., max_length=100)
    bio: str
    specializations: List[str]
    languages: List[str]
    experience: str
    location: GuideLocation
    pricing: GuidePricing
    certifications: Optional[List[str]] = None
    availability: GuideAvailability = GuideAvailability.AVAILABLE

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "guides"
        indexes = [
            IndexModel([("specializations", ASCENDING)], name="guide_specializations_index"),
            IndexModel([("location.district", ASCENDING)], name="guide_district_index"),
        ]

    class Create(ApiModel):
        name: Name
        bio: Text
        specializations: List[str] = Field(..., min_length=1, description="At least one specialization")
        languages: List[str] = Field(..., min_length=1, description="At least one language")
        experience: str = Field(..., min_length=1)
        location: GuideLocation
        pricing: GuidePricing
        certifications: Optional[List[str]] = None
        availability: GuideAvailability = GuideAvailability.AVAILABLE

    class Update(ApiModel):
        name: Optional[Name] = None
        bio: Optional[Text] = None
        specializations: Optional[List[str]] = Field(None, min_length=1)
        languages: Optional[List[str]] = Field(None, min_length=1)
        experience: Optional[str] = Field(None, min_length=1)
        location: Optional[GuideLocation] = None
        pricing: Optional[GuidePricing] = None
        certifications: Optional[List[str]] = None
        availability: Optional[GuideAvailability] = None

        @field_validator(
            "name", "bio", "specializations", "languages", "experience",
            "location", "pricing", "availability",
            mode="before",
        )
        @classmethod
        def no_null_for_required(cls, value: Any) -> Any:
            return reject_null(value)

    class Query(PaginationQuery):
        specialization: Optional[str] = None

    class Response(ApiModel):
        id: str
        name: str
        bio: str
        specializations: List[str]
        languages: List[str]
        experience: str
        location: GuideLocation
        pricing: GuidePricing
        certifications: Optional[List[str]] = None
        availability: GuideAvailability
        created_at: datetime
        updated_at: datetime
