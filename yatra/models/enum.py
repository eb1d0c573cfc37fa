# yatra/models/enum.py
from enum import Enum


class PropertyType(str, Enum):
    ENTIRE = "entire"     # whole property
    PRIVATE = "private"   # private room
    SHARED = "shared"


class HomestayStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"   # awaiting approval


class GuideAvailability(str, Enum):
    AVAILABLE = "available"
    BUSY = "busy"
    UNAVAILABLE = "unavailable"


class ListingType(str, Enum):
    HOMESTAY = "homestay"
    GUIDE = "guide"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class SearchType(str, Enum):
    ALL = "all"
    HOMESTAYS = "homestays"
    GUIDES = "guides"
    PRODUCTS = "products"
