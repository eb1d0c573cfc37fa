# yatra/services/booking_service.py
"""
Booking workflow.

A booking is only written once it has a booking number: the listing is
resolved first, then a number is allocated, then the document is inserted.
If allocation fails nothing is stored. A failed insert after a successful
allocation leaves a gap in the sequence, never a duplicate.
"""
from typing import List

from beanie import PydanticObjectId, UpdateResponse
from loguru import logger
from pymongo.errors import PyMongoError

from yatra.core.exceptions import ConflictError, NotFoundError, StorageUnavailable
from yatra.core.sequence import BookingNumberAllocator
from yatra.models.booking import CANCELLABLE_STATUSES, Booking, parse_booking_date
from yatra.models.enum import BookingStatus, GuideAvailability, HomestayStatus, ListingType
from yatra.models.guide import Guide
from yatra.models.homestay import Homestay, utc_now


def _listing_model(listing_type: ListingType):
    if listing_type == ListingType.HOMESTAY:
        return Homestay
    return Guide


async def get_listing(listing_type: ListingType, listing_id: str):
    model = _listing_model(listing_type)
    try:
        listing = await model.get(PydanticObjectId(listing_id))
    except PyMongoError as e:
        raise StorageUnavailable(f"Could not load {listing_type.value} '{listing_id}'") from e
    if listing is None:
        raise NotFoundError(listing_type.value.capitalize(), listing_id)
    return listing


def ensure_bookable(listing_type: ListingType, listing) -> None:
    if listing_type == ListingType.HOMESTAY and listing.status != HomestayStatus.ACTIVE:
        raise ConflictError(f"Homestay '{listing.id}' is not open for booking (status: {listing.status.value}).")
    if listing_type == ListingType.GUIDE and listing.availability == GuideAvailability.UNAVAILABLE:
        raise ConflictError(f"Guide '{listing.id}' is currently unavailable.")


async def create_booking(booking_in: Booking.Create, allocator: BookingNumberAllocator) -> Booking:
    listing = await get_listing(booking_in.listing_type, booking_in.listing_id)
    ensure_bookable(booking_in.listing_type, listing)

    # raises StorageUnavailable; nothing has been written at this point
    booking_number = await allocator.allocate_booking_number()

    now = utc_now()
    booking = Booking(
        booking_number=booking_number,
        listing_type=booking_in.listing_type,
        listing_id=booking_in.listing_id,
        check_in=parse_booking_date(booking_in.check_in, "check-in"),
        check_out=parse_booking_date(booking_in.check_out, "check-out"),
        guests=booking_in.guests,
        guest_details=booking_in.guest_details,
        special_requests=booking_in.special_requests,
        pricing=booking_in.pricing,
        status=BookingStatus.PENDING,
        created_at=now,
        updated_at=now,
    )
    try:
        await booking.insert()
    except PyMongoError as e:
        logger.error(f"Failed to save booking {booking_number}: {e}")
        raise StorageUnavailable("Failed to save booking.", context={"booking_number": booking_number}) from e

    logger.info(f"Booking {booking_number} created for {booking_in.listing_type.value} '{booking_in.listing_id}'")
    return booking


async def get_booking(booking_id: str) -> Booking:
    try:
        booking = await Booking.get(PydanticObjectId(booking_id))
    except PyMongoError as e:
        raise StorageUnavailable("Could not load booking.") from e
    if booking is None:
        raise NotFoundError("Booking", booking_id)
    return booking


async def get_booking_by_number(booking_number: str) -> Booking:
    try:
        booking = await Booking.find_one({"booking_number": booking_number})
    except PyMongoError as e:
        raise StorageUnavailable("Could not load booking.") from e
    if booking is None:
        raise NotFoundError("Booking", booking_number)
    return booking


async def list_bookings(query: Booking.Query) -> List[Booking]:
    filters = {}
    if query.status is not None:
        filters["status"] = query.status.value
    try:
        return await Booking.find(filters).sort("-created_at").skip(query.skip).limit(query.limit).to_list()
    except PyMongoError as e:
        raise StorageUnavailable("Could not list bookings.") from e


async def cancel_booking(booking_id: str, cancel_in: Booking.Cancel) -> Booking:
    """Cancel with one conditional update; only pending or confirmed bookings match."""
    now = utc_now()
    try:
        booking = await Booking.find_one(
            {"_id": PydanticObjectId(booking_id), "status": {"$in": [s.value for s in CANCELLABLE_STATUSES]}}
        ).update(
            {"$set": {
                "status": BookingStatus.CANCELLED.value,
                "cancellation_reason": cancel_in.reason,
                "cancelled_at": now,
                "updated_at": now,
            }},
            response_type=UpdateResponse.NEW_DOCUMENT,
        )
    except PyMongoError as e:
        raise StorageUnavailable("Failed to cancel booking.") from e

    if booking is None:
        # either missing (404) or no longer cancellable
        existing = await get_booking(booking_id)
        raise ConflictError(f"Booking {existing.booking_number} cannot be cancelled (status: {existing.status.value}).")
    logger.info(f"Booking {booking.booking_number} cancelled")
    return booking
