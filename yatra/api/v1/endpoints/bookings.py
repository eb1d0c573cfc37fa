# yatra/api/v1/endpoints/bookings.py
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Request, status
from loguru import logger
from pydantic import ValidationError

from yatra.core.rate_limiter import limiter
from yatra.core.sequence import BookingNumberAllocator, get_booking_number_allocator
from yatra.middleware.validation import validate
from yatra.models.booking import Booking
from yatra.models.common import IdParam, document_to_dict
from yatra.services import booking_service

router = APIRouter(tags=["Bookings"])


def validate_booking_response(booking_doc) -> Booking.Response:
    booking_id_log = str(getattr(booking_doc, "id", "N/A"))
    try:
        return Booking.Response.model_validate(document_to_dict(booking_doc))
    except (ValidationError, ValueError) as e:
        logger.error(f"[{booking_id_log}] Could not build booking response: {e}")
        raise HTTPException(status_code=500, detail="Error preparing booking response.") from e


@router.post(
    "/",
    response_model=Booking.Response,
    status_code=status.HTTP_201_CREATED,
    summary="Create Booking",
)
@limiter.limit("30/hour")
async def create_booking(
    request: Request,
    booking_in: Booking.Create = Body(...),
    allocator: BookingNumberAllocator = Depends(get_booking_number_allocator),
):
    """Book a homestay or guide. The response carries the allocated booking number."""
    logger.info(f"Booking request for {booking_in.listing_type.value} '{booking_in.listing_id}'")
    booking = await booking_service.create_booking(booking_in, allocator)
    return validate_booking_response(booking)


@router.get("/", response_model=List[Booking.Response], summary="List Bookings")
@limiter.limit("60/minute")
async def list_bookings(
    request: Request,
    query: Booking.Query = Depends(validate(Booking.Query, "query")),
):
    bookings = await booking_service.list_bookings(query)
    response_list: List[Booking.Response] = []
    for booking_doc in bookings:
        try:
            response_list.append(validate_booking_response(booking_doc))
        except HTTPException:
            logger.error(f"Skipping booking {getattr(booking_doc, 'id', 'N/A')} in list")
    return response_list


@router.get("/number/{booking_number}", response_model=Booking.Response, summary="Get Booking by Number")
@limiter.limit("120/minute")
async def read_booking_by_number(
    request: Request,
    booking_number: str = Path(..., min_length=1, description="Public booking number, e.g. JY-2025-001001"),
):
    booking = await booking_service.get_booking_by_number(booking_number)
    return validate_booking_response(booking)


@router.get("/{id}", response_model=Booking.Response, summary="Get Booking")
@limiter.limit("120/minute")
async def read_booking(
    request: Request,
    params: IdParam = Depends(validate(IdParam, "path")),
):
    booking = await booking_service.get_booking(params.id)
    return validate_booking_response(booking)


@router.patch("/{id}/cancel", response_model=Booking.Response, summary="Cancel Booking")
@limiter.limit("20/hour")
async def cancel_booking(
    request: Request,
    params: IdParam = Depends(validate(IdParam, "path")),
    cancel_in: Optional[Booking.Cancel] = Body(None),
):
    """Cancel a pending or confirmed booking."""
    cancel_in = cancel_in or Booking.Cancel()
    logger.info(f"Cancelling booking '{params.id}'")
    booking = await booking_service.cancel_booking(params.id, cancel_in)
    return validate_booking_response(booking)
