# yatra/api/v1/endpoints/homestays.py
import re
from typing import Any, Dict, List

from beanie import PydanticObjectId
from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from loguru import logger
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from yatra.core.exceptions import NotFoundError, StorageUnavailable
from yatra.core.rate_limiter import limiter
from yatra.middleware.validation import validate
from yatra.models.common import IdParam, document_to_dict
from yatra.models.enum import HomestayStatus
from yatra.models.homestay import Homestay, utc_now

router = APIRouter(tags=["Homestays"])


async def get_homestay_or_404(homestay_id: str) -> Homestay:
    try:
        homestay = await Homestay.get(PydanticObjectId(homestay_id))
    except PyMongoError as e:
        raise StorageUnavailable(f"Error retrieving homestay '{homestay_id}'.") from e
    if not homestay:
        raise NotFoundError("Homestay", homestay_id)
    return homestay


def validate_homestay_response(homestay_doc) -> Homestay.Response:
    try:
        return Homestay.Response.model_validate(document_to_dict(homestay_doc))
    except (ValidationError, ValueError) as e:
        logger.error(f"[{getattr(homestay_doc, 'id', 'N/A')}] Could not build homestay response: {e}")
        raise HTTPException(status_code=500, detail="Error preparing homestay response.") from e


def build_listing_filters(query: Homestay.Query) -> Dict[str, Any]:
    """Active homestays only; district is matched exactly, ignoring case."""
    filters: Dict[str, Any] = {"status": HomestayStatus.ACTIVE.value}
    if query.district:
        filters["location.district"] = {"$regex": f"^{re.escape(query.district)}$", "$options": "i"}
    price: Dict[str, int] = {}
    if query.min_price is not None:
        price["$gte"] = query.min_price
    if query.max_price is not None:
        price["$lte"] = query.max_price
    if price:
        filters["pricing.base_price"] = price
    return filters


@router.get("/", response_model=List[Homestay.Response], summary="List Homestays")
@limiter.limit("60/minute")
async def list_homestays(
    request: Request,
    query: Homestay.Query = Depends(validate(Homestay.Query, "query")),
):
    filters = build_listing_filters(query)
    try:
        homestay_docs = await Homestay.find(filters).sort("-created_at").skip(query.skip).limit(query.limit).to_list()
    except PyMongoError as e:
        logger.error(f"Error listing homestays: {e}")
        raise StorageUnavailable("Error retrieving homestays.") from e
    return [validate_homestay_response(doc) for doc in homestay_docs]


@router.get("/{id}", response_model=Homestay.Response, summary="Get Homestay")
@limiter.limit("120/minute")
async def read_homestay(
    request: Request,
    params: IdParam = Depends(validate(IdParam, "path")),
):
    homestay = await get_homestay_or_404(params.id)
    return validate_homestay_response(homestay)


@router.post("/", response_model=Homestay.Response, status_code=status.HTTP_201_CREATED, summary="Create Homestay")
@limiter.limit("20/hour")
async def create_homestay(
    request: Request,
    homestay_in: Homestay.Create = Body(...),
):
    logger.info(f"Creating homestay: {homestay_in.title}")
    now = utc_now()
    homestay_obj = Homestay(
        **homestay_in.model_dump(),
        status=HomestayStatus.ACTIVE,
        created_at=now,
        updated_at=now,
    )
    try:
        await homestay_obj.insert()
    except PyMongoError as e:
        raise StorageUnavailable("Failed to save homestay.") from e
    logger.info(f"Homestay '{homestay_obj.title}' created with ID {homestay_obj.id}")
    return validate_homestay_response(homestay_obj)


@router.put("/{id}", response_model=Homestay.Response, summary="Update Homestay")
@limiter.limit("30/hour")
async def update_homestay(
    request: Request,
    params: IdParam = Depends(validate(IdParam, "path")),
    homestay_in: Homestay.Update = Body(...),
):
    """Partial update. Only the fields present in the body are changed."""
    homestay = await get_homestay_or_404(params.id)
    update_data = homestay_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No update data provided.")

    update_data["updated_at"] = utc_now()
    try:
        await homestay.set(update_data)
    except PyMongoError as e:
        raise StorageUnavailable("Failed to update homestay.") from e
    logger.info(f"Homestay {params.id} updated: {sorted(update_data)}")
    return validate_homestay_response(homestay)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Homestay")
@limiter.limit("10/hour")
async def delete_homestay(
    request: Request,
    params: IdParam = Depends(validate(IdParam, "path")),
):
    homestay = await get_homestay_or_404(params.id)
    try:
        await homestay.delete()
    except PyMongoError as e:
        raise StorageUnavailable("Failed to delete homestay.") from e
    logger.warning(f"Homestay '{homestay.title}' (ID: {params.id}) deleted")
    return None
