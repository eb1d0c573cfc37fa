# yatra/api/v1/endpoints/guides.py
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
from yatra.models.guide import Guide
from yatra.models.homestay import utc_now

router = APIRouter(tags=["Guides"])


async def get_guide_or_404(guide_id: str) -> Guide:
    try:
        guide = await Guide.get(PydanticObjectId(guide_id))
    except PyMongoError as e:
        raise StorageUnavailable(f"Error retrieving guide '{guide_id}'.") from e
    if not guide:
        raise NotFoundError("Guide", guide_id)
    return guide


def validate_guide_response(guide_doc) -> Guide.Response:
    try:
        return Guide.Response.model_validate(document_to_dict(guide_doc))
    except (ValidationError, ValueError) as e:
        logger.error(f"[{getattr(guide_doc, 'id', 'N/A')}] Could not build guide response: {e}")
        raise HTTPException(status_code=500, detail="Error preparing guide response.") from e


def build_guide_filters(query: Guide.Query) -> Dict[str, Any]:
    filters: Dict[str, Any] = {}
    if query.specialization:
        # matches any element of the specializations array
        filters["specializations"] = {"$regex": f"^{re.escape(query.specialization)}$", "$options": "i"}
    return filters


@router.get("/", response_model=List[Guide.Response], summary="List Guides")
@limiter.limit("60/minute")
async def list_guides(
    request: Request,
    query: Guide.Query = Depends(validate(Guide.Query, "query")),
):
    try:
        guide_docs = await Guide.find(build_guide_filters(query)).sort("-created_at").skip(query.skip).limit(query.limit).to_list()
    except PyMongoError as e:
        raise StorageUnavailable("Error retrieving guides.") from e
    return [validate_guide_response(doc) for doc in guide_docs]


@router.get("/{id}", response_model=Guide.Response, summary="Get Guide")
@limiter.limit("120/minute")
async def read_guide(
    request: Request,
    params: IdParam = Depends(validate(IdParam, "path")),
):
    return validate_guide_response(await get_guide_or_404(params.id))


@router.post("/", response_model=Guide.Response, status_code=status.HTTP_201_CREATED, summary="Create Guide")
@limiter.limit("20/hour")
async def create_guide(
    request: Request,
    guide_in: Guide.Create = Body(...),
):
    now = utc_now()
    guide = Guide(**guide_in.model_dump(), created_at=now, updated_at=now)
    try:
        await guide.insert()
    except PyMongoError as e:
        raise StorageUnavailable("Failed to save guide.") from e
    logger.info(f"Guide '{guide.name}' created with ID {guide.id}")
    return validate_guide_response(guide)


@router.put("/{id}", response_model=Guide.Response, summary="Update Guide")
@limiter.limit("30/hour")
async def update_guide(
    request: Request,
    params: IdParam = Depends(validate(IdParam, "path")),
    guide_in: Guide.Update = Body(...),
):
    guide = await get_guide_or_404(params.id)
    update_data = guide_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No update data provided.")

    update_data["updated_at"] = utc_now()
    try:
        await guide.set(update_data)
    except PyMongoError as e:
        raise StorageUnavailable("Failed to update guide.") from e
    logger.info(f"Guide {params.id} updated: {sorted(update_data)}")
    return validate_guide_response(guide)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Guide")
@limiter.limit("10/hour")
async def delete_guide(
    request: Request,
    params: IdParam = Depends(validate(IdParam, "path")),
):
    guide = await get_guide_or_404(params.id)
    try:
        await guide.delete()
    except PyMongoError as e:
        raise StorageUnavailable("Failed to delete guide.") from e
    logger.warning(f"Guide '{guide.name}' (ID: {params.id}) deleted")
    return None
