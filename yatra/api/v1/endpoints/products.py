# yatra/api/v1/endpoints/products.py
import re
from typing import List

from beanie import PydanticObjectId
from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from loguru import logger
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from yatra.core.exceptions import NotFoundError, StorageUnavailable
from yatra.core.rate_limiter import limiter
from yatra.middleware.validation import validate
from yatra.models.common import IdParam, document_to_dict
from yatra.models.homestay import utc_now
from yatra.models.product import Product

router = APIRouter(tags=["Products"])


async def get_product_or_404(product_id: str) -> Product:
    try:
        product = await Product.get(PydanticObjectId(product_id))
    except PyMongoError as e:
        raise StorageUnavailable(f"Error retrieving product '{product_id}'.") from e
    if not product:
        raise NotFoundError("Product", product_id)
    return product


def validate_product_response(product_doc) -> Product.Response:
    try:
        return Product.Response.model_validate(document_to_dict(product_doc))
    except (ValidationError, ValueError) as e:
        logger.error(f"[{getattr(product_doc, 'id', 'N/A')}] Could not build product response: {e}")
        raise HTTPException(status_code=500, detail="Error preparing product response.") from e


@router.get("/", response_model=List[Product.Response], summary="List Products")
@limiter.limit("60/minute")
async def list_products(
    request: Request,
    query: Product.Query = Depends(validate(Product.Query, "query")),
):
    filters = {}
    if query.category:
        filters["category"] = {"$regex": f"^{re.escape(query.category)}$", "$options": "i"}
    try:
        product_docs = await Product.find(filters).sort("-created_at").skip(query.skip).limit(query.limit).to_list()
    except PyMongoError as e:
        raise StorageUnavailable("Error retrieving products.") from e
    return [validate_product_response(doc) for doc in product_docs]


@router.get("/{id}", response_model=Product.Response, summary="Get Product")
@limiter.limit("120/minute")
async def read_product(
    request: Request,
    params: IdParam = Depends(validate(IdParam, "path")),
):
    return validate_product_response(await get_product_or_404(params.id))


@router.post("/", response_model=Product.Response, status_code=status.HTTP_201_CREATED, summary="Create Product")
@limiter.limit("20/hour")
async def create_product(
    request: Request,
    product_in: Product.Create = Body(...),
):
    now = utc_now()
    product = Product(**product_in.model_dump(), created_at=now, updated_at=now)
    try:
        await product.insert()
    except PyMongoError as e:
        raise StorageUnavailable("Failed to save product.") from e
    logger.info(f"Product '{product.title}' created with ID {product.id}")
    return validate_product_response(product)


@router.put("/{id}", response_model=Product.Response, summary="Update Product")
@limiter.limit("30/hour")
async def update_product(
    request: Request,
    params: IdParam = Depends(validate(IdParam, "path")),
    product_in: Product.Update = Body(...),
):
    product = await get_product_or_404(params.id)
    update_data = product_in.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No update data provided.")

    update_data["updated_at"] = utc_now()
    try:
        await product.set(update_data)
    except PyMongoError as e:
        raise StorageUnavailable("Failed to update product.") from e
    logger.info(f"Product {params.id} updated: {sorted(update_data)}")
    return validate_product_response(product)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Product")
@limiter.limit("10/hour")
async def delete_product(
    request: Request,
    params: IdParam = Depends(validate(IdParam, "path")),
):
    product = await get_product_or_404(params.id)
    try:
        await product.delete()
    except PyMongoError as e:
        raise StorageUnavailable("Failed to delete product.") from e
    logger.warning(f"Product '{product.title}' (ID: {params.id}) deleted")
    return None
