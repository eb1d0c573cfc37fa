# yatra/api/v1/endpoints/search.py
"""
Free-text search across homestays, guides and products.

Matching is a case-insensitive substring match on a few text fields per
collection; the query text is escaped so it is never treated as a pattern.
Inactive homestays and unavailable guides are left out.
"""
import re
from typing import Any, Dict, List, Sequence

from fastapi import APIRouter, Depends, Request
from pymongo.errors import PyMongoError

from yatra.api.v1.endpoints.guides import validate_guide_response
from yatra.api.v1.endpoints.homestays import validate_homestay_response
from yatra.api.v1.endpoints.products import validate_product_response
from yatra.core.exceptions import StorageUnavailable
from yatra.core.rate_limiter import limiter
from yatra.dto.search import AutocompleteQuery, AutocompleteResults, SearchQuery, SearchResults, Suggestion
from yatra.middleware.validation import validate
from yatra.models.enum import GuideAvailability, HomestayStatus, SearchType
from yatra.models.guide import Guide
from yatra.models.homestay import Homestay
from yatra.models.product import Product

router = APIRouter(tags=["Search"])

AUTOCOMPLETE_LIMIT = 5

HOMESTAY_FIELDS = ("title", "description", "location.district")
GUIDE_FIELDS = ("name", "bio", "specializations", "location.district")
PRODUCT_FIELDS = ("title", "description", "category")


def text_filter(text: str, fields: Sequence[str], base: Dict[str, Any]) -> Dict[str, Any]:
    pattern = re.escape(text)
    return {**base, "$or": [{field: {"$regex": pattern, "$options": "i"}} for field in fields]}


def prefix_filter(text: str, field: str, base: Dict[str, Any]) -> Dict[str, Any]:
    return {**base, field: {"$regex": f"^{re.escape(text)}", "$options": "i"}}


def homestay_base() -> Dict[str, Any]:
    return {"status": HomestayStatus.ACTIVE.value}


def guide_base() -> Dict[str, Any]:
    return {"availability": {"$ne": GuideAvailability.UNAVAILABLE.value}}


def wants(query_type: SearchType, target: SearchType) -> bool:
    return query_type in (SearchType.ALL, target)


async def find_page(model, filters: Dict[str, Any], query: SearchQuery) -> List[Any]:
    return await model.find(filters).sort("-created_at").skip(query.skip).limit(query.limit).to_list()


@router.get("/", response_model=SearchResults, summary="Search Listings")
@limiter.limit("60/minute")
async def search(
    request: Request,
    query: SearchQuery = Depends(validate(SearchQuery, "query")),
):
    results = SearchResults(query=query.q, type=query.type)
    try:
        if wants(query.type, SearchType.HOMESTAYS):
            docs = await find_page(Homestay, text_filter(query.q, HOMESTAY_FIELDS, homestay_base()), query)
            results.homestays = [validate_homestay_response(doc) for doc in docs]
        if wants(query.type, SearchType.GUIDES):
            docs = await find_page(Guide, text_filter(query.q, GUIDE_FIELDS, guide_base()), query)
            results.guides = [validate_guide_response(doc) for doc in docs]
        if wants(query.type, SearchType.PRODUCTS):
            docs = await find_page(Product, text_filter(query.q, PRODUCT_FIELDS, {}), query)
            results.products = [validate_product_response(doc) for doc in docs]
    except PyMongoError as e:
        raise StorageUnavailable("Search failed.") from e
    return results


@router.get("/autocomplete", response_model=AutocompleteResults, summary="Autocomplete")
@limiter.limit("120/minute")
async def autocomplete(
    request: Request,
    query: AutocompleteQuery = Depends(validate(AutocompleteQuery, "query")),
):
    suggestions: List[Suggestion] = []
    try:
        homestays = await Homestay.find(prefix_filter(query.q, "title", homestay_base())).limit(AUTOCOMPLETE_LIMIT).to_list()
        guides = await Guide.find(prefix_filter(query.q, "name", guide_base())).limit(AUTOCOMPLETE_LIMIT).to_list()
        products = await Product.find(prefix_filter(query.q, "title", {})).limit(AUTOCOMPLETE_LIMIT).to_list()
    except PyMongoError as e:
        raise StorageUnavailable("Autocomplete failed.") from e

    suggestions.extend(Suggestion(type="homestay", id=str(doc.id), label=doc.title) for doc in homestays)
    suggestions.extend(Suggestion(type="guide", id=str(doc.id), label=doc.name) for doc in guides)
    suggestions.extend(Suggestion(type="product", id=str(doc.id), label=doc.title) for doc in products)
    return AutocompleteResults(suggestions=suggestions)
