# yatra/dto/search.py
from typing import Annotated, List

from pydantic import AfterValidator, Field

from yatra.models.common import ApiModel, PaginationQuery
from yatra.models.enum import SearchType
from yatra.models.guide import Guide
from yatra.models.homestay import Homestay
from yatra.models.product import Product


def check_search_text(value: str) -> str:
    value = value.strip()
    if len(value) < 2:
        raise ValueError("Search query must be at least 2 characters")
    return value


SearchText = Annotated[str, AfterValidator(check_search_text)]


class SearchQuery(PaginationQuery):
    q: SearchText
    type: SearchType = SearchType.ALL


class AutocompleteQuery(ApiModel):
    q: SearchText


class SearchResults(ApiModel):
    query: str
    type: SearchType
    homestays: List[Homestay.Response] = Field(default_factory=list)
    guides: List[Guide.Response] = Field(default_factory=list)
    products: List[Product.Response] = Field(default_factory=list)


class Suggestion(ApiModel):
    type: str
    id: str
    label: str


class AutocompleteResults(ApiModel):
    suggestions: List[Suggestion]
