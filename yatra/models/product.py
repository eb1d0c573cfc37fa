# yatra/models/product.py
from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional

from beanie import Document
from pydantic import BaseModel, Field, StringConstraints, field_validator
from pymongo import ASCENDING, IndexModel

from .common import ApiModel, PaginationQuery, reject_null
from .homestay import ImageUrl, Text, Title, utc_now

Category = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ProductPrice(BaseModel):
    amount: float = Field(..., ge=0)
    original_amount: Optional[float] = Field(None, ge=0)
    discount: Optional[float] = Field(None, ge=0, le=100, description="Percent, 0-100")


class Product(Document):
    """Local handicraft or produce sold on the platform."""
    title: str = Field(..., max_length=200)
    description: str
    category: str
    subcategory: Optional[str] = None
    price: ProductPrice
    stock: int = Field(default=0, ge=0)
    images: List[str] = Field(default_factory=list)
    specifications: Optional[Dict[str, str]] = None

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "products"
        indexes = [
            IndexModel([("category", ASCENDING)], name="product_category_index"),
        ]

    class Create(ApiModel):
        title: Title
        description: Text
        category: Category
        subcategory: Optional[Annotated[str, StringConstraints(strip_whitespace=True)]] = None
        price: ProductPrice
        stock: int = Field(default=0, ge=0)
        images: List[ImageUrl] = Field(default_factory=list)
        specifications: Optional[Dict[str, str]] = None

    class Update(ApiModel):
        title: Optional[Title] = None
        description: Optional[Text] = None
        category: Optional[Category] = None
        subcategory: Optional[Annotated[str, StringConstraints(strip_whitespace=True)]] = None
        price: Optional[ProductPrice] = None
        stock: Optional[int] = Field(None, ge=0)
        images: Optional[List[ImageUrl]] = None
        specifications: Optional[Dict[str, str]] = None

        @field_validator("title", "description", "category", "price", "stock", "images", mode="before")
        @classmethod
        def no_null_for_required(cls, value: Any) -> Any:
            return reject_null(value)

    class Query(PaginationQuery):
        category: Optional[str] = None

    class Response(ApiModel):
        id: str
        title: str
        description: str
        category: str
        subcategory: Optional[str] = None
        price: ProductPrice
        stock: int
        images: List[str]
        specifications: Optional[Dict[str, str]] = None
        created_at: datetime
        updated_at: datetime
