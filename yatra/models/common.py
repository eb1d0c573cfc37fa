# yatra/models/common.py
"""Schema pieces shared by every listing and by bookings."""
import re
from typing import Annotated, Any, Dict, Optional

from pydantic import AfterValidator, BaseModel, Field, field_validator

OBJECT_ID_PATTERN = re.compile(r"^[a-fA-F0-9]{24}$")
MAX_PAGE_SIZE = 100


class ApiModel(BaseModel):
    """Base for request and response schemas."""
    class Config:
        populate_by_name = True
        from_attributes = True


def validate_object_id(value: str) -> str:
    if not isinstance(value, str) or not OBJECT_ID_PATTERN.match(value):
        raise ValueError("Invalid ID format")
    return value


ObjectIdStr = Annotated[str, AfterValidator(validate_object_id)]


def reject_null(value: Any) -> Any:
    """Partial updates may omit a field but not send it as null."""
    if value is None:
        raise ValueError("Field cannot be null")
    return value


def _parse_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class PaginationQuery(ApiModel):
    """``page``/``limit`` query parameters. Bad values fall back to defaults, ``limit`` is capped."""
    page: int = 1
    limit: int = 10

    @field_validator("page", mode="before")
    @classmethod
    def coerce_page(cls, value: Any) -> int:
        parsed = _parse_int(value, 1)
        return parsed if parsed >= 1 else 1

    @field_validator("limit", mode="before")
    @classmethod
    def coerce_limit(cls, value: Any) -> int:
        parsed = _parse_int(value, 10)
        if parsed < 1:
            return 10
        return min(parsed, MAX_PAGE_SIZE)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class IdParam(ApiModel):
    id: ObjectIdStr


class Coordinates(ApiModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


def document_to_dict(doc: Any) -> Dict[str, Any]:
    """Dump a Beanie document for a response schema, with ``id`` as a plain string."""
    if doc is None:
        raise ValueError("Invalid document")
    data = doc.model_dump()
    doc_id: Optional[Any] = getattr(doc, "id", None) or data.get("_id")
    if doc_id is None:
        raise ValueError("Document has no id")
    data["id"] = str(doc_id)
    return data
