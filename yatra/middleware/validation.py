# yatra/middleware/validation.py
"""
Request validation dependencies.

``validate(schema, target)`` parses one part of the request (``body``,
``query`` or ``path``) with a Pydantic schema and hands the parsed model to
the route; ``validate_multiple`` does several parts and reports every error
at once. Failures raise ``RequestValidationFailed`` which the app turns into
a 400 with ``{"detail": "Validation failed", "errors": [...]}``.

Usage::

    @router.get("/")
    async def list_homestays(query: Homestay.Query = Depends(validate(Homestay.Query, "query"))):
        ...
"""
import json
from typing import Any, Dict, Iterable, List, Literal, Optional, Type

from fastapi import Request
from pydantic import BaseModel, ValidationError

from yatra.core.exceptions import RequestValidationFailed

ValidationTarget = Literal["body", "query", "path"]

# leading loc entries FastAPI adds to RequestValidationError
REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}
VALUE_ERROR_PREFIX = "Value error, "


def format_validation_errors(errors: Iterable[Dict[str, Any]], prefix: Optional[str] = None) -> List[Dict[str, str]]:
    """Turn Pydantic/FastAPI error dicts into ``{"field": "location.district", "message": ...}``."""
    formatted = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in REQUEST_LOCATIONS:
            loc = loc[1:]
        field = ".".join(loc)
        if prefix:
            field = f"{prefix}.{field}" if field else prefix
        message = str(error.get("msg", "Invalid value"))
        if message.startswith(VALUE_ERROR_PREFIX):
            message = message[len(VALUE_ERROR_PREFIX):]
        formatted.append({"field": field, "message": message})
    return formatted


async def read_target(request: Request, target: ValidationTarget) -> Any:
    if target == "query":
        return dict(request.query_params)
    if target == "path":
        return dict(request.path_params)
    body = await request.body()
    if not body:
        return {}
    try:
        return json.loads(body)
    except ValueError as exc:
        raise RequestValidationFailed([{"field": "body", "message": "Invalid JSON body"}]) from exc


def validate(schema: Type[BaseModel], target: ValidationTarget = "body"):
    """Dependency factory validating ``target`` against ``schema``."""
    async def dependency(request: Request) -> BaseModel:
        data = await read_target(request, target)
        try:
            return schema.model_validate(data)
        except ValidationError as exc:
            raise RequestValidationFailed(format_validation_errors(exc.errors())) from exc
    return dependency


def validate_multiple(**schemas: Type[BaseModel]):
    """Validate several targets; errors are prefixed with their target, e.g. ``body.email``."""
    unknown = set(schemas) - {"body", "query", "path"}
    if unknown:
        raise ValueError(f"Unknown validation target(s): {sorted(unknown)}")

    async def dependency(request: Request) -> Dict[str, BaseModel]:
        validated: Dict[str, BaseModel] = {}
        all_errors: List[Dict[str, str]] = []
        for target, schema in schemas.items():
            if schema is None:
                continue
            data = await read_target(request, target)
            try:
                validated[target] = schema.model_validate(data)
            except ValidationError as exc:
                all_errors.extend(format_validation_errors(exc.errors(), prefix=target))
        if all_errors:
            raise RequestValidationFailed(all_errors)
        return validated
    return dependency
