# yatra/core/error_handlers.py
"""
Exception -> JSON response mapping.

Every error body has a ``detail`` string; validation failures add an
``errors`` list of ``{"field", "message"}``.
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from yatra.core.exceptions import RequestValidationFailed, YatraError
from yatra.core.rate_limiter import rate_limit_exception_handler
from yatra.middleware.validation import format_validation_errors


async def request_validation_handler(request: Request, exc) -> JSONResponse:
    errors = format_validation_errors(exc.errors())
    logger.warning(f"{request.method} {request.url.path}: validation failed {errors}")
    return JSONResponse(status_code=400, content={"detail": "Validation failed", "errors": errors})


async def yatra_exception_handler(request: Request, exc: YatraError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {type(exc).__name__}: {exc.message} {exc.context}")
    else:
        logger.info(f"{request.method} {request.url.path}: {type(exc).__name__}: {exc.message}")
    content = {"detail": exc.message}
    if isinstance(exc, RequestValidationFailed):
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path}: HTTP {exc.status_code} {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(f"{request.method} {request.url.path}: unhandled {type(exc).__name__}")
    return JSONResponse(status_code=500, content={"detail": "An internal server error occurred."})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationError, request_validation_handler)
    app.add_exception_handler(YatraError, yatra_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
