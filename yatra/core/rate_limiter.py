# yatra/core/rate_limiter.py
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request

from yatra.core.config import RATE_LIMIT_ENABLED, RATE_LIMIT_STORAGE_URI

# per client IP; use a shared storage (redis://...) when running several workers
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=RATE_LIMIT_STORAGE_URI,
    enabled=RATE_LIMIT_ENABLED,
)


def get_rate_limiter() -> Limiter:
    return limiter


def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    client = get_remote_address(request)
    logger.warning(f"Too many requests from {client} to {request.method} {request.url.path} ({exc.detail})")
    return JSONResponse(status_code=429, content={"detail": f"Too many requests: {exc.detail}"})
