# yatra/middleware/logging.py
import time
import uuid

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One log line when a request starts and one when it ends, tagged with a request id.

    An incoming ``X-Request-ID`` is reused, otherwise a uuid4 is generated.
    The id is stored on ``request.state`` and echoed in the response header.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        route = f"{request.method} {request.url.path}"
        started = time.perf_counter()

        with logger.contextualize(request_id=request_id):
            logger.info(f"[{request_id}] --> {route}")
            try:
                response = await call_next(request)
            except Exception:
                elapsed_ms = (time.perf_counter() - started) * 1000
                logger.exception(f"[{request_id}] !!! {route} failed after {elapsed_ms:.1f}ms")
                raise
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(f"[{request_id}] <-- {route} {response.status_code} {elapsed_ms:.1f}ms")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
