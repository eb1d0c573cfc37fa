# yatra/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from loguru import logger

from yatra.api.v1.api import api_router_v1
from yatra.api.v1.endpoints import health
from yatra.core.config import CORS_ORIGINS, setup_logging
from yatra.core.error_handlers import register_exception_handlers
from yatra.core.rate_limiter import get_rate_limiter
from yatra.db.database import close_db, init_db
from yatra.middleware.logging import RequestLoggingMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Starting Yatra API")
    await init_db()
    yield
    logger.info("Stopping Yatra API")
    await close_db()


def create_app() -> FastAPI:
    application = FastAPI(
        title="Yatra Booking API",
        description="Homestays, local guides and bookings.",
        version="0.1.0",
        lifespan=lifespan,
    )
    register_exception_handlers(application)

    application.state.limiter = get_rate_limiter()
    application.add_middleware(GZipMiddleware, minimum_size=500)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(RequestLoggingMiddleware)

    application.include_router(health.router)
    application.include_router(api_router_v1)

    @application.get("/", include_in_schema=False)
    async def read_root():
        return {"message": "Welcome to the Yatra Booking API!", "docs": "/docs"}

    return application


app = create_app()
