# yatra/db/database.py
from typing import Optional

from beanie import init_beanie
from loguru import logger
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from yatra.core.config import DATABASE_NAME, MONGODB_URL
from yatra.core.exceptions import StorageUnavailable
from yatra.models.booking import Booking
from yatra.models.counter import Counter
from yatra.models.guide import Guide
from yatra.models.homestay import Homestay
from yatra.models.product import Product

DOCUMENT_MODELS = [Homestay, Guide, Product, Booking, Counter]

_client: Optional[AsyncMongoClient] = None


def get_client() -> AsyncMongoClient:
    global _client
    if _client is None:
        _client = AsyncMongoClient(MONGODB_URL, serverSelectionTimeoutMS=5000)
    return _client


async def init_db():
    """Connect to MongoDB and register the Beanie document models."""
    logger.info("Connecting to MongoDB...")
    database = get_client()[DATABASE_NAME]
    logger.info(f"Using database: {DATABASE_NAME}")
    await init_beanie(database=database, document_models=DOCUMENT_MODELS)
    logger.info("Beanie initialization complete for all models.")


async def close_db():
    global _client
    if _client is not None:
        await _client.close()
        _client = None
        logger.info("MongoDB connection closed.")


async def ping_db() -> None:
    """Round trip to the server; raises StorageUnavailable when it cannot be reached."""
    try:
        await get_client().admin.command("ping")
    except PyMongoError as e:
        logger.error(f"MongoDB ping failed: {e}")
        raise StorageUnavailable("MongoDB connection failed.") from e
