# yatra/api/v1/endpoints/health.py
from fastapi import APIRouter

from yatra.db.database import ping_db

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/health/db")
async def health_db():
    """503 (via StorageUnavailable) when MongoDB does not answer a ping."""
    await ping_db()
    return {"status": "success", "message": "MongoDB connection is healthy."}
