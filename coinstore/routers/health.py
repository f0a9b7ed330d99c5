from fastapi import APIRouter

from coinstore.core.exceptions import AppError
from coinstore.db.init import ping_db

router = APIRouter()


@router.get("/health")
async def api_health():
    """Health check including a MongoDB ping."""
    if not await ping_db():
        raise AppError("Database unreachable", code="DB_UNAVAILABLE")
    return {"ok": True, "db": "connected"}
