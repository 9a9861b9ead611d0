from fastapi import APIRouter
from app.core.database import check_db_connection
from app.core.redis import check_redis_connection, queued_expiry_count

router = APIRouter()


@router.get("/health")
@router.get("/api/health")
async def health_check():
    """Liveness with DB, Redis and the delayed expiry backlog"""
    db_ok = check_db_connection()
    redis_ok = await check_redis_connection()

    return {
        "status": "ok" if (db_ok and redis_ok) else "degraded",
        "db": "connected" if db_ok else "disconnected",
        "redis": "connected" if redis_ok else "disconnected",
        "queued_expiries": await queued_expiry_count() if redis_ok else None,
    }
