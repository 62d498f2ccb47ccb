"""
Health check and diagnostics endpoints.
"""

from typing import Dict, Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
import redis.asyncio as redis
from sqlalchemy import text

from config import settings
from database import engine
from services.diagnostics import diagnostics_buffer

router = APIRouter()


async def _database_status() -> str:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:
        return f"down: {exc}"
    return "up"


async def _redis_status() -> str:
    # Rate limiting falls back to in-process counters, so redis only degrades.
    client = redis.from_url(settings.REDIS_URL)
    try:
        await client.ping()
    except Exception as exc:
        return f"down: {exc}"
    finally:
        await client.aclose()
    return "up"


@router.get("/health")
async def health_check():
    """Report database, redis and storage status."""
    checks: Dict[str, str] = {
        "api": "up",
        "database": await _database_status(),
        "redis": await _redis_status(),
        "storage": "configured" if settings.STORAGE_PUBLIC_BASE_URL else "missing",
    }
    degraded = any(value.startswith("down") for value in checks.values())
    return {"status": "degraded" if degraded else "healthy", **checks}


@router.get("/health/ready")
async def readiness_check():
    """Ready once stored creative paths can be turned into public URLs."""
    if not settings.STORAGE_PUBLIC_BASE_URL:
        return JSONResponse(
            status_code=503,
            content={"ready": False, "missing": ["STORAGE_PUBLIC_BASE_URL"]},
        )
    return {"ready": True}


@router.get("/health/live")
async def liveness_check():
    return {"alive": True}


@router.get("/health/diagnostics")
async def diagnostics(
    limit: int = Query(default=100, ge=1, le=1000),
    request_id: Optional[str] = None,
):
    """Recent application log records from the in-memory ring buffer."""
    entries = diagnostics_buffer.entries(request_id=request_id, limit=limit)
    return {
        "capacity": diagnostics_buffer.capacity,
        "count": len(entries),
        "entries": entries,
    }
