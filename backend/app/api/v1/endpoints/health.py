"""
Probes for the orchestrator

/health/live answers as long as the process is up. /health/ready answers
200 only once the database is reachable and its schema is in place.
"""
import time
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import inspect, text

from app.core.config import settings
from app.core.database import get_engine
from app.core.logging_config import logger
from app.models.boarding import Room
from app.services.cache_service import cache_service

router = APIRouter(prefix="/health", tags=["Health Checks"])

# Presence of this table means init_db has run
SENTINEL_TABLE = Room.__tablename__


async def check_database() -> Dict[str, Any]:
    started = time.perf_counter()
    result: Dict[str, Any] = {"status": "unhealthy", "connection": "failed", "tables_ready": False}
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
            result["connection"] = "ok"
            result["status"] = "healthy"
            result["tables_ready"] = await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).has_table(SENTINEL_TABLE)
            )
    except Exception as e:
        # A probe reports the failure instead of raising it
        logger.error(f"[HealthCheck] Database check failed: {e}")
        result["error"] = str(e)
    result["latency_ms"] = round((time.perf_counter() - started) * 1000, 2)
    return result


@router.get("/live")
async def liveness_check():
    return {"status": "alive", "app": settings.APP_NAME, "timestamp": datetime.utcnow().isoformat()}


@router.get("/ready")
async def readiness_check():
    """Cache state is reported but never blocks readiness"""
    database = await check_database()
    ready = database["status"] == "healthy" and database["tables_ready"]

    body = {
        "status": "ready" if ready else "not_ready",
        "timestamp": datetime.utcnow().isoformat(),
        "checks": {"database": database, "cache": await cache_service.get_cache_stats()},
    }
    if not ready:
        logger.warning(f"[HealthCheck] Not ready: {database}")
        return JSONResponse(status_code=503, content=body)
    return body
