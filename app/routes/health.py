# app/routes/health.py
"""
Liveness and readiness endpoints.

Redis is optional: when REDIS_URL is unset it is reported but does not
affect readiness.
"""

import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.config import settings
from app.db.pool import db_health_check
from app.infrastructure.observability.logging import log_health_check
from app.services.redis_client import fast_redis

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "chronogift"}


@router.get("/readyz")
async def readyz():
    """Readiness check against the database pool and, if configured, Redis."""
    checks = {}
    overall_ok = True

    t0 = time.time()
    try:
        db_health = await db_health_check()
        is_healthy = bool(db_health.get("healthy", False))
        checks["database"] = {
            "ok": is_healthy,
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }
        if "pool_stats" in db_health:
            checks["database"]["pool_size"] = db_health["pool_stats"].get("pool_size", 0)
            checks["database"]["pool_available"] = db_health["pool_stats"].get(
                "pool_available", 0
            )
        if not is_healthy:
            checks["database"]["error"] = db_health.get("error", "Database unhealthy")
        overall_ok = overall_ok and is_healthy
    except Exception as e:
        checks["database"] = {
            "ok": False,
            "error": f"{type(e).__name__}: {e}",
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }
        overall_ok = False

    log_health_check(
        "database",
        checks["database"]["ok"],
        checks["database"]["latency_ms"],
        checks["database"].get("error"),
    )

    if fast_redis.configured:
        t0 = time.time()
        redis_ok = await fast_redis.ping()
        checks["redis"] = {
            "ok": redis_ok,
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }
        log_health_check("redis", redis_ok, checks["redis"]["latency_ms"])
        # Redis gates readiness only when the limiter fails closed
        if not settings.RATE_LIMIT_FAIL_OPEN:
            overall_ok = overall_ok and redis_ok
    else:
        checks["redis"] = {"ok": None, "configured": False}

    body = {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}
    return JSONResponse(status_code=200 if overall_ok else 503, content=body)
