# app/routes/health.py
"""
Health check endpoints: liveness plus readiness of the database pool and
email delivery configuration.
"""

import time

from fastapi import APIRouter, Request

from app.config import settings
from app.infrastructure.observability.logging import log_health_check

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "project-status-api"}


@router.get("/readyz")
async def readyz(request: Request):
    """Readiness check for the database pool and required configuration."""
    checks = {}
    overall_ok = True

    # 1) Database pool
    t0 = time.time()
    db = getattr(request.app.state, "db", None)
    try:
        if db is None:
            raise RuntimeError("Database pool not configured")
        db_health = await db.health_check()
        is_healthy = db_health.get("healthy", False)
        latency_ms = round((time.time() - t0) * 1000, 1)

        checks["database"] = {"ok": is_healthy, "latency_ms": latency_ms}
        if "pool_stats" in db_health:
            checks["database"].update(db_health["pool_stats"])
        if not is_healthy:
            checks["database"]["error"] = db_health.get("error", "Database unhealthy")

        overall_ok = overall_ok and is_healthy
        log_health_check("database", is_healthy, latency_ms, db_health.get("error"))

    except Exception as e:
        checks["database"] = {
            "ok": False,
            "error": f"{type(e).__name__}: {e}",
            "latency_ms": round((time.time() - t0) * 1000, 1),
        }
        overall_ok = False
        log_health_check("database", False, checks["database"]["latency_ms"], str(e))

    # 2) Configuration. Email settings are reported but never fail readiness.
    config_issues = []
    if not settings.SUPABASE_DB_URL:
        config_issues.append("SUPABASE_DB_URL not set")
    config_ok = not config_issues

    checks["configuration"] = {
        "ok": config_ok,
        "issues": config_issues or None,
        "environment": settings.environment,
    }
    checks["email"] = {
        "ok": settings.email_configured(),
        "issues": None if settings.email_configured() else ["EMAIL_API_KEY or FROM_EMAIL not set"],
    }
    overall_ok = overall_ok and config_ok

    return {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}
