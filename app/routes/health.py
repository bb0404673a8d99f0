# app/routes/health.py
"""
Health check endpoints with timesheet source monitoring.
"""

import time

from fastapi import APIRouter, Request

from app.infrastructure.observability.logging import log_dependency_check

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "timesheet-dashboard"}


@router.get("/readyz")
async def readyz(request: Request):
    """
    Readiness check: timesheet source reachability plus aggregation cache stats.
    """
    checks = {}
    overall_ok = True

    t0 = time.time()
    try:
        source_ok = await request.app.state.timesheet_client.ping()
        latency_ms = round((time.time() - t0) * 1000, 1)
        checks["timesheet_source"] = {"ok": bool(source_ok), "latency_ms": latency_ms}
        log_dependency_check("timesheet_source", bool(source_ok), latency_ms)
        overall_ok = overall_ok and bool(source_ok)
    except Exception as e:
        latency_ms = round((time.time() - t0) * 1000, 1)
        checks["timesheet_source"] = {
            "ok": False,
            "latency_ms": latency_ms,
            "error": f"{type(e).__name__}: {e}",
        }
        log_dependency_check("timesheet_source", False, latency_ms, error=str(e))
        overall_ok = False

    checks["aggregation_cache"] = {"ok": True, **request.app.state.timesheet_aggregator.stats()}

    return {"overall_ok": overall_ok, "checks": checks}
