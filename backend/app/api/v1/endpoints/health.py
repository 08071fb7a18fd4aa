"""
Health Check Endpoints

- /health/live  - liveness (process is up)
- /health/ready - readiness (database reachable, scaffold and scratch dir usable)
"""

import os
import time
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.core.config import settings
from app.core.database import get_session_local
from app.core.logging_config import logger


router = APIRouter(prefix="/health", tags=["Health Checks"])


async def check_database() -> Dict[str, Any]:
    """Check database connectivity"""
    start = time.time()
    try:
        session_factory = get_session_local()
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        return {
            "status": "healthy",
            "latency_ms": round((time.time() - start) * 1000, 2),
        }
    except Exception as e:
        logger.error(f"[HealthCheck] Database check failed: {e}")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start) * 1000, 2),
            "error": str(e),
        }


def check_template() -> Dict[str, Any]:
    """The scaffold is optional; a missing one only degrades the output"""
    template_dir = settings.TEMPLATE_DIR
    if template_dir.is_dir():
        return {"status": "healthy", "path": str(template_dir)}
    return {
        "status": "degraded",
        "path": str(template_dir),
        "message": "Scaffold not found; generated projects will contain sources only",
    }


def check_scratch_dir() -> Dict[str, Any]:
    scratch = settings.SCRATCH_ROOT
    if scratch.is_dir() and os.access(scratch, os.W_OK):
        return {"status": "healthy", "path": str(scratch)}
    return {"status": "unhealthy", "path": str(scratch), "message": "Scratch directory not writable"}


@router.get("/live")
async def liveness():
    return {"status": "alive", "timestamp": datetime.utcnow().isoformat()}


@router.get("/ready")
async def readiness():
    """Ready when the database and scratch directory are usable"""
    checks = {
        "database": await check_database(),
        "template": check_template(),
        "scratch": check_scratch_dir(),
    }
    ready = all(c["status"] != "unhealthy" for c in checks.values())
    return JSONResponse(
        status_code=200 if ready else 503,
        content={
            "status": "ready" if ready else "not_ready",
            "timestamp": datetime.utcnow().isoformat(),
            "checks": checks,
        },
    )
