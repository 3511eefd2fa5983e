# 📄 File: sproutsync/api/v1/health.py
# 🧭 Purpose (Layman Explanation):
# A quick "are you alive?" check for SproutSync and a deeper one that also pokes the
# database, used by load balancers and whoever is on call.
#
# 🧪 Purpose (Technical Summary):
# Health endpoints mounted at /api/health: liveness with uptime/environment/version and
# a database connectivity probe built on database_health_check.
#
# 🔗 Dependencies:
# - FastAPI APIRouter
# - sproutsync.shared.infrastructure.database.connection
#
# 🔄 Connected Modules / Calls From:
# - sproutsync.api.v1.router, load balancers, monitoring

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from sproutsync.shared.config.settings import get_settings
from sproutsync.shared.infrastructure.database.connection import database_health_check

logger = logging.getLogger(__name__)

health_router = APIRouter()

# Process start, for uptime
_app_start_time = time.monotonic()


@health_router.get("", summary="Basic Health Check", description="Liveness check for load balancers")
async def health_check():
    settings = get_settings()
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - _app_start_time, 3),
        "environment": settings.ENVIRONMENT,
        "version": settings.APP_VERSION,
    }


@health_router.get(
    "/database",
    summary="Database Health Check",
    responses={503: {"description": "Database unreachable"}},
)
async def database_health() -> JSONResponse:
    """
    Database connectivity check.

    Returns 200 with the probe result when the database answers, 503 otherwise.
    """
    result = await database_health_check()
    status_code = 200 if result.get("status") == "healthy" else 503
    if status_code != 200:
        logger.warning(f"⚠️ Database health check failed: {result}")
    return JSONResponse(status_code=status_code, content=result)
