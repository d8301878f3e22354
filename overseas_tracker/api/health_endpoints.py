"""
Health check endpoints.

- GET /: Basic liveness with app name and version
- GET /health: Database reachability, scheduler state and error statistics
"""

from fastapi import APIRouter, Request
import logging
import time
from datetime import datetime, timezone

from sqlalchemy import text

from overseas_tracker.core.error_handlers import error_handler

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

# Application start time for uptime calculation
_app_start_time = time.time()


@router.get("/")
async def root(request: Request):
    """Root endpoint for basic health check."""
    settings = request.app.state.settings
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "status": "running",
    }


@router.get("/health")
async def health_check(request: Request):
    """
    Health check with database status.

    Reports "unhealthy" when the database cannot answer a trivial query.
    """
    settings = request.app.state.settings
    details = {"database": {"status": "unknown"}, "scheduler": {"status": "disabled"}}

    try:
        async with request.app.state.database.session() as db:
            await db.execute(text("SELECT 1"))
        details["database"] = {"status": "healthy"}
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        details["database"] = {"status": "unhealthy", "error": str(e)}

    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is not None:
        details["scheduler"] = {
            "status": "running" if scheduler.running else "stopped",
            "jobs": [
                {
                    "id": job.id,
                    "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
                }
                for job in scheduler.get_jobs()
            ],
        }

    overall = "healthy" if details["database"]["status"] == "healthy" else "unhealthy"

    return {
        "status": overall,
        "version": settings.app_version,
        "timezone": settings.timezone,
        "today": request.app.state.clock.today().isoformat(),
        "uptime_seconds": round(time.time() - _app_start_time, 1),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "details": details,
        "error_statistics": error_handler.get_error_statistics(),
    }
