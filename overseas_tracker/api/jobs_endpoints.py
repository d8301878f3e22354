"""Manual triggers for the scheduled jobs.

Both routes call the same entry points the scheduler uses.
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from overseas_tracker.core.db import get_db
from overseas_tracker.core.dependencies import get_daily_summary_service, require_admin
from overseas_tracker.core.exceptions import JobFailedError, TransientStorageError
from overseas_tracker.models.account import Account
from overseas_tracker.schemas.base import Envelope
from overseas_tracker.services.daily_summary_service import DailySummaryService
from overseas_tracker.services.status_transition_job import StatusTransitionJob

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("/status-transition", response_model=Envelope[dict])
async def run_status_transition(
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: Account = Depends(require_admin),
):
    """
    Advance trip statuses for today now instead of waiting for the timer.

    A failed run answers with the standard error body: 503 when storage was
    unreachable, 500 otherwise.
    """
    job: StatusTransitionJob = request.app.state.transition_job
    result = await job.run(db)
    if result["status"] == "error":
        if result.get("error_type") == TransientStorageError.__name__:
            raise TransientStorageError("run_batch_transition")
        raise JobFailedError("status_transition", result["error"])
    return Envelope(status="ok", data=result)


@router.post("/daily-summary", response_model=Envelope[dict])
async def send_daily_summary(
    service: DailySummaryService = Depends(get_daily_summary_service),
    admin: Account = Depends(require_admin),
):
    result = await service.send_daily_summary()
    return Envelope(status="ok", data=result)
