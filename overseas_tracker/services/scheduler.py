"""
Background scheduler for the daily jobs

Both jobs fire on the configured calendar timezone, so "midnight" and
"8 am" mean the same day boundary the clock uses.
"""
import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from overseas_tracker.config.settings import Settings
from overseas_tracker.core.clock import Clock
from overseas_tracker.core.db import Database
from overseas_tracker.services.daily_summary_service import DailySummaryService
from overseas_tracker.services.mail_sender import MailSender
from overseas_tracker.services.status_transition_job import StatusTransitionJob

logger = logging.getLogger(__name__)

TRANSITION_JOB_ID = "status_transition"
SUMMARY_JOB_ID = "daily_summary"


def build_scheduler(
    settings: Settings,
    database: Database,
    clock: Clock,
    mail_sender: MailSender,
    transition_job: Optional[StatusTransitionJob] = None,
) -> AsyncIOScheduler:
    """Create (but do not start) the scheduler with both daily jobs registered."""
    tz = settings.get_zoneinfo()
    transition_job = transition_job or StatusTransitionJob(clock)

    async def _run_status_transition():
        async with database.session() as db:
            result = await transition_job.run(db)
        if result["status"] == "error":
            logger.error(f"Scheduled status transition failed: {result['error']}")

    async def _run_daily_summary():
        try:
            async with database.session() as db:
                result = await DailySummaryService(db, clock, mail_sender).send_daily_summary()
            logger.info(
                f"Daily summary for {result['report_date']}: {result['starting']} starting, "
                f"{result['completed']} completed, sent={result['sent']}"
            )
        except Exception as e:
            logger.error(f"Daily summary job failed: {e}", exc_info=True)

    scheduler = AsyncIOScheduler(timezone=tz)
    scheduler.add_job(
        _run_status_transition,
        CronTrigger(
            hour=settings.scheduler.transition_hour,
            minute=settings.scheduler.transition_minute,
            timezone=tz,
        ),
        id=TRANSITION_JOB_ID,
        coalesce=True,
        max_instances=1,
    )
    scheduler.add_job(
        _run_daily_summary,
        CronTrigger(
            hour=settings.scheduler.summary_hour,
            minute=settings.scheduler.summary_minute,
            timezone=tz,
        ),
        id=SUMMARY_JOB_ID,
        coalesce=True,
        max_instances=1,
    )
    return scheduler
