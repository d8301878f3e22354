"""
Status transition job - Advances trip statuses once a day
"""
import logging
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from overseas_tracker.core.clock import Clock
from overseas_tracker.services.trip_service import TripService

logger = logging.getLogger(__name__)


class StatusTransitionJob:
    """
    Runs the batch status transition on behalf of the scheduler

    A failed run is logged and reported, never raised, so the scheduler keeps
    its timer and the next tick retries.
    """

    def __init__(self, clock: Clock):
        self.clock = clock
        self.is_running = False

    async def run(self, db: AsyncSession) -> dict:
        """
        Execute one transition pass

        Args:
            db: Database session

        Returns:
            Run statistics
        """
        if self.is_running:
            logger.warning("Status transition already running, skipping")
            return {"status": "skipped", "reason": "already_running"}

        self.is_running = True
        start_time = datetime.now(timezone.utc)

        try:
            logger.info(f"Starting status transition for {self.clock.today().isoformat()}")

            service = TripService(db, self.clock)
            counts = await service.run_batch_transition()

            duration = (datetime.now(timezone.utc) - start_time).total_seconds()

            logger.info(
                f"Status transition completed: {counts.activated} activated, "
                f"{counts.completed} completed in {duration:.2f}s"
            )

            return {
                "status": "success",
                "activated": counts.activated,
                "completed": counts.completed,
                "duration_seconds": duration,
                "timestamp": start_time.isoformat(),
            }

        except Exception as e:
            logger.error(f"Status transition failed: {e}", exc_info=True)
            return {
                "status": "error",
                "error": str(e),
                "error_type": type(e).__name__,
                "timestamp": start_time.isoformat(),
            }
        finally:
            self.is_running = False


async def run_status_transition_once(session_factory: Callable[[], AsyncSession], clock: Clock) -> dict:
    """
    Convenience function to run the transition job once with a fresh session

    Args:
        session_factory: Callable returning a new AsyncSession
        clock: Clock defining today

    Returns:
        Run statistics
    """
    async with session_factory() as db:
        return await StatusTransitionJob(clock).run(db)
