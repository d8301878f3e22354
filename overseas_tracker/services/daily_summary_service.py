"""
Daily Summary Service - Morning admin report of departures and returns
"""
import logging
from datetime import date
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from overseas_tracker.core.clock import Clock
from overseas_tracker.core.db import storage_errors
from overseas_tracker.models.company import Company
from overseas_tracker.models.trip import Trip, TripStatus
from overseas_tracker.services.mail_sender import MailSender
from overseas_tracker.services.status_resolver import reconcile_status

logger = logging.getLogger(__name__)

RULE = "-" * 33


class SummaryTrip(BaseModel):
    trip_id: int
    name: str
    company_name: Optional[str] = None
    day: date


class DailySummary(BaseModel):
    report_date: date
    starting_today: List[SummaryTrip] = []
    completed_yesterday: List[SummaryTrip] = []

    @property
    def is_empty(self) -> bool:
        return not self.starting_today and not self.completed_yesterday


class DailySummaryService:
    """Builds and mails the daily trip summary"""

    def __init__(self, db: AsyncSession, clock: Clock, mail_sender: Optional[MailSender] = None):
        self.db = db
        self.clock = clock
        self.mail_sender = mail_sender

    async def build_summary(self) -> DailySummary:
        """
        Collect trips departing today and trips that finished yesterday

        Cancelled trips are left out. Status is read through the same
        reconcile rule as the listings, so the report does not depend on
        the transition job having run first.
        """
        today = self.clock.today()
        yesterday = self.clock.yesterday()

        stmt = (
            select(Trip, Company.name)
            .outerjoin(Company, Trip.company_id == Company.id)
            .where(
                Trip.status != TripStatus.CANCELLED,
                (Trip.departure_date == today) | (Trip.return_date == yesterday),
            )
            .order_by(Trip.name.asc(), Trip.id.asc())
        )
        async with storage_errors("build_summary"):
            rows = (await self.db.execute(stmt)).all()

        summary = DailySummary(report_date=today)
        for trip, company_name in rows:
            status = reconcile_status(trip.status, trip.departure_date, trip.return_date, today)
            if trip.departure_date == today:
                summary.starting_today.append(
                    SummaryTrip(trip_id=trip.id, name=trip.name, company_name=company_name, day=trip.departure_date)
                )
            if trip.return_date == yesterday and status == TripStatus.COMPLETED:
                summary.completed_yesterday.append(
                    SummaryTrip(trip_id=trip.id, name=trip.name, company_name=company_name, day=trip.return_date)
                )
        return summary

    @staticmethod
    def render_text(summary: DailySummary) -> str:
        """Format the summary as the plain-text mail body."""
        heading = f"DAILY TRIP SUMMARY - {summary.report_date.strftime('%d/%m/%Y')}"
        lines = ["=" * len(heading), heading, "=" * len(heading), ""]

        if summary.is_empty:
            lines.append("No trips starting today or completed yesterday.")
            lines.append("")

        if summary.starting_today:
            lines.append(f"Trips Starting Today ({len(summary.starting_today)})")
            lines.append(RULE)
            for t in summary.starting_today:
                lines.append(f"* Name: {t.name}")
                lines.append(f"  Company: {t.company_name or 'No company'}")
                lines.append(f"  Departure Date: {t.day.isoformat()}")
                lines.append("")

        if summary.completed_yesterday:
            lines.append(f"Trips Completed Yesterday ({len(summary.completed_yesterday)})")
            lines.append(RULE)
            for t in summary.completed_yesterday:
                lines.append(f"* Name: {t.name}")
                lines.append(f"  Company: {t.company_name or 'No company'}")
                lines.append(f"  Return Date: {t.day.isoformat()}")
                lines.append("")

        lines.append(RULE)
        lines.append("Report generated automatically by Overseas Access Tracker.")
        lines.append("Please do not reply to this message.")
        return "\n".join(lines) + "\n"

    async def send_daily_summary(self) -> dict:
        """
        Build the summary and mail it to the configured admins

        Returns:
            Counts per section and whether mail went out

        Raises:
            MailDeliveryError: SMTP delivery failed
        """
        summary = await self.build_summary()
        result = {
            "report_date": summary.report_date.isoformat(),
            "starting": len(summary.starting_today),
            "completed": len(summary.completed_yesterday),
            "sent": False,
        }

        if self.mail_sender is None or not self.mail_sender.enabled:
            logger.warning("Mail delivery disabled; daily summary not sent")
            return result

        subject = f"Daily Trip Summary - {summary.report_date.strftime('%d/%m/%Y')}"
        await self.mail_sender.send(subject, self.render_text(summary))
        result["sent"] = True
        return result
