# Business logic services

from .status_resolver import resolve_status, reconcile_status
from .trip_service import TripService, check_date_order
from .account_service import AccountService
from .company_service import CompanyService
from .mail_sender import MailSender
from .daily_summary_service import DailySummaryService, DailySummary, SummaryTrip
from .status_transition_job import StatusTransitionJob, run_status_transition_once

__all__ = [
    "resolve_status",
    "reconcile_status",
    "TripService",
    "check_date_order",
    "AccountService",
    "CompanyService",
    "MailSender",
    "DailySummaryService",
    "DailySummary",
    "SummaryTrip",
    "StatusTransitionJob",
    "run_status_transition_once",
]
