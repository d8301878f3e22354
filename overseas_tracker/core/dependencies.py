"""
Dependency injection setup for FastAPI.
Provides the current account, role checks and request-scoped services.
"""

import logging

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from overseas_tracker.config.settings import Settings
from overseas_tracker.core.clock import Clock, get_clock
from overseas_tracker.core.db import get_db
from overseas_tracker.core.exceptions import AuthenticationError, PermissionDeniedError
from overseas_tracker.core.jwt import decode_token
from overseas_tracker.models.account import Account
from overseas_tracker.services.account_service import AccountService
from overseas_tracker.services.company_service import CompanyService
from overseas_tracker.services.daily_summary_service import DailySummaryService
from overseas_tracker.services.mail_sender import MailSender
from overseas_tracker.services.trip_service import TripService

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_mail_sender(request: Request) -> MailSender:
    return request.app.state.mail_sender


async def get_current_account(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Account:
    """
    Resolve the bearer token to an active account.

    Raises:
        AuthenticationError: Missing, malformed, expired token or unknown/disabled account
    """
    auth_header = request.headers.get("Authorization", "")
    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError("Missing or invalid authorization header")

    payload = decode_token(parts[1], request.app.state.settings.security)
    if not payload or not payload.get("sub"):
        raise AuthenticationError("Invalid or expired token")

    try:
        account_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token payload") from None

    account = await db.get(Account, account_id)
    if account is None or not account.is_active:
        raise AuthenticationError("Account not found or disabled")

    request.state.account_id = account.id
    return account


async def require_admin(account: Account = Depends(get_current_account)) -> Account:
    if not account.is_admin:
        logger.warning(f"Account {account.id} denied admin route")
        raise PermissionDeniedError()
    return account


def get_trip_service(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> TripService:
    return TripService(db, clock)


def get_account_service(db: AsyncSession = Depends(get_db)) -> AccountService:
    return AccountService(db)


def get_company_service(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> CompanyService:
    return CompanyService(db, clock)


def get_daily_summary_service(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    mail_sender: MailSender = Depends(get_mail_sender),
) -> DailySummaryService:
    return DailySummaryService(db, clock, mail_sender)
