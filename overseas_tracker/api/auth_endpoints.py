"""Authentication endpoints."""

from fastapi import APIRouter, Depends

from overseas_tracker.config.settings import Settings
from overseas_tracker.core.dependencies import (
    get_account_service,
    get_app_settings,
    get_current_account,
)
from overseas_tracker.core.jwt import create_access_token
from overseas_tracker.models.account import Account
from overseas_tracker.schemas.account import AccountRead, LoginRequest, Token
from overseas_tracker.schemas.base import Envelope
from overseas_tracker.services.account_service import AccountService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=Envelope[Token])
async def login(
    payload: LoginRequest,
    service: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_app_settings),
):
    account = await service.authenticate(payload.username, payload.password)
    access = create_access_token(str(account.id), settings.security, scopes=[account.role.value])
    return Envelope(
        status="ok",
        data=Token(access_token=access, account_id=account.id, role=account.role),
    )


@router.get("/me", response_model=Envelope[AccountRead])
async def get_me(current_account: Account = Depends(get_current_account)):
    """Account behind the bearer token."""
    return Envelope(status="ok", data=AccountRead.model_validate(current_account))
