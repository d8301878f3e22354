"""
Admin endpoints - Account and company management
"""
from fastapi import APIRouter, Depends, status

from overseas_tracker.core.dependencies import (
    get_account_service,
    get_company_service,
    require_admin,
)
from overseas_tracker.models.account import Account
from overseas_tracker.schemas.account import AccountCreate, AccountRead, ActiveFlag, PasswordChange
from overseas_tracker.schemas.base import Envelope, Message
from overseas_tracker.schemas.company import CompanyCreate, CompanyRead
from overseas_tracker.services.account_service import AccountService
from overseas_tracker.services.company_service import CompanyService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/accounts", response_model=Envelope[list[AccountRead]])
async def list_accounts(
    service: AccountService = Depends(get_account_service),
    admin: Account = Depends(require_admin),
):
    accounts = await service.list_accounts()
    return Envelope(status="ok", data=[AccountRead.model_validate(a) for a in accounts])


@router.post("/accounts", response_model=Envelope[AccountRead], status_code=status.HTTP_201_CREATED)
async def create_account(
    payload: AccountCreate,
    service: AccountService = Depends(get_account_service),
    admin: Account = Depends(require_admin),
):
    account = await service.create_account(payload, actor_id=admin.id)
    return Envelope(status="ok", data=AccountRead.model_validate(account))


@router.post("/accounts/{account_id}/active", response_model=Envelope[AccountRead])
async def set_account_active(
    account_id: int,
    payload: ActiveFlag,
    service: AccountService = Depends(get_account_service),
    admin: Account = Depends(require_admin),
):
    """Enable or disable an account; disabled accounts cannot log in"""
    account = await service.set_active(account_id, payload.is_active, actor_id=admin.id)
    return Envelope(status="ok", data=AccountRead.model_validate(account))


@router.post("/accounts/{account_id}/password", response_model=Envelope[Message])
async def change_password(
    account_id: int,
    payload: PasswordChange,
    service: AccountService = Depends(get_account_service),
    admin: Account = Depends(require_admin),
):
    await service.change_password(account_id, payload.new_password, actor_id=admin.id)
    return Envelope(status="ok", data=Message(message="Password updated"))


@router.delete("/accounts/{account_id}", response_model=Envelope[Message])
async def delete_account(
    account_id: int,
    service: AccountService = Depends(get_account_service),
    admin: Account = Depends(require_admin),
):
    """Delete an account and the trips it travels on"""
    await service.delete_account(account_id, actor_id=admin.id)
    return Envelope(status="ok", data=Message(message="Account deleted"))


@router.get("/companies", response_model=Envelope[list[CompanyRead]])
async def list_all_companies(
    service: CompanyService = Depends(get_company_service),
    admin: Account = Depends(require_admin),
):
    companies = await service.list_companies()
    return Envelope(status="ok", data=[CompanyRead.model_validate(c) for c in companies])


@router.post("/companies", response_model=Envelope[CompanyRead], status_code=status.HTTP_201_CREATED)
async def create_company(
    payload: CompanyCreate,
    service: CompanyService = Depends(get_company_service),
    admin: Account = Depends(require_admin),
):
    company = await service.create_company(payload.name, actor_id=admin.id)
    return Envelope(status="ok", data=CompanyRead.model_validate(company))


@router.post("/companies/{company_id}/active", response_model=Envelope[CompanyRead])
async def set_company_active(
    company_id: int,
    payload: ActiveFlag,
    service: CompanyService = Depends(get_company_service),
    admin: Account = Depends(require_admin),
):
    company = await service.set_active(company_id, payload.is_active, actor_id=admin.id)
    return Envelope(status="ok", data=CompanyRead.model_validate(company))


@router.delete("/companies/{company_id}", response_model=Envelope[Message])
async def delete_company(
    company_id: int,
    service: CompanyService = Depends(get_company_service),
    admin: Account = Depends(require_admin),
):
    """Delete a company; its trips are kept without a company"""
    await service.delete_company(company_id, actor_id=admin.id)
    return Envelope(status="ok", data=Message(message="Company deleted"))
