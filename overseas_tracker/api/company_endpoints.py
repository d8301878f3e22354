"""Company lookup for trip forms."""
from fastapi import APIRouter, Depends

from overseas_tracker.core.dependencies import get_company_service, get_current_account
from overseas_tracker.models.account import Account
from overseas_tracker.schemas.base import Envelope
from overseas_tracker.schemas.company import CompanyRead
from overseas_tracker.services.company_service import CompanyService

router = APIRouter(prefix="/companies", tags=["companies"])


@router.get("", response_model=Envelope[list[CompanyRead]])
async def list_active_companies(
    service: CompanyService = Depends(get_company_service),
    current_account: Account = Depends(get_current_account),
):
    companies = await service.list_companies(active_only=True)
    return Envelope(status="ok", data=[CompanyRead.model_validate(c) for c in companies])
