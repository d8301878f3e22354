"""
Company Service - Client companies that trips are grouped under
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from overseas_tracker.core.clock import Clock
from overseas_tracker.core.db import storage_errors
from overseas_tracker.core.exceptions import DuplicateError, NotFoundError
from overseas_tracker.models.company import Company
from overseas_tracker.models.trip import Trip

audit_logger = logging.getLogger("overseas_tracker.audit")


class CompanyService:
    def __init__(self, db: AsyncSession, clock: Optional[Clock] = None):
        self.db = db
        self.clock = clock

    async def create_company(self, name: str, actor_id: Optional[int] = None) -> Company:
        """
        Add a company; names are compared trimmed and case-insensitively

        Raises:
            DuplicateError: A company with that name exists
        """
        name = name.strip()
        async with storage_errors("create_company"):
            if await self.find_by_name(name) is not None:
                raise DuplicateError("company", name)
            company = Company(name=name, is_active=True)
            self.db.add(company)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                raise DuplicateError("company", name) from None
            await self.db.refresh(company)

        audit_logger.info(f"CREATE_COMPANY company={company.id} name={name} by={actor_id}")
        return company

    async def get_company(self, company_id: int) -> Company:
        async with storage_errors("get_company"):
            company = await self.db.get(Company, company_id)
        if company is None:
            raise NotFoundError("company", company_id)
        return company

    async def find_by_name(self, name: str) -> Optional[Company]:
        result = await self.db.execute(
            select(Company).where(func.lower(func.trim(Company.name)) == name.strip().lower())
        )
        return result.scalar_one_or_none()

    async def list_companies(self, active_only: bool = False) -> List[Company]:
        stmt = select(Company).order_by(Company.name.asc())
        if active_only:
            stmt = stmt.where(Company.is_active.is_(True))
        async with storage_errors("list_companies"):
            result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def set_active(self, company_id: int, is_active: bool, actor_id: Optional[int] = None) -> Company:
        company = await self.get_company(company_id)
        async with storage_errors("set_company_active"):
            company.is_active = is_active
            await self.db.commit()
            await self.db.refresh(company)

        audit_logger.info(f"UPDATE_COMPANY company={company_id} is_active={is_active} by={actor_id}")
        return company

    async def delete_company(self, company_id: int, actor_id: Optional[int] = None) -> None:
        """
        Delete a company; its trips stay, with no company

        Detaching counts as an edit of each trip, so their versions move on.
        """
        now = self.clock.now() if self.clock else datetime.now(timezone.utc)
        company = await self.get_company(company_id)
        async with storage_errors("delete_company"):
            await self.db.execute(
                update(Trip)
                .where(Trip.company_id == company_id)
                .values(
                    company_id=None,
                    version=Trip.version + 1,
                    last_modified_at=now,
                    last_modified_by=actor_id,
                )
                .execution_options(synchronize_session=False)
            )
            await self.db.delete(company)
            await self.db.commit()

        audit_logger.info(f"DELETE_COMPANY company={company_id} by={actor_id}")
