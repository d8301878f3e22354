"""
Account Service - Staff/admin accounts and login
"""
import logging
from typing import List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from overseas_tracker.core.db import storage_errors
from overseas_tracker.core.exceptions import (
    AuthenticationError,
    DuplicateError,
    NotFoundError,
)
from overseas_tracker.core.security import hash_password, verify_password
from overseas_tracker.models.account import Account, AccountRole
from overseas_tracker.models.trip import Trip
from overseas_tracker.schemas.account import AccountCreate

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("overseas_tracker.audit")


class AccountService:
    """Manages accounts, roles and credential checks"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def authenticate(self, username: str, password: str) -> Account:
        """
        Check credentials

        Raises:
            AuthenticationError: Unknown user, wrong password or disabled account
        """
        async with storage_errors("authenticate"):
            account = await self._find_by_username(username)
        if account is None or not verify_password(password, account.password_hash):
            raise AuthenticationError("Invalid credentials")
        if not account.is_active:
            raise AuthenticationError("Account disabled")

        audit_logger.info(f"LOGIN_SUCCESS account={account.id} username={account.username}")
        return account

    async def create_account(self, data: AccountCreate, actor_id: Optional[int] = None) -> Account:
        """
        Create an account

        Raises:
            DuplicateError: Username already taken
        """
        username = data.username.strip()
        async with storage_errors("create_account"):
            if await self._find_by_username(username) is not None:
                raise DuplicateError("account", username)

            account = Account(
                username=username,
                password_hash=hash_password(data.password),
                role=data.role,
                is_active=True,
            )
            self.db.add(account)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                raise DuplicateError("account", username) from None
            await self.db.refresh(account)

        audit_logger.info(
            f"CREATE_ACCOUNT account={account.id} username={username} role={account.role.value} by={actor_id}"
        )
        return account

    async def get_account(self, account_id: int) -> Account:
        async with storage_errors("get_account"):
            account = await self.db.get(Account, account_id)
        if account is None:
            raise NotFoundError("account", account_id)
        return account

    async def list_accounts(self) -> List[Account]:
        async with storage_errors("list_accounts"):
            result = await self.db.execute(select(Account).order_by(Account.username.asc()))
        return list(result.scalars().all())

    async def set_active(self, account_id: int, is_active: bool, actor_id: Optional[int] = None) -> Account:
        account = await self.get_account(account_id)
        async with storage_errors("set_account_active"):
            account.is_active = is_active
            await self.db.commit()
            await self.db.refresh(account)

        audit_logger.info(f"UPDATE_ACCOUNT account={account_id} is_active={is_active} by={actor_id}")
        return account

    async def change_password(self, account_id: int, new_password: str, actor_id: Optional[int] = None) -> None:
        account = await self.get_account(account_id)
        async with storage_errors("change_password"):
            account.password_hash = hash_password(new_password)
            await self.db.commit()

        audit_logger.info(f"CHANGE_PASSWORD account={account_id} by={actor_id}")

    async def delete_account(self, account_id: int, actor_id: Optional[int] = None) -> None:
        """
        Delete an account together with the trips it travels on

        Trips it last modified keep their row with ``last_modified_by`` cleared.
        """
        account = await self.get_account(account_id)
        async with storage_errors("delete_account"):
            await self.db.execute(
                delete(Trip)
                .where(Trip.traveller_id == account_id)
                .execution_options(synchronize_session=False)
            )
            await self.db.execute(
                update(Trip)
                .where(Trip.last_modified_by == account_id)
                .values(last_modified_by=None)
                .execution_options(synchronize_session=False)
            )
            await self.db.delete(account)
            await self.db.commit()

        audit_logger.info(f"DELETE_ACCOUNT account={account_id} by={actor_id}")

    async def ensure_default_admin(self, username: str, password: str) -> Optional[Account]:
        """
        Seed an admin account when none exists

        Returns:
            The created account, or None if an admin was already present
        """
        async with storage_errors("ensure_default_admin"):
            result = await self.db.execute(
                select(func.count(Account.id)).where(Account.role == AccountRole.ADMIN)
            )
            if result.scalar_one() > 0:
                logger.info("Admin account already exists")
                return None

        account = await self.create_account(
            AccountCreate(username=username, password=password, role=AccountRole.ADMIN)
        )
        logger.warning(f"Default admin account '{username}' created; change its password")
        return account

    async def _find_by_username(self, username: str) -> Optional[Account]:
        result = await self.db.execute(
            select(Account).where(func.lower(Account.username) == username.strip().lower())
        )
        return result.scalar_one_or_none()
