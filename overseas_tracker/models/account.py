from sqlalchemy import Boolean, Column, DateTime, Enum as SQLEnum, Integer, String, func
import enum

from overseas_tracker.core.db import Base


class AccountRole(str, enum.Enum):
    ADMIN = "ADMIN"
    STAFF = "STAFF"
    USER = "USER"


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        SQLEnum(AccountRole, name="account_role", native_enum=False, length=16),
        default=AccountRole.USER,
        nullable=False,
    )
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    @property
    def is_admin(self) -> bool:
        return self.role == AccountRole.ADMIN

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Account id={self.id} username={self.username} role={self.role}>"
