from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from overseas_tracker.models.account import AccountRole


class AccountCreate(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=6)
    role: AccountRole = AccountRole.USER


class AccountRead(BaseModel):
    id: int
    username: str
    role: AccountRole
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ActiveFlag(BaseModel):
    is_active: bool


class PasswordChange(BaseModel):
    new_password: str = Field(min_length=6)


class LoginRequest(BaseModel):
    username: str
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account_id: int
    role: AccountRole
