from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class CompanyCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)


class CompanyRead(BaseModel):
    id: int
    name: str
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
