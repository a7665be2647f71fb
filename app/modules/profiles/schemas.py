from enum import Enum
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class Role(str, Enum):
    client = "client"
    admin = "admin"
    owner = "owner"


class Plan(str, Enum):
    free = "free"
    pro = "pro"
    enterprise = "enterprise"


class ProfileResponse(BaseModel):
    id: str
    full_name: Optional[str] = None
    # Plain strings: unexpected values stored in the table are passed through
    role_id: str = Role.client.value
    plan: str = Plan.free.value
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    persisted: bool = True

    class Config:
        from_attributes = True
