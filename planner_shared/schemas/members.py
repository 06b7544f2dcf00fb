from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from .common import Role


class MemberAddRequest(BaseModel):
    user_id: UUID
    role: Role = Role.MEMBER


class MemberRead(BaseModel):
    organization_id: UUID
    user_id: UUID
    role: Role
    created_at: datetime

    model_config = {"from_attributes": True}
