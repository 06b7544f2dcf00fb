"""Organization membership (join table keyed by org + user)."""

from datetime import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from planner_shared.schemas.common import Role

from .base import _utcnow


class Membership(SQLModel, table=True):
    __tablename__ = "organization_members"

    organization_id: uuid.UUID = Field(foreign_key="organizations.id", primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", primary_key=True, index=True)
    role: Role = Field(
        sa_column=sa.Column(sa.Enum(Role, name="member_role"), nullable=False),
    )
    created_at: datetime = Field(
        default_factory=_utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now()},
        sa_type=sa.DateTime(timezone=True),
    )
