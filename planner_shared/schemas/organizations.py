"""
Organization-related Pydantic schemas shared between server and clients.

Covers: org create request, list items, detail view with levels and the
caller's role.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from .common import Role
from .levels import LevelRead


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class OrgCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Organization display name")

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Organization name is required")
        return value


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class OrgResponse(BaseModel):
    id: uuid.UUID
    name: str
    owner_id: uuid.UUID
    created_at: datetime

    model_config = {"from_attributes": True}


class OrgDetailResponse(OrgResponse):
    levels: list[LevelRead] = Field(
        default_factory=list,
        description="All levels of the org, oldest first (flat, parent-pointer based)",
    )
    role: Role  # the requesting user's role in this org
