from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field, field_validator
from uuid import UUID
from datetime import datetime


class LevelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    organization_id: UUID
    parent_id: Optional[UUID] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Level name is required")
        return value


class LevelMove(BaseModel):
    parent_id: Optional[UUID] = Field(
        ..., description="New parent level, or null to make the level a root"
    )


class LevelRead(BaseModel):
    id: UUID
    name: str
    organization_id: UUID
    parent_id: Optional[UUID] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class LevelOrganization(BaseModel):
    id: UUID
    name: str
    owner_id: UUID

    model_config = {"from_attributes": True}


class LevelDetail(LevelRead):
    """A level with one step of context: direct children, parent and org (breadcrumbs)."""

    children: list[LevelRead] = Field(default_factory=list)
    parent: Optional[LevelRead] = None
    organization: LevelOrganization


class LevelNode(LevelRead):
    children: list[LevelNode] = Field(default_factory=list)


LevelNode.model_rebuild()
