from typing import Optional
from pydantic import BaseModel, Field, field_validator
from uuid import UUID
from datetime import datetime
from .common import ExerciseStatus


class ExerciseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value

    @field_validator("description")
    @classmethod
    def _blank_description_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


class ExerciseRead(BaseModel):
    id: UUID
    organization_id: UUID
    name: str
    description: Optional[str] = None
    status: ExerciseStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
