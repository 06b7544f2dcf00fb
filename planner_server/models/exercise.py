"""Exercise model: status-tracked work item scoped to an organization."""

from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from planner_shared.schemas.common import ExerciseStatus

from .base import TimestampMixin, UUIDMixin


class Exercise(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "exercises"

    organization_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    name: str = Field(nullable=False)
    description: Optional[str] = None
    status: ExerciseStatus = Field(
        default=ExerciseStatus.PLANNED,
        sa_column=sa.Column(
            sa.Enum(ExerciseStatus, name="exercise_status"),
            nullable=False,
            server_default=ExerciseStatus.PLANNED.value,
        ),
    )
