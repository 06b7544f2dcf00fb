"""
Exercise service: flat, status-tagged work items of an organization.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from planner_server.core.errors import ValidationError
from planner_server.models.exercise import Exercise
from planner_shared.schemas.common import ExerciseStatus

log = structlog.get_logger()


async def list_exercises(
    session: AsyncSession, organization_id: uuid.UUID
) -> list[Exercise]:
    """Exercises of an org, newest first."""
    result = await session.execute(
        select(Exercise)
        .where(Exercise.organization_id == organization_id)
        .order_by(Exercise.created_at.desc())
    )
    return list(result.scalars().all())


async def create_exercise(
    session: AsyncSession,
    organization_id: uuid.UUID,
    name: Optional[str],
    description: Optional[str] = None,
) -> Exercise:
    """Create an exercise in PLANNED state. The caller must already hold ADMIN."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name is required")

    exercise = Exercise(
        organization_id=organization_id,
        name=name,
        description=description or None,
        status=ExerciseStatus.PLANNED,
    )
    session.add(exercise)
    await session.flush()

    log.info("exercise.created", exercise_id=str(exercise.id), org_id=str(organization_id))
    return exercise
