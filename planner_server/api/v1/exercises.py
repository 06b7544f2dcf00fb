"""
Exercise endpoints.

GET    /api/v1/organizations/{organization_id}/exercises  — List exercises (newest first)
POST   /api/v1/organizations/{organization_id}/exercises  — Create an exercise (Admin only)
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from planner_server.core.auth import AuthorizedMember, require_admin, require_member
from planner_server.core.database import get_session
from planner_server.services import exercises as exercise_service
from planner_shared.schemas.exercises import ExerciseCreate, ExerciseRead

router = APIRouter()


@router.get("", response_model=List[ExerciseRead])
async def list_exercises(
    auth: AuthorizedMember = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """List the org's exercises, newest first."""
    return await exercise_service.list_exercises(session, auth.organization_id)


@router.post("", response_model=ExerciseRead, status_code=201)
async def create_exercise(
    body: ExerciseCreate,
    auth: AuthorizedMember = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Create an exercise (Admin only). New exercises start as PLANNED."""
    exercise = await exercise_service.create_exercise(
        session, auth.organization_id, body.name, body.description
    )
    await session.commit()
    await session.refresh(exercise)
    return exercise
