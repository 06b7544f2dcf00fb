"""
Level endpoints: creation, single-level expansion, re-parenting.

The organization used for authorization on GET/PATCH is always read from the
stored level, never taken from the request.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from planner_server.core.auth import Identity, authorize, get_identity
from planner_server.core.database import get_session
from planner_server.services import levels as level_service
from planner_shared.schemas.common import Role
from planner_shared.schemas.levels import LevelCreate, LevelDetail, LevelMove, LevelRead

router = APIRouter()


@router.post("", response_model=LevelRead, status_code=201)
async def create_level(
    body: LevelCreate,
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Create a level in an org (Admin only), optionally under a parent level."""
    await authorize(session, identity.user_id, body.organization_id, Role.ADMIN)
    level = await level_service.create_level(
        session, body.name, body.organization_id, body.parent_id
    )
    await session.commit()
    await session.refresh(level)
    return level


@router.get("/{level_id}", response_model=LevelDetail)
async def get_level(
    level_id: uuid.UUID,
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Level with its direct children (by name), parent and organization."""
    return await level_service.get_level_detail(session, level_id, identity.user_id)


@router.patch("/{level_id}", response_model=LevelRead)
async def move_level(
    level_id: uuid.UUID,
    body: LevelMove,
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Move a level under another parent of the same org, or to the root (Admin only)."""
    level = await level_service.get_level_or_404(session, level_id)
    await authorize(session, identity.user_id, level.organization_id, Role.ADMIN)
    level = await level_service.move_level(session, level, body.parent_id)
    await session.commit()
    await session.refresh(level)
    return level
