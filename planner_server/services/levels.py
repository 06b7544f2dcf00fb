"""
Level service layer: creation, navigation and re-parenting of the level forest.

Handles:
- Creation under an optional parent of the same organization
- Single-step expansion (children + parent + organization) for breadcrumbs
- Root listing and full flat listing for client-side forest building
- Re-parenting with same-organization and acyclicity checks
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from planner_server.core.auth import authorize
from planner_server.core.errors import (
    ConflictError,
    InvalidParentError,
    NotFoundError,
    ValidationError,
)
from planner_server.core.level_tree import would_create_cycle
from planner_server.models.level import Level
from planner_server.services import organizations as org_service
from planner_shared.schemas.common import Role
from planner_shared.schemas.levels import LevelDetail, LevelOrganization, LevelRead

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_level_or_404(session: AsyncSession, level_id: uuid.UUID) -> Level:
    level = await session.get(Level, level_id)
    if not level:
        raise NotFoundError("Level", level_id)
    return level


async def _validate_parent(
    session: AsyncSession, parent_id: uuid.UUID, organization_id: uuid.UUID
) -> Level:
    """The parent must exist and live in the same organization."""
    parent = await session.get(Level, parent_id)
    if not parent or parent.organization_id != organization_id:
        raise InvalidParentError("Parent level not found in this organization")
    return parent


async def _sibling_name_taken(
    session: AsyncSession,
    organization_id: uuid.UUID,
    parent_id: Optional[uuid.UUID],
    name: str,
    exclude_id: Optional[uuid.UUID] = None,
) -> bool:
    stmt = select(Level.id).where(
        Level.organization_id == organization_id,
        Level.name == name,
    )
    if parent_id is None:
        stmt = stmt.where(Level.parent_id.is_(None))
    else:
        stmt = stmt.where(Level.parent_id == parent_id)
    if exclude_id is not None:
        stmt = stmt.where(Level.id != exclude_id)
    result = await session.execute(stmt.limit(1))
    return result.first() is not None


async def _flush_or_conflict(session: AsyncSession, name: str) -> None:
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise ConflictError(f"A level named '{name}' already exists here")


async def _parent_map(
    session: AsyncSession, organization_id: uuid.UUID
) -> dict[uuid.UUID, Optional[uuid.UUID]]:
    result = await session.execute(
        select(Level.id, Level.parent_id).where(Level.organization_id == organization_id)
    )
    return {row.id: row.parent_id for row in result.all()}


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def create_level(
    session: AsyncSession,
    name: str,
    organization_id: uuid.UUID,
    parent_id: Optional[uuid.UUID] = None,
) -> Level:
    """Create a level. The caller must already hold ADMIN on ``organization_id``."""
    name = name.strip()
    if not name:
        raise ValidationError("Level name is required")

    if parent_id is not None:
        await _validate_parent(session, parent_id, organization_id)

    if await _sibling_name_taken(session, organization_id, parent_id, name):
        raise ConflictError(f"A level named '{name}' already exists here")

    level = Level(name=name, organization_id=organization_id, parent_id=parent_id)
    session.add(level)
    await _flush_or_conflict(session, name)

    log.info(
        "level.created",
        level_id=str(level.id),
        org_id=str(organization_id),
        parent_id=str(parent_id) if parent_id else None,
    )
    return level


async def move_level(
    session: AsyncSession, level: Level, new_parent_id: Optional[uuid.UUID]
) -> Level:
    """Re-parent a level (or make it a root). The caller must hold ADMIN on its org."""
    if new_parent_id == level.parent_id:
        return level

    if new_parent_id is not None:
        await _validate_parent(session, new_parent_id, level.organization_id)

        # Circular if the new parent is the level itself or one of its descendants
        parent_of = await _parent_map(session, level.organization_id)
        if would_create_cycle(level.id, new_parent_id, parent_of):
            raise InvalidParentError("A level cannot be moved under itself or its descendants")

    if await _sibling_name_taken(
        session, level.organization_id, new_parent_id, level.name, exclude_id=level.id
    ):
        raise ConflictError(f"A level named '{level.name}' already exists here")

    old_parent_id = level.parent_id
    level.parent_id = new_parent_id
    session.add(level)
    await _flush_or_conflict(session, level.name)

    log.info(
        "level.moved",
        level_id=str(level.id),
        org_id=str(level.organization_id),
        from_parent=str(old_parent_id) if old_parent_id else None,
        to_parent=str(new_parent_id) if new_parent_id else None,
    )
    return level


async def get_level_detail(
    session: AsyncSession, level_id: uuid.UUID, user_id: uuid.UUID
) -> LevelDetail:
    """Level with its direct children (name asc), parent and organization.

    Authorization uses the organization recorded on the level itself, never
    one asserted by the caller.
    """
    level = await get_level_or_404(session, level_id)
    await authorize(session, user_id, level.organization_id, Role.MEMBER)

    result = await session.execute(
        select(Level).where(Level.parent_id == level.id).order_by(Level.name.asc())
    )
    children = result.scalars().all()

    parent = None
    if level.parent_id is not None:
        parent = await session.get(Level, level.parent_id)

    org = await org_service.get_organization(session, level.organization_id)

    detail = LevelDetail(
        id=level.id,
        name=level.name,
        organization_id=level.organization_id,
        parent_id=level.parent_id,
        created_at=level.created_at,
        children=[LevelRead.model_validate(c) for c in children],
        parent=LevelRead.model_validate(parent) if parent else None,
        organization=LevelOrganization.model_validate(org),
    )
    return detail


async def list_root_levels(
    session: AsyncSession, organization_id: uuid.UUID
) -> list[Level]:
    """Top-level view: levels without a parent, by name."""
    result = await session.execute(
        select(Level)
        .where(Level.organization_id == organization_id, Level.parent_id.is_(None))
        .order_by(Level.name.asc())
    )
    return list(result.scalars().all())


async def list_levels(
    session: AsyncSession, organization_id: uuid.UUID
) -> list[Level]:
    """Every level of the org, oldest first (flat, parent-pointer based)."""
    result = await session.execute(
        select(Level)
        .where(Level.organization_id == organization_id)
        .order_by(Level.created_at.asc())
    )
    return list(result.scalars().all())
