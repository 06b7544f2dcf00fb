"""
Membership registry: who belongs to which organization, and with what role.

Memberships are only ever created here; there is no role change or removal.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from planner_server.core.errors import ConflictError, NotFoundError
from planner_server.models.membership import Membership
from planner_server.models.user import User
from planner_shared.schemas.common import Role

log = structlog.get_logger()


async def find_membership(
    session: AsyncSession, organization_id: uuid.UUID, user_id: uuid.UUID
) -> Membership | None:
    """Primary-key lookup on (organization_id, user_id)."""
    return await session.get(Membership, (organization_id, user_id))


async def create_membership(
    session: AsyncSession,
    organization_id: uuid.UUID,
    user_id: uuid.UUID,
    role: Role,
) -> Membership:
    """Insert a membership; an existing (org, user) pair is a Conflict, never an overwrite."""
    if await find_membership(session, organization_id, user_id) is not None:
        raise ConflictError("User is already a member of this organization")

    membership = Membership(organization_id=organization_id, user_id=user_id, role=role)
    session.add(membership)
    try:
        await session.flush()
    except IntegrityError:
        # A concurrent writer won the race for the composite key
        await session.rollback()
        log.info(
            "membership.conflict",
            organization_id=str(organization_id),
            user_id=str(user_id),
        )
        raise ConflictError("User is already a member of this organization")

    log.info(
        "membership.created",
        organization_id=str(organization_id),
        user_id=str(user_id),
        role=role.value,
    )
    return membership


async def add_member(
    session: AsyncSession,
    organization_id: uuid.UUID,
    user_id: uuid.UUID,
    role: Role,
) -> Membership:
    """Admin-driven add of an existing user to an organization."""
    if await session.get(User, user_id) is None:
        raise NotFoundError("User", user_id)
    return await create_membership(session, organization_id, user_id, role)


async def list_memberships_for_user(
    session: AsyncSession, user_id: uuid.UUID
) -> list[Membership]:
    result = await session.execute(
        select(Membership).where(Membership.user_id == user_id)
    )
    return list(result.scalars().all())


async def list_members(
    session: AsyncSession, organization_id: uuid.UUID
) -> list[Membership]:
    """All memberships of an org, oldest first."""
    result = await session.execute(
        select(Membership)
        .where(Membership.organization_id == organization_id)
        .order_by(Membership.created_at.asc())
    )
    return list(result.scalars().all())
