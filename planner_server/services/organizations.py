"""
Organization service: org creation (with its first admin) and lookups.
"""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from planner_server.core.errors import NotFoundError, ValidationError
from planner_server.models.membership import Membership
from planner_server.models.organization import Organization
from planner_server.services import memberships as membership_service
from planner_shared.schemas.common import Role

log = structlog.get_logger()


async def list_user_organizations(
    session: AsyncSession, user_id: uuid.UUID
) -> list[Organization]:
    """List all orgs a user belongs to (owned or joined), oldest first."""
    result = await session.execute(
        select(Organization)
        .join(Membership, Membership.organization_id == Organization.id)
        .where(Membership.user_id == user_id)
        .order_by(Organization.created_at.asc())
    )
    return list(result.scalars().all())


async def _insert_organization(
    session: AsyncSession, name: str, owner_id: uuid.UUID
) -> Organization:
    # Only called from create_organization: an org must never exist without an admin.
    org = Organization(name=name, owner_id=owner_id)
    session.add(org)
    await session.flush()
    return org


async def create_organization(
    session: AsyncSession, name: str, owner_id: uuid.UUID
) -> Organization:
    """Create an org and make the owner its first ADMIN, as one unit of work.

    Both rows are written in the caller's transaction. If the membership
    insert fails the whole transaction is rolled back by the session owner
    (``get_session``), so no org is left without an admin.
    """
    name = name.strip()
    if not name:
        raise ValidationError("Organization name is required")

    org = await _insert_organization(session, name, owner_id)
    await membership_service.create_membership(session, org.id, owner_id, Role.ADMIN)

    log.info("org.created", org_id=str(org.id), owner_id=str(owner_id))
    return org


async def get_organization(
    session: AsyncSession, organization_id: uuid.UUID
) -> Organization:
    """Get an org by id; raises NotFound if absent."""
    org = await session.get(Organization, organization_id)
    if not org:
        raise NotFoundError("Organization", organization_id)
    return org
