"""
Membership endpoints.

GET    /api/v1/organizations/{organization_id}/members  — List members
POST   /api/v1/organizations/{organization_id}/members  — Add an existing user (Admin only)

Role changes and removals are not offered.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from planner_server.core.auth import AuthorizedMember, require_admin, require_member
from planner_server.core.database import get_session
from planner_server.services import memberships as membership_service
from planner_shared.schemas.members import MemberAddRequest, MemberRead

router = APIRouter()


@router.get("", response_model=List[MemberRead])
async def list_members(
    auth: AuthorizedMember = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """List all members of the org with their roles."""
    return await membership_service.list_members(session, auth.organization_id)


@router.post("", response_model=MemberRead, status_code=201)
async def add_member(
    body: MemberAddRequest,
    auth: AuthorizedMember = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    """Add a user to the org (Admin only). An existing membership is a conflict."""
    membership = await membership_service.add_member(
        session, auth.organization_id, body.user_id, body.role
    )
    await session.commit()
    await session.refresh(membership)
    return membership
