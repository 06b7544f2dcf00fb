"""
Organization API endpoints.

GET    /api/v1/organizations                               — List orgs for authenticated user
POST   /api/v1/organizations                               — Create an org (creator becomes ADMIN)
GET    /api/v1/organizations/{organization_id}             — Org detail, all levels, caller's role
GET    /api/v1/organizations/{organization_id}/levels      — Root levels (by name)
GET    /api/v1/organizations/{organization_id}/levels/tree — Nested level forest
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from planner_server.core.auth import (
    AuthorizedMember,
    Identity,
    get_identity,
    require_member,
)
from planner_server.core.database import get_session
from planner_server.core.level_tree import build_level_forest
from planner_server.services import levels as level_service
from planner_server.services import organizations as org_service
from planner_shared.schemas.levels import LevelNode, LevelRead
from planner_shared.schemas.organizations import (
    OrgCreateRequest,
    OrgDetailResponse,
    OrgResponse,
)

# ---------------------------------------------------------------------------
# Non-org-scoped routes (no organization_id in path)
# ---------------------------------------------------------------------------
router_global = APIRouter()


@router_global.get("/organizations", response_model=List[OrgResponse], tags=["Organizations"])
async def list_organizations(
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """List orgs the authenticated user belongs to."""
    return await org_service.list_user_organizations(session, identity.user_id)


@router_global.post(
    "/organizations", response_model=OrgResponse, status_code=201, tags=["Organizations"]
)
async def create_organization(
    body: OrgCreateRequest,
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
):
    """Create a new organization. The creator becomes its first ADMIN."""
    org = await org_service.create_organization(session, body.name, identity.user_id)
    # committed before the response is built
    await session.commit()
    await session.refresh(org)
    return org


# ---------------------------------------------------------------------------
# Org-scoped routes (organization_id in path)
# ---------------------------------------------------------------------------
router_scoped = APIRouter()


@router_scoped.get("", response_model=OrgDetailResponse)
async def get_organization(
    auth: AuthorizedMember = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """Get org details with every level (oldest first) and the caller's role."""
    org = await org_service.get_organization(session, auth.organization_id)
    levels = await level_service.list_levels(session, org.id)
    return OrgDetailResponse(
        id=org.id,
        name=org.name,
        owner_id=org.owner_id,
        created_at=org.created_at,
        levels=[LevelRead.model_validate(level) for level in levels],
        role=auth.role,
    )


@router_scoped.get("/levels", response_model=List[LevelRead])
async def list_root_levels(
    auth: AuthorizedMember = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """Top-level view: levels without a parent, ordered by name."""
    return await level_service.list_root_levels(session, auth.organization_id)


@router_scoped.get("/levels/tree", response_model=List[LevelNode])
async def get_level_forest(
    auth: AuthorizedMember = Depends(require_member),
    session: AsyncSession = Depends(get_session),
):
    """All levels nested under their parents."""
    levels = await level_service.list_levels(session, auth.organization_id)
    return build_level_forest(levels)
