"""
API v1 Router

Org-scoped endpoints are prefixed with /organizations/{organization_id}.
Level endpoints are addressed by level id; the org is read from the level.
"""

from fastapi import APIRouter

from planner_shared.schemas.common import ErrorResponse

from . import exercises, levels, members
from .organizations import router_global as orgs_global_router
from .organizations import router_scoped as orgs_scoped_router

router = APIRouter(
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not a member or insufficient role"},
    }
)

# Organization routes (non-org-scoped: list, create)
router.include_router(orgs_global_router)

# Organization routes (org-scoped: detail, root levels, forest)
router.include_router(
    orgs_scoped_router, prefix="/organizations/{organization_id}", tags=["Organizations"]
)

# Resource routers
router.include_router(
    exercises.router, prefix="/organizations/{organization_id}/exercises", tags=["Exercises"]
)
router.include_router(
    members.router, prefix="/organizations/{organization_id}/members", tags=["Members"]
)
router.include_router(levels.router, prefix="/levels", tags=["Levels"])


@router.get("/", tags=["API"])
async def api_root():
    """API root: returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/organizations",
            "/organizations/{organization_id}",
            "/organizations/{organization_id}/levels",
            "/organizations/{organization_id}/levels/tree",
            "/organizations/{organization_id}/exercises",
            "/organizations/{organization_id}/members",
            "/levels",
            "/levels/{level_id}",
        ],
    }
