"""
Identity resolution and authorization for Exercise Planner.

Supports:
- Identity: a signed session JWT (issued by the external session provider)
  read from the Authorization header or the session cookie; ``sub`` is the user id
- Authorization gateway: (user, organization, required role) -> Membership or denial
- Role-based FastAPI dependencies for org-scoped routes
"""

from __future__ import annotations

import uuid
from typing import Optional

import jwt
import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from planner_server.core.config import get_settings
from planner_server.core.database import get_session
from planner_server.core.errors import (
    InsufficientRoleError,
    NotAMemberError,
    UnauthenticatedError,
)
from planner_server.core.logging import bind_request_context
from planner_server.models.membership import Membership
from planner_server.models.user import User
from planner_server.services import memberships as membership_service
from planner_shared.schemas.common import Role

log = structlog.get_logger()
settings = get_settings()

bearer_scheme = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def decode_jwt(token: str) -> dict:
    """Decode and verify a session JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub", "exp"]},
    )


def _subject_to_user_id(payload: dict) -> uuid.UUID:
    try:
        return uuid.UUID(str(payload["sub"]))
    except (KeyError, ValueError):
        raise UnauthenticatedError("Invalid session subject")


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------

class Identity:
    """A verified caller. Only the user id matters to authorization."""

    def __init__(self, user: User):
        self.user = user
        self.user_id = user.id


def _extract_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    if credentials and credentials.scheme.lower() == "bearer":
        return credentials.credentials.strip()
    return request.cookies.get(settings.session_cookie_name)


async def get_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_session),
) -> Identity:
    """Resolve the caller. Fails with Unauthenticated, never with Forbidden."""
    token = _extract_token(request, credentials)
    if not token:
        raise UnauthenticatedError()

    try:
        payload = decode_jwt(token)
    except jwt.PyJWTError:
        raise UnauthenticatedError("Invalid or expired session")

    user_id = _subject_to_user_id(payload)
    user = await session.get(User, user_id)
    if not user:
        raise UnauthenticatedError("User not found")

    bind_request_context(user_id=str(user_id))
    request.state.identity = Identity(user)
    return request.state.identity


# ---------------------------------------------------------------------------
# Authorization gateway
# ---------------------------------------------------------------------------

async def authorize(
    session: AsyncSession,
    user_id: uuid.UUID,
    organization_id: uuid.UUID,
    required_role: Role = Role.MEMBER,
) -> Membership:
    """Resolve (user, organization) to a Membership that satisfies ``required_role``.

    Every tenant-scoped read or write goes through here before touching
    organization, level or exercise data.
    """
    membership = await membership_service.find_membership(session, organization_id, user_id)
    if membership is None:
        log.info(
            "authz.denied",
            reason="not_a_member",
            user_id=str(user_id),
            organization_id=str(organization_id),
        )
        raise NotAMemberError()

    if required_role == Role.ADMIN and membership.role != Role.ADMIN:
        log.info(
            "authz.denied",
            reason="insufficient_role",
            user_id=str(user_id),
            organization_id=str(organization_id),
            role=membership.role.value,
        )
        raise InsufficientRoleError()

    return membership


class AuthorizedMember:
    """Container for an authenticated caller + their membership in one org."""

    def __init__(self, identity: Identity, membership: Membership):
        self.identity = identity
        self.membership = membership
        self.user_id = identity.user_id
        self.organization_id = membership.organization_id
        self.role = membership.role


# ---------------------------------------------------------------------------
# Authorization dependencies (role checks for /organizations/{organization_id}/...)
# ---------------------------------------------------------------------------

async def require_member(
    organization_id: uuid.UUID,
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
) -> AuthorizedMember:
    """Any org member can access this endpoint."""
    membership = await authorize(session, identity.user_id, organization_id, Role.MEMBER)
    return AuthorizedMember(identity, membership)


async def require_admin(
    organization_id: uuid.UUID,
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_session),
) -> AuthorizedMember:
    """Requires the ADMIN role in the org."""
    membership = await authorize(session, identity.user_id, organization_id, Role.ADMIN)
    return AuthorizedMember(identity, membership)
