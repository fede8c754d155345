# campus_connect/api/deps.py

from typing import AsyncGenerator, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect.core.database import get_session
from campus_connect.models.enums import IdentityRole
from campus_connect.models.identity import Identity
from campus_connect.services.identity_service import SessionContext, current_session


# ------------------------------------------------------------
# HTTP Bearer Authentication
# ------------------------------------------------------------
bearer_scheme = HTTPBearer(auto_error=False)


# ------------------------------------------------------------
# DB Session
# ------------------------------------------------------------
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


# ------------------------------------------------------------
# Session context from the bearer token (re-runs the approval gate)
# ------------------------------------------------------------
async def get_session_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> SessionContext:

    if credentials is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Not authenticated")

    context = await current_session(session, credentials.credentials)
    if context is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Could not validate credentials")

    return context


async def get_current_identity(
    context: SessionContext = Depends(get_session_context),
) -> Identity:
    return context.identity


# ------------------------------------------------------------
# Role-based access control
# ------------------------------------------------------------
def role_required(*allowed_roles: IdentityRole):
    """
    Enforces that the caller's tier is one of the allowed roles.
    Services re-check department scope themselves.
    """
    allowed = set(allowed_roles)

    async def checker(current: Identity = Depends(get_current_identity)) -> Identity:
        if current.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied for role '{current.role.value}'"
            )
        return current

    return checker


# ------------------------------------------------------------
# Exposed dependencies for routers
# ------------------------------------------------------------
require_super_admin = role_required(IdentityRole.SuperAdmin)
require_admin = role_required(IdentityRole.Admin)
