# campus_connect/services/identity_service.py

from dataclasses import dataclass
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from campus_connect.core.config import settings
from campus_connect.core.constants import DASHBOARD_HOME, SUPER_ADMIN_HOME
from campus_connect.core.exceptions import ApprovalPendingError, NotFoundError
from campus_connect.models.account import Account
from campus_connect.models.enums import IdentityRole
from campus_connect.models.identity import Identity
from campus_connect.services import auth_service

PENDING_APPROVAL_MESSAGE = "Your account is pending approval from your Program Head"
ACCOUNT_NOT_FOUND_MESSAGE = "Account not found. Please sign up first."


@dataclass
class SessionContext:
    """Everything an operation needs to know about who is calling."""

    token: str
    account_id: uuid.UUID
    identity: Identity

    @property
    def role(self) -> IdentityRole:
        return self.identity.role

    @property
    def redirect_to(self) -> str:
        return landing_route(self.identity)


def landing_route(identity: Identity) -> str:
    if identity.role == IdentityRole.SuperAdmin:
        return SUPER_ADMIN_HOME
    return DASHBOARD_HOME


# ============================================================================
# RESOLVE TIER
# ============================================================================
async def resolve_identity(session: AsyncSession, account_id) -> Identity | None:
    if not isinstance(account_id, uuid.UUID):
        try:
            account_id = uuid.UUID(str(account_id))
        except ValueError:
            return None
    return await session.get(Identity, account_id)


async def admit(session: AsyncSession, account: Account, token: str) -> SessionContext:
    """
    Approval gate. Any refusal signs the account out before raising,
    so no half-authenticated token survives.
    """
    identity = await resolve_identity(session, account.id)

    if identity is None:
        await auth_service.sign_out(session, account)
        logger.warning(f"Login refused for {account.email}: no profile")
        raise NotFoundError(ACCOUNT_NOT_FOUND_MESSAGE)

    if not identity.is_admitted:
        await auth_service.sign_out(session, account)
        logger.warning(f"Login refused for {account.email}: pending approval")
        raise ApprovalPendingError(PENDING_APPROVAL_MESSAGE)

    return SessionContext(token=token, account_id=account.id, identity=identity)


# ============================================================================
# LOGIN
# ============================================================================
async def establish_session(session: AsyncSession, email: str, password: str) -> SessionContext:
    account, token = await auth_service.sign_in_with_password(session, email, password)
    context = await admit(session, account, token)
    logger.info(f"Session established for {account.email} as {context.role.value}")
    return context


async def current_session(session: AsyncSession, token: str | None) -> SessionContext | None:
    """
    Re-runs the gate for an already issued token. Returns None when
    the token itself is dead; raises when the profile is gone or was
    revoked since the token was issued.
    """
    account = await auth_service.get_session(session, token)
    if account is None:
        return None
    return await admit(session, account, token)


def session_expires_in() -> int:
    return settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
