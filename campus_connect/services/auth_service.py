# campus_connect/services/auth_service.py
"""
Identity provider: accounts, password sign-in, bearer sessions,
sign-out, password change and email verification.

Profiles (tiers) live in `identities`; this module only knows about
credentials.
"""

from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger
import jwt
import uuid

from campus_connect.core.config import settings
from campus_connect.core.constants import MIN_PASSWORD_LENGTH
from campus_connect.core.exceptions import AuthError, ValidationError
from campus_connect.core.security import (
    VERIFY_EMAIL_PURPOSE,
    create_access_token,
    create_email_verification_token,
    decode_token,
    hash_password,
    verify_password,
)
from campus_connect.models.account import Account, utcnow


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


# ============================================================================
# FETCH ACCOUNT
# ============================================================================
async def get_account_by_email(session: AsyncSession, email: str) -> Account | None:
    result = await session.execute(
        select(Account).where(Account.email == normalize_email(email))
    )
    return result.scalar_one_or_none()


async def get_account_by_id(session: AsyncSession, account_id) -> Account | None:
    if not isinstance(account_id, uuid.UUID):
        try:
            account_id = uuid.UUID(str(account_id))
        except ValueError:
            return None
    return await session.get(Account, account_id)


# ============================================================================
# SIGN UP
# ============================================================================
def sign_up(session: AsyncSession, email: str, password: str) -> Account:
    """
    Stages a new account on the session. The caller commits, so the
    account and its profile row land in one transaction.
    """
    account = Account(
        id=uuid.uuid4(),
        email=normalize_email(email),
        password_hash=hash_password(password),
        email_verified_at=None if settings.REQUIRE_EMAIL_VERIFICATION else utcnow(),
    )
    session.add(account)
    return account


def issue_email_verification_token(account: Account) -> str:
    return create_email_verification_token(account.id)


async def verify_email(session: AsyncSession, token: str) -> Account:
    try:
        payload = decode_token(token, purpose=VERIFY_EMAIL_PURPOSE)
    except jwt.InvalidTokenError:
        raise AuthError("Verification link is invalid or has expired")

    account = await get_account_by_id(session, payload.get("sub"))
    if not account:
        raise AuthError("Verification link is invalid or has expired")

    if account.email_verified_at is None:
        account.email_verified_at = utcnow()
        session.add(account)
        await session.commit()
        await session.refresh(account)
        logger.info(f"Email verified for account {account.id}")

    return account


# ============================================================================
# SIGN IN
# ============================================================================
def issue_session_token(account: Account, data: dict | None = None) -> str:
    claims = {"ver": account.token_version}
    if data:
        claims.update(data)
    return create_access_token(subject=str(account.id), data=claims)


async def sign_in_with_password(session: AsyncSession, email: str, password: str) -> tuple[Account, str]:
    if not (email or "").strip() or not password:
        raise ValidationError("Please enter both email and password")

    account = await get_account_by_email(session, email)
    if not account or not verify_password(password, account.password_hash):
        raise AuthError("Invalid login credentials")

    if settings.REQUIRE_EMAIL_VERIFICATION and account.email_verified_at is None:
        raise AuthError("Email not confirmed")

    return account, issue_session_token(account)


# ============================================================================
# CURRENT SESSION
# ============================================================================
async def get_session(session: AsyncSession, token: str | None) -> Account | None:
    """
    Returns the account a bearer token belongs to, or None when the
    token is missing, invalid, expired, or was issued before sign-out.
    """
    if not token:
        return None

    try:
        payload = decode_token(token)
    except jwt.InvalidTokenError:
        return None

    account = await get_account_by_id(session, payload.get("sub"))
    if not account or payload.get("ver") != account.token_version:
        return None

    return account


# ============================================================================
# SIGN OUT
# ============================================================================
async def sign_out(session: AsyncSession, account: Account) -> None:
    account.token_version += 1
    session.add(account)
    await session.commit()
    logger.debug(f"Signed out account {account.id}")


# ============================================================================
# PASSWORD CHANGE
# ============================================================================
async def update_password(
    session: AsyncSession,
    account: Account,
    new_password: str,
    confirm_password: str,
) -> None:
    if not new_password or not confirm_password:
        raise ValidationError("Please fill in all password fields")

    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if new_password != confirm_password:
        raise ValidationError("Passwords do not match")

    account.password_hash = hash_password(new_password)
    session.add(account)
    await session.commit()
    logger.info(f"Password changed for account {account.id}")


# ============================================================================
# DELETE ACCOUNT
# ============================================================================
async def delete_account(session: AsyncSession, account_id: uuid.UUID) -> None:
    # No commit: used inside the rejection cascade
    account = await get_account_by_id(session, account_id)
    if account:
        await session.delete(account)
