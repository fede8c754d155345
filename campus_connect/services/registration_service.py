# campus_connect/services/registration_service.py

from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from loguru import logger

from campus_connect.core.constants import (
    MIN_PASSWORD_LENGTH,
    Department,
    expected_role_email,
)
from campus_connect.core.exceptions import (
    AuthError,
    DuplicateRoleError,
    EmailConventionError,
    ValidationError,
)
from campus_connect.models.enums import IdentityRole
from campus_connect.models.identity import Identity
from campus_connect.schemas.auth import SignUpRequest
from campus_connect.services import auth_service


ROLE_TITLES = {
    IdentityRole.Admin: "Admin",
    IdentityRole.SuperAdmin: "Program Head",
}


@dataclass
class Registration:
    identity: Identity
    verification_token: str


def _parse_department(value) -> Department:
    raw = value.value if isinstance(value, Department) else str(value or "")
    try:
        return Department(raw.strip().upper())
    except ValueError:
        allowed = ", ".join(d.value for d in Department)
        raise ValidationError(f"Unknown department '{value}'. Allowed: {allowed}")


# ------------------------------------------------------------
# PURE VALIDATION (no storage access)
# ------------------------------------------------------------
def validate_registration(data: SignUpRequest) -> Department:
    if not data.name.strip() or not data.email.strip() or not data.password or not data.confirm_password:
        raise ValidationError("All fields are required")

    try:
        validate_email(data.email.strip(), check_deliverability=False)
    except EmailNotValidError:
        raise ValidationError("Please enter a valid email address")

    if data.password != data.confirm_password:
        raise ValidationError("Passwords do not match")

    if len(data.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    department = _parse_department(data.department)

    expected = expected_role_email(data.role, department)
    if expected is not None and data.email.strip().lower() != expected:
        raise EmailConventionError(
            f"{ROLE_TITLES[data.role]} email must be {expected} for {department.value} department"
        )

    return department


async def get_department_head(
    session: AsyncSession, role: IdentityRole, department: Department
) -> Identity | None:
    result = await session.execute(
        select(Identity).where(
            (Identity.role == role) & (Identity.department == department)
        )
    )
    return result.scalars().first()


def _duplicate_role_error(role: IdentityRole, department: Department) -> DuplicateRoleError:
    article = "An" if role == IdentityRole.Admin else "A"
    return DuplicateRoleError(
        f"{article} {ROLE_TITLES[role]} for {department.value} already exists"
    )


# ------------------------------------------------------------
# REGISTER ACCOUNT + PROFILE
# ------------------------------------------------------------
async def register(session: AsyncSession, data: SignUpRequest) -> Registration:
    department = validate_registration(data)

    # Friendly early answer. The unique index below is what actually
    # guarantees one admin / one super_admin per department.
    if data.role in ROLE_TITLES:
        if await get_department_head(session, data.role, department):
            raise _duplicate_role_error(data.role, department)

    if await auth_service.get_account_by_email(session, data.email):
        raise AuthError("User already registered")

    account = auth_service.sign_up(session, data.email, data.password)

    identity = Identity(
        id=account.id,
        name=data.name.strip(),
        email=account.email,
        department=department,
        role=data.role,
        is_approved=False if data.role != IdentityRole.SuperAdmin else None,
    )
    session.add(identity)

    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        msg = str(e.orig).lower()

        if "department" in msg:
            logger.warning(f"Concurrent {data.role.value} registration lost for {department.value}")
            raise _duplicate_role_error(data.role, department)
        if "email" in msg:
            raise AuthError("User already registered")

        raise

    await session.refresh(identity)
    logger.info(f"Registered {identity.role.value} {identity.email} ({department.value})")

    return Registration(
        identity=identity,
        verification_token=auth_service.issue_email_verification_token(account),
    )
