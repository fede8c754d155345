# campus_connect/services/approval_service.py

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from campus_connect.core.exceptions import NotFoundError, ScopeError, ValidationError
from campus_connect.models.account import utcnow
from campus_connect.models.comment import Comment
from campus_connect.models.enums import IdentityRole
from campus_connect.models.identity import Identity
from campus_connect.models.post import Post
from campus_connect.services import auth_service
from campus_connect.models.audit import AuditLog
from campus_connect.services.audit_service import list_actions_for, record_action


@dataclass
class ApprovalResult:
    id: UUID
    action: str
    outcome: str
    identity: Optional[Identity] = None


def _as_uuid(value) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise ValidationError(f"'{value}' is not a valid profile id")


def _require_program_head(actor: Identity) -> None:
    if actor.role != IdentityRole.SuperAdmin:
        raise ScopeError("Only a Program Head can manage approvals")


def _require_same_department(actor: Identity, target: Identity) -> None:
    if target.department != actor.department:
        raise ScopeError(
            f"Program Head of {actor.department.value} cannot manage "
            f"accounts in {target.department.value}"
        )


async def _load_governed_profile(session: AsyncSession, actor: Identity, profile_id) -> Identity | None:
    """Fetch the target and apply the tier and department rules."""
    _require_program_head(actor)

    target = await session.get(Identity, _as_uuid(profile_id))
    if target is None:
        return None

    _require_same_department(actor, target)

    if not target.requires_approval:
        raise ValidationError("Program Head accounts do not go through approval")

    return target


# ============================================================================
# LIST PENDING / APPROVED PROFILES OF THE ACTOR'S DEPARTMENT
# ============================================================================
async def list_profiles(
    session: AsyncSession,
    actor: Identity,
    approved: bool,
    role: IdentityRole | None = None,
) -> list[Identity]:
    _require_program_head(actor)

    query = select(Identity).where(
        (Identity.department == actor.department)
        & (Identity.role != IdentityRole.SuperAdmin)
        & (Identity.is_approved == approved)
    )

    if role is not None:
        query = query.where(Identity.role == role)

    if approved:
        query = query.order_by(Identity.approved_at.desc())
    else:
        query = query.order_by(Identity.created_at.desc())

    result = await session.execute(query)
    return result.scalars().all()


# ============================================================================
# APPROVE: PENDING -> APPROVED
# ============================================================================
async def approve(session: AsyncSession, actor: Identity, profile_id) -> ApprovalResult:
    target = await _load_governed_profile(session, actor, profile_id)
    if target is None:
        raise NotFoundError("Profile not found")

    if target.is_approved:
        return ApprovalResult(target.id, "approve", "already_approved", target)

    target.is_approved = True
    target.approved_by = actor.id
    target.approved_at = utcnow()
    session.add(target)

    record_action(session, actor, "approve", target)
    await session.commit()
    await session.refresh(target)

    logger.success(f"{actor.email} approved {target.role.value} {target.email}")
    return ApprovalResult(target.id, "approve", "approved", target)


# ============================================================================
# REVOKE: APPROVED -> PENDING
# ============================================================================
async def revoke(session: AsyncSession, actor: Identity, profile_id) -> ApprovalResult:
    target = await _load_governed_profile(session, actor, profile_id)
    if target is None:
        raise NotFoundError("Profile not found")

    if not target.is_approved:
        return ApprovalResult(target.id, "revoke", "already_pending", target)

    target.is_approved = False
    target.approved_by = None
    target.approved_at = None
    session.add(target)

    record_action(session, actor, "revoke", target)
    await session.commit()
    await session.refresh(target)

    logger.info(f"{actor.email} revoked approval for {target.email}")
    return ApprovalResult(target.id, "revoke", "revoked", target)


# ============================================================================
# REJECT: PENDING -> DELETED (profile, account and everything they wrote)
# ============================================================================
async def reject(session: AsyncSession, actor: Identity, profile_id) -> ApprovalResult:
    profile_uuid = _as_uuid(profile_id)
    target = await _load_governed_profile(session, actor, profile_uuid)

    # Retried after success: the row is already gone
    if target is None:
        return ApprovalResult(profile_uuid, "reject", "already_gone")

    if target.is_approved:
        raise ValidationError("Revoke approval before rejecting this account")

    record_action(session, actor, "reject", target)

    authored_posts = select(Post.id).where(Post.author_id == target.id)
    await session.execute(
        delete(Comment).where(
            (Comment.user_id == target.id) | (Comment.post_id.in_(authored_posts))
        )
    )
    await session.execute(delete(Post).where(Post.author_id == target.id))
    await session.delete(target)
    await session.flush()
    await auth_service.delete_account(session, target.id)
    await session.commit()

    logger.info(f"{actor.email} rejected and removed {target.email}")
    return ApprovalResult(profile_uuid, "reject", "rejected")


# ============================================================================
# HISTORY OF A PROFILE (survives rejection)
# ============================================================================
async def profile_history(session: AsyncSession, actor: Identity, profile_id) -> list[AuditLog]:
    _require_program_head(actor)
    profile_uuid = _as_uuid(profile_id)

    target = await session.get(Identity, profile_uuid)
    if target is not None:
        _require_same_department(actor, target)

    # Rejected profiles are gone; their entries still record the department
    entries = await list_actions_for(session, profile_uuid)
    return [e for e in entries if (e.details or {}).get("department") == actor.department.value]
