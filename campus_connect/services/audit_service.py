# campus_connect/services/audit_service.py

from typing import Optional, Dict, Any

from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect.models.audit import AuditLog
from campus_connect.models.identity import Identity


def record_action(
    session: AsyncSession,
    actor: Identity,
    action: str,
    target: Identity,
    details: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """
    Stages an audit entry on the caller's session so it commits (or
    rolls back) together with the action it describes.
    """
    entry = AuditLog(
        actor_id=actor.id,
        actor_role=actor.role.value,
        actor_name=actor.name,
        action=action,
        target_id=target.id,
        details={
            "department": target.department.value,
            "target_role": target.role.value,
            "target_email": target.email,
            **(details or {}),
        },
    )
    session.add(entry)
    return entry


async def list_actions_for(session: AsyncSession, target_id) -> list[AuditLog]:
    result = await session.execute(
        select(AuditLog)
        .where(AuditLog.target_id == target_id)
        .order_by(AuditLog.timestamp.asc())
    )
    return result.scalars().all()
