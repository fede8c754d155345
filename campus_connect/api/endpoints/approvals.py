from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect.api.deps import get_db_session, require_super_admin
from campus_connect.models.enums import IdentityRole
from campus_connect.models.identity import Identity
from campus_connect.schemas.approval import ApprovalActionResponse, AuditEntryRead
from campus_connect.schemas.identity import IdentityRead
from campus_connect.services import approval_service
from campus_connect.services.approval_service import ApprovalResult
from campus_connect.services.email_service import send_account_approved_email

router = APIRouter(
    prefix="/api/approvals",
    tags=["Approvals"]
)


def to_response(result: ApprovalResult) -> ApprovalActionResponse:
    return ApprovalActionResponse(
        id=result.id,
        action=result.action,
        outcome=result.outcome,
        identity=IdentityRead.model_validate(result.identity) if result.identity else None,
    )


# ===================================================================
# LIST PENDING / APPROVED ACCOUNTS OF MY DEPARTMENT
# ===================================================================
@router.get("/pending", response_model=List[IdentityRead])
async def list_pending(
    role: Optional[IdentityRole] = Query(None),
    current: Identity = Depends(require_super_admin),
    session: AsyncSession = Depends(get_db_session),
):
    profiles = await approval_service.list_profiles(session, current, approved=False, role=role)
    return [IdentityRead.model_validate(p) for p in profiles]


@router.get("/approved", response_model=List[IdentityRead])
async def list_approved(
    role: Optional[IdentityRole] = Query(None),
    current: Identity = Depends(require_super_admin),
    session: AsyncSession = Depends(get_db_session),
):
    profiles = await approval_service.list_profiles(session, current, approved=True, role=role)
    return [IdentityRead.model_validate(p) for p in profiles]


# ===================================================================
# TRANSITIONS
# ===================================================================
@router.post("/{profile_id}/approve", response_model=ApprovalActionResponse)
async def approve_profile(
    profile_id: UUID,
    background_tasks: BackgroundTasks,
    current: Identity = Depends(require_super_admin),
    session: AsyncSession = Depends(get_db_session),
):
    result = await approval_service.approve(session, current, profile_id)

    if result.outcome == "approved":
        background_tasks.add_task(send_account_approved_email, {
            "name": result.identity.name,
            "email": result.identity.email,
            "department": result.identity.department.value,
            "approver_name": current.name,
        })

    return to_response(result)


@router.post("/{profile_id}/reject", response_model=ApprovalActionResponse)
async def reject_profile(
    profile_id: UUID,
    current: Identity = Depends(require_super_admin),
    session: AsyncSession = Depends(get_db_session),
):
    return to_response(await approval_service.reject(session, current, profile_id))


@router.post("/{profile_id}/revoke", response_model=ApprovalActionResponse)
async def revoke_profile(
    profile_id: UUID,
    current: Identity = Depends(require_super_admin),
    session: AsyncSession = Depends(get_db_session),
):
    return to_response(await approval_service.revoke(session, current, profile_id))


# ===================================================================
# AUDIT TRAIL OF ONE PROFILE
# ===================================================================
@router.get("/{profile_id}/history", response_model=List[AuditEntryRead])
async def profile_history(
    profile_id: UUID,
    current: Identity = Depends(require_super_admin),
    session: AsyncSession = Depends(get_db_session),
):
    return await approval_service.profile_history(session, current, profile_id)
