# campus_connect/api/endpoints/account.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect.api.deps import get_db_session, get_session_context
from campus_connect.schemas.auth import ChangePasswordRequest
from campus_connect.services import auth_service
from campus_connect.services.identity_service import SessionContext

router = APIRouter(prefix="/api/account", tags=["Account"])


@router.post("/change-password")
async def change_password(
    payload: ChangePasswordRequest,
    context: SessionContext = Depends(get_session_context),
    session: AsyncSession = Depends(get_db_session)
):
    account = await auth_service.get_account_by_id(session, context.account_id)
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")

    await auth_service.update_password(
        session, account, payload.new_password, payload.confirm_password
    )
    return {"detail": "Password changed successfully"}
