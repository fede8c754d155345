from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect.api.deps import get_current_identity, get_db_session
from campus_connect.models.identity import Identity
from campus_connect.schemas.post import DeleteResult
from campus_connect.services import comment_service

router = APIRouter(prefix="/api/comments", tags=["Comments"])


@router.delete("/{comment_id}", response_model=DeleteResult)
async def delete_comment(
    comment_id: UUID,
    current: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_db_session),
):
    outcome = await comment_service.delete_comment(session, current, comment_id)
    return DeleteResult(id=comment_id, outcome=outcome)
