# campus_connect/api/endpoints/profile.py

from fastapi import APIRouter, Depends, File, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect.api.deps import get_current_identity, get_db_session
from campus_connect.core.rate_limiter import limiter
from campus_connect.models.identity import Identity
from campus_connect.schemas.identity import IdentityRead, ProfileUpdate
from campus_connect.services import profile_service

router = APIRouter(prefix="/api/profile", tags=["Profile"])


@router.get("", response_model=IdentityRead)
async def my_profile(current: Identity = Depends(get_current_identity)):
    return IdentityRead.model_validate(current)


@router.put("", response_model=IdentityRead)
async def update_my_profile(
    data: ProfileUpdate,
    current: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_db_session),
):
    return IdentityRead.model_validate(await profile_service.update_profile(session, current, data.name))


# ----------------------------------------------------------------
# PROFILE PICTURE (Protected with Rate Limit)
# ----------------------------------------------------------------
@router.post("/picture", response_model=IdentityRead)
@limiter.limit("5/minute")
async def upload_picture(
    request: Request,
    file: UploadFile = File(...),
    current: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_db_session),
):
    """
    JPG, PNG or GIF up to 2MB. The previous picture is removed from
    storage once the new one is stored.
    """
    content = await file.read()
    identity = await profile_service.upload_profile_picture(
        session, current, file.filename, file.content_type, content
    )
    return IdentityRead.model_validate(identity)


@router.delete("/picture", response_model=IdentityRead)
async def remove_picture(
    current: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_db_session),
):
    return IdentityRead.model_validate(await profile_service.remove_profile_picture(session, current))
