# campus_connect/services/profile_service.py

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from campus_connect.core import storage
from campus_connect.core.config import settings
from campus_connect.core.constants import ALLOWED_IMAGE_PREFIX
from campus_connect.core.exceptions import StorageError, ValidationError
from campus_connect.models.identity import Identity


async def update_profile(session: AsyncSession, identity: Identity, name: str) -> Identity:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name is required")

    identity.name = name
    session.add(identity)
    await session.commit()
    await session.refresh(identity)
    return identity


def validate_picture(content_type: str | None, size: int) -> None:
    if not content_type or not content_type.startswith(ALLOWED_IMAGE_PREFIX):
        raise ValidationError("Please upload an image file")

    if size > settings.MAX_PROFILE_PICTURE_BYTES:
        limit_mb = settings.MAX_PROFILE_PICTURE_BYTES // (1024 * 1024)
        raise ValidationError(f"Image size must be less than {limit_mb}MB")


async def _remove_old_picture(old_url: str | None) -> None:
    if not old_url:
        return
    old_path = storage.object_path_from_url(old_url)
    try:
        await run_in_threadpool(storage.remove, old_path)
    except StorageError:
        # Orphaned object; the profile already points at the new picture
        logger.warning(f"Could not remove old profile picture {old_path}")


async def upload_profile_picture(
    session: AsyncSession,
    identity: Identity,
    filename: str,
    content_type: str | None,
    content: bytes,
) -> Identity:
    """
    Checks type and size before anything reaches storage. The old
    object is removed only after the new URL is committed, so a failed
    upload leaves the current picture untouched.
    """
    validate_picture(content_type, len(content))
    old_url = identity.profile_picture

    path = storage.build_object_path(identity.id, filename)
    public_url = await run_in_threadpool(storage.upload, path, content, content_type)

    identity.profile_picture = public_url
    session.add(identity)
    await session.commit()
    await session.refresh(identity)

    await _remove_old_picture(old_url)
    logger.info(f"Profile picture updated for {identity.email}")
    return identity


async def remove_profile_picture(session: AsyncSession, identity: Identity) -> Identity:
    if not identity.profile_picture:
        return identity

    old_path = storage.object_path_from_url(identity.profile_picture)
    await run_in_threadpool(storage.remove, old_path)

    identity.profile_picture = None
    session.add(identity)
    await session.commit()
    await session.refresh(identity)
    return identity
