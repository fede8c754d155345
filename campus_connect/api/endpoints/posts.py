# campus_connect/api/endpoints/posts.py

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect.api.deps import get_current_identity, get_db_session, require_admin
from campus_connect.models.enums import PostStatus, PostView
from campus_connect.models.identity import Identity
from campus_connect.schemas.comment import CommentCreate, CommentRead
from campus_connect.schemas.identity import AuthorSummary
from campus_connect.schemas.post import (
    DeleteResult,
    PostCreate,
    PostRead,
    PostUpdate,
    PostWithStats,
)
from campus_connect.services import comment_service, post_service
from campus_connect.services.comment_service import CommentListing
from campus_connect.services.post_service import PostListing

router = APIRouter(
    prefix="/api/posts",
    tags=["Posts"]
)


def to_post_with_stats(listing: PostListing) -> PostWithStats:
    return PostWithStats(
        **PostRead.model_validate(listing.post).model_dump(),
        comment_count=listing.comment_count,
        author=AuthorSummary.model_validate(listing.author) if listing.author else None,
    )


def to_comment_read(listing: CommentListing) -> CommentRead:
    return CommentRead(
        id=listing.comment.id,
        post_id=listing.comment.post_id,
        user_id=listing.comment.user_id,
        content=listing.comment.content,
        created_at=listing.comment.created_at,
        author=AuthorSummary.model_validate(listing.author) if listing.author else None,
    )


# ------------------------------------------------------------
# FEED / ARCHIVE / MANAGE
# ------------------------------------------------------------
@router.get("", response_model=List[PostWithStats])
async def list_posts(
    view: PostView = Query(PostView.Feed),
    status_filter: Optional[PostStatus] = Query(None, alias="status"),
    current: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_db_session),
):
    listings = await post_service.list_visible_posts(session, current, view, status_filter)
    return [to_post_with_stats(item) for item in listings]


@router.post("", response_model=PostRead, status_code=status.HTTP_201_CREATED)
async def create_post(
    data: PostCreate,
    current: Identity = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    return await post_service.create_post(session, current, data)


# ------------------------------------------------------------
# SINGLE POST
# ------------------------------------------------------------
@router.get("/{post_id}", response_model=PostWithStats)
async def get_post(
    post_id: UUID,
    current: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_db_session),
):
    return to_post_with_stats(await post_service.get_visible_post(session, current, post_id))


@router.put("/{post_id}", response_model=PostRead)
async def edit_post(
    post_id: UUID,
    data: PostUpdate,
    current: Identity = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    return await post_service.update_post(session, current, post_id, data)


@router.delete("/{post_id}", response_model=DeleteResult)
async def delete_post(
    post_id: UUID,
    current: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_db_session),
):
    outcome = await post_service.delete_post(session, current, post_id)
    return DeleteResult(id=post_id, outcome=outcome)


@router.post("/{post_id}/archive", response_model=PostRead)
async def archive_post(
    post_id: UUID,
    current: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_db_session),
):
    return await post_service.archive_post(session, current, post_id)


@router.post("/{post_id}/restore", response_model=PostRead)
async def restore_post(
    post_id: UUID,
    current: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_db_session),
):
    return await post_service.restore_post(session, current, post_id)


# ------------------------------------------------------------
# COMMENTS ON A POST
# ------------------------------------------------------------
@router.get("/{post_id}/comments", response_model=List[CommentRead])
async def list_comments(
    post_id: UUID,
    current: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_db_session),
):
    return [to_comment_read(c) for c in await comment_service.list_comments(session, current, post_id)]


@router.post("/{post_id}/comments", response_model=CommentRead, status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: UUID,
    data: CommentCreate,
    current: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_db_session),
):
    return to_comment_read(await comment_service.add_comment(session, current, post_id, data.content))
