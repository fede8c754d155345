# campus_connect/services/post_service.py

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from campus_connect.core.exceptions import NotFoundError, ScopeError, ValidationError
from campus_connect.models.account import utcnow
from campus_connect.models.comment import Comment
from campus_connect.models.enums import IdentityRole, PostStatus, PostType, PostView
from campus_connect.models.identity import Identity
from campus_connect.models.post import Post
from campus_connect.schemas.post import PostCreate, PostUpdate


@dataclass
class PostListing:
    post: Post
    comment_count: int
    author: Optional[Identity] = None


def _as_uuid(value) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise NotFoundError("Post not found")


# ------------------------------------------------------------
# FIELD RULES (shared by create and edit)
# ------------------------------------------------------------
def validate_post_fields(
    title: str,
    content: str,
    post_type: PostType,
    event_date: Optional[datetime],
) -> Optional[datetime]:
    """Returns the event_date to store for the given type."""
    if not (title or "").strip() or not (content or "").strip():
        raise ValidationError("Title and content are required")

    if post_type == PostType.Event:
        if event_date is None:
            raise ValidationError("Event date is required for events")
        return event_date

    return None


# ------------------------------------------------------------
# PERMISSIONS
# ------------------------------------------------------------
def can_view(actor: Identity, post: Post) -> bool:
    if actor.role == IdentityRole.SuperAdmin:
        return True
    if actor.role == IdentityRole.Admin:
        return post.status == PostStatus.Active or post.author_id == actor.id
    return post.department == actor.department


def _require_author(actor: Identity, post: Post) -> None:
    if actor.role != IdentityRole.Admin or post.author_id != actor.id:
        raise ScopeError("Only the author can edit this post")


def _require_moderator(actor: Identity, post: Post) -> None:
    """Author, or the Program Head of the post's department."""
    if actor.role == IdentityRole.Admin and post.author_id == actor.id:
        return
    if actor.role == IdentityRole.SuperAdmin and post.department == actor.department:
        return
    raise ScopeError("You are not allowed to manage this post")


# ============================================================================
# VISIBILITY FILTER
# ============================================================================
def visible_posts_query(actor: Identity, view: PostView, status: Optional[PostStatus] = None):
    query = select(Post)

    if actor.role == IdentityRole.SuperAdmin:
        if view == PostView.Feed:
            query = query.where(Post.status == PostStatus.Active)
        elif view == PostView.Archive:
            query = query.where(Post.status == PostStatus.Archived)
        elif status is not None:
            query = query.where(Post.status == status)

    elif actor.role == IdentityRole.Admin:
        if view == PostView.Feed:
            query = query.where(Post.status == PostStatus.Active)
        elif view == PostView.Archive:
            query = query.where(
                (Post.author_id == actor.id) & (Post.status == PostStatus.Archived)
            )
        else:
            query = query.where(Post.author_id == actor.id)
            if status is not None:
                query = query.where(Post.status == status)

    else:
        if view == PostView.Manage:
            raise ScopeError("Only admins can manage posts")
        wanted = PostStatus.Archived if view == PostView.Archive else PostStatus.Active
        query = query.where(
            (Post.department == actor.department) & (Post.status == wanted)
        )

    return query.order_by(Post.created_at.desc())


async def comment_counts(session: AsyncSession, post_ids: list[UUID]) -> dict[UUID, int]:
    if not post_ids:
        return {}
    result = await session.execute(
        select(Comment.post_id, func.count(Comment.id))
        .where(Comment.post_id.in_(post_ids))
        .group_by(Comment.post_id)
    )
    return {post_id: count for post_id, count in result.all()}


async def _authors(session: AsyncSession, author_ids) -> dict[UUID, Identity]:
    ids = set(author_ids)
    if not ids:
        return {}
    result = await session.execute(select(Identity).where(Identity.id.in_(ids)))
    return {identity.id: identity for identity in result.scalars().all()}


async def list_visible_posts(
    session: AsyncSession,
    actor: Identity,
    view: PostView = PostView.Feed,
    status: Optional[PostStatus] = None,
) -> list[PostListing]:
    result = await session.execute(visible_posts_query(actor, view, status))
    posts = result.scalars().all()

    counts = await comment_counts(session, [p.id for p in posts])
    authors = await _authors(session, (p.author_id for p in posts))

    return [
        PostListing(post=p, comment_count=counts.get(p.id, 0), author=authors.get(p.author_id))
        for p in posts
    ]


# ============================================================================
# SINGLE POST
# ============================================================================
async def get_post(session: AsyncSession, post_id) -> Post | None:
    return await session.get(Post, _as_uuid(post_id))


async def get_visible_post(session: AsyncSession, actor: Identity, post_id) -> PostListing:
    post = await get_post(session, post_id)
    if post is None or not can_view(actor, post):
        raise NotFoundError("Post not found")

    counts = await comment_counts(session, [post.id])
    author = await session.get(Identity, post.author_id)
    return PostListing(post=post, comment_count=counts.get(post.id, 0), author=author)


async def _get_or_404(session: AsyncSession, post_id) -> Post:
    post = await get_post(session, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return post


# ============================================================================
# CREATE
# ============================================================================
async def create_post(session: AsyncSession, actor: Identity, data: PostCreate) -> Post:
    if actor.role != IdentityRole.Admin:
        raise ScopeError("Only admins can create posts")

    event_date = validate_post_fields(data.title, data.content, data.type, data.event_date)

    post = Post(
        title=data.title.strip(),
        content=data.content.strip(),
        type=data.type,
        event_date=event_date,
        department=actor.department,
        author_id=actor.id,
        status=PostStatus.Active,
    )
    session.add(post)
    await session.commit()
    await session.refresh(post)

    logger.info(f"{actor.email} created {post.type.value} {post.id}")
    return post


# ============================================================================
# EDIT
# ============================================================================
async def update_post(session: AsyncSession, actor: Identity, post_id, data: PostUpdate) -> Post:
    post = await _get_or_404(session, post_id)
    _require_author(actor, post)

    changes = data.model_dump(exclude_unset=True)

    title = changes.get("title", post.title)
    content = changes.get("content", post.content)
    post_type = changes.get("type") or post.type
    event_date = changes.get("event_date", post.event_date)

    post.event_date = validate_post_fields(title, content, post_type, event_date)
    post.title = title.strip()
    post.content = content.strip()
    post.type = post_type
    post.updated_at = utcnow()

    session.add(post)
    await session.commit()
    await session.refresh(post)
    return post


# ============================================================================
# ARCHIVE / RESTORE (idempotent)
# ============================================================================
async def set_status(session: AsyncSession, actor: Identity, post_id, status: PostStatus) -> Post:
    post = await _get_or_404(session, post_id)
    _require_moderator(actor, post)

    if post.status == status:
        return post

    post.status = status
    post.updated_at = utcnow()
    session.add(post)
    await session.commit()
    await session.refresh(post)

    logger.info(f"{actor.email} set post {post.id} to {status.value}")
    return post


async def archive_post(session: AsyncSession, actor: Identity, post_id) -> Post:
    return await set_status(session, actor, post_id, PostStatus.Archived)


async def restore_post(session: AsyncSession, actor: Identity, post_id) -> Post:
    return await set_status(session, actor, post_id, PostStatus.Active)


# ============================================================================
# DELETE (irreversible; retries after success are benign)
# ============================================================================
async def delete_post(session: AsyncSession, actor: Identity, post_id) -> str:
    post = await get_post(session, post_id)
    if post is None:
        return "already_gone"

    _require_moderator(actor, post)

    await session.execute(delete(Comment).where(Comment.post_id == post.id))
    await session.delete(post)
    await session.commit()

    logger.info(f"{actor.email} deleted post {post.id}")
    return "deleted"
