# campus_connect/services/comment_service.py

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from campus_connect.core.exceptions import NotFoundError, ScopeError, ValidationError
from campus_connect.models.comment import Comment
from campus_connect.models.enums import IdentityRole
from campus_connect.models.identity import Identity
from campus_connect.services.post_service import get_post, get_visible_post


@dataclass
class CommentListing:
    comment: Comment
    author: Optional[Identity] = None


async def list_comments(session: AsyncSession, actor: Identity, post_id) -> list[CommentListing]:
    listing = await get_visible_post(session, actor, post_id)

    result = await session.execute(
        select(Comment, Identity)
        .join(Identity, Identity.id == Comment.user_id, isouter=True)
        .where(Comment.post_id == listing.post.id)
        .order_by(Comment.created_at.asc())
    )
    return [CommentListing(comment=c, author=a) for c, a in result.all()]


async def add_comment(session: AsyncSession, actor: Identity, post_id, content: str) -> CommentListing:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Comment cannot be empty")

    listing = await get_visible_post(session, actor, post_id)

    comment = Comment(post_id=listing.post.id, user_id=actor.id, content=content)
    session.add(comment)
    await session.commit()
    await session.refresh(comment)

    logger.debug(f"{actor.email} commented on post {listing.post.id}")
    return CommentListing(comment=comment, author=actor)


async def delete_comment(session: AsyncSession, actor: Identity, comment_id) -> str:
    """
    Allowed for the comment's author, the post's author, or the
    Program Head of the post's department.
    """
    try:
        comment_uuid = comment_id if isinstance(comment_id, UUID) else UUID(str(comment_id))
    except ValueError:
        raise NotFoundError("Comment not found")

    comment = await session.get(Comment, comment_uuid)
    if comment is None:
        return "already_gone"

    post = await get_post(session, comment.post_id)
    allowed = (
        comment.user_id == actor.id
        or (post is not None and post.author_id == actor.id)
        or (
            post is not None
            and actor.role == IdentityRole.SuperAdmin
            and post.department == actor.department
        )
    )
    if not allowed:
        raise ScopeError("You are not allowed to delete this comment")

    await session.delete(comment)
    await session.commit()
    return "deleted"
