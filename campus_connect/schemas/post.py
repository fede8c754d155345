# campus_connect/schemas/post.py
from pydantic import BaseModel, model_validator
from typing import Optional
from uuid import UUID
from datetime import datetime

from campus_connect.core.constants import Department
from campus_connect.models.enums import PostStatus, PostType
from campus_connect.schemas.identity import AuthorSummary


# ------------------------------------------------------------
# CREATE POST (admin)
# ------------------------------------------------------------
class PostCreate(BaseModel):
    title: str
    content: str
    type: PostType = PostType.Announcement
    event_date: Optional[datetime] = None

    @model_validator(mode="after")
    def drop_date_from_announcements(self):
        """
        Announcements never carry a date, so a stale one sent along is
        dropped. A missing event date is reported by the post service.
        """
        if self.type != PostType.Event:
            self.event_date = None
        return self


# ------------------------------------------------------------
# EDIT POST (partial)
# ------------------------------------------------------------
class PostUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    type: Optional[PostType] = None
    event_date: Optional[datetime] = None


# ------------------------------------------------------------
# READ POST
# ------------------------------------------------------------
class PostRead(BaseModel):
    id: UUID
    title: str
    content: str
    type: PostType
    event_date: Optional[datetime] = None
    department: Department
    author_id: UUID
    status: PostStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PostWithStats(PostRead):
    comment_count: int = 0
    author: Optional[AuthorSummary] = None


class DeleteResult(BaseModel):
    id: UUID
    outcome: str  # "deleted" | "already_gone"
