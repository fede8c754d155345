from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from typing import Optional

from campus_connect.schemas.identity import AuthorSummary


class CommentCreate(BaseModel):
    content: str


class CommentRead(BaseModel):
    id: UUID
    post_id: UUID
    user_id: UUID
    content: str
    created_at: datetime
    author: Optional[AuthorSummary] = None

    class Config:
        from_attributes = True
