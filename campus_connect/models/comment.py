from sqlmodel import SQLModel, Field, Column
from sqlalchemy import DateTime, ForeignKey, Text, Uuid
from datetime import datetime
import uuid

from campus_connect.models.account import utcnow


class Comment(SQLModel, table=True):
    __tablename__ = "comments"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid, primary_key=True)
    )

    post_id: uuid.UUID = Field(
        sa_column=Column(Uuid, ForeignKey("posts.id"), nullable=False, index=True)
    )

    user_id: uuid.UUID = Field(
        sa_column=Column(Uuid, ForeignKey("identities.id"), nullable=False, index=True)
    )

    content: str = Field(sa_column=Column(Text, nullable=False))

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
