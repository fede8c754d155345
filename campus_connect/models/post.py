# campus_connect/models/post.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy import Enum as PGEnum
from datetime import datetime
import uuid
from typing import Optional

from campus_connect.core.constants import Department
from campus_connect.models.account import utcnow
from campus_connect.models.enums import PostStatus, PostType, enum_values


class Post(SQLModel, table=True):
    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint(
            "(type = 'event' AND event_date IS NOT NULL) OR "
            "(type <> 'event' AND event_date IS NULL)",
            name="ck_posts_event_date_matches_type",
        ),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid, primary_key=True)
    )

    title: str = Field(sa_column=Column(String(255), nullable=False))
    content: str = Field(sa_column=Column(Text, nullable=False))

    type: PostType = Field(
        default=PostType.Announcement,
        sa_column=Column(
            PGEnum(PostType, name="post_type", values_callable=enum_values),
            nullable=False,
        )
    )

    event_date: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    department: Department = Field(
        sa_column=Column(
            PGEnum(Department, name="department_code", values_callable=enum_values),
            nullable=False,
            index=True,
        )
    )

    author_id: uuid.UUID = Field(
        sa_column=Column(Uuid, ForeignKey("identities.id"), nullable=False, index=True)
    )

    status: PostStatus = Field(
        default=PostStatus.Active,
        sa_column=Column(
            PGEnum(PostStatus, name="post_status", values_callable=enum_values),
            nullable=False,
            index=True,
        )
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )

    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
