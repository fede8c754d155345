# campus_connect/models/account.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import DateTime, Integer, String, Uuid
from datetime import datetime, timezone
import uuid
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(SQLModel, table=True):
    """Credentials owned by the identity provider, not by the profile store."""

    __tablename__ = "accounts"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid, primary_key=True)
    )

    email: str = Field(
        sa_column=Column(String, nullable=False, unique=True, index=True)
    )
    password_hash: str = Field(sa_column=Column(String, nullable=False))

    # Bumped on sign-out; tokens carrying an older version are dead
    token_version: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0)
    )

    email_verified_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
