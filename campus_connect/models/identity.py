# campus_connect/models/identity.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Uuid, text
from sqlalchemy import Enum as PGEnum
from datetime import datetime
import uuid
from typing import Optional

from campus_connect.core.constants import Department
from campus_connect.models.account import utcnow
from campus_connect.models.enums import ApprovalState, IdentityRole, enum_values


# Only one admin and one super_admin may hold a department. The predicate is
# spelled out for both dialects so the same index guards prod and tests.
_DEPARTMENT_HEAD_PREDICATE = text("role IN ('admin', 'super_admin')")


class Identity(SQLModel, table=True):
    """
    One row per profile. `role` is the discriminant that used to be
    three separate tables (users, admins, super_admins).
    """

    __tablename__ = "identities"
    __table_args__ = (
        Index(
            "uq_identities_role_department",
            "role",
            "department",
            unique=True,
            postgresql_where=_DEPARTMENT_HEAD_PREDICATE,
            sqlite_where=_DEPARTMENT_HEAD_PREDICATE,
        ),
    )

    # Same id as the owning Account
    id: uuid.UUID = Field(
        sa_column=Column(Uuid, ForeignKey("accounts.id"), primary_key=True)
    )

    name: str = Field(sa_column=Column(String, nullable=False))
    email: str = Field(sa_column=Column(String, nullable=False))

    department: Department = Field(
        sa_column=Column(
            PGEnum(Department, name="department_code", values_callable=enum_values),
            nullable=False,
            index=True,
        )
    )

    role: IdentityRole = Field(
        sa_column=Column(
            PGEnum(IdentityRole, name="identity_role", values_callable=enum_values),
            nullable=False,
        )
    )

    # NULL for super_admin: that tier is self-activating
    is_approved: Optional[bool] = Field(
        default=None,
        sa_column=Column(Boolean, nullable=True)
    )
    approved_by: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(Uuid, nullable=True)
    )
    approved_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    profile_picture: Optional[str] = Field(
        default=None,
        sa_column=Column(String, nullable=True)
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )

    @property
    def requires_approval(self) -> bool:
        return self.role != IdentityRole.SuperAdmin

    @property
    def approval_state(self) -> Optional[ApprovalState]:
        if not self.requires_approval:
            return None
        return ApprovalState.Approved if self.is_approved else ApprovalState.Pending

    @property
    def is_admitted(self) -> bool:
        return not self.requires_approval or bool(self.is_approved)
