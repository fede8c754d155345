from typing import Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel

from campus_connect.core.constants import Department
from campus_connect.models.enums import ApprovalState, IdentityRole


# ---------------------------------------------------------
# READ IDENTITY (response)
# ---------------------------------------------------------
class IdentityRead(BaseModel):
    id: UUID
    name: str
    email: str
    department: Department
    role: IdentityRole
    is_approved: Optional[bool] = None
    approval_state: Optional[ApprovalState] = None
    approved_by: Optional[UUID] = None
    approved_at: Optional[datetime] = None
    profile_picture: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


# ---------------------------------------------------------
# AUTHOR SNAPSHOT (embedded in posts and comments)
# ---------------------------------------------------------
class AuthorSummary(BaseModel):
    id: UUID
    name: str
    department: Department
    role: IdentityRole
    profile_picture: Optional[str] = None

    class Config:
        from_attributes = True


# ---------------------------------------------------------
# UPDATE PROFILE (self-service)
# ---------------------------------------------------------
class ProfileUpdate(BaseModel):
    name: str
