from pydantic import BaseModel
from uuid import UUID
from typing import Any, Dict, Optional
from datetime import datetime

from campus_connect.schemas.identity import IdentityRead


class ApprovalActionResponse(BaseModel):
    id: UUID
    action: str    # "approve" | "reject" | "revoke"
    outcome: str   # "approved" | "already_approved" | "rejected" | "already_gone" | "revoked" | "already_pending"
    identity: Optional[IdentityRead] = None


class AuditEntryRead(BaseModel):
    id: UUID
    actor_id: Optional[UUID] = None
    actor_role: Optional[str] = None
    actor_name: Optional[str] = None
    action: str
    target_id: Optional[UUID] = None
    details: Dict[str, Any] = {}
    timestamp: datetime

    class Config:
        from_attributes = True
