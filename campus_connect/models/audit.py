# campus_connect/models/audit.py

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import Optional, Dict, Any
from uuid import UUID, uuid4
from datetime import datetime

from campus_connect.models.account import utcnow


class AuditLog(SQLModel, table=True):
    __tablename__ = "audit_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    # No foreign keys: entries must outlive rejected (deleted) identities
    actor_id: Optional[UUID] = Field(default=None, index=True)
    actor_role: Optional[str] = None
    actor_name: Optional[str] = None

    action: str
    target_id: Optional[UUID] = Field(default=None, index=True)

    # e.g. {"department": "CCS", "target_role": "admin"}
    details: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    timestamp: datetime = Field(default_factory=utcnow)
