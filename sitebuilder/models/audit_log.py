"""
Append-only audit trail.
"""
from enum import Enum as PyEnum

from sqlalchemy import Column, String
from sqlalchemy.dialects.postgresql import JSONB, UUID

from sitebuilder.models.base import Base, BaseModel


class AuditAction(str, PyEnum):
    AI_SITE_GENERATED = "AI_SITE_GENERATED"


class AuditLog(Base, BaseModel):
    """Immutable record of an action taken by an actor on a target."""

    __tablename__ = "audit_logs"

    actor_id = Column(UUID(as_uuid=True), nullable=True, index=True)
    actor_email = Column(String(255), nullable=False)
    action = Column(String(100), nullable=False, index=True)
    target_id = Column(UUID(as_uuid=True), nullable=True, index=True)
    target_type = Column(String(50), nullable=False)
    # "metadata" is reserved on declarative classes
    details = Column("metadata", JSONB, default=dict)

    def __repr__(self) -> str:
        return f"<AuditLog {self.action} {self.target_type}:{self.target_id}>"
