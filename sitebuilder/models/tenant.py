"""
Tenant model for multi-tenancy.
"""
from enum import Enum as PyEnum

from sqlalchemy import Column, Enum, String
from sqlalchemy.orm import relationship

from sitebuilder.models.base import Base, BaseModel


class TenantStatus(str, PyEnum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class Tenant(Base, BaseModel):
    """Tenant model representing a workspace that owns sites."""

    __tablename__ = "tenants"

    name = Column(String(255), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=True)
    status = Column(
        Enum(TenantStatus),
        default=TenantStatus.ACTIVE,
        nullable=False,
    )
    plan = Column(String(50), default="free")

    # Relationships
    users = relationship("User", back_populates="tenant")
    sites = relationship("Site", back_populates="tenant", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Tenant {self.name} ({self.slug})>"
