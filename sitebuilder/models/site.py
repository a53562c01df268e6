"""
Site model for tenant-owned generated websites.
"""
from sqlalchemy import Boolean, Column, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import relationship

from sitebuilder.models.base import Base, BaseModel


class Site(Base, BaseModel):
    """Site served under a globally unique subdomain."""

    __tablename__ = "sites"

    tenant_id = Column(
        UUID(as_uuid=True),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    # Uniqueness here is the authoritative collision signal for subdomain races
    subdomain = Column(String(63), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    industry = Column(String(255), nullable=True)
    styles = Column(JSONB, default=dict)
    navigation = Column(JSONB, default=list)
    is_published = Column(Boolean, default=False, nullable=False)
    is_template = Column(Boolean, default=False, nullable=False)

    # Relationships
    tenant = relationship("Tenant", back_populates="sites")
    pages = relationship("Page", back_populates="site", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Site {self.name} ({self.subdomain})>"
