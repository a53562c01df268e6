"""
SQLAlchemy models for SiteBuilder.
"""
from sitebuilder.models.base import Base, BaseModel
from sitebuilder.models.tenant import Tenant, TenantStatus
from sitebuilder.models.user import User, UserStatus
from sitebuilder.models.site import Site
from sitebuilder.models.page import Page
from sitebuilder.models.audit_log import AuditLog, AuditAction

__all__ = [
    "Base",
    "BaseModel",
    "Tenant",
    "TenantStatus",
    "User",
    "UserStatus",
    "Site",
    "Page",
    "AuditLog",
    "AuditAction",
]
