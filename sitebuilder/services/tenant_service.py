"""
Tenant service: find-or-create the workspace that owns a user's sites.
"""
import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sitebuilder.models.tenant import Tenant
from sitebuilder.models.user import User

logger = logging.getLogger(__name__)


def tenant_slug_for(user: User) -> str:
    """Stable slug derived from the user's identifier."""
    return f"user-{user.id.hex[:8]}"


class TenantService:
    """Service for tenant operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, tenant_id: UUID) -> Tenant | None:
        """Get tenant by ID."""
        result = await self.db.execute(
            select(Tenant).where(Tenant.id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def get_by_slug(self, slug: str) -> Tenant | None:
        """Get tenant by slug."""
        result = await self.db.execute(
            select(Tenant).where(Tenant.slug == slug)
        )
        return result.scalar_one_or_none()

    async def ensure_for_user(self, user: User) -> Tenant:
        """Return the user's tenant, creating and committing one if missing.

        Safe to repeat: the slug is derived from the user id, so a retry or a
        concurrent request finds the same row instead of creating a second one.
        """
        if user.tenant_id:
            tenant = await self.get_by_id(user.tenant_id)
            if tenant:
                return tenant

        slug = tenant_slug_for(user)
        tenant = await self.get_by_slug(slug)

        if tenant is None:
            logger.info(f"Creating tenant {slug} for user {user.email}")
            tenant = Tenant(
                name=user.display_name,
                slug=slug,
                email=user.email,
            )
            self.db.add(tenant)
            try:
                await self.db.flush()
            except IntegrityError:
                # Lost the race to a concurrent request for the same user
                await self.db.rollback()
                await self.db.refresh(user)
                tenant = await self.get_by_slug(slug)
                if tenant is None:
                    raise

        user.tenant_id = tenant.id
        await self.db.commit()
        return tenant
