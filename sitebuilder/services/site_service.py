"""
Site service for datastore lookups.
"""
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sitebuilder.models.site import Site


class SiteService:
    """Service for site operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, site_id: UUID, tenant_id: UUID | None = None) -> Site | None:
        """Get site by ID with its pages, optionally filtering by tenant."""
        query = select(Site).options(selectinload(Site.pages)).where(Site.id == site_id)
        if tenant_id:
            query = query.where(Site.tenant_id == tenant_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_subdomain(self, subdomain: str) -> Site | None:
        """Get site by its globally unique subdomain."""
        result = await self.db.execute(
            select(Site).where(Site.subdomain == subdomain)
        )
        return result.scalar_one_or_none()

    async def subdomain_exists(self, subdomain: str) -> bool:
        """Check whether a subdomain is already taken."""
        result = await self.db.execute(
            select(Site.id).where(Site.subdomain == subdomain).limit(1)
        )
        return result.scalar_one_or_none() is not None
