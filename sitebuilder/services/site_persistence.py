"""
Persistence orchestrator: stores a generated site as one atomic unit.

The tenant is found-or-created first and committed on its own. The site, its
home page and the audit record are then written in a single transaction; any
failure rolls all three back. A unique violation on the subdomain means a
concurrent request won the name, so resolution and the write are retried.
"""
import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sitebuilder.config import settings
from sitebuilder.core.exceptions import ExhaustedError, PersistError
from sitebuilder.core.retry import AttemptsExhausted, attempt_async
from sitebuilder.models.audit_log import AuditAction, AuditLog
from sitebuilder.models.page import Page
from sitebuilder.models.site import Site
from sitebuilder.models.user import User
from sitebuilder.schemas.site_spec import SiteSpec, TransformedBlock
from sitebuilder.services.site_service import SiteService
from sitebuilder.services.subdomain_resolver import SubdomainResolver
from sitebuilder.services.tenant_service import TenantService

logger = logging.getLogger(__name__)

DEFAULT_NAVIGATION = [
    {"label": "Home", "href": "/"},
    {"label": "About", "href": "#about"},
    {"label": "Contact", "href": "#contact"},
]

HOME_PAGE_NAME = "Home"
HOME_PAGE_PATH = "/"


def default_styles(primary_color: str | None) -> dict[str, str]:
    return {
        "primary": primary_color or settings.DEFAULT_PRIMARY_COLOR,
        "background": "#ffffff",
        "foreground": "#000000",
        "muted": "#f1f5f9",
        "mutedForeground": "#64748b",
        "fontHeading": "Inter",
        "fontBody": "Inter",
        "radius": "0.5",
    }


def is_subdomain_conflict(exc: IntegrityError) -> bool:
    return "subdomain" in str(exc.orig).lower()


class SubdomainConflict(Exception):
    """The datastore rejected a subdomain another request committed first."""


@dataclass
class CommitResult:
    site_id: UUID
    subdomain: str


class SitePersistenceService:
    """Writes tenant, site, home page and audit record for a generated site."""

    def __init__(
        self,
        db: AsyncSession,
        resolver: SubdomainResolver | None = None,
        max_attempts: int | None = None,
    ):
        self.db = db
        self.tenants = TenantService(db)
        self.resolver = resolver or SubdomainResolver(SiteService(db))
        self.max_attempts = max_attempts or settings.SUBDOMAIN_MAX_ATTEMPTS

    def _build_site(self, spec: SiteSpec, tenant_id: UUID, subdomain: str) -> Site:
        return Site(
            tenant_id=tenant_id,
            name=spec.name,
            subdomain=subdomain,
            description=spec.description,
            industry=spec.industry,
            styles=default_styles(spec.primary_color),
            navigation=[dict(item) for item in DEFAULT_NAVIGATION],
            is_published=True,
            is_template=False,
        )

    def _build_home_page(self, site: Site, blocks: list[TransformedBlock]) -> Page:
        return Page(
            site_id=site.id,
            name=HOME_PAGE_NAME,
            slug=HOME_PAGE_PATH,
            path=HOME_PAGE_PATH,
            draft_content=[b.model_dump() for b in blocks],
            published_content=[b.model_dump() for b in blocks],
            is_published=True,
            is_home_page=True,
        )

    def _build_audit_entry(
        self,
        site: Site,
        actor_id: UUID,
        actor_email: str,
        metadata: dict[str, Any],
    ) -> AuditLog:
        return AuditLog(
            actor_id=actor_id,
            actor_email=actor_email,
            action=AuditAction.AI_SITE_GENERATED.value,
            target_id=site.id,
            target_type="Site",
            details=metadata,
        )

    async def _write_unit(
        self,
        spec: SiteSpec,
        blocks: list[TransformedBlock],
        subdomain: str,
        tenant_id: UUID,
        actor_id: UUID,
        actor_email: str,
        prompt: str,
    ) -> UUID:
        """Site, home page and audit entry in one transaction."""
        site = self._build_site(spec, tenant_id, subdomain)
        self.db.add(site)
        await self.db.flush()
        site_id = site.id

        self.db.add(self._build_home_page(site, blocks))
        await self.db.flush()

        self.db.add(
            self._build_audit_entry(
                site,
                actor_id,
                actor_email,
                {
                    "prompt": prompt,
                    "industry": spec.industry,
                    "componentCount": len(blocks),
                },
            )
        )
        await self.db.commit()
        return site_id

    async def commit(
        self,
        spec: SiteSpec,
        blocks: list[TransformedBlock],
        actor: User,
        prompt: str,
    ) -> CommitResult:
        """Persist a generated site. Raises ``PersistError`` or ``ExhaustedError``."""
        try:
            tenant = await self.tenants.ensure_for_user(actor)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception("Tenant preparation failed")
            raise PersistError(f"Could not prepare workspace: {e}") from e

        # Rollbacks expire ORM instances; keep plain values for the retry loop
        tenant_id = tenant.id
        actor_id = actor.id
        actor_email = actor.email
        lost: set[str] = set()

        async def _write(n: int) -> CommitResult:
            try:
                subdomain = await self.resolver.resolve(spec.subdomain, exclude=lost)
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.exception("Subdomain lookup failed")
                raise PersistError(f"Database error: {e}") from e
            logger.info(f"Saving site '{spec.name}' as '{subdomain}' with {len(blocks)} blocks")
            try:
                site_id = await self._write_unit(
                    spec, blocks, subdomain, tenant_id, actor_id, actor_email, prompt
                )
            except IntegrityError as e:
                await self.db.rollback()
                if not is_subdomain_conflict(e):
                    logger.exception("Site write violated a constraint")
                    raise PersistError(f"Database error: {e.orig}") from e
                logger.warning(f"Subdomain '{subdomain}' was taken concurrently, resolving again")
                lost.add(subdomain)
                raise SubdomainConflict(subdomain) from e
            except Exception as e:
                await self.db.rollback()
                logger.exception("Site write failed, rolled back")
                raise PersistError(f"Database error: {e}") from e
            return CommitResult(site_id=site_id, subdomain=subdomain)

        try:
            result = await attempt_async(_write, self.max_attempts, retry_on=(SubdomainConflict,))
        except AttemptsExhausted as e:
            raise ExhaustedError(requested=spec.subdomain, attempts=e.attempts) from e.last_error

        logger.info(f"Site created: {result.site_id} ({result.subdomain})")
        return result
