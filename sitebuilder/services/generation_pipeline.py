"""
Site generation pipeline: prompt in, persisted site or typed failure out.

    prompt -> generator -> sanitize -> validate -> transform -> resolve + commit

``generate_site`` is the only operation exposed to callers. Every failure is
reported through ``PipelineResult.error``; exceptions never escape it.
"""
import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from sitebuilder.config import settings
from sitebuilder.core.exceptions import DocumentValidationError, PipelineError, Unauthorized
from sitebuilder.integrations.llm import TextGenerator
from sitebuilder.models.user import User
from sitebuilder.services import block_transformer, sanitizer, structure_validator
from sitebuilder.services.site_persistence import SitePersistenceService

logger = logging.getLogger(__name__)

PROMPT_LOG_PREVIEW = 80


@dataclass
class PipelineResult:
    success: bool
    site_id: UUID | None = None
    subdomain: str | None = None
    error: PipelineError | None = None

    @classmethod
    def ok(cls, site_id: UUID, subdomain: str) -> "PipelineResult":
        return cls(success=True, site_id=site_id, subdomain=subdomain)

    @classmethod
    def failure(cls, error: PipelineError) -> "PipelineResult":
        return cls(success=False, error=error)


def check_prompt(prompt_text: str) -> str:
    text = (prompt_text or "").strip()
    if not settings.PROMPT_MIN_LENGTH <= len(text) <= settings.PROMPT_MAX_LENGTH:
        raise DocumentValidationError(
            f"Prompt must be between {settings.PROMPT_MIN_LENGTH} and "
            f"{settings.PROMPT_MAX_LENGTH} characters",
            field="promptText",
            length=len(text),
        )
    return text


class SiteGenerationPipeline:
    """Runs one generation request through every stage."""

    def __init__(
        self,
        db: AsyncSession,
        generator: TextGenerator,
        persistence: SitePersistenceService | None = None,
    ):
        self.db = db
        self.generator = generator
        self.persistence = persistence or SitePersistenceService(db)

    async def _run(self, prompt_text: str, actor: User | None) -> PipelineResult:
        if actor is None:
            raise Unauthorized()

        prompt = check_prompt(prompt_text)
        logger.info(f"Generating site for {actor.email}: {prompt[:PROMPT_LOG_PREVIEW]!r}")

        raw = await self.generator.generate(prompt, response_format_hint="json")
        logger.info(f"Generator returned {len(raw or '')} chars")

        cleaned = sanitizer.sanitize(raw)
        spec = structure_validator.validate(cleaned)
        blocks = block_transformer.transform(spec.components)

        saved = await self.persistence.commit(spec, blocks, actor, prompt)
        return PipelineResult.ok(saved.site_id, saved.subdomain)

    async def generate_site(self, prompt_text: str, actor: User | None) -> PipelineResult:
        """Generate and persist a site from a natural-language prompt."""
        try:
            result = await self._run(prompt_text, actor)
        except PipelineError as e:
            logger.warning(f"Site generation failed: {e.code.value}: {e.message}")
            return PipelineResult.failure(e)

        logger.info(f"Site generation succeeded: {result.subdomain}")
        return result
