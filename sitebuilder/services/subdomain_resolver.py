"""
Identity resolver: picks a free, URL-safe subdomain for a new site.

The probe is advisory only. Two requests can both see a name as free; the
unique constraint on ``sites.subdomain`` decides at commit time and the
persistence service resolves again when it loses.
"""
import logging
import random
from typing import Iterable

from sitebuilder.config import settings
from sitebuilder.core.exceptions import ExhaustedError
from sitebuilder.core.retry import AttemptsExhausted, attempt_async
from sitebuilder.services.site_service import SiteService

logger = logging.getLogger(__name__)

MAX_SUBDOMAIN_LENGTH = 30
FALLBACK_BASE = "site"


class SubdomainTaken(Exception):
    """A candidate subdomain is already in use."""

    def __init__(self, subdomain: str):
        self.subdomain = subdomain
        super().__init__(f"Subdomain '{subdomain}' is taken")


class SubdomainResolver:
    """Bounded collision resolution by random numeric suffix."""

    def __init__(
        self,
        site_service: SiteService,
        max_attempts: int | None = None,
        suffix_digits: int | None = None,
        rng: random.Random | None = None,
    ):
        self.site_service = site_service
        self.max_attempts = max_attempts or settings.SUBDOMAIN_MAX_ATTEMPTS
        self.suffix_digits = suffix_digits or settings.SUBDOMAIN_SUFFIX_DIGITS
        self.rng = rng or random.Random()

    def _suffix(self) -> str:
        low = 10 ** (self.suffix_digits - 1)
        return str(self.rng.randrange(low, low * 10))

    def candidate(self, requested: str, attempt_number: int) -> str:
        """The exact name first, then ``<base>-<digits>`` trimmed to stay within 30 chars."""
        if attempt_number == 0:
            return requested
        suffix = self._suffix()
        base = requested[:MAX_SUBDOMAIN_LENGTH - len(suffix) - 1].strip("-") or FALLBACK_BASE
        return f"{base}-{suffix}"

    async def resolve(self, requested: str, exclude: Iterable[str] = ()) -> str:
        """Return a subdomain that is free right now.

        ``exclude`` lists names known to be taken even if the probe disagrees
        (a write that just lost a race). Raises ``ExhaustedError`` after
        ``max_attempts`` probes.
        """
        excluded = set(exclude)

        async def _probe(n: int) -> str:
            name = self.candidate(requested, n)
            if name in excluded or await self.site_service.subdomain_exists(name):
                logger.info(f"Subdomain collision on '{name}' (attempt {n + 1}/{self.max_attempts})")
                raise SubdomainTaken(name)
            return name

        try:
            subdomain = await attempt_async(_probe, self.max_attempts, retry_on=(SubdomainTaken,))
        except AttemptsExhausted as e:
            logger.warning(f"No free subdomain for '{requested}' after {e.attempts} attempts")
            raise ExhaustedError(requested=requested, attempts=e.attempts) from e

        if subdomain != requested:
            logger.info(f"Subdomain '{requested}' taken, using '{subdomain}'")
        return subdomain
