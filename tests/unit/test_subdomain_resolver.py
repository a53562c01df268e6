"""
Unit tests for the identity resolver.
"""
import random
import re
from unittest.mock import AsyncMock, MagicMock

import pytest

from sitebuilder.core.exceptions import ExhaustedError
from sitebuilder.services.subdomain_resolver import MAX_SUBDOMAIN_LENGTH, SubdomainResolver

SUBDOMAIN_RE = re.compile(r"^[a-z0-9-]{3,30}$")


def _site_service(*taken_results):
    service = MagicMock()
    if taken_results:
        service.subdomain_exists = AsyncMock(side_effect=list(taken_results))
    else:
        service.subdomain_exists = AsyncMock(return_value=True)
    return service


class TestCandidate:
    """Test candidate name generation."""

    def test_first_attempt_is_exact(self):
        resolver = SubdomainResolver(_site_service(), rng=random.Random(1))
        assert resolver.candidate("luxury-pet-hotel", 0) == "luxury-pet-hotel"

    def test_suffixed_candidate(self):
        resolver = SubdomainResolver(_site_service(), rng=random.Random(1))

        name = resolver.candidate("luxury-pet-hotel", 1)

        assert re.fullmatch(r"luxury-pet-hotel-\d{4}", name)

    def test_long_name_is_truncated(self):
        resolver = SubdomainResolver(_site_service(), rng=random.Random(1))

        name = resolver.candidate("a" * 30, 3)

        assert len(name) == MAX_SUBDOMAIN_LENGTH
        assert SUBDOMAIN_RE.match(name)

    def test_truncation_does_not_leave_double_hyphen(self):
        resolver = SubdomainResolver(_site_service(), rng=random.Random(1))
        requested = "abcdefghijklmnopqrstuvwx-zzzzz"

        name = resolver.candidate(requested, 1)

        assert "--" not in name
        assert name.startswith("abcdefghijklmnopqrstuvwx-")
        assert SUBDOMAIN_RE.match(name)


class TestResolve:
    """Test bounded collision resolution."""

    @pytest.mark.asyncio
    async def test_free_name_is_used(self):
        service = _site_service(False)
        resolver = SubdomainResolver(service)

        assert await resolver.resolve("luxury-pet-hotel") == "luxury-pet-hotel"
        assert service.subdomain_exists.await_count == 1

    @pytest.mark.asyncio
    async def test_collision_gets_suffix(self):
        service = _site_service(True, False)
        resolver = SubdomainResolver(service, rng=random.Random(4821))

        name = await resolver.resolve("luxury-pet-hotel")

        assert name.startswith("luxury-pet-hotel-")
        assert SUBDOMAIN_RE.match(name)
        assert service.subdomain_exists.await_count == 2

    @pytest.mark.asyncio
    async def test_always_taken_exhausts_after_ten_probes(self):
        service = _site_service()
        resolver = SubdomainResolver(service)

        with pytest.raises(ExhaustedError) as exc_info:
            await resolver.resolve("luxury-pet-hotel")

        assert service.subdomain_exists.await_count == 10
        assert exc_info.value.details == {"requested": "luxury-pet-hotel", "attempts": 10}
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_custom_attempt_bound(self):
        service = _site_service()
        resolver = SubdomainResolver(service, max_attempts=3)

        with pytest.raises(ExhaustedError):
            await resolver.resolve("luxury-pet-hotel")

        assert service.subdomain_exists.await_count == 3

    @pytest.mark.asyncio
    async def test_excluded_name_skipped_without_probe(self):
        service = MagicMock()
        service.subdomain_exists = AsyncMock(return_value=False)
        resolver = SubdomainResolver(service, rng=random.Random(2))

        name = await resolver.resolve("luxury-pet-hotel", exclude={"luxury-pet-hotel"})

        assert name != "luxury-pet-hotel"
        assert name.startswith("luxury-pet-hotel-")
        assert service.subdomain_exists.await_count == 1
