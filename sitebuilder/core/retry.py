"""
Bounded retry combinator.

``fn`` receives the zero-based attempt number so callers can vary the work per
attempt (a repair pass, a new candidate name). Only the exception types in
``retry_on`` trigger another attempt; anything else propagates immediately.
"""
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AttemptsExhausted(Exception):
    """Raised when every attempt failed with a retryable error."""

    def __init__(self, attempts: int, errors: list[BaseException]):
        self.attempts = attempts
        self.errors = errors
        super().__init__(f"Gave up after {attempts} attempts")

    @property
    def first_error(self) -> BaseException | None:
        return self.errors[0] if self.errors else None

    @property
    def last_error(self) -> BaseException | None:
        return self.errors[-1] if self.errors else None


def attempt(
    fn: Callable[[int], T],
    max_attempts: int,
    *,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
) -> T:
    """Call ``fn`` until it returns, at most ``max_attempts`` times."""
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    errors: list[BaseException] = []
    for n in range(max_attempts):
        try:
            return fn(n)
        except retry_on as e:
            errors.append(e)
            logger.debug(f"Attempt {n + 1}/{max_attempts} failed: {e}")
    raise AttemptsExhausted(max_attempts, errors)


async def attempt_async(
    fn: Callable[[int], Awaitable[T]],
    max_attempts: int,
    *,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
) -> T:
    """Async twin of :func:`attempt`."""
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    errors: list[BaseException] = []
    for n in range(max_attempts):
        try:
            return await fn(n)
        except retry_on as e:
            errors.append(e)
            logger.debug(f"Attempt {n + 1}/{max_attempts} failed: {e}")
    raise AttemptsExhausted(max_attempts, errors)
