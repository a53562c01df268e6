"""
Core utilities for SiteBuilder.
"""
from sitebuilder.core.exceptions import (
    ErrorCode,
    PipelineError,
    Unauthorized,
    GenerationUnavailable,
    NoJsonBoundary,
    ParseFailed,
    DocumentValidationError,
    MissingComponents,
    InvalidComponentsType,
    MissingHero,
    ExhaustedError,
    PersistError,
)
from sitebuilder.core.retry import AttemptsExhausted, attempt, attempt_async

__all__ = [
    "ErrorCode",
    "PipelineError",
    "Unauthorized",
    "GenerationUnavailable",
    "NoJsonBoundary",
    "ParseFailed",
    "DocumentValidationError",
    "MissingComponents",
    "InvalidComponentsType",
    "MissingHero",
    "ExhaustedError",
    "PersistError",
    "AttemptsExhausted",
    "attempt",
    "attempt_async",
]
