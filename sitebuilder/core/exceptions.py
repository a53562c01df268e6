"""
Typed failures of the site-generation pipeline.

Stages raise these; ``SiteGenerationPipeline.generate_site`` converts them into
a ``PipelineResult`` so no exception crosses the pipeline boundary. The HTTP
status codes are only consulted by the API layer.
"""
from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    UNAUTHORIZED = "UNAUTHORIZED"
    GENERATION_UNAVAILABLE = "GENERATION_UNAVAILABLE"
    NO_JSON_BOUNDARY = "NO_JSON_BOUNDARY"
    PARSE_FAILED = "PARSE_FAILED"
    MISSING_COMPONENTS = "MISSING_COMPONENTS"
    INVALID_COMPONENTS_TYPE = "INVALID_COMPONENTS_TYPE"
    MISSING_HERO = "MISSING_HERO"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    SUBDOMAIN_EXHAUSTED = "SUBDOMAIN_EXHAUSTED"
    PERSIST_ERROR = "PERSIST_ERROR"


class PipelineError(Exception):
    """Base class for every failure kind the pipeline can report."""

    code: ErrorCode = ErrorCode.VALIDATION_ERROR
    status_code: int = 422
    retryable: bool = False
    default_message: str = "Site generation failed"

    def __init__(self, message: str | None = None, **details: Any):
        self.message = message or self.default_message
        self.details = {k: v for k, v in details.items() if v is not None}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
            "retryable": self.retryable,
        }
        if self.details:
            payload["details"] = self.details
        return {"error": payload}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.code.value}: {self.message}>"


class Unauthorized(PipelineError):
    code = ErrorCode.UNAUTHORIZED
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized - please sign in"


class GenerationUnavailable(PipelineError):
    code = ErrorCode.GENERATION_UNAVAILABLE
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True
    default_message = "The content generator is unavailable, please try again"


class NoJsonBoundary(PipelineError):
    code = ErrorCode.NO_JSON_BOUNDARY
    status_code = status.HTTP_502_BAD_GATEWAY
    retryable = True
    default_message = "No JSON document found in the generated response, try regenerating the site"


class ParseFailed(PipelineError):
    code = ErrorCode.PARSE_FAILED
    status_code = status.HTTP_502_BAD_GATEWAY
    retryable = True
    default_message = "The generated response is malformed JSON, try regenerating the site"

    def __init__(self, message: str | None = None, *, offset: int | None = None, **details: Any):
        super().__init__(message, offset=offset, **details)
        self.offset = offset


class DocumentValidationError(PipelineError):
    """A field of the generated document violates the site schema."""

    code = ErrorCode.VALIDATION_ERROR
    default_message = "The generated document failed schema validation"

    def __init__(self, message: str | None = None, *, field: str | None = None, **details: Any):
        super().__init__(message, field=field, **details)
        self.field = field


class MissingComponents(DocumentValidationError):
    code = ErrorCode.MISSING_COMPONENTS
    default_message = "Missing required 'components' array"


class InvalidComponentsType(DocumentValidationError):
    code = ErrorCode.INVALID_COMPONENTS_TYPE
    default_message = "'components' must be an array"


class MissingHero(DocumentValidationError):
    code = ErrorCode.MISSING_HERO
    default_message = "The first component must be a hero section"


class ExhaustedError(PipelineError):
    code = ErrorCode.SUBDOMAIN_EXHAUSTED
    status_code = status.HTTP_409_CONFLICT
    retryable = True
    default_message = "Could not find a free subdomain, please choose one manually"


class PersistError(PipelineError):
    code = ErrorCode.PERSIST_ERROR
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Could not save the generated site"
