"""
Common Pydantic schemas used across the API.
"""
from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class StrictSchema(BaseModel):
    """Schema for untrusted generated documents: no type coercion, camelCase aliases."""

    model_config = ConfigDict(
        strict=True,
        populate_by_name=True,
    )


class ErrorDetail(BaseSchema):
    code: str
    message: str
    retryable: bool = False
    details: dict | None = None


class ErrorResponse(BaseSchema):
    """Error envelope returned for any failed request."""

    error: ErrorDetail
