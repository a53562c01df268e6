"""
Site generation request/response schemas.
"""
from uuid import UUID

from sitebuilder.schemas.common import BaseSchema


class GenerateSiteRequest(BaseSchema):
    """Generate a site from a free-text business description.

    Length bounds are enforced by the pipeline so violations come back in the
    same error envelope as every other generation failure.
    """

    prompt_text: str


class GenerateSiteResponse(BaseSchema):
    """Identity of the newly created site."""

    site_id: UUID
    subdomain: str
