"""
Pydantic schemas for SiteBuilder.
"""
from sitebuilder.schemas.common import BaseSchema, StrictSchema, ErrorDetail, ErrorResponse
from sitebuilder.schemas.generation import GenerateSiteRequest, GenerateSiteResponse
from sitebuilder.schemas.site_spec import (
    ComponentSpec,
    COMPONENT_VARIANTS,
    HeroComponent,
    FeaturesComponent,
    PricingComponent,
    TestimonialsComponent,
    FaqComponent,
    ContactComponent,
    TextComponent,
    GalleryComponent,
    PassthroughComponent,
    SiteMetadata,
    SiteSpec,
    TransformedBlock,
)

__all__ = [
    "BaseSchema",
    "StrictSchema",
    "ErrorDetail",
    "ErrorResponse",
    "GenerateSiteRequest",
    "GenerateSiteResponse",
    "ComponentSpec",
    "COMPONENT_VARIANTS",
    "HeroComponent",
    "FeaturesComponent",
    "PricingComponent",
    "TestimonialsComponent",
    "FaqComponent",
    "ContactComponent",
    "TextComponent",
    "GalleryComponent",
    "PassthroughComponent",
    "SiteMetadata",
    "SiteSpec",
    "TransformedBlock",
]
