"""
AI site generation endpoint.
"""
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from sitebuilder.core.deps import DbSession, OptionalUser, TextGeneratorDep
from sitebuilder.schemas.common import ErrorResponse
from sitebuilder.schemas.generation import GenerateSiteRequest, GenerateSiteResponse
from sitebuilder.services.generation_pipeline import SiteGenerationPipeline

router = APIRouter(prefix="/sites", tags=["Generation"])


@router.post(
    "/generate",
    response_model=GenerateSiteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def generate_site(
    data: GenerateSiteRequest,
    current_user: OptionalUser,
    db: DbSession,
    generator: TextGeneratorDep,
):
    """Generate a landing page from a business description and save it."""
    pipeline = SiteGenerationPipeline(db, generator)
    result = await pipeline.generate_site(data.prompt_text, current_user)

    if not result.success:
        return JSONResponse(
            status_code=result.error.status_code,
            content=result.error.to_dict(),
        )

    return GenerateSiteResponse(site_id=result.site_id, subdomain=result.subdomain)
