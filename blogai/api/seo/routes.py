"""SEO metadata recommendation and validation endpoints."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from blogai.api.dependencies import SeoRecommender, SeoValidator
from blogai.api.errors import result_response
from blogai.schemas.result import ServiceResult
from blogai.schemas.seo import SEOValidationRequest, SeoRecommendationRequest

router = APIRouter()


@router.post(
    "/recommend",
    summary="Recommend SEO metadata",
    description=(
        "Generate a meta title, description, keywords, Open Graph tags and a slug for a post, "
        "each with a locally computed confidence score."
    ),
)
async def recommend_metadata(
    request: SeoRecommendationRequest,
    recommender: SeoRecommender,
) -> JSONResponse:
    result = await recommender.recommend_metadata(request)
    return result_response(result)


@router.post(
    "/validate",
    summary="Validate SEO",
    description=(
        "Score content structure and metadata, combined with a qualitative model audit. "
        "A failed audit falls back to default scores instead of failing the request."
    ),
)
async def validate_seo(request: SEOValidationRequest, validator: SeoValidator) -> JSONResponse:
    verdict = await validator.validate_seo(request)
    return result_response(ServiceResult.ok(verdict))
