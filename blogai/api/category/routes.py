"""Category recommendation and auto-tagging endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from blogai.api.dependencies import AutoTagger, CategoryEngine
from blogai.api.errors import result_response
from blogai.schemas.category import (
    AutoTagRequest,
    CategoryEngineHealth,
    CategoryRecommendRequest,
    RecommendAndApplyRequest,
    RemoveCategoriesRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/recommend",
    summary="Recommend categories",
    description=(
        "Classify a post against the existing categories and return up to three weighted, "
        "deduplicated recommendations with a content analysis."
    ),
)
async def recommend_categories(
    request: CategoryRecommendRequest,
    engine: CategoryEngine,
) -> JSONResponse:
    result = await engine.recommend_categories(request)
    return result_response(result)


@router.post(
    "/auto-tag",
    summary="Apply categories to a post",
    description=(
        "Persist the selected categories as AI-suggested tags. Manual tags survive unless "
        "replaceExisting is set."
    ),
)
async def auto_tag(request: AutoTagRequest, auto_tagger: AutoTagger) -> JSONResponse:
    result = await auto_tagger.apply_auto_tags(request)
    return result_response(result)


@router.post(
    "/recommend-and-apply",
    summary="Recommend and optionally apply categories",
    description="Classify a stored post and, when autoApply is set, tag it with confident picks.",
)
async def recommend_and_apply(
    request: RecommendAndApplyRequest,
    auto_tagger: AutoTagger,
) -> JSONResponse:
    result = await auto_tagger.recommend_and_apply_tags(request.post_id, request.auto_apply)
    return result_response(result)


@router.get(
    "/stats",
    summary="Post category stats",
    description="Count a post's AI-suggested and manual categories and their average confidence.",
)
async def category_stats(
    auto_tagger: AutoTagger,
    post_id: Annotated[str, Query(alias="postId", min_length=1)],
) -> JSONResponse:
    result = await auto_tagger.get_post_category_stats(post_id)
    return result_response(result)


@router.post(
    "/remove",
    summary="Remove categories from a post",
    description="Delete the given associations, optionally only the AI-suggested ones.",
)
async def remove_categories(
    request: RemoveCategoriesRequest,
    auto_tagger: AutoTagger,
) -> JSONResponse:
    result = await auto_tagger.remove_post_categories(
        request.post_id,
        request.category_ids,
        request.only_ai_suggested,
    )
    return result_response(result)


@router.get(
    "/health",
    response_model=CategoryEngineHealth,
    summary="Classifier health check",
    description="Probe the classification model and report its configured limits.",
)
async def classifier_health(engine: CategoryEngine) -> JSONResponse:
    health = await engine.health_check()
    if health.status != "healthy":
        logger.warning("Category classifier reported unhealthy", extra={"model": health.model})
    return JSONResponse(
        status_code=(
            status.HTTP_200_OK
            if health.status == "healthy"
            else status.HTTP_503_SERVICE_UNAVAILABLE
        ),
        content=health.model_dump(mode="json", by_alias=True),
    )
