"""FastAPI dependencies resolving the services built at startup."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from blogai.services.auto_tag import AutoTagService
from blogai.services.category_recommendation import CategoryRecommendationEngine
from blogai.services.container import ServiceContainer
from blogai.services.seo_recommendation import SeoRecommendationService
from blogai.services.seo_validation import SeoValidationService


def get_services(request: Request) -> ServiceContainer:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Services are not initialized",
        )
    return services


Services = Annotated[ServiceContainer, Depends(get_services)]


def get_category_engine(services: Services) -> CategoryRecommendationEngine:
    return services.category_engine


def get_auto_tag_service(services: Services) -> AutoTagService:
    return services.auto_tag


def get_seo_recommendation_service(services: Services) -> SeoRecommendationService:
    return services.seo_recommendation


def get_seo_validation_service(services: Services) -> SeoValidationService:
    return services.seo_validation


CategoryEngine = Annotated[CategoryRecommendationEngine, Depends(get_category_engine)]
AutoTagger = Annotated[AutoTagService, Depends(get_auto_tag_service)]
SeoRecommender = Annotated[SeoRecommendationService, Depends(get_seo_recommendation_service)]
SeoValidator = Annotated[SeoValidationService, Depends(get_seo_validation_service)]
