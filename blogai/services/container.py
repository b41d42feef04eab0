"""Explicit wiring of the AI services, built once at application startup."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from blogai.agents.category_classifier import CategoryClassifierAgent
from blogai.agents.seo_auditor import SeoAuditorAgent
from blogai.agents.seo_metadata import SeoMetadataAgent
from blogai.agents.text_generator import PydanticAITextGenerator
from blogai.config import Settings, settings as default_settings
from blogai.repositories.category_repository import CategoryRepository
from blogai.repositories.post_category_repository import PostCategoryRepository
from blogai.repositories.post_repository import PostRepository
from blogai.services.auto_tag import AutoTagService
from blogai.services.category_recommendation import CategoryRecommendationEngine
from blogai.services.seo_recommendation import SeoRecommendationService
from blogai.services.seo_validation import SeoValidationService


@dataclass(frozen=True)
class ServiceContainer:
    category_engine: CategoryRecommendationEngine
    auto_tag: AutoTagService
    seo_recommendation: SeoRecommendationService
    seo_validation: SeoValidationService


def build_services(
    *,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    config: Settings | None = None,
) -> ServiceContainer:
    """Construct every service with its collaborators."""
    config = config or default_settings
    if session_factory is None:
        from blogai.core.database import async_session_maker

        session_factory = async_session_maker

    category_repository = CategoryRepository(session_factory)
    category_engine = CategoryRecommendationEngine(
        classifier=CategoryClassifierAgent(
            PydanticAITextGenerator(
                model=config.llm_model,
                temperature=config.classification_temperature,
            )
        ),
        category_store=category_repository,
        config=config,
    )
    auto_tag = AutoTagService(
        session_factory=session_factory,
        category_repository=category_repository,
        post_repository=PostRepository(session_factory),
        post_category_repository=PostCategoryRepository(),
        recommendation_engine=category_engine,
        config=config,
    )
    seo_recommendation = SeoRecommendationService(
        agent=SeoMetadataAgent(
            PydanticAITextGenerator(model=config.llm_model, temperature=config.seo_temperature)
        ),
        config=config,
    )
    seo_validation = SeoValidationService(
        auditor=SeoAuditorAgent(
            PydanticAITextGenerator(
                model=config.llm_model,
                temperature=config.validation_temperature,
            ),
            max_content_length=config.seo_validation_prompt_content_length,
        ),
        config=config,
    )
    return ServiceContainer(
        category_engine=category_engine,
        auto_tag=auto_tag,
        seo_recommendation=seo_recommendation,
        seo_validation=seo_validation,
    )
