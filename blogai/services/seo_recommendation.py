"""SEO metadata recommendation with locally computed confidence scores."""

from __future__ import annotations

import logging
import math
import re
import time
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from blogai.agents.seo_metadata import SeoMetadataAgent, SeoMetadataInput, SeoMetadataOutput
from blogai.config import Settings, settings as default_settings
from blogai.core.exceptions import AIServiceError, BlogAIError, PromptValidationError, ValidationError
from blogai.core.ids import new_request_id
from blogai.schemas.result import ServiceError, ServiceResult
from blogai.schemas.seo import (
    OpenGraph,
    SeoConfidence,
    SeoOptions,
    SeoProcessingMetrics,
    SeoRecommendationData,
    SeoRecommendationRequest,
)

module_logger = logging.getLogger(__name__)

INVALID_CONTENT = "INVALID_CONTENT"
CONTENT_TOO_SHORT = "CONTENT_TOO_SHORT"
CONTENT_TOO_LONG = "CONTENT_TOO_LONG"
AI_SERVICE_ERROR = "AI_SERVICE_ERROR"

BASE_SCORE = 70
ACTION_PHRASES = (
    "알아보",
    "확인",
    "살펴보",
    "방법",
    "가이드",
    "튜토리얼",
    "learn",
    "discover",
    "guide",
    "how to",
    "tutorial",
    "find out",
)
_EMOTIVE_PUNCTUATION = re.compile(r"[!?:|]")
_SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


def _clamp_score(score: int) -> int:
    return max(0, min(100, score))


def score_title(title: str, target_keywords: Sequence[str]) -> int:
    score = BASE_SCORE
    if 30 <= len(title) <= 60:
        score += 15
    elif len(title) < 30:
        score -= 10
    else:
        score -= 5

    lowered = title.lower()
    if any(keyword.lower() in lowered for keyword in target_keywords):
        score += 10
    if _EMOTIVE_PUNCTUATION.search(title):
        score += 5
    return _clamp_score(score)


def score_description(description: str, target_keywords: Sequence[str]) -> int:
    score = BASE_SCORE
    if 120 <= len(description) <= 160:
        score += 15
    elif len(description) < 120:
        score -= 10
    else:
        score -= 5

    lowered = description.lower()
    matched = sum(1 for keyword in target_keywords if keyword.lower() in lowered)
    score += min(10, matched * 3)
    if any(phrase in lowered for phrase in ACTION_PHRASES):
        score += 5
    return _clamp_score(score)


def score_keywords(keywords: Sequence[str], target_keywords: Sequence[str]) -> int:
    score = BASE_SCORE
    score += 15 if 3 <= len(keywords) <= 8 else -10

    targets = [target.lower() for target in target_keywords]
    overlap = sum(
        1
        for keyword in keywords
        if any(keyword.lower() in target or target in keyword.lower() for target in targets)
    )
    score += min(15, overlap * 5)
    return _clamp_score(score)


def score_slug(slug: str) -> int:
    score = BASE_SCORE
    if 20 <= len(slug) <= 50:
        score += 15
    elif len(slug) < 20:
        score -= 5
    else:
        score -= 10

    score += 10 if _SLUG_PATTERN.match(slug) else -20
    if 2 <= slug.count("-") <= 5:
        score += 5
    return _clamp_score(score)


def calculate_confidence(
    output: SeoMetadataOutput,
    target_keywords: Sequence[str],
) -> SeoConfidence:
    """Score each generated field independently and average them."""
    title = score_title(output.meta_title, target_keywords)
    description = score_description(output.meta_description, target_keywords)
    keywords = score_keywords(output.keywords, target_keywords)
    slug = score_slug(output.suggested_slug)
    overall = math.floor((title + description + keywords + slug) * 0.25 + 0.5)
    return SeoConfidence(
        overall=overall,
        title=title,
        description=description,
        keywords=keywords,
        slug=slug,
    )


class SeoRecommendationService:
    """Generate SEO metadata for a post and rate how good it looks."""

    def __init__(
        self,
        *,
        agent: SeoMetadataAgent,
        config: Settings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._agent = agent
        self._config = config or default_settings
        self._logger = logger or module_logger

    @property
    def model_name(self) -> str:
        return self._agent.model_name

    async def recommend_metadata(
        self,
        request: SeoRecommendationRequest,
    ) -> ServiceResult[SeoRecommendationData]:
        request_id = new_request_id("seo")
        started_at = datetime.now(UTC)
        t0 = time.perf_counter()

        try:
            self._validate_request(request)
            language = request.options.language or self._config.seo_default_language
            output = await self._agent.run(
                SeoMetadataInput(
                    content=request.content,
                    title=request.title,
                    content_type=request.content_type,
                    target_keywords=request.target_keywords,
                    language=language,
                    max_title_length=self._config.seo_max_title_length,
                    max_description_length=self._config.seo_max_description_length,
                    include_schema=request.options.include_schema,
                )
            )
        except BlogAIError as exc:
            error = self._to_service_error(exc)
            self._logger.warning(
                "SEO recommendation failed",
                extra={
                    "request_id": request_id,
                    "code": error.code,
                    "retryable": error.retryable,
                    "reason": error.message,
                },
            )
            return ServiceResult.fail(
                error,
                metrics=self._metrics(request_id, started_at, t0, 0, success=False, error_code=error.code),
            )

        data = self._build_data(output, request, language)
        metrics = self._metrics(request_id, started_at, t0, len(request.content), success=True)
        self._logger.info(
            "SEO recommendation completed",
            extra={
                "request_id": request_id,
                "overall_confidence": data.confidence.overall,
                "processing_time_ms": metrics.processing_time_ms,
            },
        )
        return ServiceResult.ok(data, metrics=metrics)

    async def quick_recommend(
        self,
        content: str,
        title: str,
        content_type: str = "markdown",
    ) -> ServiceResult[SeoRecommendationData]:
        """Recommend with default options and no schema markup."""
        return await self.recommend_metadata(
            SeoRecommendationRequest(
                content=content,
                title=title,
                content_type=content_type,
                options=SeoOptions(
                    generate_slug=True,
                    optimize_for_mobile=True,
                    include_schema=False,
                    language="ko",
                ),
            )
        )

    async def recommend_with_keywords(
        self,
        content: str,
        title: str,
        target_keywords: list[str],
        options: SeoOptions | None = None,
    ) -> ServiceResult[SeoRecommendationData]:
        """Recommend around target keywords, with schema markup unless overridden."""
        merged = SeoOptions(
            generate_slug=True,
            optimize_for_mobile=True,
            include_schema=True,
            language="ko",
        )
        if options is not None:
            merged = merged.model_copy(update=options.model_dump(exclude_unset=True))
        return await self.recommend_metadata(
            SeoRecommendationRequest(
                content=content,
                title=title,
                content_type="markdown",
                target_keywords=target_keywords,
                options=merged,
            )
        )

    def build_schema_markup(self, output: SeoMetadataOutput) -> dict[str, Any]:
        """schema.org BlogPosting for the generated metadata."""
        now = datetime.now(UTC).isoformat()
        base_url = self._config.blog_base_url.rstrip("/")
        return {
            "@context": "https://schema.org",
            "@type": "BlogPosting",
            "headline": output.meta_title,
            "description": output.meta_description,
            "keywords": output.keywords,
            "author": {"@type": "Person", "name": self._config.blog_author_name},
            "publisher": {
                "@type": "Organization",
                "name": self._config.blog_name,
                "logo": {"@type": "ImageObject", "url": self._config.blog_logo_url},
            },
            "datePublished": now,
            "dateModified": now,
            "mainEntityOfPage": {
                "@type": "WebPage",
                "@id": f"{base_url}/{output.suggested_slug}",
            },
        }

    def _build_data(
        self,
        output: SeoMetadataOutput,
        request: SeoRecommendationRequest,
        language: str,
    ) -> SeoRecommendationData:
        return SeoRecommendationData(
            meta_title=output.meta_title,
            meta_description=output.meta_description,
            keywords=output.keywords,
            open_graph=OpenGraph(
                title=output.open_graph_title,
                description=output.open_graph_description,
                type="article",
                locale="en_US" if language == "en" else "ko_KR",
            ),
            suggested_slug=output.suggested_slug,
            schema_markup=self.build_schema_markup(output) if request.options.include_schema else None,
            confidence=calculate_confidence(output, request.target_keywords),
        )

    def _validate_request(self, request: SeoRecommendationRequest) -> None:
        if not request.content.strip():
            raise ValidationError("Content cannot be empty", code=INVALID_CONTENT)
        if len(request.content) < self._config.seo_min_content_length:
            raise ValidationError(
                f"Content must be at least {self._config.seo_min_content_length} characters long",
                code=CONTENT_TOO_SHORT,
            )
        if len(request.content) > self._config.seo_max_content_length:
            raise ValidationError(
                f"Content exceeds maximum length of {self._config.seo_max_content_length} characters",
                code=CONTENT_TOO_LONG,
            )
        if not request.title.strip():
            raise ValidationError("Title cannot be empty", code=INVALID_CONTENT)
        if request.content_type not in self._config.supported_content_types:
            raise ValidationError(
                "Content type must be either markdown or html",
                code=INVALID_CONTENT,
            )

    @staticmethod
    def _to_service_error(exc: BlogAIError) -> ServiceError:
        if isinstance(exc, PromptValidationError):
            return ServiceError.from_exception(exc, code=INVALID_CONTENT)
        if isinstance(exc, AIServiceError):
            return ServiceError.from_exception(exc, code=AI_SERVICE_ERROR)
        return ServiceError.from_exception(exc)

    def _metrics(
        self,
        request_id: str,
        started_at: datetime,
        t0: float,
        content_length: int,
        *,
        success: bool,
        error_code: str | None = None,
    ) -> SeoProcessingMetrics:
        return SeoProcessingMetrics(
            request_id=request_id,
            start_time=started_at,
            end_time=datetime.now(UTC),
            processing_time_ms=int((time.perf_counter() - t0) * 1000),
            model=self.model_name,
            content_length=content_length,
            words_analyzed=content_length // 5,
            cache_hit=False,
            success=success,
            error_code=error_code,
        )
