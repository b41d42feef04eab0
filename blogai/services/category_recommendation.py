"""Category recommendation: classify a post, then weight, dedupe and filter."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from blogai.agents.category_classifier import (
    CategoryClassifierAgent,
    CategoryClassifierInput,
    CategoryLike,
    ClassifiedCategory,
    format_available_categories,
)
from blogai.agents.prompting import truncate_content
from blogai.config import Settings, settings as default_settings
from blogai.core.exceptions import BlogAIError, PromptValidationError, ValidationError
from blogai.core.ids import new_request_id
from blogai.schemas.category import (
    CategoryEngineHealth,
    CategoryRecommendation,
    CategoryRecommendationData,
    CategoryRecommendRequest,
    ProcessingMetrics,
)
from blogai.schemas.result import ServiceError, ServiceResult

module_logger = logging.getLogger(__name__)

RECOMMENDATION_FAILED = "CATEGORY_RECOMMENDATION_FAILED"
HEALTH_PROBE_PROMPT = "Analyze this: React hooks test content for health check"

# Editorial priority per category slug. Unlisted categories weigh 1.0.
CATEGORY_WEIGHTS: dict[str, float] = {
    "web-development": 1.2,
    "blockchain": 1.1,
    "cryptography": 1.1,
    "ai-ml": 1.0,
    "devops": 1.0,
    "tutorial": 0.9,
    "review": 0.9,
}


class CategoryStore(Protocol):
    async def list(self) -> Sequence[CategoryLike]: ...


def apply_domain_weight(confidence: float, weight: float) -> float:
    """Scale a confidence, clamp it to 1.0 and round half-up to two decimals."""
    adjusted = min(confidence * weight, 1.0)
    return math.floor(adjusted * 100 + 0.5) / 100


def deduplicate_recommendations(
    recommendations: Sequence[CategoryRecommendation],
) -> list[CategoryRecommendation]:
    """Sort by confidence descending and keep the first entry per category id."""
    seen: set[str] = set()
    unique: list[CategoryRecommendation] = []
    for recommendation in sorted(recommendations, key=lambda rec: rec.confidence, reverse=True):
        if recommendation.category_id in seen:
            continue
        seen.add(recommendation.category_id)
        unique.append(recommendation)
    return unique


class CategoryRecommendationEngine:
    """Recommend existing categories for a post.

    Public entry points never raise for expected failures; they return a
    `ServiceResult` whose error carries a code and a retryable flag.
    """

    def __init__(
        self,
        *,
        classifier: CategoryClassifierAgent,
        category_store: CategoryStore,
        config: Settings | None = None,
        weights: Mapping[str, float] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._classifier = classifier
        self._category_store = category_store
        self._config = config or default_settings
        self._weights = dict(CATEGORY_WEIGHTS if weights is None else weights)
        self._logger = logger or module_logger

    @property
    def model_name(self) -> str:
        return self._classifier.model_name

    async def recommend_categories(
        self,
        request: CategoryRecommendRequest,
    ) -> ServiceResult[CategoryRecommendationData]:
        request_id = new_request_id("cat")
        started_at = datetime.now(UTC)
        t0 = time.perf_counter()

        try:
            self._validate_request(request)
        except ValidationError as exc:
            self._logger.info(
                "Category recommendation rejected",
                extra={"request_id": request_id, "code": exc.code, "reason": exc.message},
            )
            return ServiceResult.fail(
                ServiceError.from_exception(exc),
                metrics=self._metrics(request_id, started_at, t0, request, success=False),
            )

        try:
            categories = list(await self._category_store.list())
            output = await self._classifier.run(
                CategoryClassifierInput(
                    title=request.title,
                    content=truncate_content(
                        request.content, self._config.category_max_content_length
                    ),
                    content_type=request.content_type,
                    available_categories=format_available_categories(categories),
                    max_suggestions=request.max_suggestions,
                    existing_categories=request.existing_categories,
                )
            )
        except (BlogAIError, SQLAlchemyError) as exc:
            message = exc.message if isinstance(exc, BlogAIError) else str(exc)
            retryable = not isinstance(exc, PromptValidationError)
            self._logger.warning(
                "Category recommendation failed",
                extra={
                    "request_id": request_id,
                    "error_type": type(exc).__name__,
                    "reason": message,
                },
            )
            return ServiceResult.fail(
                ServiceError(
                    code=RECOMMENDATION_FAILED,
                    message=message,
                    retryable=retryable,
                    details={"cause": getattr(exc, "code", type(exc).__name__)},
                ),
                metrics=self._metrics(request_id, started_at, t0, request, success=False),
            )

        recommendations = self.post_process(
            output.recommendations,
            categories,
            existing_categories=request.existing_categories,
            limit=self._result_limit(request),
        )
        metrics = self._metrics(request_id, started_at, t0, request, success=True)
        self._logger.info(
            "Category recommendation completed",
            extra={
                "request_id": request_id,
                "raw_recommendations": len(output.recommendations),
                "recommendations": len(recommendations),
                "processing_time_ms": metrics.processing_time_ms,
            },
        )
        return ServiceResult.ok(
            CategoryRecommendationData(
                recommendations=recommendations,
                content_analysis=output.content_analysis.to_analysis(),
                processing_metrics=metrics,
            ),
            metrics=metrics,
        )

    def post_process(
        self,
        raw: Sequence[ClassifiedCategory],
        categories: Sequence[CategoryLike],
        *,
        existing_categories: Sequence[str] = (),
        limit: int | None = None,
    ) -> list[CategoryRecommendation]:
        """Exclude, weight, dedupe, threshold and validate raw recommendations."""
        by_key: dict[str, CategoryLike] = {}
        for category in categories:
            by_key.setdefault(category.name.strip().lower(), category)
        for category in categories:
            by_key[category.slug] = category
        for category in categories:
            by_key[category.id] = category

        excluded = set(existing_categories)
        resolved: list[CategoryRecommendation] = []
        for item in raw:
            category = by_key.get(item.category_id) or by_key.get(item.category_id.lower())
            category_id = category.id if category else item.category_id
            if category_id in excluded or item.category_id in excluded:
                continue
            resolved.append(
                CategoryRecommendation(
                    category_id=category_id,
                    category_name=category.name if category else item.category_name,
                    confidence=apply_domain_weight(
                        item.confidence, self._weight_for(category_id, category)
                    ),
                    reasoning=item.reasoning,
                    key_topics=item.key_topics,
                    is_existing=category is not None,
                )
            )

        threshold = self._config.category_confidence_threshold
        known_ids = {category.id for category in categories}
        accepted = [
            recommendation
            for recommendation in deduplicate_recommendations(resolved)
            if recommendation.confidence >= threshold and recommendation.category_id in known_ids
        ]
        return accepted[: limit or self._config.category_max_recommendations]

    async def health_check(self) -> CategoryEngineHealth:
        """Send a tiny probe prompt and report whether the model answered."""
        try:
            await self._classifier.generator.generate(HEALTH_PROBE_PROMPT)
            status = "healthy"
        except BlogAIError as exc:
            self._logger.warning("Category engine health probe failed", extra={"reason": exc.message})
            status = "unhealthy"

        return CategoryEngineHealth(
            status=status,
            model=self.model_name,
            timestamp=datetime.now(UTC),
            timeout_ms=self._config.category_timeout_ms,
            retry_attempts=self._config.category_retry_attempts,
            cache_ttl_seconds=self._config.category_cache_ttl_seconds,
        )

    def _weight_for(self, category_id: str, category: CategoryLike | None) -> float:
        weight = self._weights.get(category_id)
        if weight is None and category is not None:
            weight = self._weights.get(category.slug)
        return 1.0 if weight is None else weight

    def _result_limit(self, request: CategoryRecommendRequest) -> int:
        cap = self._config.category_max_recommendations
        if request.max_suggestions > 0:
            return min(cap, request.max_suggestions)
        return cap

    def _validate_request(self, request: CategoryRecommendRequest) -> None:
        if not request.title.strip() or not request.content.strip():
            raise ValidationError("Title and content are required")

        length = len(request.content)
        if not (
            self._config.category_min_content_length
            <= length
            <= self._config.category_max_request_length
        ):
            raise ValidationError(
                f"Content length must be between {self._config.category_min_content_length} "
                f"and {self._config.category_max_request_length} characters",
                details={"content_length": length},
            )

        if request.content_type not in self._config.supported_content_types:
            raise ValidationError(
                f"Unsupported content type: {request.content_type}",
                details={"content_type": request.content_type},
            )

    def _metrics(
        self,
        request_id: str,
        started_at: datetime,
        t0: float,
        request: CategoryRecommendRequest,
        *,
        success: bool,
    ) -> ProcessingMetrics:
        return ProcessingMetrics(
            request_id=request_id,
            start_time=started_at,
            end_time=datetime.now(UTC),
            processing_time_ms=int((time.perf_counter() - t0) * 1000),
            content_length=len(request.content),
            model_used=self.model_name,
            success=success,
        )
