"""Persist category recommendations as post-category associations."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from blogai.config import Settings, settings as default_settings
from blogai.core.exceptions import (
    BlogAIError,
    CategoryNotFoundError,
    PersistenceError,
    PostNotFoundError,
    ValidationError,
)
from blogai.core.retry import is_transient_error
from blogai.repositories.category_repository import CategoryRepository
from blogai.repositories.post_category_repository import (
    PostCategoryRepository,
    PostCategoryRow,
)
from blogai.repositories.post_repository import PostRepository
from blogai.schemas.category import (
    AutoTagRequest,
    AutoTagResult,
    CategoryRecommendRequest,
    FinalCategory,
    PostCategoryStats,
    RecommendAndApplyResult,
    RemoveCategoriesResult,
    SelectedCategory,
)
from blogai.schemas.result import ServiceError, ServiceResult
from blogai.services.category_recommendation import (
    RECOMMENDATION_FAILED,
    CategoryRecommendationEngine,
)

module_logger = logging.getLogger(__name__)


def _persistence_error(exc: SQLAlchemyError, operation: str) -> PersistenceError:
    return PersistenceError(
        f"Failed to {operation}",
        retryable=is_transient_error(exc),
        details={"db_error": type(exc).__name__},
    )


class AutoTagService:
    """Applies, removes and summarizes AI-suggested categories on posts.

    Each apply runs its delete, insert and re-read inside one transaction.
    Concurrent applies on the same post are last-write-wins.
    """

    def __init__(
        self,
        *,
        session_factory: async_sessionmaker[AsyncSession],
        category_repository: CategoryRepository,
        post_repository: PostRepository,
        post_category_repository: PostCategoryRepository,
        recommendation_engine: CategoryRecommendationEngine,
        config: Settings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._categories = category_repository
        self._posts = post_repository
        self._post_categories = post_category_repository
        self._engine = recommendation_engine
        self._config = config or default_settings
        self._logger = logger or module_logger

    async def apply_auto_tags(self, request: AutoTagRequest) -> ServiceResult[AutoTagResult]:
        """Tag a post with the selected categories.

        With `replace_existing` every current association is dropped first;
        otherwise only AI-suggested rows are replaced and manual rows survive.
        A selected category that is already attached manually is left as is.
        """
        try:
            self._validate_selection(request)
            async with self._session_factory() as session, session.begin():
                await self._ensure_references(session, request)
                result = await self._replace_tags(session, request)
        except BlogAIError as exc:
            self._logger.info(
                "Auto-tagging rejected",
                extra={"post_id": request.post_id, "code": exc.code, "reason": exc.message},
            )
            return ServiceResult.fail(ServiceError.from_exception(exc))
        except SQLAlchemyError as exc:
            error = _persistence_error(exc, "apply categories")
            self._logger.error(
                "Auto-tagging transaction failed",
                extra={"post_id": request.post_id, "error": repr(exc)},
            )
            return ServiceResult.fail(ServiceError.from_exception(error))

        self._logger.info(
            "Auto-tagging applied",
            extra={
                "post_id": request.post_id,
                "added": result.added_categories,
                "removed": result.removed_categories,
                "final": len(result.final_categories),
            },
        )
        return ServiceResult.ok(result)

    async def recommend_and_apply_tags(
        self,
        post_id: str,
        auto_apply: bool = False,
    ) -> ServiceResult[RecommendAndApplyResult]:
        """Recommend categories for a stored post, applying confident ones if asked."""
        try:
            post = await self._posts.get_by_id(post_id)
            if post is None:
                raise PostNotFoundError(post_id)
            async with self._session_factory() as session:
                existing = await self._post_categories.find_category_ids(session, post_id=post_id)
        except BlogAIError as exc:
            return ServiceResult.fail(ServiceError.from_exception(exc))
        except SQLAlchemyError as exc:
            return ServiceResult.fail(
                ServiceError.from_exception(_persistence_error(exc, "load post categories"))
            )

        recommended = await self._engine.recommend_categories(
            CategoryRecommendRequest(
                title=post.title,
                content=post.content,
                content_type="markdown",
                max_suggestions=self._config.category_max_recommendations,
                existing_categories=existing,
            )
        )
        if not recommended.success or recommended.data is None:
            error = recommended.error or ServiceError(
                code=RECOMMENDATION_FAILED,
                message="Category recommendation returned no data",
                retryable=True,
            )
            return ServiceResult.fail(error, metrics=recommended.metrics)

        recommendations = recommended.data.recommendations
        result = RecommendAndApplyResult(recommendations=recommendations)
        confident = [
            rec
            for rec in recommendations
            if rec.confidence >= self._config.auto_apply_confidence_threshold
        ]
        if auto_apply and confident:
            applied = await self.apply_auto_tags(
                AutoTagRequest(
                    post_id=post_id,
                    selected_categories=[
                        SelectedCategory(category_id=rec.category_id, confidence=rec.confidence)
                        for rec in confident
                    ],
                    replace_existing=False,
                )
            )
            result.applied = applied.success
            if applied.success:
                result.applied_categories = [rec.category_id for rec in confident]
            else:
                self._logger.warning(
                    "Automatic tag application failed",
                    extra={"post_id": post_id, "error": applied.error and applied.error.code},
                )

        return ServiceResult.ok(result, metrics=recommended.metrics)

    async def remove_post_categories(
        self,
        post_id: str,
        category_ids: Sequence[str],
        only_ai_suggested: bool = False,
    ) -> ServiceResult[RemoveCategoriesResult]:
        if not post_id.strip():
            return ServiceResult.fail(
                ServiceError.from_exception(ValidationError("Post id is required"))
            )
        if not category_ids:
            return ServiceResult.ok(RemoveCategoriesResult(post_id=post_id, removed_count=0))

        try:
            async with self._session_factory() as session, session.begin():
                removed = await self._post_categories.delete_many(
                    session,
                    post_id=post_id,
                    category_ids=category_ids,
                    ai_suggested_only=only_ai_suggested,
                )
        except SQLAlchemyError as exc:
            return ServiceResult.fail(
                ServiceError.from_exception(_persistence_error(exc, "remove categories"))
            )

        self._logger.info(
            "Post categories removed",
            extra={"post_id": post_id, "removed": removed, "only_ai": only_ai_suggested},
        )
        return ServiceResult.ok(RemoveCategoriesResult(post_id=post_id, removed_count=removed))

    async def get_post_category_stats(self, post_id: str) -> ServiceResult[PostCategoryStats]:
        try:
            async with self._session_factory() as session:
                groups = await self._post_categories.stats(session, post_id=post_id)
        except SQLAlchemyError as exc:
            return ServiceResult.fail(
                ServiceError.from_exception(_persistence_error(exc, "load category stats"))
            )

        stats = PostCategoryStats()
        scored = 0
        confidence_sum = 0.0
        for group in groups:
            stats.total += group.count
            if group.is_ai_suggested:
                stats.ai_suggested = group.count
            else:
                stats.manual = group.count
            scored += group.confidence_count
            confidence_sum += group.confidence_sum
        if scored:
            stats.average_confidence = round(confidence_sum / scored, 4)
        return ServiceResult.ok(stats)

    def _validate_selection(self, request: AutoTagRequest) -> None:
        if not request.post_id.strip():
            raise ValidationError("Post id is required")

        selected = request.selected_categories
        if not selected:
            raise ValidationError("At least one category must be selected")
        if len(selected) > self._config.auto_tag_max_categories:
            raise ValidationError(
                f"At most {self._config.auto_tag_max_categories} categories can be selected",
                details={"selected": len(selected)},
            )

        seen: set[str] = set()
        for item in selected:
            if not item.category_id.strip():
                raise ValidationError("Category id is required")
            if not 0.0 <= item.confidence <= 1.0:
                raise ValidationError(
                    "Confidence must be between 0 and 1",
                    details={"category_id": item.category_id, "confidence": item.confidence},
                )
            if item.category_id in seen:
                raise ValidationError(
                    f"Category selected more than once: {item.category_id}",
                    details={"category_id": item.category_id},
                )
            seen.add(item.category_id)

    async def _ensure_references(self, session: AsyncSession, request: AutoTagRequest) -> None:
        wanted = [item.category_id for item in request.selected_categories]
        found = await self._categories.find_existing_ids(wanted, session=session)
        for category_id in wanted:
            if category_id not in found:
                raise CategoryNotFoundError(category_id)

        if await self._posts.get_by_id(request.post_id, session=session) is None:
            raise PostNotFoundError(request.post_id)

    async def _replace_tags(self, session: AsyncSession, request: AutoTagRequest) -> AutoTagResult:
        post_id = request.post_id
        removed = await self._post_categories.delete_many(
            session,
            post_id=post_id,
            ai_suggested_only=not request.replace_existing,
        )

        manual: set[str] = set()
        if not request.replace_existing:
            manual = set(
                await self._post_categories.find_category_ids(
                    session, post_id=post_id, ai_suggested=False
                )
            )

        added = await self._post_categories.create_many(
            session,
            [
                PostCategoryRow(
                    post_id=post_id,
                    category_id=item.category_id,
                    confidence=item.confidence,
                    is_ai_suggested=True,
                )
                for item in request.selected_categories
                if item.category_id not in manual
            ],
        )

        final = await self._post_categories.find_many(session, post_id=post_id)
        return AutoTagResult(
            post_id=post_id,
            added_categories=added,
            removed_categories=removed,
            final_categories=[
                FinalCategory(
                    category_id=link.category_id,
                    category_name=link.category.name,
                    confidence=link.confidence or 0.0,
                    is_ai_suggested=link.is_ai_suggested,
                )
                for link in final
            ],
        )
