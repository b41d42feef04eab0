"""Association store for post-category rows.

Every method runs on a caller-owned session so that a delete, insert and
re-read can share one transaction.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from blogai.models.category import PostCategory


@dataclass(frozen=True)
class PostCategoryRow:
    """Values for a new association row."""

    post_id: str
    category_id: str
    confidence: float | None
    is_ai_suggested: bool = True


@dataclass(frozen=True)
class PostCategoryGroupStats:
    """Aggregate of one `is_ai_suggested` group."""

    is_ai_suggested: bool
    count: int
    confidence_count: int
    confidence_sum: float


class PostCategoryRepository:
    """Filtered delete/create/find over `post_categories`."""

    async def delete_many(
        self,
        session: AsyncSession,
        *,
        post_id: str,
        category_ids: Iterable[str] | None = None,
        ai_suggested_only: bool = False,
    ) -> int:
        """Delete matching rows and return how many were removed."""
        stmt = delete(PostCategory).where(PostCategory.post_id == post_id)
        if category_ids is not None:
            stmt = stmt.where(PostCategory.category_id.in_(list(category_ids)))
        if ai_suggested_only:
            stmt = stmt.where(PostCategory.is_ai_suggested.is_(True))
        result = await session.execute(stmt)
        return int(result.rowcount or 0)

    async def create_many(self, session: AsyncSession, rows: Sequence[PostCategoryRow]) -> int:
        session.add_all(
            PostCategory(
                post_id=row.post_id,
                category_id=row.category_id,
                confidence=row.confidence,
                is_ai_suggested=row.is_ai_suggested,
            )
            for row in rows
        )
        await session.flush()
        return len(rows)

    async def find_many(
        self,
        session: AsyncSession,
        *,
        post_id: str,
        ai_suggested: bool | None = None,
    ) -> list[PostCategory]:
        """Return a post's rows with their categories loaded."""
        stmt = (
            select(PostCategory)
            .options(joinedload(PostCategory.category))
            .where(PostCategory.post_id == post_id)
            .order_by(PostCategory.created_at, PostCategory.category_id)
            .execution_options(populate_existing=True)
        )
        if ai_suggested is not None:
            stmt = stmt.where(PostCategory.is_ai_suggested.is_(ai_suggested))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def find_category_ids(
        self,
        session: AsyncSession,
        *,
        post_id: str,
        ai_suggested: bool | None = None,
    ) -> list[str]:
        stmt = select(PostCategory.category_id).where(PostCategory.post_id == post_id)
        if ai_suggested is not None:
            stmt = stmt.where(PostCategory.is_ai_suggested.is_(ai_suggested))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def stats(self, session: AsyncSession, *, post_id: str) -> list[PostCategoryGroupStats]:
        """Count rows and sum confidences grouped by `is_ai_suggested`."""
        stmt = (
            select(
                PostCategory.is_ai_suggested,
                func.count(),
                func.count(PostCategory.confidence),
                func.coalesce(func.sum(PostCategory.confidence), 0.0),
            )
            .where(PostCategory.post_id == post_id)
            .group_by(PostCategory.is_ai_suggested)
        )
        result = await session.execute(stmt)
        return [
            PostCategoryGroupStats(
                is_ai_suggested=bool(is_ai),
                count=int(count),
                confidence_count=int(scored),
                confidence_sum=float(total),
            )
            for is_ai, count, scored, total in result.all()
        ]
