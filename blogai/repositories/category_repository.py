"""Read-only access to the category store."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from blogai.models.category import Category

logger = logging.getLogger(__name__)


class CategoryRepository:
    """Lists categories through short-lived sessions. Never writes."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list(self) -> list[Category]:
        """Return every category ordered by name."""
        async with self._session_factory() as session:
            result = await session.execute(select(Category).order_by(Category.name))
            categories = list(result.scalars().all())
        logger.debug("Loaded categories", extra={"count": len(categories)})
        return categories

    async def find_existing_ids(
        self,
        category_ids: Iterable[str],
        *,
        session: AsyncSession | None = None,
    ) -> set[str]:
        """Return the subset of `category_ids` present in the store."""
        wanted = {str(category_id) for category_id in category_ids}
        if not wanted:
            return set()

        stmt = select(Category.id).where(Category.id.in_(wanted))
        if session is not None:
            result = await session.execute(stmt)
            return set(result.scalars().all())

        async with self._session_factory() as own_session:
            result = await own_session.execute(stmt)
            return set(result.scalars().all())
