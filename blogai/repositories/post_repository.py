"""Read access to posts."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from blogai.models.post import Post


class PostRepository:
    """Fetches posts for AI features; post CRUD lives elsewhere."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_id(
        self,
        post_id: str,
        *,
        session: AsyncSession | None = None,
    ) -> Post | None:
        stmt = select(Post).where(Post.id == str(post_id))
        if session is not None:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

        async with self._session_factory() as own_session:
            result = await own_session.execute(stmt)
            return result.scalar_one_or_none()
