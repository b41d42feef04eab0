"""Blog post model (owned by the post CRUD layer; read here for AI features)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blogai.models.base import Base, IDMixin, TimestampMixin

if TYPE_CHECKING:
    from blogai.models.category import PostCategory


class Post(Base, IDMixin, TimestampMixin):
    """Blog post."""

    __tablename__ = "posts"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")

    category_links: Mapped[list[PostCategory]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
