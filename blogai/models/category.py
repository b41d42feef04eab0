"""Category and post-category association models."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from blogai.models.base import Base, IDMixin, StringID, TimestampMixin

if TYPE_CHECKING:
    from blogai.models.post import Post


class Category(Base, IDMixin, TimestampMixin):
    """Editorial category. Read-only from the AI layer's point of view."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    post_links: Mapped[list[PostCategory]] = relationship(
        back_populates="category",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class PostCategory(Base):
    """Association between a post and a category, optionally AI-suggested."""

    __tablename__ = "post_categories"
    __table_args__ = (
        Index("ix_post_categories_post_ai", "post_id", "is_ai_suggested"),
    )

    post_id: Mapped[str] = mapped_column(
        StringID(),
        ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    category_id: Mapped[str] = mapped_column(
        StringID(),
        ForeignKey("categories.id", ondelete="CASCADE"),
        primary_key=True,
    )
    confidence: Mapped[float | None] = mapped_column(Float, nullable=True)
    is_ai_suggested: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    post: Mapped[Post] = relationship(back_populates="category_links")
    category: Mapped[Category] = relationship(back_populates="post_links", lazy="joined")
