"""SQLAlchemy database models."""

from blogai.models.base import Base
from blogai.models.category import Category, PostCategory
from blogai.models.post import Post

__all__ = [
    "Base",
    "Category",
    "Post",
    "PostCategory",
]
