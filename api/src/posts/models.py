"""Database models for posts.

- Post: authored content with a draft/published/archived lifecycle
- PostCategory: join table linking posts to categories (many-to-many)
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.categories.models import Category
from src.core.database.base import TimestampedModel
from src.users.models import User


class ContentStatus(str, Enum):
    """Post publication status."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


POST_STATUSES = frozenset(s.value for s in ContentStatus)


class PostCategory(TimestampedModel):
    """Join row between a post and a category."""

    __tablename__ = "post_categories"
    __table_args__ = (UniqueConstraint("post_id", "category_id"),)

    post_id: Mapped[int] = mapped_column(
        ForeignKey("posts.id"), nullable=False, index=True
    )
    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id"), nullable=False, index=True
    )

    def __repr__(self) -> str:
        return f"<PostCategory(post_id={self.post_id}, category_id={self.category_id})>"


class Post(TimestampedModel):
    """Blog post."""

    __tablename__ = "posts"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    slug: Mapped[str] = mapped_column(String(300), unique=True, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    excerpt: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=ContentStatus.DRAFT.value, index=True
    )
    featured_image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    user: Mapped[User] = relationship(User)
    categories: Mapped[list[Category]] = relationship(
        Category,
        secondary="post_categories",
        order_by=Category.name,
        viewonly=True,
    )

    @property
    def is_published(self) -> bool:
        return self.status == ContentStatus.PUBLISHED.value

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, slug={self.slug!r}, status={self.status!r})>"
