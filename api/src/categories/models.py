"""Database models for the category tree.

Categories form a self-referential hierarchy through parent_id. Posts are
linked through the post_categories join table (see src.posts.models).
"""

import re
import unicodedata

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import TimestampedModel


def generate_slug(text: str) -> str:
    """Generate URL-friendly slug from text.

    Examples:
        >>> generate_slug("Ruby on Rails")
        'ruby-on-rails'
        >>> generate_slug("Café & Lifestyle")
        'cafe-lifestyle'
    """
    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[-\s_]+", "-", text)
    return text.strip("-")


class Category(TimestampedModel):
    """Category node. Root categories have no parent."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id"), nullable=True, index=True
    )

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def __repr__(self) -> str:
        return (
            f"<Category(id={self.id}, slug={self.slug!r}, "
            f"parent_id={self.parent_id})>"
        )
