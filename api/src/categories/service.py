"""Category service layer.

Business logic for:
- Category CRUD with slug uniqueness
- Parent assignment with cycle detection
- Cascading subtree delete (categories + post links, never posts)
"""

from collections import defaultdict

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.core.database import (
    collect_ancestor_ids,
    collect_descendant_ids,
    delete_by_ids,
)
from src.core.logging import get_logger
from src.core.validation import ErrorCode, ValidationErrors, raise_unique_violation
from src.posts.models import Post, PostCategory

from .models import Category
from .schemas import (
    CategoryDetailResponse,
    CategoryPostResponse,
    CreateCategoryRequest,
    UpdateCategoryRequest,
)


logger = get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class CategoryError(Exception):
    """Base category error."""

    def __init__(self, message: str, code: str = "category_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class CategoryNotFoundError(CategoryError):
    """Category not found."""

    def __init__(self, message: str = "Category not found"):
        super().__init__(message, "category_not_found")


# ==============================================================================
# Category Service
# ==============================================================================


class CategoryService:
    """Service for the category tree."""

    def __init__(self, session: Session):
        self.session = session

    def get_category(self, category_id: int) -> Category | None:
        """Get category by ID."""
        return self.session.get(Category, category_id)

    def get_category_by_slug(self, slug: str) -> Category | None:
        """Get category by slug."""
        return self.session.scalar(select(Category).where(Category.slug == slug))

    def require_category(self, category_id: int) -> Category:
        """Get category by ID or raise CategoryNotFoundError."""
        category = self.get_category(category_id)
        if category is None:
            raise CategoryNotFoundError
        return category

    def list_categories(
        self,
        parent_id: int | None = None,
        root_only: bool = False,
        is_active: bool | None = None,
    ) -> list[Category]:
        """List categories ordered by sort_order, then name."""
        stmt = select(Category).order_by(Category.sort_order, Category.name)
        if root_only:
            stmt = stmt.where(Category.parent_id.is_(None))
        elif parent_id is not None:
            stmt = stmt.where(Category.parent_id == parent_id)
        if is_active is not None:
            stmt = stmt.where(Category.is_active == is_active)
        return list(self.session.scalars(stmt))

    def get_children(self, category_id: int) -> list[Category]:
        """Direct children of a category."""
        return self.list_categories(parent_id=category_id)

    def get_posts_by_category(self, category_ids: list[int]) -> dict[int, list[Post]]:
        """Posts linked to each category (one hop), newest first."""
        if not category_ids:
            return {}
        rows = self.session.execute(
            select(PostCategory.category_id, Post)
            .join(Post, Post.id == PostCategory.post_id)
            .where(PostCategory.category_id.in_(category_ids))
            .order_by(Post.created_at.desc(), Post.id.desc())
        ).all()

        posts: dict[int, list[Post]] = defaultdict(list)
        for category_id, post in rows:
            posts[category_id].append(post)
        return posts

    def create_category(self, data: CreateCategoryRequest) -> Category:
        """Create a new category.

        Raises:
            ValidationFailedError: Missing name/slug, duplicate slug or
                unknown parent
        """
        category = Category(
            name=data.name.strip() if data.name else data.name,
            slug=data.slug.strip() if data.slug else data.slug,
            description=data.description,
            sort_order=data.sort_order if data.sort_order is not None else 0,
            is_active=data.is_active if data.is_active is not None else True,
            parent_id=data.parent_id,
        )
        self._validate(category)

        self.session.add(category)
        self._commit()

        logger.info(
            "category_created",
            category_id=category.id,
            slug=category.slug,
            parent_id=category.parent_id,
        )
        return category

    def update_category(
        self, category_id: int, data: UpdateCategoryRequest
    ) -> Category:
        """Update category fields present in the request."""
        category = self.require_category(category_id)

        fields = data.model_dump(exclude_unset=True)
        for key in ("name", "slug"):
            if key in fields:
                value = fields[key]
                setattr(category, key, value.strip() if value else None)
        if "description" in fields:
            category.description = fields["description"]
        if fields.get("sort_order") is not None:
            category.sort_order = fields["sort_order"]
        if fields.get("is_active") is not None:
            category.is_active = fields["is_active"]
        if "parent_id" in fields:
            category.parent_id = fields["parent_id"]

        try:
            self._validate(category)
        except Exception:
            self.session.rollback()
            raise

        self._commit()
        logger.info("category_updated", category_id=category.id, fields=sorted(fields))
        return category

    def delete_category(self, category_id: int) -> dict[str, int]:
        """Delete a category, all its descendants and all their post links.

        Posts themselves are never deleted. Runs as a single transaction.

        Returns:
            Deleted row counts per table
        """
        self.require_category(category_id)

        try:
            category_ids = collect_descendant_ids(
                self.session, Category.id, Category.parent_id, [category_id]
            )
            counts = {
                "post_categories": delete_by_ids(
                    self.session, PostCategory.category_id, category_ids
                ),
                "categories": delete_by_ids(self.session, Category.id, category_ids),
            }
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        self.session.expire_all()
        logger.info("category_deleted", category_id=category_id, **counts)
        return counts

    def _commit(self) -> None:
        """Commit, reporting a slug claimed by a concurrent write as taken."""
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise_unique_violation(e, "slug", ErrorCode.DUPLICATE_SLUG)
            raise

    def _validate(self, category: Category) -> None:
        errors = ValidationErrors()

        errors.require("name", category.name)
        if errors.require("slug", category.slug):
            existing = self.get_category_by_slug(category.slug)
            if existing is not None and existing.id != category.id:
                errors.add("slug", ErrorCode.DUPLICATE_SLUG, "has already been taken")

        if category.parent_id is not None:
            self._validate_parent(category, errors)

        errors.raise_if_any()

    def _validate_parent(self, category: Category, errors: ValidationErrors) -> None:
        if self.get_category(category.parent_id) is None:
            errors.add("parent_id", ErrorCode.MISSING_REFERENCE, "must exist")
            return

        if category.id is None:
            return

        # New parent must not be the category itself or one of its descendants
        ancestors = collect_ancestor_ids(
            self.session, Category.id, Category.parent_id, category.parent_id
        )
        if category.id in ancestors:
            errors.add(
                "parent_id",
                ErrorCode.INVALID_PARENT,
                "cannot be the category itself or one of its descendants",
            )

    def to_response(
        self, category: Category, posts: list[Post] | None = None
    ) -> CategoryDetailResponse:
        """Convert Category entity to response with its linked posts."""
        response = CategoryDetailResponse.model_validate(category)
        response.posts = [CategoryPostResponse.model_validate(p) for p in posts or []]
        return response
