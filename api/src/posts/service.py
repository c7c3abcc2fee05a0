"""Post service layer.

Business logic for:
- Post CRUD with slug uniqueness and status validation
- Publish/unpublish transitions
- Category links (post_categories)
- Cascading delete of comment trees and category links
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from src.categories.models import Category
from src.comments.models import Comment
from src.core.database import collect_descendant_ids, delete_by_ids, utc_now
from src.core.logging import get_logger
from src.core.validation import ErrorCode, ValidationErrors, raise_unique_violation
from src.users.models import User

from .models import POST_STATUSES, ContentStatus, Post, PostCategory
from .schemas import CreatePostRequest, PostDetailResponse, UpdatePostRequest


logger = get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class PostError(Exception):
    """Base post error."""

    def __init__(self, message: str, code: str = "post_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class PostNotFoundError(PostError):
    """Post not found."""

    def __init__(self, message: str = "Post not found"):
        super().__init__(message, "post_not_found")


# ==============================================================================
# Post Service
# ==============================================================================


_TEXT_FIELDS = ("title", "slug", "content")
_PLAIN_FIELDS = ("user_id", "excerpt", "featured_image", "view_count")


class PostService:
    """Service for post management."""

    def __init__(self, session: Session):
        self.session = session

    def _select(self):
        return select(Post).options(
            selectinload(Post.user), selectinload(Post.categories)
        )

    def get_post(self, post_id: int) -> Post | None:
        """Get post by ID with owner and categories loaded."""
        return self.session.scalar(self._select().where(Post.id == post_id))

    def get_post_by_slug(self, slug: str) -> Post | None:
        """Get post by slug."""
        return self.session.scalar(select(Post).where(Post.slug == slug))

    def require_post(self, post_id: int, user_id: int | None = None) -> Post:
        """Get post by ID or raise PostNotFoundError.

        Args:
            post_id: Post ID
            user_id: When given, the post must belong to this user
        """
        post = self.get_post(post_id)
        if post is None or (user_id is not None and post.user_id != user_id):
            raise PostNotFoundError
        return post

    def list_posts(
        self,
        status: str | None = None,
        user_id: int | None = None,
        category_id: int | None = None,
    ) -> list[Post]:
        """List posts newest first with owner and categories loaded."""
        stmt = self._select().order_by(Post.created_at.desc(), Post.id.desc())
        if status:
            stmt = stmt.where(Post.status == status)
        if user_id is not None:
            stmt = stmt.where(Post.user_id == user_id)
        if category_id is not None:
            stmt = stmt.where(
                Post.id.in_(
                    select(PostCategory.post_id).where(
                        PostCategory.category_id == category_id
                    )
                )
            )
        return list(self.session.scalars(stmt))

    def list_published(self) -> list[Post]:
        """Published posts, newest first."""
        return self.list_posts(status=ContentStatus.PUBLISHED.value)

    def list_drafts(self) -> list[Post]:
        """Draft posts, newest first."""
        return self.list_posts(status=ContentStatus.DRAFT.value)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_post(self, data: CreatePostRequest, user_id: int | None = None) -> Post:
        """Create a new post.

        Args:
            data: Post fields
            user_id: Owner override (nested /users/{id}/posts route)

        Raises:
            ValidationFailedError: Missing fields, duplicate slug, invalid
                status, unknown user or unknown categories
        """
        status = data.status if data.status is not None else ContentStatus.DRAFT.value
        post = Post(
            user_id=user_id if user_id is not None else data.user_id,
            title=data.title,
            slug=data.slug.strip() if data.slug else data.slug,
            content=data.content,
            excerpt=data.excerpt,
            status=status,
            featured_image=data.featured_image,
            view_count=data.view_count or 0,
            published_at=data.published_at,
        )
        if post.status == ContentStatus.PUBLISHED.value and post.published_at is None:
            post.published_at = utc_now()

        self._validate(post, data.category_ids)

        try:
            self.session.add(post)
            self.session.flush()
            if data.category_ids is not None:
                self._replace_categories(post, data.category_ids)
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise_unique_violation(e, "slug", ErrorCode.DUPLICATE_SLUG)
            raise
        except Exception:
            self.session.rollback()
            raise

        logger.info(
            "post_created", post_id=post.id, user_id=post.user_id, status=post.status
        )
        return post

    def update_post(
        self,
        post_id: int,
        data: UpdatePostRequest,
        owner_id: int | None = None,
    ) -> Post:
        """Update post fields present in the request."""
        post = self.require_post(post_id, owner_id)
        fields = data.model_dump(exclude_unset=True)
        previous_status = post.status

        self._apply_fields(post, fields)
        self._apply_status_transition(post, previous_status, fields)

        category_ids = fields.get("category_ids")
        try:
            self._validate(post, category_ids)
            if category_ids is not None:
                self._replace_categories(post, category_ids)
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise_unique_violation(e, "slug", ErrorCode.DUPLICATE_SLUG)
            raise
        except Exception:
            self.session.rollback()
            raise

        logger.info("post_updated", post_id=post.id, fields=sorted(fields))
        return post

    def publish_post(self, post_id: int, owner_id: int | None = None) -> Post:
        """Set status=published and published_at=now, whatever the prior state."""
        post = self.require_post(post_id, owner_id)
        post.status = ContentStatus.PUBLISHED.value
        post.published_at = utc_now()
        self.session.commit()

        logger.info("post_published", post_id=post.id)
        return post

    def unpublish_post(self, post_id: int, owner_id: int | None = None) -> Post:
        """Set status=draft and clear published_at, whatever the prior state."""
        post = self.require_post(post_id, owner_id)
        post.status = ContentStatus.DRAFT.value
        post.published_at = None
        self.session.commit()

        logger.info("post_unpublished", post_id=post.id)
        return post

    def delete_post(self, post_id: int, owner_id: int | None = None) -> dict[str, int]:
        """Delete a post with its comment trees and category links.

        The owning user and the linked categories are kept. Runs as a single
        transaction.

        Returns:
            Deleted row counts per table
        """
        self.require_post(post_id, owner_id)

        try:
            top_comment_ids = set(
                self.session.scalars(
                    select(Comment.id).where(Comment.post_id == post_id)
                )
            )
            comment_ids = collect_descendant_ids(
                self.session, Comment.id, Comment.parent_id, top_comment_ids
            )
            counts = {
                "comments": delete_by_ids(self.session, Comment.id, comment_ids),
                "post_categories": delete_by_ids(
                    self.session, PostCategory.post_id, {post_id}
                ),
                "posts": delete_by_ids(self.session, Post.id, {post_id}),
            }
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        self.session.expire_all()
        logger.info("post_deleted", post_id=post_id, **counts)
        return counts

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _apply_fields(self, post: Post, fields: dict[str, Any]) -> None:
        for key in _TEXT_FIELDS:
            if key in fields:
                value = fields[key]
                if key == "slug" and value:
                    value = value.strip()
                setattr(post, key, value)
        for key in _PLAIN_FIELDS:
            if key in fields:
                setattr(post, key, fields[key])
        if "status" in fields:
            post.status = fields["status"]
        if "published_at" in fields:
            post.published_at = fields["published_at"]

    def _apply_status_transition(
        self, post: Post, previous_status: str, fields: dict[str, Any]
    ) -> None:
        """Keep published_at in step with the status an update leaves behind.

        A published post always carries a timestamp. Moving to published
        stamps the current time unless the request supplies one, and moving
        from published back to draft clears it whatever the request says.
        """
        if post.status == ContentStatus.PUBLISHED.value:
            entering = previous_status != ContentStatus.PUBLISHED.value
            stamped = "published_at" in fields
            if post.published_at is None or (entering and not stamped):
                post.published_at = utc_now()
        elif (
            previous_status == ContentStatus.PUBLISHED.value
            and post.status == ContentStatus.DRAFT.value
        ):
            post.published_at = None

    def _replace_categories(self, post: Post, category_ids: list[int]) -> None:
        delete_by_ids(self.session, PostCategory.post_id, {post.id})
        for category_id in dict.fromkeys(category_ids):
            self.session.add(PostCategory(post_id=post.id, category_id=category_id))
        self.session.flush()
        self.session.expire(post, ["categories"])

    def _validate(self, post: Post, category_ids: list[int] | None = None) -> None:
        errors = ValidationErrors()

        if errors.require("user_id", post.user_id):
            if self.session.get(User, post.user_id) is None:
                errors.add("user_id", ErrorCode.MISSING_REFERENCE, "must exist")

        for key in _TEXT_FIELDS:
            errors.require(key, getattr(post, key))

        if not errors.has_field("slug"):
            existing = self.get_post_by_slug(post.slug)
            if existing is not None and existing.id != post.id:
                errors.add("slug", ErrorCode.DUPLICATE_SLUG, "has already been taken")

        errors.require_choice("status", post.status, POST_STATUSES)

        if category_ids:
            found = set(
                self.session.scalars(
                    select(Category.id).where(Category.id.in_(category_ids))
                )
            )
            missing = sorted(set(category_ids) - found)
            if missing:
                errors.add(
                    "category_ids",
                    ErrorCode.MISSING_REFERENCE,
                    f"unknown categories: {', '.join(map(str, missing))}",
                )

        errors.raise_if_any()

    def to_response(self, post: Post) -> PostDetailResponse:
        """Convert Post entity to response with owner and categories."""
        return PostDetailResponse.model_validate(post)
