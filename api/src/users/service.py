"""User service layer.

Business logic for:
- User CRUD with email uniqueness
- Cascading delete of owned posts and comments
"""

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.comments.models import Comment
from src.core.database import collect_descendant_ids, delete_by_ids
from src.core.logging import get_logger
from src.core.validation import (
    ErrorCode,
    ValidationErrors,
    is_valid_email,
    normalize_email,
    raise_unique_violation,
)
from src.posts.models import Post, PostCategory

from .models import User, UserStatus
from .schemas import CreateUserRequest, UpdateUserRequest, UserResponse


logger = get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class UserError(Exception):
    """Base user error."""

    def __init__(self, message: str, code: str = "user_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class UserNotFoundError(UserError):
    """User not found."""

    def __init__(self, message: str = "User not found"):
        super().__init__(message, "user_not_found")


# ==============================================================================
# User Service
# ==============================================================================


class UserService:
    """Service for user management."""

    def __init__(self, session: Session):
        self.session = session

    def get_user(self, user_id: int) -> User | None:
        """Get user by ID."""
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> User | None:
        """Get user by email (case-insensitive)."""
        return self.session.scalar(
            select(User).where(func.lower(User.email) == normalize_email(email))
        )

    def require_user(self, user_id: int) -> User:
        """Get user by ID or raise UserNotFoundError."""
        user = self.get_user(user_id)
        if user is None:
            raise UserNotFoundError
        return user

    def list_users(self, status: str | None = None) -> list[User]:
        """List users, optionally filtered by status."""
        stmt = select(User).order_by(User.id)
        if status:
            stmt = stmt.where(User.status == status)
        return list(self.session.scalars(stmt))

    def create_user(self, data: CreateUserRequest) -> User:
        """Create a new user.

        Raises:
            ValidationFailedError: If email/name are missing or email is taken
        """
        user = User(
            email=normalize_email(data.email) if data.email else data.email,
            name=data.name.strip() if data.name else data.name,
            status=data.status or UserStatus.ACTIVE.value,
        )
        self._validate(user)

        self.session.add(user)
        self._commit()

        logger.info("user_created", user_id=user.id)
        return user

    def update_user(self, user_id: int, data: UpdateUserRequest) -> User:
        """Update user fields present in the request."""
        user = self.require_user(user_id)

        fields = data.model_dump(exclude_unset=True)
        if "email" in fields:
            user.email = normalize_email(fields["email"]) if fields["email"] else None
        if "name" in fields:
            user.name = fields["name"].strip() if fields["name"] else None
        if "status" in fields:
            user.status = fields["status"]

        try:
            self._validate(user)
        except Exception:
            self.session.rollback()
            raise

        self._commit()
        logger.info("user_updated", user_id=user.id, fields=sorted(fields))
        return user

    def delete_user(self, user_id: int) -> dict[str, int]:
        """Delete a user with all owned posts and comments.

        Comments deleted are: the user's own comments, every comment on the
        user's posts, and every reply below any of those. Runs as a single
        transaction.

        Returns:
            Deleted row counts per table
        """
        self.require_user(user_id)

        try:
            post_ids = set(
                self.session.scalars(select(Post.id).where(Post.user_id == user_id))
            )
            seed_comment_ids = set(
                self.session.scalars(
                    select(Comment.id).where(
                        or_(Comment.user_id == user_id, Comment.post_id.in_(post_ids))
                    )
                )
            )
            comment_ids = collect_descendant_ids(
                self.session, Comment.id, Comment.parent_id, seed_comment_ids
            )

            counts = {
                "comments": delete_by_ids(self.session, Comment.id, comment_ids),
                "post_categories": delete_by_ids(
                    self.session, PostCategory.post_id, post_ids
                ),
                "posts": delete_by_ids(self.session, Post.id, post_ids),
            }
            counts["users"] = delete_by_ids(self.session, User.id, {user_id})
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        self.session.expire_all()
        logger.info("user_deleted", user_id=user_id, **counts)
        return counts

    def _commit(self) -> None:
        """Commit, reporting an email claimed by a concurrent write as taken."""
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise_unique_violation(e, "email", ErrorCode.DUPLICATE_EMAIL)
            raise

    def _validate(self, user: User) -> None:
        errors = ValidationErrors()

        if errors.require("email", user.email):
            if not is_valid_email(user.email):
                errors.add("email", ErrorCode.INVALID_EMAIL, "is invalid")
            else:
                existing = self.get_user_by_email(user.email)
                if existing is not None and existing.id != user.id:
                    errors.add(
                        "email", ErrorCode.DUPLICATE_EMAIL, "has already been taken"
                    )
        errors.require("name", user.name)

        errors.raise_if_any()

    def to_response(self, user: User) -> UserResponse:
        """Convert User entity to response."""
        return UserResponse.model_validate(user)
