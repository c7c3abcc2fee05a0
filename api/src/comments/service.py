"""Comment thread engine service layer.

Business logic for:
- Comment CRUD with reply threading (parent_id)
- Registered vs anonymous authorship rules
- Moderation status with the derived approval flag
- Cascading delete of reply subtrees
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from src.core.database import (
    collect_ancestor_ids,
    collect_descendant_ids,
    delete_by_ids,
)
from src.core.logging import get_logger
from src.core.validation import ErrorCode, ValidationErrors, is_blank, is_valid_email
from src.posts.models import Post
from src.users.models import User

from .models import (
    COMMENT_STATUSES,
    CONTENT_MAX_LENGTH,
    CONTENT_MIN_LENGTH,
    Anonymous,
    Authored,
    Comment,
    CommentStatus,
)
from .schemas import CommentResponse, CreateCommentRequest, UpdateCommentRequest


logger = get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class CommentError(Exception):
    """Base comment error."""

    def __init__(self, message: str, code: str = "comment_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class CommentNotFoundError(CommentError):
    """Comment not found."""

    def __init__(self, message: str = "Comment not found"):
        super().__init__(message, "comment_not_found")


# ==============================================================================
# Comment Service
# ==============================================================================


# Fields copied verbatim from update requests; is_approved is never one of them
_UPDATABLE_FIELDS = (
    "post_id",
    "user_id",
    "parent_id",
    "author_name",
    "author_email",
    "content",
    "status",
)


class CommentService:
    """Service for comment management."""

    def __init__(self, session: Session):
        self.session = session

    def _select(self):
        return select(Comment).options(
            selectinload(Comment.user),
            selectinload(Comment.post),
            selectinload(Comment.replies),
        )

    def get_comment(self, comment_id: int) -> Comment | None:
        """Get comment by ID with user, post and direct replies loaded."""
        return self.session.scalar(self._select().where(Comment.id == comment_id))

    def require_comment(self, comment_id: int) -> Comment:
        """Get comment by ID or raise CommentNotFoundError."""
        comment = self.get_comment(comment_id)
        if comment is None:
            raise CommentNotFoundError
        return comment

    def list_comments(
        self,
        status: str | None = None,
        approved: bool | None = None,
        post_id: int | None = None,
    ) -> list[Comment]:
        """List every comment newest first.

        Args:
            status: Moderation status filter (e.g. pending)
            approved: Approval flag filter
            post_id: Restrict to one post
        """
        stmt = self._select().order_by(Comment.created_at.desc(), Comment.id.desc())
        if status:
            stmt = stmt.where(Comment.status == status)
        if approved is not None:
            stmt = stmt.where(Comment.is_approved == approved)
        if post_id is not None:
            stmt = stmt.where(Comment.post_id == post_id)
        return list(self.session.scalars(stmt))

    def list_approved(self) -> list[Comment]:
        return self.list_comments(approved=True)

    def list_pending(self) -> list[Comment]:
        return self.list_comments(status=CommentStatus.PENDING.value)

    def list_for_post(self, post_id: int) -> list[Comment]:
        """Top-level comments of a post, newest first.

        Callers check that the post exists.
        """
        stmt = (
            self._select()
            .where(Comment.post_id == post_id, Comment.parent_id.is_(None))
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return list(self.session.scalars(stmt))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_comment(
        self,
        data: CreateCommentRequest,
        post_id: int | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> Comment:
        """Create a comment or a reply.

        Args:
            data: Comment fields (is_approved is ignored)
            post_id: Post override (nested /posts/{id}/comments route)
            ip_address: Requester IP, stored for moderation
            user_agent: Requester User-Agent, stored for moderation

        Raises:
            ValidationFailedError: Bad content, status or authorship, or a
                missing post/user/parent
        """
        status = data.status if data.status is not None else CommentStatus.PENDING.value
        comment = Comment(
            post_id=post_id if post_id is not None else data.post_id,
            user_id=data.user_id,
            parent_id=data.parent_id,
            author_name=data.author_name,
            author_email=data.author_email,
            content=data.content,
            status=status,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        comment.apply_approval()

        self._validate(comment)

        try:
            self.session.add(comment)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(
            "comment_created",
            comment_id=comment.id,
            post_id=comment.post_id,
            parent_id=comment.parent_id,
            anonymous=comment.is_anonymous,
            status=comment.status,
        )
        return comment

    def update_comment(self, comment_id: int, data: UpdateCommentRequest) -> Comment:
        """Update comment fields present in the request.

        The merged comment is validated again and its approval flag derived
        from the resulting status.
        """
        comment = self.require_comment(comment_id)
        fields = data.model_dump(exclude_unset=True)
        previous_post_id = comment.post_id

        self._apply_fields(comment, fields)
        comment.apply_approval()

        try:
            self._validate(comment, previous_post_id=previous_post_id)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        # Many-to-one attributes may point at the old rows after a move
        self.session.expire(comment, ["user", "post", "parent"])
        logger.info("comment_updated", comment_id=comment.id, fields=sorted(fields))
        return comment

    def delete_comment(self, comment_id: int) -> dict[str, int]:
        """Delete a comment with its whole reply subtree in one transaction.

        Returns:
            Deleted row counts per table
        """
        self.require_comment(comment_id)

        try:
            comment_ids = collect_descendant_ids(
                self.session, Comment.id, Comment.parent_id, {comment_id}
            )
            counts = {
                "comments": delete_by_ids(self.session, Comment.id, comment_ids),
            }
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        self.session.expire_all()
        logger.info("comment_deleted", comment_id=comment_id, **counts)
        return counts

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _apply_fields(self, comment: Comment, fields: dict[str, Any]) -> None:
        for key in _UPDATABLE_FIELDS:
            if key in fields:
                setattr(comment, key, fields[key])

    def _has_replies(self, comment_id: int) -> bool:
        return (
            self.session.scalar(
                select(Comment.id).where(Comment.parent_id == comment_id).limit(1)
            )
            is not None
        )

    def _validate(
        self, comment: Comment, previous_post_id: int | None = None
    ) -> None:
        errors = ValidationErrors()

        if errors.require("content", comment.content):
            errors.require_length(
                "content", comment.content, CONTENT_MIN_LENGTH, CONTENT_MAX_LENGTH
            )

        errors.require_choice("status", comment.status, COMMENT_STATUSES)

        author = comment.author
        if isinstance(author, Authored):
            if self.session.get(User, author.user_id) is None:
                errors.add("user_id", ErrorCode.MISSING_REFERENCE, "must exist")
        elif isinstance(author, Anonymous):
            if is_blank(author.name):
                errors.add("author_name", ErrorCode.MISSING_AUTHOR, "can't be blank")
            if not is_valid_email(author.email):
                errors.add("author_email", ErrorCode.INVALID_EMAIL, "is invalid")

        if errors.require("post_id", comment.post_id):
            if self.session.get(Post, comment.post_id) is None:
                errors.add("post_id", ErrorCode.MISSING_REFERENCE, "must exist")

        if comment.parent_id is not None:
            self._validate_parent(comment, errors)

        moved = (
            comment.id is not None
            and previous_post_id is not None
            and comment.post_id != previous_post_id
        )
        if moved and self._has_replies(comment.id):
            errors.add(
                "post_id",
                ErrorCode.INVALID_PARENT,
                "can't move a comment with replies to another post",
            )

        errors.raise_if_any()

    def _validate_parent(self, comment: Comment, errors: ValidationErrors) -> None:
        parent = self.session.get(Comment, comment.parent_id)
        if parent is None:
            errors.add("parent_id", ErrorCode.MISSING_REFERENCE, "must exist")
            return

        if comment.id is not None and comment.id in collect_ancestor_ids(
            self.session, Comment.id, Comment.parent_id, parent.id
        ):
            errors.add(
                "parent_id",
                ErrorCode.INVALID_PARENT,
                "can't be the comment itself or one of its replies",
            )
        elif parent.post_id != comment.post_id:
            errors.add(
                "parent_id",
                ErrorCode.INVALID_PARENT,
                "must belong to the same post",
            )

    def to_response(self, comment: Comment) -> CommentResponse:
        """Convert Comment entity to response with user, post and replies."""
        return CommentResponse.model_validate(comment)
