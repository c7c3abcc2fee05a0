"""Database models for the comment thread engine.

Comments form reply trees scoped to a post (parent_id). Authorship is
either an attached user or an anonymous name/email pair; the approval flag
is always derived from the moderation status right before a write.
"""

from dataclasses import dataclass
from enum import Enum

from sqlalchemy import Boolean, ForeignKey, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import TimestampedModel
from src.posts.models import Post
from src.users.models import User


class CommentStatus(str, Enum):
    """Moderation status."""

    PENDING = "pending"
    APPROVED = "approved"
    SPAM = "spam"
    TRASH = "trash"


COMMENT_STATUSES = frozenset(s.value for s in CommentStatus)

CONTENT_MIN_LENGTH = 1
CONTENT_MAX_LENGTH = 1000


# ==============================================================================
# Authorship
# ==============================================================================


@dataclass(frozen=True)
class Authored:
    """Comment written by a registered user."""

    user_id: int


@dataclass(frozen=True)
class Anonymous:
    """Comment written by a visitor identified only by name and email."""

    name: str | None
    email: str | None


CommentAuthor = Authored | Anonymous


def resolve_author(
    user_id: int | None, author_name: str | None, author_email: str | None
) -> CommentAuthor:
    """Classify comment authorship from the raw fields."""
    if user_id is not None:
        return Authored(user_id=user_id)
    return Anonymous(name=author_name, email=author_email)


def derive_approval(status: str | None) -> bool:
    """Approval flag for a moderation status."""
    return status == CommentStatus.APPROVED.value


# ==============================================================================
# Comment
# ==============================================================================


class Comment(TimestampedModel):
    """Comment or reply on a post."""

    __tablename__ = "comments"

    post_id: Mapped[int] = mapped_column(
        ForeignKey("posts.id"), nullable=False, index=True
    )
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"), nullable=True, index=True
    )
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("comments.id"), nullable=True, index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=CommentStatus.PENDING.value, index=True
    )
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    author_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    author_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(500), nullable=True)

    user: Mapped[User | None] = relationship(User)
    post: Mapped[Post] = relationship(Post)
    parent: Mapped["Comment | None"] = relationship(
        "Comment", remote_side="Comment.id", back_populates="replies"
    )
    replies: Mapped[list["Comment"]] = relationship(
        "Comment",
        back_populates="parent",
        order_by="Comment.created_at",
        passive_deletes="all",
    )

    @property
    def author(self) -> CommentAuthor:
        return resolve_author(self.user_id, self.author_name, self.author_email)

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None

    def apply_approval(self) -> None:
        """Overwrite is_approved from status."""
        self.is_approved = derive_approval(self.status)

    def __repr__(self) -> str:
        return (
            f"<Comment(id={self.id}, post_id={self.post_id}, "
            f"parent_id={self.parent_id}, status={self.status!r})>"
        )


@event.listens_for(Comment, "before_insert")
@event.listens_for(Comment, "before_update")
def _derive_approval_before_write(_mapper, _connection, target: Comment) -> None:
    target.apply_approval()
