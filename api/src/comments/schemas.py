"""Pydantic schemas for the comment thread engine.

Request models only enforce types. Content length, authorship and
reference rules are checked by CommentService so every failing field is
reported together.
"""

from pydantic import BaseModel, Field

from src.core.schemas import ORMResponse
from src.posts.schemas import PostResponse
from src.users.schemas import UserResponse


class CreateCommentRequest(BaseModel):
    """Comment creation request.

    `post_id` is taken from the path on /v1/posts/{post_id}/comments.
    Leave `user_id` empty for an anonymous comment, which then needs
    `author_name` and `author_email`.
    """

    post_id: int | None = None
    user_id: int | None = Field(None, description="Registered author")
    parent_id: int | None = Field(None, description="Comment being replied to")
    author_name: str | None = Field(None, max_length=200)
    author_email: str | None = Field(None, max_length=255)
    content: str | None = None
    status: str | None = Field(None, description="pending, approved, spam or trash")
    is_approved: bool | None = Field(
        None, description="Ignored, always derived from status"
    )


class UpdateCommentRequest(BaseModel):
    """Comment update request (only provided fields are changed)."""

    post_id: int | None = None
    user_id: int | None = None
    parent_id: int | None = None
    author_name: str | None = Field(None, max_length=200)
    author_email: str | None = Field(None, max_length=255)
    content: str | None = None
    status: str | None = None
    is_approved: bool | None = None


class CommentReplyResponse(ORMResponse):
    """Direct reply, without its own replies."""

    post_id: int
    user_id: int | None = None
    parent_id: int | None = None
    content: str
    status: str
    is_approved: bool
    author_name: str | None = None
    author_email: str | None = None


class CommentResponse(CommentReplyResponse):
    """Comment with its author, post and direct replies."""

    user: UserResponse | None = None
    post: PostResponse | None = None
    replies: list[CommentReplyResponse] = Field(default_factory=list)
