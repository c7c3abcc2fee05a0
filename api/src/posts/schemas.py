"""Pydantic schemas for posts."""

from pydantic import BaseModel, Field

from src.categories.schemas import CategoryResponse
from src.core.schemas import ORMResponse, UTCDateTime
from src.users.schemas import UserResponse


class CreatePostRequest(BaseModel):
    """Post creation request.

    `user_id` is taken from the path on /v1/users/{user_id}/posts.
    """

    user_id: int | None = Field(None, description="Owning user")
    title: str | None = Field(None, max_length=300)
    slug: str | None = Field(None, max_length=300, description="Unique slug")
    content: str | None = None
    excerpt: str | None = None
    status: str | None = Field(None, description="draft, published or archived")
    featured_image: str | None = Field(None, max_length=500)
    view_count: int | None = Field(None, ge=0)
    published_at: UTCDateTime | None = None
    category_ids: list[int] | None = Field(
        None, description="Categories to link (replaces existing links)"
    )


class UpdatePostRequest(BaseModel):
    """Post update request (only provided fields are changed)."""

    user_id: int | None = None
    title: str | None = Field(None, max_length=300)
    slug: str | None = Field(None, max_length=300)
    content: str | None = None
    excerpt: str | None = None
    status: str | None = None
    featured_image: str | None = Field(None, max_length=500)
    view_count: int | None = Field(None, ge=0)
    published_at: UTCDateTime | None = None
    category_ids: list[int] | None = None


class PostResponse(ORMResponse):
    """Post response."""

    user_id: int
    title: str
    slug: str
    content: str
    excerpt: str | None = None
    status: str
    featured_image: str | None = None
    view_count: int = 0
    published_at: UTCDateTime | None = None


class PostDetailResponse(PostResponse):
    """Post with its owner and categories."""

    user: UserResponse | None = None
    categories: list[CategoryResponse] = Field(default_factory=list)
