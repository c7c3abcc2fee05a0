"""Pydantic schemas for the category tree."""

from pydantic import BaseModel, Field

from src.core.schemas import ORMResponse, UTCDateTime


class CreateCategoryRequest(BaseModel):
    """Category creation request."""

    name: str | None = Field(None, max_length=200, description="Category name")
    slug: str | None = Field(None, max_length=200, description="Unique slug")
    description: str | None = Field(None, max_length=5000)
    sort_order: int | None = Field(None, description="Position among siblings")
    is_active: bool | None = Field(None, description="Whether category is active")
    parent_id: int | None = Field(None, description="Parent category (None = root)")


class UpdateCategoryRequest(BaseModel):
    """Category update request (only provided fields are changed)."""

    name: str | None = Field(None, max_length=200)
    slug: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=5000)
    sort_order: int | None = None
    is_active: bool | None = None
    parent_id: int | None = None


class CategoryPostResponse(BaseModel):
    """Post as listed under a category."""

    model_config = ORMResponse.model_config

    id: int
    user_id: int
    title: str
    slug: str
    excerpt: str | None = None
    status: str
    published_at: UTCDateTime | None = None


class CategoryResponse(ORMResponse):
    """Category response."""

    name: str
    slug: str
    description: str | None = None
    sort_order: int = 0
    is_active: bool = True
    parent_id: int | None = None


class CategoryDetailResponse(CategoryResponse):
    """Category with its directly linked posts."""

    posts: list[CategoryPostResponse] = Field(default_factory=list)
