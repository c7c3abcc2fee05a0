"""Category API endpoints."""

from fastapi import APIRouter, status

from src.core.schemas import ERROR_RESPONSES

from .dependencies import CategoryServiceDep, handle_category_error
from .schemas import (
    CategoryDetailResponse,
    CreateCategoryRequest,
    UpdateCategoryRequest,
)
from .service import CategoryError


router = APIRouter(
    prefix="/v1/categories", tags=["categories"], responses=ERROR_RESPONSES
)


@router.get(
    "",
    response_model=list[CategoryDetailResponse],
    summary="List categories",
)
def list_categories(
    category_service: CategoryServiceDep,
    parent_id: int | None = None,
    root_only: bool = False,
    is_active: bool | None = None,
) -> list[CategoryDetailResponse]:
    """List categories with their linked posts.

    Filters: `parent_id` (direct children), `root_only`, `is_active`.
    """
    categories = category_service.list_categories(
        parent_id=parent_id, root_only=root_only, is_active=is_active
    )
    posts = category_service.get_posts_by_category([c.id for c in categories])
    return [category_service.to_response(c, posts.get(c.id)) for c in categories]


@router.get(
    "/{category_id}",
    response_model=CategoryDetailResponse,
    summary="Get category",
)
def get_category(
    category_id: int, category_service: CategoryServiceDep
) -> CategoryDetailResponse:
    """Get a category with its linked posts."""
    try:
        category = category_service.require_category(category_id)
    except CategoryError as e:
        raise handle_category_error(e) from e
    posts = category_service.get_posts_by_category([category.id])
    return category_service.to_response(category, posts.get(category.id))


@router.post(
    "",
    response_model=CategoryDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
)
def create_category(
    data: CreateCategoryRequest, category_service: CategoryServiceDep
) -> CategoryDetailResponse:
    """Create a root category, or a child when `parent_id` is given."""
    category = category_service.create_category(data)
    return category_service.to_response(category)


@router.api_route(
    "/{category_id}",
    methods=["PATCH", "PUT"],
    response_model=CategoryDetailResponse,
    summary="Update category",
)
def update_category(
    category_id: int,
    data: UpdateCategoryRequest,
    category_service: CategoryServiceDep,
) -> CategoryDetailResponse:
    """Update the provided category fields.

    Moving a category under itself or one of its descendants is rejected.
    """
    try:
        category = category_service.update_category(category_id, data)
    except CategoryError as e:
        raise handle_category_error(e) from e
    posts = category_service.get_posts_by_category([category.id])
    return category_service.to_response(category, posts.get(category.id))


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete category",
)
def delete_category(
    category_id: int, category_service: CategoryServiceDep
) -> None:
    """Delete a category with its whole subtree and their post links.

    Linked posts are kept.
    """
    try:
        category_service.delete_category(category_id)
    except CategoryError as e:
        raise handle_category_error(e) from e
