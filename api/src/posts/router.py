"""Post API endpoints.

Provides routes for:
- Posts: CRUD, publish/unpublish
- User posts: CRUD scoped to the owning user (/v1/users/{user_id}/posts)
"""

from fastapi import APIRouter, Query, status

from src.core.schemas import ERROR_RESPONSES
from src.users.dependencies import UserServiceDep, handle_user_error
from src.users.service import UserError

from .dependencies import PostServiceDep, handle_post_error
from .schemas import CreatePostRequest, PostDetailResponse, UpdatePostRequest
from .service import PostError


# ==============================================================================
# Posts Router
# ==============================================================================

router = APIRouter(prefix="/v1/posts", tags=["posts"], responses=ERROR_RESPONSES)


@router.get(
    "",
    response_model=list[PostDetailResponse],
    summary="List posts",
)
def list_posts(
    post_service: PostServiceDep,
    status_filter: str | None = Query(None, alias="status"),
    user_id: int | None = None,
    category_id: int | None = None,
) -> list[PostDetailResponse]:
    """List posts with owner and categories, newest first.

    Filters: `status` (e.g. published, draft), `user_id`, `category_id`.
    """
    posts = post_service.list_posts(
        status=status_filter, user_id=user_id, category_id=category_id
    )
    return [post_service.to_response(p) for p in posts]


@router.get(
    "/{post_id}",
    response_model=PostDetailResponse,
    summary="Get post",
)
def get_post(post_id: int, post_service: PostServiceDep) -> PostDetailResponse:
    """Get a post with owner and categories."""
    try:
        post = post_service.require_post(post_id)
    except PostError as e:
        raise handle_post_error(e) from e
    return post_service.to_response(post)


@router.post(
    "",
    response_model=PostDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create post",
)
def create_post(
    data: CreatePostRequest, post_service: PostServiceDep
) -> PostDetailResponse:
    """Create a new post. Status defaults to draft."""
    post = post_service.create_post(data)
    return post_service.to_response(post)


@router.api_route(
    "/{post_id}",
    methods=["PATCH", "PUT"],
    response_model=PostDetailResponse,
    summary="Update post",
)
def update_post(
    post_id: int, data: UpdatePostRequest, post_service: PostServiceDep
) -> PostDetailResponse:
    """Update the provided post fields."""
    try:
        post = post_service.update_post(post_id, data)
    except PostError as e:
        raise handle_post_error(e) from e
    return post_service.to_response(post)


@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete post",
)
def delete_post(post_id: int, post_service: PostServiceDep) -> None:
    """Delete a post with all its comments and category links."""
    try:
        post_service.delete_post(post_id)
    except PostError as e:
        raise handle_post_error(e) from e


@router.patch(
    "/{post_id}/publish",
    response_model=PostDetailResponse,
    summary="Publish post",
)
def publish_post(
    post_id: int, post_service: PostServiceDep
) -> PostDetailResponse:
    """Set status to published and stamp published_at with the current time."""
    try:
        post = post_service.publish_post(post_id)
    except PostError as e:
        raise handle_post_error(e) from e
    return post_service.to_response(post)


@router.patch(
    "/{post_id}/unpublish",
    response_model=PostDetailResponse,
    summary="Unpublish post",
)
def unpublish_post(
    post_id: int, post_service: PostServiceDep
) -> PostDetailResponse:
    """Set status back to draft and clear published_at."""
    try:
        post = post_service.unpublish_post(post_id)
    except PostError as e:
        raise handle_post_error(e) from e
    return post_service.to_response(post)


# ==============================================================================
# User Posts Router
# ==============================================================================

user_posts_router = APIRouter(
    prefix="/v1/users/{user_id}/posts", tags=["posts"], responses=ERROR_RESPONSES
)


def _require_user(user_service: UserServiceDep, user_id: int) -> None:
    try:
        user_service.require_user(user_id)
    except UserError as e:
        raise handle_user_error(e) from e


@user_posts_router.get(
    "",
    response_model=list[PostDetailResponse],
    summary="List user posts",
)
def list_user_posts(
    user_id: int,
    post_service: PostServiceDep,
    user_service: UserServiceDep,
    status_filter: str | None = Query(None, alias="status"),
) -> list[PostDetailResponse]:
    """List posts owned by a user, newest first."""
    _require_user(user_service, user_id)
    posts = post_service.list_posts(status=status_filter, user_id=user_id)
    return [post_service.to_response(p) for p in posts]


@user_posts_router.get(
    "/{post_id}",
    response_model=PostDetailResponse,
    summary="Get user post",
)
def get_user_post(
    user_id: int, post_id: int, post_service: PostServiceDep
) -> PostDetailResponse:
    """Get a post owned by the user."""
    try:
        post = post_service.require_post(post_id, user_id)
    except PostError as e:
        raise handle_post_error(e) from e
    return post_service.to_response(post)


@user_posts_router.post(
    "",
    response_model=PostDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user post",
)
def create_user_post(
    user_id: int,
    data: CreatePostRequest,
    post_service: PostServiceDep,
    user_service: UserServiceDep,
) -> PostDetailResponse:
    """Create a post owned by the user in the path."""
    _require_user(user_service, user_id)
    post = post_service.create_post(data, user_id=user_id)
    return post_service.to_response(post)


@user_posts_router.api_route(
    "/{post_id}",
    methods=["PATCH", "PUT"],
    response_model=PostDetailResponse,
    summary="Update user post",
)
def update_user_post(
    user_id: int,
    post_id: int,
    data: UpdatePostRequest,
    post_service: PostServiceDep,
) -> PostDetailResponse:
    """Update a post owned by the user."""
    try:
        post = post_service.update_post(post_id, data, owner_id=user_id)
    except PostError as e:
        raise handle_post_error(e) from e
    return post_service.to_response(post)


@user_posts_router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete user post",
)
def delete_user_post(
    user_id: int, post_id: int, post_service: PostServiceDep
) -> None:
    """Delete a post owned by the user."""
    try:
        post_service.delete_post(post_id, owner_id=user_id)
    except PostError as e:
        raise handle_post_error(e) from e
