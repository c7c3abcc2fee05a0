"""Comment API endpoints.

Provides routes for:
- Comments: CRUD with moderation filters
- Post comments: thread listing and creation under /v1/posts/{post_id}
"""

from fastapi import APIRouter, Query, status

from src.core.schemas import ERROR_RESPONSES
from src.posts.dependencies import PostServiceDep, handle_post_error
from src.posts.service import PostError

from .dependencies import ClientInfo, CommentServiceDep, handle_comment_error
from .schemas import CommentResponse, CreateCommentRequest, UpdateCommentRequest
from .service import CommentError


# ==============================================================================
# Comments Router
# ==============================================================================

router = APIRouter(prefix="/v1/comments", tags=["comments"], responses=ERROR_RESPONSES)


@router.get(
    "",
    response_model=list[CommentResponse],
    summary="List comments",
)
def list_comments(
    comment_service: CommentServiceDep,
    status_filter: str | None = Query(None, alias="status"),
    approved: bool | None = None,
    post_id: int | None = None,
) -> list[CommentResponse]:
    """List every comment with user, post and direct replies, newest first.

    Filters: `status` (e.g. pending), `approved`, `post_id`.
    """
    comments = comment_service.list_comments(
        status=status_filter, approved=approved, post_id=post_id
    )
    return [comment_service.to_response(c) for c in comments]


@router.get(
    "/{comment_id}",
    response_model=CommentResponse,
    summary="Get comment",
)
def get_comment(
    comment_id: int, comment_service: CommentServiceDep
) -> CommentResponse:
    """Get a comment with user, post and direct replies."""
    try:
        comment = comment_service.require_comment(comment_id)
    except CommentError as e:
        raise handle_comment_error(e) from e
    return comment_service.to_response(comment)


@router.post(
    "",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create comment",
)
def create_comment(
    data: CreateCommentRequest,
    comment_service: CommentServiceDep,
    client_info: ClientInfo,
) -> CommentResponse:
    """Create a comment, or a reply when `parent_id` is given.

    Status defaults to pending. `is_approved` is derived from status.
    """
    user_agent, ip_address = client_info
    comment = comment_service.create_comment(
        data, ip_address=ip_address, user_agent=user_agent
    )
    return comment_service.to_response(comment)


@router.api_route(
    "/{comment_id}",
    methods=["PATCH", "PUT"],
    response_model=CommentResponse,
    summary="Update comment",
)
def update_comment(
    comment_id: int,
    data: UpdateCommentRequest,
    comment_service: CommentServiceDep,
) -> CommentResponse:
    """Update the provided comment fields."""
    try:
        comment = comment_service.update_comment(comment_id, data)
    except CommentError as e:
        raise handle_comment_error(e) from e
    return comment_service.to_response(comment)


@router.delete(
    "/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete comment",
)
def delete_comment(comment_id: int, comment_service: CommentServiceDep) -> None:
    """Delete a comment with every reply below it."""
    try:
        comment_service.delete_comment(comment_id)
    except CommentError as e:
        raise handle_comment_error(e) from e


# ==============================================================================
# Post Comments Router
# ==============================================================================

post_comments_router = APIRouter(
    prefix="/v1/posts/{post_id}/comments",
    tags=["comments"],
    responses=ERROR_RESPONSES,
)


@post_comments_router.get(
    "",
    response_model=list[CommentResponse],
    summary="List post comments",
)
def list_post_comments(
    post_id: int,
    comment_service: CommentServiceDep,
    post_service: PostServiceDep,
) -> list[CommentResponse]:
    """List top-level comments of a post with their direct replies."""
    try:
        post_service.require_post(post_id)
    except PostError as e:
        raise handle_post_error(e) from e
    comments = comment_service.list_for_post(post_id)
    return [comment_service.to_response(c) for c in comments]


@post_comments_router.post(
    "",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create post comment",
)
def create_post_comment(
    post_id: int,
    data: CreateCommentRequest,
    comment_service: CommentServiceDep,
    post_service: PostServiceDep,
    client_info: ClientInfo,
) -> CommentResponse:
    """Comment on the post in the path."""
    try:
        post_service.require_post(post_id)
    except PostError as e:
        raise handle_post_error(e) from e
    user_agent, ip_address = client_info
    comment = comment_service.create_comment(
        data, post_id=post_id, ip_address=ip_address, user_agent=user_agent
    )
    return comment_service.to_response(comment)
