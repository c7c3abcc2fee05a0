"""User API endpoints.

Provides routes for:
- Users: CRUD operations

Posts nested under a user live in src.posts.router.
"""

from fastapi import APIRouter, Query, status

from src.core.schemas import ERROR_RESPONSES

from .dependencies import UserServiceDep, handle_user_error
from .schemas import CreateUserRequest, UpdateUserRequest, UserResponse
from .service import UserError


router = APIRouter(prefix="/v1/users", tags=["users"], responses=ERROR_RESPONSES)


@router.get(
    "",
    response_model=list[UserResponse],
    summary="List users",
)
def list_users(
    user_service: UserServiceDep,
    status_filter: str | None = Query(None, alias="status"),
) -> list[UserResponse]:
    """List all users, optionally filtered by account status."""
    users = user_service.list_users(status=status_filter)
    return [user_service.to_response(u) for u in users]


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get user",
)
def get_user(user_id: int, user_service: UserServiceDep) -> UserResponse:
    """Get a single user."""
    try:
        user = user_service.require_user(user_id)
    except UserError as e:
        raise handle_user_error(e) from e
    return user_service.to_response(user)


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
)
def create_user(
    data: CreateUserRequest, user_service: UserServiceDep
) -> UserResponse:
    """Create a new user. Email must be unique."""
    user = user_service.create_user(data)
    return user_service.to_response(user)


@router.api_route(
    "/{user_id}",
    methods=["PATCH", "PUT"],
    response_model=UserResponse,
    summary="Update user",
)
def update_user(
    user_id: int, data: UpdateUserRequest, user_service: UserServiceDep
) -> UserResponse:
    """Update the provided user fields."""
    try:
        user = user_service.update_user(user_id, data)
    except UserError as e:
        raise handle_user_error(e) from e
    return user_service.to_response(user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete user",
)
def delete_user(user_id: int, user_service: UserServiceDep) -> None:
    """Delete a user together with all their posts and comments."""
    try:
        user_service.delete_user(user_id)
    except UserError as e:
        raise handle_user_error(e) from e
