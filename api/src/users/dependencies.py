"""FastAPI dependencies for users."""

from typing import Annotated

from fastapi import Depends, HTTPException, status

from src.core.database import DbSessionDep

from .service import UserError, UserService


def get_user_service(session: DbSessionDep) -> UserService:
    """Build a UserService bound to the request session."""
    return UserService(session)


UserServiceDep = Annotated[UserService, Depends(get_user_service)]


def handle_user_error(error: UserError) -> HTTPException:
    """Convert user errors to HTTP exceptions."""
    status_map = {
        "user_not_found": status.HTTP_404_NOT_FOUND,
    }

    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail=error.message,
    )
