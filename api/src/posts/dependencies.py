"""FastAPI dependencies for posts."""

from typing import Annotated

from fastapi import Depends, HTTPException, status

from src.core.database import DbSessionDep

from .service import PostError, PostService


def get_post_service(session: DbSessionDep) -> PostService:
    """Build a PostService bound to the request session."""
    return PostService(session)


PostServiceDep = Annotated[PostService, Depends(get_post_service)]


def handle_post_error(error: PostError) -> HTTPException:
    """Convert post errors to HTTP exceptions."""
    status_map = {
        "post_not_found": status.HTTP_404_NOT_FOUND,
    }

    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail=error.message,
    )
