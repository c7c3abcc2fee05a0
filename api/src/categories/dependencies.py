"""FastAPI dependencies for the category tree."""

from typing import Annotated

from fastapi import Depends, HTTPException, status

from src.core.database import DbSessionDep

from .service import CategoryError, CategoryService


def get_category_service(session: DbSessionDep) -> CategoryService:
    """Build a CategoryService bound to the request session."""
    return CategoryService(session)


CategoryServiceDep = Annotated[CategoryService, Depends(get_category_service)]


def handle_category_error(error: CategoryError) -> HTTPException:
    """Convert category errors to HTTP exceptions."""
    status_map = {
        "category_not_found": status.HTTP_404_NOT_FOUND,
    }

    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail=error.message,
    )
