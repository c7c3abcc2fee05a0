"""FastAPI dependencies for the comment thread engine.

Provides dependency injection for:
- Comment service
- Client info captured on comment creation
- Error handlers
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from src.core.database import DbSessionDep
from src.core.middleware import resolve_client_ip

from .service import CommentError, CommentService


def get_comment_service(session: DbSessionDep) -> CommentService:
    """Build a CommentService bound to the request session."""
    return CommentService(session)


CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]


async def get_client_info(request: Request) -> tuple[str | None, str | None]:
    """Extract client information stored with new comments.

    Returns:
        Tuple of (user_agent, ip_address)
    """
    user_agent = request.headers.get("user-agent")
    # Set by RequestContextMiddleware
    ip_address = getattr(request.state, "client_ip", None)
    if ip_address is None:
        ip_address = resolve_client_ip(request)
    return user_agent, ip_address


ClientInfo = Annotated[tuple[str | None, str | None], Depends(get_client_info)]


def handle_comment_error(error: CommentError) -> HTTPException:
    """Convert comment errors to HTTP exceptions."""
    status_map = {
        "comment_not_found": status.HTTP_404_NOT_FOUND,
    }

    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail=error.message,
    )
