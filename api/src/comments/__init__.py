"""Comment system module.

Provides threaded comments on posts with:
- Replies (parent/child) scoped to a single post
- Authenticated or anonymous authorship
- Moderation status with a derived approval flag

Note: Service and router are not exported here to avoid circular imports.
Import directly from src.comments.service / src.comments.router when needed.
"""

from .models import (
    COMMENT_STATUSES,
    Anonymous,
    Authored,
    Comment,
    CommentAuthor,
    CommentStatus,
    derive_approval,
    resolve_author,
)


__all__ = [
    "COMMENT_STATUSES",
    "Anonymous",
    "Authored",
    "Comment",
    "CommentAuthor",
    "CommentStatus",
    "derive_approval",
    "resolve_author",
]
