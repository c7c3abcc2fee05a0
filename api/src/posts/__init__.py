"""Post store module.

Note: Service and router are not exported here to avoid circular imports
between the model modules. Import them directly when needed.
"""

from .models import POST_STATUSES, ContentStatus, Post, PostCategory


__all__ = ["POST_STATUSES", "ContentStatus", "Post", "PostCategory"]
