"""User module.

Note: Service and router are not exported here to avoid circular imports
between the model modules. Import them directly when needed.
"""

from .models import User, UserStatus


__all__ = ["User", "UserStatus"]
