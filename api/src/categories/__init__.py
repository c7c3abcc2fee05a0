"""Category tree module.

Note: Service and router are not exported here to avoid circular imports
between the model modules. Import them directly when needed.
"""

from .models import Category, generate_slug


__all__ = ["Category", "generate_slug"]
