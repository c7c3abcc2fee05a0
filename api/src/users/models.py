"""Database models for users.

Users own posts and comments. Ownership cascades are handled explicitly
by UserService.delete_user, not by the database.
"""

from enum import Enum

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import TimestampedModel


class UserStatus(str, Enum):
    """Account status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    BANNED = "banned"


class User(TimestampedModel):
    """Blog user (post author or authenticated commenter)."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=UserStatus.ACTIVE.value
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r})>"
