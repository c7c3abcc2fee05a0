"""Pydantic schemas for users.

Request models only enforce types; presence, format and uniqueness rules
are checked by UserService so every failing field is reported together.
"""

from pydantic import BaseModel, Field

from src.core.schemas import ORMResponse


class CreateUserRequest(BaseModel):
    """User creation request."""

    email: str | None = Field(None, max_length=255, description="Unique email")
    name: str | None = Field(None, max_length=200, description="Display name")
    status: str | None = Field(None, max_length=32, description="Account status")


class UpdateUserRequest(BaseModel):
    """User update request (only provided fields are changed)."""

    email: str | None = Field(None, max_length=255)
    name: str | None = Field(None, max_length=200)
    status: str | None = Field(None, max_length=32)


class UserResponse(ORMResponse):
    """User response."""

    email: str
    name: str
    status: str
