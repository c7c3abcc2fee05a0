"""Shared Pydantic types for request/response models."""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict

from src.core.database.base import ensure_utc_aware


# Datetimes read back from SQLite are naive; they were written as UTC
UTCDateTime = Annotated[datetime, AfterValidator(ensure_utc_aware)]


class ORMResponse(BaseModel):
    """Base for responses built from mapped entities."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: UTCDateTime
    updated_at: UTCDateTime


class ErrorResponse(BaseModel):
    """Error envelope returned by the exception handlers."""

    error: bool = True
    message: str
    status_code: int
    request_id: str | None = None
    errors: dict[str, list[str]] | None = None
    codes: dict[str, list[str]] | None = None
    details: list[dict[str, str]] | None = None


# Documented on every resource router; the handlers in main.py build the body
ERROR_RESPONSES: dict[int | str, dict] = {
    404: {"model": ErrorResponse, "description": "Resource not found"},
    422: {"model": ErrorResponse, "description": "Validation failed"},
}
