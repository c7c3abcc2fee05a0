"""Field-level validation shared by the domain services.

Services collect every violated rule into a ``ValidationErrors`` bag and
raise a single ``ValidationFailedError`` carrying the full set, so callers
always see all failing fields at once.
"""

from enum import Enum
from typing import NamedTuple

from email_validator import EmailNotValidError, validate_email as _validate_email


class ErrorCode(str, Enum):
    """Machine-readable validation failure codes."""

    MISSING_FIELD = "missing_field"
    DUPLICATE_SLUG = "duplicate_slug"
    DUPLICATE_EMAIL = "duplicate_email"
    INVALID_STATUS = "invalid_status"
    INVALID_LENGTH = "invalid_length"
    MISSING_AUTHOR = "missing_author"
    INVALID_EMAIL = "invalid_email"
    MISSING_REFERENCE = "missing_reference"
    INVALID_PARENT = "invalid_parent"


class FieldError(NamedTuple):
    """A single rule violation on one field."""

    field: str
    code: ErrorCode
    message: str


class ValidationFailedError(Exception):
    """One or more field-level rules were violated."""

    def __init__(self, errors: list[FieldError]):
        self.field_errors = errors
        self.message = "Validation failed"
        self.code = "validation_failed"
        super().__init__(self.message)

    @property
    def errors(self) -> dict[str, list[str]]:
        """Messages grouped by field."""
        grouped: dict[str, list[str]] = {}
        for error in self.field_errors:
            grouped.setdefault(error.field, []).append(error.message)
        return grouped

    @property
    def codes(self) -> dict[str, list[str]]:
        """Error codes grouped by field."""
        grouped: dict[str, list[str]] = {}
        for error in self.field_errors:
            grouped.setdefault(error.field, []).append(error.code.value)
        return grouped

    def has(self, field: str, code: ErrorCode) -> bool:
        """Check whether a specific violation was reported."""
        return any(e.field == field and e.code == code for e in self.field_errors)


class ValidationErrors:
    """Collector for field errors raised together at the end of validation."""

    def __init__(self) -> None:
        self._errors: list[FieldError] = []

    def add(self, field: str, code: ErrorCode, message: str) -> None:
        self._errors.append(FieldError(field, code, message))

    def __bool__(self) -> bool:
        return bool(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def has_field(self, field: str) -> bool:
        return any(e.field == field for e in self._errors)

    def raise_if_any(self) -> None:
        """Raise ValidationFailedError if anything was collected."""
        if self._errors:
            raise ValidationFailedError(list(self._errors))

    # ------------------------------------------------------------------
    # Common rules
    # ------------------------------------------------------------------

    def require(self, field: str, value: object) -> bool:
        """Require a present, non-blank value.

        Returns:
            True if the value is present.
        """
        if is_blank(value):
            self.add(field, ErrorCode.MISSING_FIELD, "can't be blank")
            return False
        return True

    def require_choice(
        self, field: str, value: str | None, choices: frozenset[str]
    ) -> bool:
        """Require a value from a closed set."""
        if value not in choices:
            allowed = ", ".join(sorted(choices))
            self.add(
                field,
                ErrorCode.INVALID_STATUS,
                f"is not included in the list ({allowed})",
            )
            return False
        return True

    def require_length(
        self, field: str, value: str | None, minimum: int, maximum: int
    ) -> bool:
        """Require a string length within [minimum, maximum]."""
        length = len(value or "")
        if length < minimum:
            self.add(
                field,
                ErrorCode.INVALID_LENGTH,
                f"is too short (minimum is {minimum} characters)",
            )
            return False
        if length > maximum:
            self.add(
                field,
                ErrorCode.INVALID_LENGTH,
                f"is too long (maximum is {maximum} characters)",
            )
            return False
        return True


def raise_unique_violation(error: Exception, field: str, code: ErrorCode) -> None:
    """Raise ValidationFailedError if ``error`` is a unique violation on ``field``.

    Covers the write that loses a race after both passed the lookup check.
    Any other integrity failure is left for the caller to re-raise.
    """
    detail = str(getattr(error, "orig", error)).lower()
    if "unique" in detail and field in detail:
        raise ValidationFailedError(
            [FieldError(field, code, "has already been taken")]
        ) from error


def is_blank(value: object) -> bool:
    """Check if a value is missing or an empty/whitespace-only string."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def is_valid_email(email: str | None) -> bool:
    """Check email syntax without DNS/deliverability lookups.

    Examples:
        >>> is_valid_email("reader@example.com")
        True
        >>> is_valid_email("not-an-email")
        False
    """
    if is_blank(email):
        return False
    try:
        _validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def normalize_email(email: str) -> str:
    """Normalize email for storage and uniqueness checks."""
    return email.strip().lower()
