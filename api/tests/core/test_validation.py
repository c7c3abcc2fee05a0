"""Tests for the shared field validation helpers."""

import pytest

from src.core.validation import (
    ErrorCode,
    ValidationErrors,
    ValidationFailedError,
    is_blank,
    is_valid_email,
    normalize_email,
)


class TestValidationErrors:
    """Tests for the error collector."""

    def test_empty_collector_does_not_raise(self) -> None:
        errors = ValidationErrors()
        errors.raise_if_any()
        assert not errors
        assert len(errors) == 0

    def test_collects_every_failure(self) -> None:
        """All failing fields are reported together, not just the first."""
        errors = ValidationErrors()
        errors.require("title", None)
        errors.require("slug", "  ")
        errors.require_choice("status", "bogus", frozenset({"draft", "published"}))

        with pytest.raises(ValidationFailedError) as exc_info:
            errors.raise_if_any()

        exc = exc_info.value
        assert exc.errors == {
            "title": ["can't be blank"],
            "slug": ["can't be blank"],
            "status": ["is not included in the list (draft, published)"],
        }
        assert exc.codes == {
            "title": ["missing_field"],
            "slug": ["missing_field"],
            "status": ["invalid_status"],
        }
        assert exc.has("status", ErrorCode.INVALID_STATUS)
        assert not exc.has("title", ErrorCode.INVALID_STATUS)

    def test_groups_multiple_errors_per_field(self) -> None:
        errors = ValidationErrors()
        errors.add("email", ErrorCode.INVALID_EMAIL, "is invalid")
        errors.add("email", ErrorCode.DUPLICATE_EMAIL, "has already been taken")

        with pytest.raises(ValidationFailedError) as exc_info:
            errors.raise_if_any()

        assert exc_info.value.codes == {"email": ["invalid_email", "duplicate_email"]}

    def test_require_returns_presence(self) -> None:
        errors = ValidationErrors()
        assert errors.require("name", "Jane") is True
        assert errors.require("name", "") is False
        assert errors.has_field("name")

    @pytest.mark.parametrize(
        "value,expected_message",
        [
            ("", "is too short (minimum is 1 characters)"),
            ("x" * 1001, "is too long (maximum is 1000 characters)"),
        ],
    )
    def test_require_length_out_of_bounds(
        self, value: str, expected_message: str
    ) -> None:
        errors = ValidationErrors()
        assert errors.require_length("content", value, 1, 1000) is False

        with pytest.raises(ValidationFailedError) as exc_info:
            errors.raise_if_any()

        assert exc_info.value.errors == {"content": [expected_message]}
        assert exc_info.value.has("content", ErrorCode.INVALID_LENGTH)

    @pytest.mark.parametrize("value", ["x", "x" * 1000])
    def test_require_length_boundaries_pass(self, value: str) -> None:
        errors = ValidationErrors()
        assert errors.require_length("content", value, 1, 1000) is True
        assert not errors


class TestHelpers:
    """Tests for the standalone helpers."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, True),
            ("", True),
            ("   \t", True),
            ("text", False),
            (0, False),
            (False, False),
        ],
    )
    def test_is_blank(self, value: object, expected: bool) -> None:
        assert is_blank(value) is expected

    @pytest.mark.parametrize(
        "email",
        ["reader@example.com", "first.last+tag@sub.example.org"],
    )
    def test_valid_email(self, email: str) -> None:
        assert is_valid_email(email) is True

    @pytest.mark.parametrize(
        "email",
        [None, "", "not-an-email", "missing-at.example.com", "two@@example.com"],
    )
    def test_invalid_email(self, email: str | None) -> None:
        assert is_valid_email(email) is False

    def test_normalize_email(self) -> None:
        assert normalize_email("  Jane@Example.COM ") == "jane@example.com"
