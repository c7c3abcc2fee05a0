"""Tests for comment authorship and approval derivation."""

import pytest

from src.comments.models import (
    Anonymous,
    Authored,
    Comment,
    CommentStatus,
    derive_approval,
    resolve_author,
)


class TestResolveAuthor:
    """Authorship is a user when one is attached, otherwise name/email."""

    def test_user_attached(self) -> None:
        assert resolve_author(5, "ignored", "ignored@example.com") == Authored(5)

    def test_anonymous(self) -> None:
        assert resolve_author(None, "Visitor", "v@example.com") == Anonymous(
            name="Visitor", email="v@example.com"
        )

    def test_comment_author_property(self) -> None:
        comment = Comment(author_name="Visitor", author_email="v@example.com")
        assert comment.is_anonymous
        assert isinstance(comment.author, Anonymous)


class TestApproval:
    """The approval flag mirrors the approved status only."""

    @pytest.mark.parametrize(
        "status,expected",
        [
            (CommentStatus.APPROVED.value, True),
            (CommentStatus.PENDING.value, False),
            (CommentStatus.SPAM.value, False),
            (CommentStatus.TRASH.value, False),
            (None, False),
        ],
    )
    def test_derive_approval(self, status: str | None, expected: bool) -> None:
        assert derive_approval(status) is expected

    def test_apply_approval_overrides_client_value(self) -> None:
        comment = Comment(status="pending", is_approved=True)
        comment.apply_approval()
        assert comment.is_approved is False
