"""Tests for the comment thread engine."""

from collections.abc import Callable

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from src.comments.models import Comment
from src.comments.schemas import CreateCommentRequest, UpdateCommentRequest
from src.comments.service import CommentNotFoundError, CommentService
from src.core.validation import ErrorCode, ValidationFailedError
from src.posts.models import Post
from src.users.models import User


class TestCreateComment:
    """Tests for comment creation."""

    def test_defaults_to_pending_and_unapproved(
        self, make_comment: Callable[..., Comment]
    ) -> None:
        comment = make_comment()
        assert comment.status == "pending"
        assert comment.is_approved is False

    def test_client_approval_flag_is_ignored(
        self,
        comment_service: CommentService,
        make_post: Callable[..., Post],
    ) -> None:
        post = make_post()

        comment = comment_service.create_comment(
            CreateCommentRequest(
                post_id=post.id,
                author_name="Visitor",
                author_email="v@example.com",
                content="Hi",
                is_approved=True,
            )
        )

        assert comment.is_approved is False

    def test_approved_status_sets_flag(
        self, make_comment: Callable[..., Comment]
    ) -> None:
        assert make_comment(status="approved").is_approved is True

    def test_registered_author_needs_no_name_or_email(
        self,
        comment_service: CommentService,
        make_post: Callable[..., Post],
        make_user: Callable[..., User],
    ) -> None:
        post = make_post()
        user = make_user()

        comment = comment_service.create_comment(
            CreateCommentRequest(post_id=post.id, user_id=user.id, content="Hi")
        )

        assert comment.user.id == user.id
        assert not comment.is_anonymous

    def test_anonymous_author_rules(
        self,
        comment_service: CommentService,
        make_post: Callable[..., Post],
    ) -> None:
        post = make_post()

        with pytest.raises(ValidationFailedError) as exc_info:
            comment_service.create_comment(
                CreateCommentRequest(
                    post_id=post.id, author_email="not-an-email", content="Hi"
                )
            )

        assert exc_info.value.codes == {
            "author_name": ["missing_author"],
            "author_email": ["invalid_email"],
        }

    @pytest.mark.parametrize(
        "content,code",
        [
            (None, ErrorCode.MISSING_FIELD),
            ("   ", ErrorCode.MISSING_FIELD),
            ("x" * 1001, ErrorCode.INVALID_LENGTH),
        ],
    )
    def test_content_rules(
        self, make_comment: Callable[..., Comment], content: str | None, code: ErrorCode
    ) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            make_comment(content=content)

        assert exc_info.value.has("content", code)

    def test_content_at_maximum_length(
        self, make_comment: Callable[..., Comment]
    ) -> None:
        assert len(make_comment(content="x" * 1000).content) == 1000

    def test_invalid_status(self, make_comment: Callable[..., Comment]) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            make_comment(status="hidden")

        assert exc_info.value.has("status", ErrorCode.INVALID_STATUS)

    def test_empty_status_is_invalid(
        self, make_comment: Callable[..., Comment]
    ) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            make_comment(status="")

        assert exc_info.value.has("status", ErrorCode.INVALID_STATUS)

    def test_missing_references(self, comment_service: CommentService) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            comment_service.create_comment(
                CreateCommentRequest(
                    post_id=404, user_id=405, parent_id=406, content="Hi"
                )
            )

        assert exc_info.value.codes == {
            "user_id": ["missing_reference"],
            "post_id": ["missing_reference"],
            "parent_id": ["missing_reference"],
        }

    def test_reply_must_match_parent_post(
        self,
        make_comment: Callable[..., Comment],
        make_post: Callable[..., Post],
    ) -> None:
        parent = make_comment()
        elsewhere = make_post()

        with pytest.raises(ValidationFailedError) as exc_info:
            make_comment(post_id=elsewhere.id, parent_id=parent.id)

        assert exc_info.value.has("parent_id", ErrorCode.INVALID_PARENT)

    def test_captures_client_info(
        self, comment_service: CommentService, make_post: Callable[..., Post]
    ) -> None:
        post = make_post()

        comment = comment_service.create_comment(
            CreateCommentRequest(
                author_name="Visitor", author_email="v@example.com", content="Hi"
            ),
            post_id=post.id,
            ip_address="203.0.113.7",
            user_agent="pytest",
        )

        assert comment.post_id == post.id
        assert comment.ip_address == "203.0.113.7"
        assert comment.user_agent == "pytest"


class TestUpdateComment:
    """Tests for updates."""

    def test_status_change_rederives_flag(
        self, comment_service: CommentService, make_comment: Callable[..., Comment]
    ) -> None:
        comment = make_comment()

        approved = comment_service.update_comment(
            comment.id, UpdateCommentRequest(status="approved")
        )
        assert approved.is_approved is True

        spam = comment_service.update_comment(
            comment.id, UpdateCommentRequest(status="spam", is_approved=True)
        )
        assert spam.is_approved is False

    def test_merged_entity_is_revalidated(
        self, comment_service: CommentService, make_comment: Callable[..., Comment]
    ) -> None:
        comment = make_comment(content="Original")

        with pytest.raises(ValidationFailedError) as exc_info:
            comment_service.update_comment(
                comment.id,
                UpdateCommentRequest(content="Changed", author_email="broken"),
            )

        assert exc_info.value.has("author_email", ErrorCode.INVALID_EMAIL)
        assert comment_service.require_comment(comment.id).content == "Original"

    def test_cannot_move_thread_to_another_post(
        self,
        comment_service: CommentService,
        make_comment: Callable[..., Comment],
        make_post: Callable[..., Post],
    ) -> None:
        top = make_comment()
        make_comment(post_id=top.post_id, parent_id=top.id)
        elsewhere = make_post()

        with pytest.raises(ValidationFailedError) as exc_info:
            comment_service.update_comment(
                top.id, UpdateCommentRequest(post_id=elsewhere.id)
            )

        assert exc_info.value.has("post_id", ErrorCode.INVALID_PARENT)

    def test_lone_comment_can_move(
        self,
        comment_service: CommentService,
        make_comment: Callable[..., Comment],
        make_post: Callable[..., Post],
    ) -> None:
        comment = make_comment()
        elsewhere = make_post()

        moved = comment_service.update_comment(
            comment.id, UpdateCommentRequest(post_id=elsewhere.id)
        )

        assert moved.post.id == elsewhere.id

    def test_cannot_reply_to_own_reply(
        self, comment_service: CommentService, make_comment: Callable[..., Comment]
    ) -> None:
        top = make_comment()
        reply = make_comment(post_id=top.post_id, parent_id=top.id)

        with pytest.raises(ValidationFailedError) as exc_info:
            comment_service.update_comment(
                top.id, UpdateCommentRequest(parent_id=reply.id)
            )

        assert exc_info.value.has("parent_id", ErrorCode.INVALID_PARENT)

    def test_missing_comment(self, comment_service: CommentService) -> None:
        with pytest.raises(CommentNotFoundError):
            comment_service.update_comment(999, UpdateCommentRequest(content="x"))


class TestListComments:
    """Tests for thread listing and moderation filters."""

    def test_list_for_post_returns_top_level_newest_first(
        self,
        comment_service: CommentService,
        make_comment: Callable[..., Comment],
        make_post: Callable[..., Post],
    ) -> None:
        post = make_post()
        older = make_comment(post_id=post.id)
        newer = make_comment(post_id=post.id)
        reply = make_comment(post_id=post.id, parent_id=older.id)
        make_comment()

        thread = comment_service.list_for_post(post.id)

        assert [c.id for c in thread] == [newer.id, older.id]
        assert [r.id for r in thread[1].replies] == [reply.id]

    def test_filters(
        self,
        comment_service: CommentService,
        make_comment: Callable[..., Comment],
    ) -> None:
        pending = make_comment()
        approved = make_comment(status="approved")
        make_comment(status="spam")

        assert [c.id for c in comment_service.list_pending()] == [pending.id]
        assert [c.id for c in comment_service.list_approved()] == [approved.id]
        assert [
            c.id for c in comment_service.list_comments(post_id=pending.post_id)
        ] == [pending.id]
        assert len(comment_service.list_comments()) == 3


class TestDeleteComment:
    """Tests for the subtree delete."""

    def test_removes_reply_subtree(
        self,
        db_session: Session,
        comment_service: CommentService,
        make_comment: Callable[..., Comment],
    ) -> None:
        top = make_comment()
        reply = make_comment(post_id=top.post_id, parent_id=top.id)
        make_comment(post_id=top.post_id, parent_id=reply.id)
        sibling = make_comment(post_id=top.post_id)
        top_id, post_id = top.id, top.post_id

        counts = comment_service.delete_comment(top_id)

        assert counts == {"comments": 3}
        assert db_session.scalars(select(Comment.id)).all() == [sibling.id]
        assert db_session.get(Post, post_id) is not None

    def test_missing_comment(self, comment_service: CommentService) -> None:
        with pytest.raises(CommentNotFoundError):
            comment_service.delete_comment(999)
