"""Tests for the post store."""

from collections.abc import Callable
from datetime import UTC, datetime

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from src.categories.models import Category
from src.comments.models import Comment
from src.core.database import delete_by_ids
from src.core.validation import ErrorCode, ValidationFailedError
from src.posts.models import ContentStatus, Post, PostCategory
from src.posts.schemas import CreatePostRequest, UpdatePostRequest
from src.posts.service import PostNotFoundError, PostService
from src.users.models import User


class TestCreatePost:
    """Tests for post creation."""

    def test_defaults_to_draft(
        self, post_service: PostService, make_user: Callable[..., User]
    ) -> None:
        author = make_user()

        post = post_service.create_post(
            CreatePostRequest(
                user_id=author.id, title="Hello", slug="hello", content="World"
            )
        )

        assert post.status == ContentStatus.DRAFT.value
        assert post.published_at is None
        assert post.view_count == 0
        assert post.user.id == author.id

    def test_published_on_create_gets_timestamp(
        self, make_post: Callable[..., Post]
    ) -> None:
        post = make_post(status="published")
        assert post.is_published
        assert post.published_at is not None

    def test_reports_every_failure(self, post_service: PostService) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            post_service.create_post(CreatePostRequest(status="live"))

        assert exc_info.value.codes == {
            "user_id": ["missing_field"],
            "title": ["missing_field"],
            "slug": ["missing_field"],
            "content": ["missing_field"],
            "status": ["invalid_status"],
        }
        assert post_service.list_posts() == []

    def test_duplicate_slug(
        self, post_service: PostService, make_post: Callable[..., Post]
    ) -> None:
        existing = make_post(slug="taken")

        with pytest.raises(ValidationFailedError) as exc_info:
            post_service.create_post(
                CreatePostRequest(
                    user_id=existing.user_id, title="T", slug="taken", content="C"
                )
            )

        assert exc_info.value.has("slug", ErrorCode.DUPLICATE_SLUG)

    def test_slug_claimed_by_concurrent_write(
        self,
        monkeypatch: pytest.MonkeyPatch,
        post_service: PostService,
        make_post: Callable[..., Post],
    ) -> None:
        existing = make_post(slug="taken")
        owner_id = existing.user_id
        # Lookup misses, as it would for a request racing the first insert
        monkeypatch.setattr(post_service, "get_post_by_slug", lambda slug: None)

        with pytest.raises(ValidationFailedError) as exc_info:
            post_service.create_post(
                CreatePostRequest(
                    user_id=owner_id, title="T", slug="taken", content="C"
                )
            )

        assert exc_info.value.codes == {"slug": ["duplicate_slug"]}
        assert [p.slug for p in post_service.list_posts()] == ["taken"]

    def test_empty_status_is_invalid(self, make_post: Callable[..., Post]) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            make_post(status="")

        assert exc_info.value.has("status", ErrorCode.INVALID_STATUS)

    def test_unknown_user_and_categories(self, post_service: PostService) -> None:
        with pytest.raises(ValidationFailedError) as exc_info:
            post_service.create_post(
                CreatePostRequest(
                    user_id=404,
                    title="T",
                    slug="s",
                    content="C",
                    category_ids=[7, 8],
                )
            )

        assert exc_info.value.has("user_id", ErrorCode.MISSING_REFERENCE)
        assert exc_info.value.errors["category_ids"] == ["unknown categories: 7, 8"]

    def test_links_categories(
        self,
        make_post: Callable[..., Post],
        make_category: Callable[..., Category],
    ) -> None:
        beta = make_category(name="Beta")
        alpha = make_category(name="Alpha")

        post = make_post(category_ids=[beta.id, alpha.id, beta.id])

        assert [c.name for c in post.categories] == ["Alpha", "Beta"]

    def test_owner_override(
        self, post_service: PostService, make_user: Callable[..., User]
    ) -> None:
        owner = make_user()
        someone_else = make_user()

        post = post_service.create_post(
            CreatePostRequest(
                user_id=someone_else.id, title="T", slug="mine", content="C"
            ),
            user_id=owner.id,
        )

        assert post.user_id == owner.id


class TestUpdatePost:
    """Tests for updates and status transitions."""

    def test_publishing_via_update_sets_timestamp(
        self, post_service: PostService, make_post: Callable[..., Post]
    ) -> None:
        post = make_post()

        updated = post_service.update_post(
            post.id, UpdatePostRequest(status="published")
        )

        assert updated.published_at is not None

    def test_back_to_draft_clears_timestamp(
        self, post_service: PostService, make_post: Callable[..., Post]
    ) -> None:
        post = make_post(status="published")

        updated = post_service.update_post(post.id, UpdatePostRequest(status="draft"))

        assert updated.published_at is None

    def test_supplied_timestamp_kept_when_publishing(
        self, post_service: PostService, make_post: Callable[..., Post]
    ) -> None:
        post = make_post()
        when = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)

        updated = post_service.update_post(
            post.id, UpdatePostRequest(status="published", published_at=when)
        )

        assert updated.published_at == when

    def test_published_post_never_lacks_timestamp(
        self, post_service: PostService, make_post: Callable[..., Post]
    ) -> None:
        draft = make_post()
        live = make_post(status="published")

        published = post_service.update_post(
            draft.id, UpdatePostRequest(status="published", published_at=None)
        )
        cleared = post_service.update_post(
            live.id, UpdatePostRequest(published_at=None)
        )

        assert published.status == ContentStatus.PUBLISHED.value
        assert published.published_at is not None
        assert cleared.published_at is not None

    def test_back_to_draft_ignores_supplied_timestamp(
        self, post_service: PostService, make_post: Callable[..., Post]
    ) -> None:
        post = make_post(status="published")
        when = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)

        updated = post_service.update_post(
            post.id, UpdatePostRequest(status="draft", published_at=when)
        )

        assert updated.status == ContentStatus.DRAFT.value
        assert updated.published_at is None

    def test_invalid_status_rolls_back(
        self, post_service: PostService, make_post: Callable[..., Post]
    ) -> None:
        post = make_post(title="Original")

        with pytest.raises(ValidationFailedError) as exc_info:
            post_service.update_post(
                post.id, UpdatePostRequest(title="Changed", status="deleted")
            )

        assert exc_info.value.has("status", ErrorCode.INVALID_STATUS)
        assert post_service.require_post(post.id).title == "Original"

    def test_replaces_categories(
        self,
        post_service: PostService,
        make_post: Callable[..., Post],
        make_category: Callable[..., Category],
    ) -> None:
        old = make_category()
        new = make_category()
        post = make_post(category_ids=[old.id])

        updated = post_service.update_post(
            post.id, UpdatePostRequest(category_ids=[new.id])
        )

        assert [c.id for c in updated.categories] == [new.id]

    def test_scoped_to_owner(
        self,
        post_service: PostService,
        make_post: Callable[..., Post],
        make_user: Callable[..., User],
    ) -> None:
        post = make_post()
        stranger = make_user()

        with pytest.raises(PostNotFoundError):
            post_service.update_post(
                post.id, UpdatePostRequest(title="Hijack"), owner_id=stranger.id
            )


class TestPublishing:
    """Tests for publish/unpublish."""

    def test_publish_is_unconditional(
        self, post_service: PostService, make_post: Callable[..., Post]
    ) -> None:
        post = make_post(status="archived")

        published = post_service.publish_post(post.id)

        assert published.status == "published"
        assert published.published_at is not None

    def test_republish_refreshes_timestamp(
        self, post_service: PostService, make_post: Callable[..., Post]
    ) -> None:
        old = datetime(2020, 1, 1, tzinfo=UTC)
        post = make_post(status="published", published_at=old)

        published = post_service.publish_post(post.id)

        assert published.published_at != old

    def test_unpublish(
        self, post_service: PostService, make_post: Callable[..., Post]
    ) -> None:
        post = make_post(status="published")

        draft = post_service.unpublish_post(post.id)

        assert draft.status == "draft"
        assert draft.published_at is None

    def test_missing_post(self, post_service: PostService) -> None:
        with pytest.raises(PostNotFoundError):
            post_service.publish_post(999)


class TestListPosts:
    """Tests for listing and scopes."""

    def test_newest_first_with_filters(
        self,
        post_service: PostService,
        make_post: Callable[..., Post],
        make_user: Callable[..., User],
        make_category: Callable[..., Category],
    ) -> None:
        author = make_user()
        category = make_category()
        first = make_post(user_id=author.id, status="published")
        second = make_post(category_ids=[category.id])
        third = make_post(user_id=author.id)

        assert [p.id for p in post_service.list_posts()] == [
            third.id,
            second.id,
            first.id,
        ]
        assert [p.id for p in post_service.list_published()] == [first.id]
        assert [p.id for p in post_service.list_drafts()] == [third.id, second.id]
        assert [p.id for p in post_service.list_posts(user_id=author.id)] == [
            third.id,
            first.id,
        ]
        assert [p.id for p in post_service.list_posts(category_id=category.id)] == [
            second.id
        ]


class TestDeletePost:
    """Tests for the cascading post delete."""

    def test_removes_comment_trees_and_links(
        self,
        db_session: Session,
        post_service: PostService,
        make_post: Callable[..., Post],
        make_comment: Callable[..., Comment],
        make_category: Callable[..., Category],
    ) -> None:
        category = make_category()
        post = make_post(category_ids=[category.id])
        other = make_post(category_ids=[category.id])

        top = make_comment(post_id=post.id)
        reply = make_comment(post_id=post.id, parent_id=top.id)
        make_comment(post_id=post.id, parent_id=reply.id)
        make_comment(post_id=post.id)
        kept = make_comment(post_id=other.id)
        post_id, owner_id = post.id, post.user_id

        counts = post_service.delete_post(post_id)

        assert counts == {"comments": 4, "post_categories": 1, "posts": 1}
        assert post_service.get_post(post_id) is None
        assert db_session.scalars(select(Comment.id)).all() == [kept.id]
        assert db_session.scalars(select(PostCategory.post_id)).all() == [other.id]
        assert db_session.get(Category, category.id) is not None
        assert db_session.get(User, owner_id) is not None

    def test_failure_midway_removes_nothing(
        self,
        monkeypatch: pytest.MonkeyPatch,
        db_session: Session,
        post_service: PostService,
        make_post: Callable[..., Post],
        make_comment: Callable[..., Comment],
        make_category: Callable[..., Category],
    ) -> None:
        post = make_post(category_ids=[make_category().id])
        top = make_comment(post_id=post.id)
        make_comment(post_id=post.id, parent_id=top.id)
        post_id = post.id

        def fail_on_links(session, column, ids):
            if column is PostCategory.post_id:
                raise RuntimeError("store unavailable")
            return delete_by_ids(session, column, ids)

        monkeypatch.setattr("src.posts.service.delete_by_ids", fail_on_links)

        with pytest.raises(RuntimeError):
            post_service.delete_post(post_id)

        assert post_service.get_post(post_id) is not None
        assert len(db_session.scalars(select(Comment.id)).all()) == 2
        assert db_session.scalars(select(PostCategory.post_id)).all() == [post_id]

    def test_missing_post(self, post_service: PostService) -> None:
        with pytest.raises(PostNotFoundError):
            post_service.delete_post(999)
