"""Shared fixtures.

Settings are cached and logging is configured when src.main is imported,
so the environment has to be prepared before any src import.
"""

import itertools
import os
import tempfile
from collections.abc import Callable, Generator
from typing import Any


os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="blog-api-logs-"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from src.categories.models import Category  # noqa: E402
from src.categories.schemas import CreateCategoryRequest  # noqa: E402
from src.categories.service import CategoryService  # noqa: E402
from src.comments.models import Comment  # noqa: E402
from src.comments.schemas import CreateCommentRequest  # noqa: E402
from src.comments.service import CommentService  # noqa: E402
from src.core.database import Base  # noqa: E402
from src.core.database.connection import create_db_engine, import_models  # noqa: E402
from src.main import app  # noqa: E402
from src.posts.models import Post  # noqa: E402
from src.posts.schemas import CreatePostRequest  # noqa: E402
from src.posts.service import PostService  # noqa: E402
from src.users.models import User  # noqa: E402
from src.users.schemas import CreateUserRequest  # noqa: E402
from src.users.service import UserService  # noqa: E402


# ==============================================================================
# Application
# ==============================================================================


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """App client running the lifespan, so every test gets a fresh in-memory DB."""
    with TestClient(app) as test_client:
        yield test_client


# ==============================================================================
# Database
# ==============================================================================


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Session on a private in-memory SQLite database."""
    engine = create_db_engine("sqlite://")
    import_models()
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = factory()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def user_service(db_session: Session) -> UserService:
    return UserService(db_session)


@pytest.fixture
def category_service(db_session: Session) -> CategoryService:
    return CategoryService(db_session)


@pytest.fixture
def post_service(db_session: Session) -> PostService:
    return PostService(db_session)


@pytest.fixture
def comment_service(db_session: Session) -> CommentService:
    return CommentService(db_session)


# ==============================================================================
# Factories
# ==============================================================================


_sequence = itertools.count(1)


@pytest.fixture
def make_user(user_service: UserService) -> Callable[..., User]:
    """Create a valid user; keyword arguments override the defaults."""

    def _make(**overrides: Any) -> User:
        n = next(_sequence)
        data = {"email": f"user{n}@example.com", "name": f"User {n}"}
        data.update(overrides)
        return user_service.create_user(CreateUserRequest(**data))

    return _make


@pytest.fixture
def make_category(category_service: CategoryService) -> Callable[..., Category]:
    """Create a valid category; keyword arguments override the defaults."""

    def _make(**overrides: Any) -> Category:
        n = next(_sequence)
        data = {"name": f"Category {n}", "slug": f"category-{n}"}
        data.update(overrides)
        return category_service.create_category(CreateCategoryRequest(**data))

    return _make


@pytest.fixture
def make_post(
    post_service: PostService, make_user: Callable[..., User]
) -> Callable[..., Post]:
    """Create a valid draft post, with a new owner unless user_id is given."""

    def _make(**overrides: Any) -> Post:
        n = next(_sequence)
        data = {
            "title": f"Post {n}",
            "slug": f"post-{n}",
            "content": f"Body of post {n}",
        }
        data.update(overrides)
        if "user_id" not in data:
            data["user_id"] = make_user().id
        return post_service.create_post(CreatePostRequest(**data))

    return _make


@pytest.fixture
def make_comment(
    comment_service: CommentService, make_post: Callable[..., Post]
) -> Callable[..., Comment]:
    """Create a valid anonymous comment, on a new post unless post_id is given."""

    def _make(**overrides: Any) -> Comment:
        data = {
            "author_name": "Visitor",
            "author_email": "visitor@example.com",
            "content": "Nice post",
        }
        data.update(overrides)
        if "post_id" not in data:
            data["post_id"] = make_post().id
        return comment_service.create_comment(CreateCommentRequest(**data))

    return _make
