"""Seed the database with sample blog data.

Creates, when missing:
- Three users
- A technology category with ruby-on-rails and javascript children, plus lifestyle
- Four posts linked to categories
- Registered, anonymous and reply comments

Everything goes through the services, so all validation rules apply.
Running it twice leaves the data unchanged.

Usage:
    cd api && uv run python -m scripts.seed
"""

import sys
from datetime import timedelta
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import structlog
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from src.categories.models import Category, generate_slug
from src.categories.schemas import CreateCategoryRequest
from src.categories.service import CategoryService
from src.comments.models import Comment
from src.comments.schemas import CreateCommentRequest
from src.comments.service import CommentService
from src.config.settings import get_settings
from src.core.context import RequestContext
from src.core.database import DatabaseConnection, init_database, utc_now
from src.posts.models import Post
from src.posts.schemas import CreatePostRequest
from src.posts.service import PostService
from src.users.models import User
from src.users.schemas import CreateUserRequest
from src.users.service import UserService


logger = structlog.get_logger(__name__)


USERS = [
    {"email": "john@example.com", "name": "John Doe"},
    {"email": "jane@example.com", "name": "Jane Smith"},
    {"email": "bob@example.com", "name": "Bob Wilson"},
]

# (name, description, sort_order, parent name)
CATEGORIES = [
    ("Technology", "Articles about technology and programming", 1, None),
    ("Ruby on Rails", "Ruby on Rails framework articles", 1, "Technology"),
    ("JavaScript", "JavaScript and web development", 2, "Technology"),
    ("Lifestyle", "Lifestyle and personal articles", 2, None),
]

POSTS = [
    {
        "author": "john@example.com",
        "title": "Getting Started with Rails 8",
        "slug": "getting-started-rails-8",
        "content": (
            "Rails 8 brings many exciting features including built-in Docker "
            "support and improved performance..."
        ),
        "excerpt": "Learn about the new features in Rails 8",
        "status": "published",
        "days_ago": 7,
        "view_count": 150,
        "categories": ["Ruby on Rails"],
    },
    {
        "author": "jane@example.com",
        "title": "Modern JavaScript Best Practices",
        "slug": "modern-javascript-best-practices",
        "content": (
            "In this article, we'll explore the latest JavaScript best "
            "practices for 2024..."
        ),
        "excerpt": "Discover the latest JavaScript best practices",
        "status": "published",
        "days_ago": 3,
        "view_count": 89,
        "categories": ["JavaScript"],
    },
    {
        "author": "bob@example.com",
        "title": "Work-Life Balance in Tech",
        "slug": "work-life-balance-tech",
        "content": (
            "Maintaining work-life balance in the tech industry can be "
            "challenging..."
        ),
        "excerpt": "Tips for maintaining work-life balance",
        "status": "draft",
        "days_ago": None,
        "view_count": 0,
        "categories": ["Lifestyle"],
    },
    {
        "author": "john@example.com",
        "title": "Docker and Rails: A Perfect Match",
        "slug": "docker-rails-perfect-match",
        "content": (
            "Docker containerization has revolutionized how we deploy and "
            "manage Rails applications..."
        ),
        "excerpt": "Learn how Docker enhances Rails development",
        "status": "published",
        "days_ago": 2,
        "view_count": 201,
        "categories": ["Ruby on Rails", "Technology"],
    },
]

COMMENTS = [
    {
        "post": "getting-started-rails-8",
        "author": "jane@example.com",
        "content": (
            "Great article! Rails 8 really does make Docker integration so "
            "much easier."
        ),
    },
    {
        "post": "getting-started-rails-8",
        "author_name": "Anonymous Developer",
        "author_email": "dev@example.com",
        "content": (
            "Thanks for the detailed walkthrough. The Docker setup was exactly "
            "what I was looking for!"
        ),
    },
    {
        "post": "modern-javascript-best-practices",
        "author": "bob@example.com",
        "content": (
            "Solid advice on modern JavaScript. The async/await patterns you "
            "mentioned are game-changers."
        ),
    },
    {
        "post": "getting-started-rails-8",
        "author": "john@example.com",
        "content": (
            "Glad you found it helpful! Rails 8 has really streamlined the "
            "development process."
        ),
    },
]

REPLY = {
    "author": "bob@example.com",
    "content": "I completely agree! The Docker integration is seamless.",
}


def seed_users(session: Session) -> dict[str, User]:
    """Create sample users, keyed by email."""
    service = UserService(session)
    users = {}
    for attrs in USERS:
        user = service.get_user_by_email(attrs["email"])
        if user is None:
            user = service.create_user(CreateUserRequest(**attrs, status="active"))
            logger.info("seed_user_created", user_id=user.id)
        users[user.email] = user
    return users


def seed_categories(session: Session) -> dict[str, Category]:
    """Create the sample category tree, keyed by name."""
    service = CategoryService(session)
    categories: dict[str, Category] = {}
    for name, description, sort_order, parent_name in CATEGORIES:
        slug = generate_slug(name)
        category = service.get_category_by_slug(slug)
        if category is None:
            parent = categories.get(parent_name) if parent_name else None
            category = service.create_category(
                CreateCategoryRequest(
                    name=name,
                    slug=slug,
                    description=description,
                    sort_order=sort_order,
                    is_active=True,
                    parent_id=parent.id if parent else None,
                )
            )
            logger.info("seed_category_created", category_id=category.id, slug=slug)
        categories[name] = category
    return categories


def seed_posts(
    session: Session, users: dict[str, User], categories: dict[str, Category]
) -> dict[str, Post]:
    """Create sample posts linked to categories, keyed by slug."""
    service = PostService(session)
    posts = {}
    now = utc_now()
    for attrs in POSTS:
        post = service.get_post_by_slug(attrs["slug"])
        if post is None:
            days_ago = attrs["days_ago"]
            post = service.create_post(
                CreatePostRequest(
                    user_id=users[attrs["author"]].id,
                    title=attrs["title"],
                    slug=attrs["slug"],
                    content=attrs["content"],
                    excerpt=attrs["excerpt"],
                    status=attrs["status"],
                    view_count=attrs["view_count"],
                    published_at=now - timedelta(days=days_ago)
                    if days_ago is not None
                    else None,
                    category_ids=[categories[c].id for c in attrs["categories"]],
                )
            )
            logger.info("seed_post_created", post_id=post.id, slug=post.slug)
        posts[post.slug] = post
    return posts


def _find_comment(session: Session, post_id: int, content: str) -> Comment | None:
    return session.scalar(
        select(Comment).where(Comment.post_id == post_id, Comment.content == content)
    )


def seed_comments(
    session: Session, users: dict[str, User], posts: dict[str, Post]
) -> None:
    """Create approved sample comments and one reply."""
    service = CommentService(session)
    created = []
    for attrs in COMMENTS:
        post = posts[attrs["post"]]
        comment = _find_comment(session, post.id, attrs["content"])
        if comment is None:
            author = users[attrs["author"]].id if "author" in attrs else None
            comment = service.create_comment(
                CreateCommentRequest(
                    post_id=post.id,
                    user_id=author,
                    author_name=attrs.get("author_name"),
                    author_email=attrs.get("author_email"),
                    content=attrs["content"],
                    status="approved",
                )
            )
            logger.info("seed_comment_created", comment_id=comment.id)
        created.append(comment)

    parent = created[0]
    if _find_comment(session, parent.post_id, REPLY["content"]) is None:
        reply = service.create_comment(
            CreateCommentRequest(
                post_id=parent.post_id,
                parent_id=parent.id,
                user_id=users[REPLY["author"]].id,
                content=REPLY["content"],
                status="approved",
            )
        )
        logger.info("seed_reply_created", comment_id=reply.id, parent_id=parent.id)


def _count(session: Session, column, *criteria) -> int:
    return session.scalar(select(func.count(column)).where(*criteria)) or 0


def run_seed() -> None:
    """Seed the configured database."""
    settings = get_settings()
    logger.info("seed_starting", database_url=settings.database_url)

    init_database()
    session = DatabaseConnection.get_session()

    try:
        with RequestContext(request_id="seed-run"):
            users = seed_users(session)
            categories = seed_categories(session)
            posts = seed_posts(session, users, categories)
            seed_comments(session, users, posts)

            logger.info(
                "seed_completed",
                users=_count(session, User.id),
                categories=_count(session, Category.id),
                posts=_count(session, Post.id),
                published_posts=_count(session, Post.id, Post.status == "published"),
                comments=_count(session, Comment.id),
                approved_comments=_count(session, Comment.id, Comment.is_approved),
            )
    finally:
        session.close()
        DatabaseConnection.disconnect()


if __name__ == "__main__":
    run_seed()
