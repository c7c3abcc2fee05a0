"""SQLAlchemy engine and session management.

Provides:
- Engine and session factory lifecycle
- Table creation at startup
- Request-scoped session dependency
"""

from collections.abc import Generator
from typing import Annotated

import structlog
from fastapi import Depends
from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.config.settings import get_settings
from src.core.database.base import Base


logger = structlog.get_logger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(
    url: str, echo: bool = False, pool_pre_ping: bool = True
) -> Engine:
    """Create an engine for the given URL.

    SQLite connections are shared across the threadpool used for sync
    dependencies, and in-memory databases must keep a single connection
    or every checkout would see an empty database.
    """
    kwargs: dict = {"echo": echo, "pool_pre_ping": pool_pre_ping}

    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if _is_memory_sqlite(url):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **kwargs)

    if url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    return engine


class DatabaseConnection:
    """Database connection manager.

    Manages engine and session factory lifecycle.
    """

    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @classmethod
    def connect(cls, url: str | None = None) -> Engine:
        """Create the engine and session factory.

        Args:
            url: Database URL. Defaults to settings.database_url.

        Returns:
            Active engine

        Raises:
            ConnectionError: If the database cannot be reached
        """
        if cls._engine is not None:
            return cls._engine

        settings = get_settings()
        url = url or settings.database_url

        engine = create_db_engine(
            url,
            echo=settings.database_echo,
            pool_pre_ping=settings.database_pool_pre_ping,
        )

        try:
            with engine.connect():
                pass
        except Exception as e:
            engine.dispose()
            logger.error("database_connection_failed", error=str(e))
            raise ConnectionError(f"Failed to connect to database: {e}") from e

        cls._engine = engine
        cls._session_factory = sessionmaker(
            bind=engine, autoflush=False, expire_on_commit=False
        )
        logger.info("database_connected", dialect=engine.dialect.name)
        return engine

    @classmethod
    def get_session(cls) -> Session:
        """Open a new session bound to the active engine."""
        if cls._session_factory is None:
            cls.connect()
        if cls._session_factory is None:
            msg = "Database not initialized"
            raise RuntimeError(msg)
        return cls._session_factory()

    @classmethod
    def disconnect(cls) -> None:
        """Dispose the engine and drop pooled connections."""
        if cls._engine is not None:
            cls._engine.dispose()
            cls._engine = None
            cls._session_factory = None
            logger.info("database_engine_disposed")

    @classmethod
    def ping(cls) -> bool:
        """Check that the active engine answers a trivial query."""
        if cls._engine is None:
            return False
        try:
            with cls._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.warning("database_ping_failed", error=str(e))
            return False
        return True


def import_models() -> None:
    """Import every model module so all tables are registered on Base.metadata."""
    import src.categories.models  # noqa: F401, PLC0415
    import src.comments.models  # noqa: F401, PLC0415
    import src.posts.models  # noqa: F401, PLC0415
    import src.users.models  # noqa: F401, PLC0415


def create_tables(engine: Engine) -> None:
    """Create all tables that don't exist yet."""
    import_models()
    Base.metadata.create_all(engine)
    logger.info("database_tables_created", tables=sorted(Base.metadata.tables))


def init_database(url: str | None = None) -> Engine:
    """Initialize database connection and schema.

    Returns:
        Configured engine
    """
    settings = get_settings()
    engine = DatabaseConnection.connect(url)

    if settings.database_create_tables:
        create_tables(engine)

    logger.info("database_initialized", dialect=engine.dialect.name)
    return engine


def shutdown_database() -> None:
    """Shutdown database connection."""
    DatabaseConnection.disconnect()


def get_db_session() -> Generator[Session, None, None]:
    """Yield a request-scoped session.

    Services commit their own units of work. Anything left pending when the
    request fails is rolled back, and the session is always closed.
    """
    session = DatabaseConnection.get_session()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


DbSessionDep = Annotated[Session, Depends(get_db_session)]
