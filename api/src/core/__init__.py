# Core infrastructure
from src.core.context import (
    RequestContext,
    clear_context,
    get_client_ip,
    get_context,
    get_correlation_id,
    get_request_id,
    get_trace_id,
    set_correlation_id,
    set_request_id,
    set_trace_id,
)
from src.core.database import get_db_session, init_database, shutdown_database
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import RequestContextMiddleware


__all__ = [
    "RequestContext",
    "RequestContextMiddleware",
    "clear_context",
    "configure_structlog",
    "get_client_ip",
    "get_context",
    "get_correlation_id",
    "get_db_session",
    "get_logger",
    "get_request_id",
    "get_trace_id",
    "init_database",
    "set_correlation_id",
    "set_request_id",
    "set_trace_id",
    "shutdown_database",
]
