"""Database models and session management."""

from app.db.models import (
    RenderJob,
    RenderStatus,
    Template,
)
from app.db.session import (
    AsyncSession,
    create_all_tables,
    get_async_session,
    init_db,
)

__all__ = [
    # Models
    "Template",
    "RenderJob",
    "RenderStatus",
    # Session
    "AsyncSession",
    "get_async_session",
    "create_all_tables",
    "init_db",
]
