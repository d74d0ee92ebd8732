"""FastAPI routers and dependencies."""

from app.api.deps import (
    get_db,
    get_importer,
    get_render_client,
)
from app.api.renders import router as renders_router
from app.api.templates import router as templates_router

__all__ = [
    "get_db",
    "get_importer",
    "get_render_client",
    "renders_router",
    "templates_router",
]
