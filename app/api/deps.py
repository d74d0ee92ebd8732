"""FastAPI dependencies for dependency injection.

Provides reusable dependencies for routes including:
- Database sessions
- Pipeline components built by the ComponentFactory
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.factory import ComponentFactory, get_factory
from app.db.session import get_async_session
from app.interfaces.render_client import BaseRenderClient
from app.strategies.template_engine import (
    CurlCommandParser,
    TemplateImporter,
    VariableCategorizer,
    VariableNormalizer,
)

logger = logging.getLogger(__name__)


async def get_db(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions.

    Args:
        settings: Application settings.

    Yields:
        An async database session.
    """
    try:
        session_source = get_async_session(settings)
        session = await session_source.__anext__()
    except Exception as e:
        logger.error(f"Error getting database session: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database connection error",
        ) from e

    try:
        yield session
    finally:
        await session_source.aclose()


def get_component_factory() -> ComponentFactory:
    """Dependency returning the process-wide ComponentFactory."""
    return get_factory()


def get_curl_parser(factory: ComponentFactory = Depends(get_component_factory)) -> CurlCommandParser:
    return factory.get_curl_parser()


def get_normalizer(factory: ComponentFactory = Depends(get_component_factory)) -> VariableNormalizer:
    return factory.get_normalizer()


def get_categorizer(factory: ComponentFactory = Depends(get_component_factory)) -> VariableCategorizer:
    return factory.get_categorizer()


def get_render_client(factory: ComponentFactory = Depends(get_component_factory)) -> BaseRenderClient:
    return factory.get_render_client()


def get_importer(factory: ComponentFactory = Depends(get_component_factory)) -> TemplateImporter:
    return factory.get_importer()
