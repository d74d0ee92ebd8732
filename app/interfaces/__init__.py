"""Abstract base classes and shared types for the template pipeline."""

from app.interfaces.render_client import BaseRenderClient, ExternalFetchError
from app.interfaces.variables import (
    PROPERTY_TYPES,
    MalformedInputError,
    ParsedCurl,
    PropertyType,
    TemplateIdNotFoundError,
    TemplateImportError,
)

__all__ = [
    "BaseRenderClient",
    "ExternalFetchError",
    "PROPERTY_TYPES",
    "PropertyType",
    "MalformedInputError",
    "ParsedCurl",
    "TemplateIdNotFoundError",
    "TemplateImportError",
]
