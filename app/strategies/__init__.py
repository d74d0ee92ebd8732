"""Concrete strategy implementations."""

from app.strategies.render_clients import CreatomateClient
from app.strategies.template_engine import (
    CurlCommandParser,
    ElementVariableExtractor,
    JsonRepairer,
    TemplateImporter,
    VariableCategorizer,
    VariableNormalizer,
)

__all__ = [
    "CreatomateClient",
    "CurlCommandParser",
    "ElementVariableExtractor",
    "JsonRepairer",
    "TemplateImporter",
    "VariableCategorizer",
    "VariableNormalizer",
]
