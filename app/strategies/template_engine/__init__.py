"""Template engine strategies.

Implements CURL parsing, JSON repair, element variable extraction,
variable normalization and categorization, and the import pipeline
that combines them.
"""

from app.strategies.template_engine.categorizer import VariableCategorizer
from app.strategies.template_engine.curl_parser import CurlCommandParser
from app.strategies.template_engine.extractor import ElementVariableExtractor
from app.strategies.template_engine.importer import ImportResult, TemplateImporter
from app.strategies.template_engine.json_repair import JsonRepairer
from app.strategies.template_engine.models import (
    CategorizedVariable,
    CategorizedVariables,
    Platform,
    PropertyType,
    TemplateElement,
)
from app.strategies.template_engine.normalizer import VariableNormalizer, cleanup_variables

__all__ = [
    "CategorizedVariable",
    "CategorizedVariables",
    "CurlCommandParser",
    "ElementVariableExtractor",
    "ImportResult",
    "JsonRepairer",
    "Platform",
    "PropertyType",
    "TemplateElement",
    "TemplateImporter",
    "VariableCategorizer",
    "VariableNormalizer",
    "cleanup_variables",
]
