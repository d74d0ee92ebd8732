"""Element variable extractor.

Walks a template's element tree and derives a flat variable map keyed
by ``ElementName.propertyType``.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from app.strategies.template_engine.models import TemplateElement

logger = logging.getLogger(__name__)

# Element field -> variable property suffix
EXTRACTED_FIELDS: tuple[tuple[str, str], ...] = (
    ("text", "text"),
    ("source", "source"),
    ("fill_color", "fill"),
)

MEDIA_TYPES = frozenset({"image", "video", "audio"})


def flatten_element(element: dict[str, Any]) -> dict[str, Any]:
    """Lift ``properties.*`` into the element itself.

    Fields set directly on the element take precedence over the same
    field under ``properties``.
    """
    properties = element.get("properties")
    if not isinstance(properties, dict):
        return dict(element)

    flat = dict(properties)
    flat.update({key: value for key, value in element.items() if key != "properties"})
    return flat


def template_elements(template: dict[str, Any]) -> list[Any]:
    """Return the element list of a fetched template.

    ``source.elements`` is preferred over top-level ``elements``.
    """
    source = template.get("source")
    if isinstance(source, dict) and isinstance(source.get("elements"), list):
        return source["elements"]
    elements = template.get("elements")
    return elements if isinstance(elements, list) else []


class ElementVariableExtractor:
    """Derives editable variables from a template element tree.

    Elements without a name get one synthesized from their type and a
    per-type counter (``image0``, ``image1``, ``Element0``).
    """

    def extract(self, elements: Iterable[dict[str, Any] | TemplateElement] | None) -> dict[str, Any]:
        """Extract variables from a list of top-level elements.

        Args:
            elements: Raw element dicts or TemplateElement models.

        Returns:
            Variable map in tree order, parents before children.
        """
        variables: dict[str, Any] = {}
        if not elements:
            return variables

        counters: defaultdict[str, int] = defaultdict(int)
        self._walk(elements, variables, counters)

        logger.debug(f"Extracted {len(variables)} variables from element tree")
        return variables

    def _walk(
        self,
        elements: Iterable[Any],
        variables: dict[str, Any],
        counters: defaultdict[str, int],
    ) -> None:
        for raw in elements:
            if isinstance(raw, TemplateElement):
                raw = raw.model_dump(exclude_none=True)
            if not isinstance(raw, dict):
                continue

            element = flatten_element(raw)
            name = element.get("name") or self._synthesize_name(element, counters)

            captured = False
            for field, suffix in EXTRACTED_FIELDS:
                value = element.get(field)
                if value is not None:
                    variables.setdefault(f"{name}.{suffix}", value)
                    captured = True

            if element.get("dynamic") is True and not captured:
                element_type = element.get("type")
                if element_type == "text":
                    variables.setdefault(f"{name}.text", f"Text for {name}")
                elif element_type in MEDIA_TYPES:
                    variables.setdefault(f"{name}.source", element.get("source") or "")

            children = element.get("elements")
            if isinstance(children, list):
                self._walk(children, variables, counters)

    @staticmethod
    def _synthesize_name(element: dict[str, Any], counters: defaultdict[str, int]) -> str:
        prefix = element.get("type") or "Element"
        index = counters[prefix]
        counters[prefix] += 1
        return f"{prefix}{index}"
