"""Variable categorizer.

Splits a template's variable map into text, media and color sections
for the customization editor.
"""

import logging
from collections.abc import Mapping
from typing import Any

from app.strategies.template_engine.models import (
    CategorizedVariable,
    CategorizedVariables,
    PropertyType,
)

logger = logging.getLogger(__name__)


def _is_nested_source(key: str) -> bool:
    return key.endswith(".source.source") or (".source." in key and not key.endswith(".source"))


class VariableCategorizer:
    """Routes variables into editor sections by property type.

    Duplicate (element, property) pairs are skipped even though the
    normalizer should already have removed them; maps edited by hand or
    stored before normalization existed still reach this code.
    """

    def categorize(self, variables: Mapping[str, Any] | None) -> CategorizedVariables:
        """Categorize a variable map.

        Args:
            variables: Variable map as stored on a template.

        Returns:
            CategorizedVariables with each section sorted by element name.
        """
        result = CategorizedVariables(formatted_variables=dict(variables or {}))
        if not variables:
            return result

        sections: dict[PropertyType, list[CategorizedVariable]] = {
            PropertyType.TEXT: result.text_variables,
            PropertyType.SOURCE: result.media_variables,
            PropertyType.FILL: result.color_variables,
        }
        seen: set[tuple[str, str | None]] = set()

        for key, value in variables.items():
            if value is None:
                continue

            parts = key.split(".")
            element_name = parts[0]
            property_name = parts[1] if len(parts) > 1 else None

            if (element_name, property_name) in seen:
                continue
            if _is_nested_source(key):
                continue

            try:
                property_type = PropertyType(property_name)
            except ValueError:
                continue

            seen.add((element_name, property_name))
            sections[property_type].append(
                CategorizedVariable(
                    key=key,
                    element_name=element_name,
                    value=value,
                    property_type=property_type,
                )
            )

        for section in sections.values():
            section.sort(key=lambda v: v.element_name)

        logger.debug(
            f"Categorized variables: text={len(result.text_variables)}, "
            f"media={len(result.media_variables)}, color={len(result.color_variables)}"
        )
        return result
