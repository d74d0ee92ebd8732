"""Variable normalizer.

Merges variable maps from several sources into one canonical map.
Keys that express the same logical variable at different depths
(``Heading.text`` and ``Heading.text.text``) collapse to a single
``Element.property`` key holding the value of the shallowest one.
"""

import logging
from collections.abc import Mapping
from typing import Any

from app.interfaces.variables import PROPERTY_TYPES

logger = logging.getLogger(__name__)


def base_property(key: str) -> str | None:
    """Return ``Element.property`` for a key of a known property type.

    Returns None for keys whose second segment is not text, source or fill.
    """
    parts = key.split(".")
    if len(parts) < 2 or parts[1] not in PROPERTY_TYPES:
        return None
    return f"{parts[0]}.{parts[1]}"


def merge_sources(*sources: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge maps in priority order; a key keeps the first value seen."""
    merged: dict[str, Any] = {}
    for source in sources:
        if not source:
            continue
        for key, value in source.items():
            merged.setdefault(key, value)
    return merged


class VariableNormalizer:
    """Collapses duplicate variables to one entry per element property."""

    def normalize(self, *sources: Mapping[str, Any] | None) -> dict[str, Any]:
        """Merge and de-duplicate variable maps.

        Args:
            *sources: Variable maps, highest priority first.

        Returns:
            Map with one ``Element.property`` key per (element, property type)
            pair, taking the value of the shallowest source key. Keys of
            unknown property types pass through unchanged.
        """
        merged = merge_sources(*sources)
        if not merged:
            return {}

        # Slot per group or passthrough key, in order of first appearance
        slots: dict[str, list[str]] = {}
        for key in merged:
            group = base_property(key)
            slots.setdefault(group if group is not None else key, []).append(key)

        result: dict[str, Any] = {}
        for group, keys in slots.items():
            # sorted() is stable, so equal depths keep insertion order
            winner = sorted(keys, key=lambda k: k.count("."))[0]
            result[group] = merged[winner]

        dropped = len(merged) - len(result)
        if dropped:
            logger.debug(f"Normalization dropped {dropped} duplicate variable keys")

        return result


def cleanup_variables(variables: Mapping[str, Any] | None) -> dict[str, Any]:
    """Prepare variables for a render request.

    Drops None values and rewrites keys of known property types to their
    two-segment form. A later key overrides an earlier one that rewrites
    to the same form.
    """
    if not variables:
        return {}

    cleaned: dict[str, Any] = {}
    for key, value in variables.items():
        if value is None:
            continue
        cleaned[base_property(key) or key] = value
    return cleaned
