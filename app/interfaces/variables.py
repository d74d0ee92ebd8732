"""Template variable pipeline interfaces.

Defines the result types and error kinds shared by the CURL parser,
JSON repairer, element extractor and the template importer.
"""

import enum
from dataclasses import dataclass
from typing import Any


class PropertyType(str, enum.Enum):
    """Editable property categories surfaced to end users."""

    TEXT = "text"
    SOURCE = "source"
    FILL = "fill"


PROPERTY_TYPES: tuple[str, ...] = tuple(member.value for member in PropertyType)


@dataclass(frozen=True)
class ParsedCurl:
    """Result of parsing a pasted CURL command.

    Attributes:
        template_id: Rendering service template ID, or None if no pattern matched.
        modifications: Parsed modifications object, or None if absent or unparseable.
    """

    template_id: str | None
    modifications: dict[str, Any] | None

    @property
    def is_empty(self) -> bool:
        """True when neither a template ID nor modifications were found."""
        return self.template_id is None and self.modifications is None


class MalformedInputError(ValueError):
    """Raised when near-JSON text cannot be repaired into valid JSON.

    Attributes:
        original: The text as it was handed to the repairer.
        repaired: The best-effort repaired text that still failed to parse.
        last_pass: Name of the last repair pass that was applied.
    """

    def __init__(self, original: str, repaired: str, last_pass: str | None, reason: str) -> None:
        self.original = original
        self.repaired = repaired
        self.last_pass = last_pass
        super().__init__(
            f"Could not repair JSON after pass '{last_pass}': {reason}. Text: {repaired[:200]}"
        )


class TemplateIdNotFoundError(LookupError):
    """Raised when no template ID was given and none could be parsed."""

    pass


class TemplateImportError(Exception):
    """Raised when a mandatory import stage fails.

    Attributes:
        stage: Name of the pipeline stage that failed (e.g. "fetch_template").
        template_id: The template ID being imported.
        status_code: Upstream HTTP status, when the failure came from an HTTP call.
    """

    def __init__(
        self,
        stage: str,
        template_id: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.stage = stage
        self.template_id = template_id
        self.status_code = status_code
        super().__init__(f"Template import failed at {stage} for {template_id}: {message}")
