"""CURL command parser.

Extracts a template ID and a modifications object from a CURL command
copied out of the rendering service's dashboard. Both GET-by-id
(``.../v1/templates/<id>``) and POST render bodies
(``{"template_id": ..., "modifications": {...}}``) are supported.
"""

import logging
import re
from typing import Any

from app.interfaces.variables import MalformedInputError, ParsedCurl
from app.strategies.template_engine.json_repair import JsonRepairer

logger = logging.getLogger(__name__)


# Tried in order; first match wins
TEMPLATE_ID_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("url_path", re.compile(r"templates/([a-f0-9-]{36})", re.IGNORECASE)),
    (
        "json_field",
        re.compile(r"""["']template_id["']\s*:\s*["']([a-f0-9-]{36})["']""", re.IGNORECASE),
    ),
)

MODIFICATIONS_KEY = re.compile(r"""["']?modifications["']?\s*:\s*(?=\{)""")


def extract_template_id(command: str) -> str | None:
    """Return the first template ID found in ``command``, or None."""
    for name, pattern in TEMPLATE_ID_PATTERNS:
        match = pattern.search(command)
        if match:
            logger.debug(f"Template ID matched by '{name}' pattern")
            return match.group(1)
    return None


def find_object_literal(text: str, start: int) -> str | None:
    """Return the object literal that opens at ``text[start]``.

    Scans forward to the brace that closes the opening one, skipping
    braces inside quoted strings. Returns None if the literal is never
    closed.
    """
    if start >= len(text) or text[start] != "{":
        return None

    depth = 0
    quote: str | None = None
    escaped = False

    for index in range(start, len(text)):
        char = text[index]
        if quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
            continue

        if char in "\"'":
            quote = char
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]

    return None


def extract_modifications_block(text: str) -> str | None:
    """Return the raw object literal that follows a ``modifications`` key."""
    match = MODIFICATIONS_KEY.search(text)
    if not match:
        return None
    return find_object_literal(text, match.end())


class CurlCommandParser:
    """Parses CURL commands into a template ID and modifications.

    Template ID and modifications are extracted independently: a command
    may yield either, both or neither, and the caller decides what to do
    about a missing part.
    """

    def __init__(self, repairer: JsonRepairer | None = None) -> None:
        self._repairer = repairer or JsonRepairer()

    def parse(self, command: str) -> ParsedCurl:
        """Parse a CURL command.

        Args:
            command: The raw command text as pasted by the user.

        Returns:
            ParsedCurl with whatever parts could be extracted.
        """
        result = ParsedCurl(
            template_id=extract_template_id(command),
            modifications=self.extract_modifications(command),
        )
        logger.info(
            f"Parsed CURL command: template_id={result.template_id}, "
            f"modifications={len(result.modifications) if result.modifications else 0}"
        )
        return result

    def extract_modifications(self, text: str | None) -> dict[str, Any] | None:
        """Extract the modifications object from arbitrary text.

        Used on CURL commands and on template descriptions that embed a
        sample request.

        Args:
            text: Text that may contain a ``"modifications": {...}`` block.

        Returns:
            The parsed modifications, or None if absent or unrepairable.
        """
        if not text:
            return None

        block = extract_modifications_block(text)
        if block is None:
            return None

        try:
            parsed = self._repairer.parse(block)
        except MalformedInputError as e:
            logger.warning(f"Ignoring unparseable modifications block: {e}")
            return None

        if not isinstance(parsed, dict):
            logger.warning(f"Modifications block is not an object: {type(parsed).__name__}")
            return None

        return parsed
