"""Best-effort repair of near-JSON text.

Pasted CURL bodies and template descriptions often carry object literals
that are almost, but not quite, JSON: single quotes, bare keys, bare
values, trailing commas. Repair runs as two tiers of named passes so a
failure can be traced to the last pass that ran.
"""

import json
import logging
import re
from collections.abc import Callable
from typing import Any

from app.interfaces.variables import MalformedInputError

logger = logging.getLogger(__name__)

RepairPass = tuple[str, Callable[[str], str]]

_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_WHITESPACE = re.compile(r"\s+")
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z_$][\w.$-]*)\s*:")
# Anchored at the start of the unquoted span that follows a quoted key
_BARE_VALUE = re.compile(r"(\s*:\s*)([^\s\"{\[][^,}\]]*?)(\s*[,}\]])")
_NUMBER = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
_LITERALS = {"true", "false", "null"}


def split_quoted(text: str) -> list[tuple[str, bool]]:
    """Split ``text`` into ``(span, quoted)`` pairs.

    Quoted spans include their double quotes; backslash escapes inside
    them are honoured. An unterminated string runs to the end of text.
    """
    spans: list[tuple[str, bool]] = []
    start = 0
    index = 0
    in_string = False

    while index < len(text):
        char = text[index]
        if in_string:
            if char == "\\":
                index += 1
            elif char == '"':
                spans.append((text[start : index + 1], True))
                start = index + 1
                in_string = False
        elif char == '"':
            if index > start:
                spans.append((text[start:index], False))
            start = index
            in_string = True
        index += 1

    if start < len(text):
        spans.append((text[start:], in_string))
    return spans


def normalize_quotes(text: str) -> str:
    """Replace every single quote with a double quote."""
    return text.replace("'", '"')


def strip_trailing_commas(text: str) -> str:
    """Remove commas that directly precede a closing brace or bracket."""
    return _TRAILING_COMMA.sub(r"\1", text)


def collapse_whitespace(text: str) -> str:
    """Collapse whitespace runs (including newlines) to single spaces."""
    return _WHITESPACE.sub(" ", text).strip()


def quote_bare_keys(text: str) -> str:
    """Quote object keys that follow '{' or ',' without quotes.

    Dotted keys such as ``Heading.text`` are treated as a single key.
    Text inside quoted strings is left alone.
    """
    return "".join(
        span if quoted else _BARE_KEY.sub(r'\1"\2":', span) for span, quoted in split_quoted(text)
    )


def _is_json_literal(value: str) -> bool:
    return value in _LITERALS or _NUMBER.fullmatch(value) is not None


def _quote_value(match: re.Match[str]) -> str:
    prefix, value, suffix = match.groups()
    value = value.strip()
    if _is_json_literal(value):
        return f"{prefix}{value}{suffix}"
    return f"{prefix}{json.dumps(value)}{suffix}"


def quote_bare_values(text: str) -> str:
    """Quote values that are not JSON literals, objects, arrays or strings.

    Must run after :func:`quote_bare_keys`: a bare value is recognised
    only in the unquoted span right after a quoted key.
    """
    parts: list[str] = []
    previous_quoted = False
    for span, quoted in split_quoted(text):
        if not quoted and previous_quoted:
            match = _BARE_VALUE.match(span)
            if match:
                span = _quote_value(match) + span[match.end() :]
        parts.append(span)
        previous_quoted = quoted
    return "".join(parts)


BASIC_PASSES: tuple[RepairPass, ...] = (
    ("normalize_quotes", normalize_quotes),
    ("strip_trailing_commas", strip_trailing_commas),
    ("collapse_whitespace", collapse_whitespace),
)

DEEP_PASSES: tuple[RepairPass, ...] = (
    ("quote_bare_keys", quote_bare_keys),
    ("quote_bare_values", quote_bare_values),
)


class JsonRepairer:
    """Repairs and parses near-JSON object literals.

    Text that is already valid JSON is parsed as-is. Otherwise the basic
    passes run, and the deep passes only run if the basic result still
    fails to parse.
    """

    def __init__(
        self,
        basic_passes: tuple[RepairPass, ...] = BASIC_PASSES,
        deep_passes: tuple[RepairPass, ...] = DEEP_PASSES,
    ) -> None:
        self._basic_passes = basic_passes
        self._deep_passes = deep_passes

    def parse(self, text: str) -> Any:
        """Repair ``text`` as needed and parse it.

        Args:
            text: Near-JSON text, typically an object literal.

        Returns:
            The parsed JSON value.

        Raises:
            MalformedInputError: If the text still fails to parse after all passes.
        """
        # Strict JSON skips repair; normalize_quotes would rewrite apostrophes
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.debug("Input is not strict JSON, applying basic passes")

        repaired, last_pass = self._apply(text, self._basic_passes, None)
        try:
            return json.loads(repaired)
        except json.JSONDecodeError:
            logger.debug(f"Basic repair insufficient after '{last_pass}', applying deep passes")

        repaired, last_pass = self._apply(repaired, self._deep_passes, last_pass)
        try:
            return json.loads(repaired)
        except json.JSONDecodeError as e:
            raise MalformedInputError(
                original=text,
                repaired=repaired,
                last_pass=last_pass,
                reason=str(e),
            ) from e

    @staticmethod
    def _apply(
        text: str, passes: tuple[RepairPass, ...], last_pass: str | None
    ) -> tuple[str, str | None]:
        for name, repair in passes:
            text = repair(text)
            last_pass = name
        return text, last_pass
