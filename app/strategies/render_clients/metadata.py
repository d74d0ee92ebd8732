"""Render metadata and status helpers.

Render requests carry a metadata string of ``key:value`` pairs joined by
``|`` so that webhook callbacks can be traced back to a render job and
platform. Creatomate render states are mapped onto job states here too.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

logger = logging.getLogger(__name__)

PAIR_SEPARATOR = "|"
KEY_SEPARATOR = ":"

# Creatomate render status -> render job status
STATUS_MAP: dict[str, str] = {
    "planned": "pending",
    "waiting": "pending",
    "transcribing": "processing",
    "rendering": "processing",
    "succeeded": "completed",
    "failed": "failed",
}


def encode_render_metadata(values: Mapping[str, Any]) -> str:
    """Encode ``values`` as ``key:value|key:value``; None values are skipped."""
    return PAIR_SEPARATOR.join(
        f"{key}{KEY_SEPARATOR}{value}" for key, value in values.items() if value is not None
    )


def parse_render_metadata(metadata: str | None) -> dict[str, str]:
    """Decode a metadata string. Malformed pairs are ignored."""
    if not metadata:
        return {}

    values: dict[str, str] = {}
    for pair in metadata.split(PAIR_SEPARATOR):
        key, sep, value = pair.partition(KEY_SEPARATOR)
        if not sep or not key.strip():
            logger.debug(f"Skipping malformed metadata pair: {pair!r}")
            continue
        values[key.strip()] = value.strip()
    return values


def map_render_status(status: str | None) -> str:
    """Map a Creatomate render status; unknown states count as pending."""
    return STATUS_MAP.get(status or "", "pending")


def aggregate_job_status(statuses: Iterable[str]) -> str:
    """Combine per-render job statuses into one job status.

    Any failure fails the job. The job completes only when every render
    has completed.
    """
    statuses = list(statuses)
    if not statuses:
        return "pending"
    if "failed" in statuses:
        return "failed"
    if all(status == "completed" for status in statuses):
        return "completed"
    if any(status in ("processing", "completed") for status in statuses):
        return "processing"
    return "pending"
