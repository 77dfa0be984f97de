"""Locate and parse the JSON structure inside a free-text model response.

Models wrap their JSON in prose, in one or more code fences, or both. The
extractor strips fence markers, takes the span from the first opening bracket
to the last closing bracket and parses it. It never repairs broken JSON.
"""

from __future__ import annotations

import json
import logging
import re

from unionwatch.domain.errors import MalformedOutputError, NoStructureFoundError

log = logging.getLogger(__name__)

_FENCE_MARKER = re.compile(r"```[A-Za-z0-9_+-]*")
_SNIPPET_LENGTH = 200


def strip_code_fences(text: str) -> str:
    return _FENCE_MARKER.sub("", text).strip()


def find_structure_span(text: str) -> tuple[int, int] | None:
    """Return ``(start, end)`` of the outermost JSON-looking span, ``end`` exclusive.

    ``None`` means there is no opening bracket at all. An opening bracket with no
    closing bracket after it yields an empty span (``end <= start``).
    """

    openings = [index for index in (text.find("{"), text.find("[")) if index >= 0]
    if not openings:
        return None
    start = min(openings)
    end = max(text.rfind("}"), text.rfind("]"))
    return start, end + 1


def extract_structured(text: str) -> object:
    """Parse the JSON value embedded in ``text``.

    Raises ``NoStructureFoundError`` when the response has no ``{``/``[`` at all
    (the model answered in prose) and ``MalformedOutputError`` when the located
    span is not valid JSON.
    """

    cleaned = strip_code_fences(text)
    span = find_structure_span(cleaned)
    if span is None:
        raise NoStructureFoundError(
            "Model answered with plain text instead of structured data",
            raw_text=text,
        )

    start, end = span
    candidate = cleaned[start:end]
    if end <= start:
        raise MalformedOutputError(
            "Structured output has no closing bracket",
            snippet=cleaned[start : start + _SNIPPET_LENGTH],
        )

    try:
        return json.loads(candidate)
    except json.JSONDecodeError as exc:
        log.debug("Failed to parse model output: %s", candidate[:_SNIPPET_LENGTH])
        raise MalformedOutputError(
            f"Model output is not valid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})",
            snippet=candidate[:_SNIPPET_LENGTH],
        ) from exc
