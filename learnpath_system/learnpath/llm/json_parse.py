import json
import re
from typing import Any, Iterator

from learnpath.core.errors import ExtractionError

# fences only count at the start of a line; a JSON string cannot hold a raw newline
FENCE_RE = re.compile(r"^```[ \t]*([\w+-]*)[ \t]*\r?\n(.*?)^[ \t]*```", re.MULTILINE | re.DOTALL)
PREVIEW_CHARS = 200


def _preview(s: str) -> str:
    return (s or "")[:PREVIEW_CHARS]


def _fenced_objects(text: str) -> Iterator[str]:
    for m in FENCE_RE.finditer(text):
        if m.group(1).lower() not in ("", "json"):
            continue
        body = m.group(2).strip()
        if "{" in body and "}" in body:
            yield body


def _brace_span(text: str) -> str | None:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def extract_json(text: str) -> dict[str, Any]:
    """
    Pull the plan object out of a model response.
    A fenced code block wins; otherwise the first '{' .. last '}' span.
    Raises ExtractionError (with a short preview) when nothing parses.
    """
    raw = text or ""
    candidate = next(_fenced_objects(raw), None)
    parsed: Any = None
    if candidate is not None:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            candidate = None
    if candidate is None:
        candidate = _brace_span(raw)
        if candidate is None:
            raise ExtractionError("No JSON object found in model response", preview=_preview(raw))
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as e:
            raise ExtractionError(f"Model response is not valid JSON: {e.msg}", preview=_preview(candidate)) from e
    if not isinstance(parsed, dict):
        raise ExtractionError(
            f"JSON is not an object (got {type(parsed).__name__})", preview=_preview(candidate)
        )
    return parsed
