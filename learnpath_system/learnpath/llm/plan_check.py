"""
Structural checks for a model-generated plan.
What it does:
- Walks the candidate dict in a fixed order
- Stops at the first bad field and names it (e.g. steps[2].durationMinutes)
- Never fills in or coerces missing data
- Builds the typed Plan once the shape is known good

And, the main purpose:
Reject malformed plans before any link checking happens.
"""


import math
from typing import Any

from learnpath.core.errors import PlanValidationError
from learnpath.llm.schemas import Plan


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)


def _require_text(obj: dict, key: str, path: str, *, allow_empty: bool = True) -> None:
    v = obj.get(key)
    if not isinstance(v, str):
        raise PlanValidationError(path, "missing or not a string")
    if not allow_empty and not v.strip():
        raise PlanValidationError(path, "must not be empty")


def _optional_text(obj: dict, key: str, path: str) -> None:
    v = obj.get(key)
    if v is not None and not isinstance(v, str):
        raise PlanValidationError(path, "must be a string")


def _check_resource(res: Any, path: str) -> None:
    if not isinstance(res, dict):
        raise PlanValidationError(path, "must be an object")
    _require_text(res, "type", f"{path}.type")
    _require_text(res, "title", f"{path}.title")
    _optional_text(res, "url", f"{path}.url")
    _optional_text(res, "source", f"{path}.source")
    paid = res.get("isPaid")
    if paid is not None and not isinstance(paid, bool):
        raise PlanValidationError(f"{path}.isPaid", "must be a boolean")


def _check_step(step: Any, path: str) -> None:
    if not isinstance(step, dict):
        raise PlanValidationError(path, "must be an object")
    _require_text(step, "id", f"{path}.id")
    _require_text(step, "title", f"{path}.title")
    _require_text(step, "description", f"{path}.description")

    duration = step.get("durationMinutes")
    if not _is_number(duration):
        raise PlanValidationError(f"{path}.durationMinutes", "missing or not a number")
    if duration < 0:
        raise PlanValidationError(f"{path}.durationMinutes", "must be non-negative")

    resources = step.get("resources")
    if not isinstance(resources, list):
        raise PlanValidationError(f"{path}.resources", "missing or not a list")
    for j, res in enumerate(resources):
        _check_resource(res, f"{path}.resources[{j}]")


def validate_plan(candidate: Any) -> Plan:
    if not isinstance(candidate, dict):
        raise PlanValidationError("plan", "must be an object")

    _require_text(candidate, "title", "title", allow_empty=False)
    _require_text(candidate, "summary", "summary", allow_empty=False)

    steps = candidate.get("steps")
    if not isinstance(steps, list) or not steps:
        raise PlanValidationError("steps", "missing, not a list, or empty")

    seen: set[str] = set()
    for i, step in enumerate(steps):
        _check_step(step, f"steps[{i}]")
        if step["id"] in seen:
            raise PlanValidationError(f"steps[{i}].id", f"duplicate step id '{step['id']}'")
        seen.add(step["id"])

    _optional_text(candidate, "category", "category")
    difficulty = candidate.get("difficulty")
    if difficulty is not None:
        if isinstance(difficulty, bool) or not isinstance(difficulty, int) or not 1 <= difficulty <= 3:
            raise PlanValidationError("difficulty", "must be an integer between 1 and 3")

    return Plan(
        title=candidate["title"].strip(),
        category=candidate.get("category"),
        difficulty=difficulty,
        summary=candidate["summary"].strip(),
        steps=[
            {
                "id": s["id"],
                "title": s["title"],
                "description": s["description"],
                # fractional minutes are rounded, never clamped
                "durationMinutes": int(round(s["durationMinutes"])),
                "resources": [
                    {
                        "type": r["type"],
                        "title": r["title"],
                        "url": r.get("url") or None,
                        "source": r.get("source"),
                        "isPaid": r.get("isPaid") is True,
                    }
                    for r in s["resources"]
                ],
            }
            for s in steps
        ],
    )
