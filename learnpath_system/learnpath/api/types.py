"""
API request and response schemas.
What it defines:
- Goal creation / progress payloads
- Parsing of the plan-generation body into a GoalRequest
- Validation rules

And, the main purpose:
Ensure structured communication between client and server.
"""


from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from learnpath.core.errors import InputError
from learnpath.llm.schemas import GoalRequest


class CreateGoalRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[int] = Field(None, ge=1, le=3)
    study_plan: Optional[dict[str, Any]] = Field(None, alias="studyPlan")


class UpdateProgressRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lesson_id: Optional[str] = Field(None, alias="lessonId")
    completed: bool = False


def summarize_validation_error(errors: list) -> str:
    first = errors[0] if errors else {}
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body") or "body"
    return f"Invalid field '{loc}': {first.get('msg', 'invalid value')}"


def parse_goal_request(raw: Any) -> GoalRequest:
    if not isinstance(raw, dict):
        raise InputError("Request body must be a JSON object")
    title = raw.get("goalTitle")
    if not isinstance(title, str) or not title.strip():
        raise InputError("Goal title is required and must be a string")
    try:
        return GoalRequest.model_validate(raw)
    except ValidationError as e:
        raise InputError(summarize_validation_error(e.errors())) from e
