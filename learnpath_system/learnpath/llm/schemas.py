from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Resource(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # open string: unknown kinds are kept for forward compatibility
    kind: str = Field(..., alias="type")
    title: str
    url: Optional[str] = None
    source: Optional[str] = None
    is_paid: bool = Field(False, alias="isPaid")


class Step(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str
    duration_minutes: int = Field(..., alias="durationMinutes", ge=0)
    resources: List[Resource] = []


class Plan(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    category: Optional[str] = None
    difficulty: Optional[int] = Field(None, ge=1, le=3)
    summary: str
    steps: List[Step] = Field(..., min_length=1)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class GoalRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., alias="goalTitle")
    description: Optional[str] = Field(None, alias="goalDescription")

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("description")
    @classmethod
    def _blank_description_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class ModelDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    capabilities: frozenset[str] = frozenset()

    @property
    def can_generate(self) -> bool:
        return "generateContent" in self.capabilities


class PlanState(str, Enum):
    SELECTING_MODEL = "selecting_model"
    GENERATING = "generating"
    EXTRACTING = "extracting"
    VALIDATING = "validating"
    FILTERING_RESOURCES = "filtering_resources"
    DONE = "done"
    FAILED = "failed"
    FALLBACK = "fallback"


class PlanResult(BaseModel):
    plan: Plan
    state: PlanState
    model: Optional[str] = None
