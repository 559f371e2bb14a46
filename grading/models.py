"""Question, verdict and grade value objects."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from ai_router.errors import ErrorCode, RouterError

from .rubric import CRITERION_MAX
from .text import clamp, round_half_up

QuestionType = Literal["mcq", "short", "long"]
Band = Literal["correct", "mostly_correct", "partial", "incorrect"]

# Score needed for an item to count as correct, per question type
CORRECT_THRESHOLDS: dict[str, float] = {"mcq": 1.0, "short": 0.90, "long": 0.90}

BAND_FLOORS: tuple[tuple[float, Band], ...] = (
    (0.90, "correct"),
    (0.70, "mostly_correct"),
    (0.30, "partial"),
)


def band_for_score(score: float) -> Band:
    for floor, band in BAND_FLOORS:
        if score >= floor:
            return band
    return "incorrect"


# --- Questions ---


class MCQQuestion(BaseModel):
    type: Literal["mcq"] = "mcq"
    id: str = Field(min_length=1)
    prompt: str
    options: list[str] = Field(default_factory=list)
    answer: str | None = None
    explanation: str | None = None


class ShortQuestion(BaseModel):
    type: Literal["short"] = "short"
    id: str = Field(min_length=1)
    prompt: str
    answer: str | None = None  # optional reference text

    @property
    def reference(self) -> str | None:
        if self.answer and self.answer.strip():
            return self.answer
        return None


class LongQuestion(BaseModel):
    type: Literal["long"] = "long"
    id: str = Field(min_length=1)
    prompt: str
    answer: str | None = None  # reference used for rubric concepts

    @property
    def reference(self) -> str | None:
        if self.answer and self.answer.strip():
            return self.answer
        return None


Question = Annotated[MCQQuestion | ShortQuestion | LongQuestion, Field(discriminator="type")]


class QuestionSet(BaseModel):
    questions: list[Question]

    @field_validator("questions")
    @classmethod
    def _ids_unique(cls, v: list[Any]) -> list[Any]:
        seen: set[str] = set()
        for question in v:
            if question.id in seen:
                raise ValueError(f"duplicate question id {question.id!r}")
            seen.add(question.id)
        return v


def parse_questions(raw: Sequence[Any]) -> list[MCQQuestion | ShortQuestion | LongQuestion]:
    """Validate dicts (or already-built models) into typed questions."""
    return QuestionSet.model_validate({"questions": list(raw)}).questions


# --- Provider-sourced verdicts ---


class AIGradingResult(BaseModel):
    id: str = Field(min_length=1)
    score: float = Field(allow_inf_nan=False)
    band: Band | None = None
    why: str = ""
    improvements: list[str] = Field(default_factory=list)
    missing_terms: list[str] = Field(default_factory=list)
    misconception: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("score")
    @classmethod
    def _clamp_score(cls, v: float) -> float:
        return round_half_up(clamp(v, 0.0, 1.0), 2)

    @model_validator(mode="after")
    def _default_band(self) -> AIGradingResult:
        if self.band is None:
            self.band = band_for_score(self.score)
        return self


class AIRubricVerdict(BaseModel):
    id: str = Field(min_length=1)
    coverage: float = Field(default=0.0, allow_inf_nan=False)
    accuracy: float = Field(default=0.0, allow_inf_nan=False)
    clarity: float = Field(default=0.0, allow_inf_nan=False)
    conciseness: float = Field(default=0.0, allow_inf_nan=False)
    why: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("coverage", "accuracy", "clarity", "conciseness")
    @classmethod
    def _clamp_criterion(cls, v: float) -> float:
        return clamp(v, 0.0, CRITERION_MAX)


# --- Grade output ---


@dataclass
class BreakdownItem:
    id: str
    type: QuestionType
    prompt: str
    user_answer: str
    score: float
    feedback: str
    correct_answer: str | None = None
    improvement: str | None = None
    missing_terms: list[str] | None = None
    criteria: dict[str, float] | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"score must be within [0, 1], got {self.score}")

    @property
    def correct(self) -> bool:
        return self.score >= CORRECT_THRESHOLDS[self.type]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "prompt": self.prompt,
            "user_answer": self.user_answer,
            "correct": self.correct,
            "score": self.score,
            "feedback": self.feedback,
        }
        for key in ("correct_answer", "improvement", "missing_terms", "criteria"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class GradeOutput:
    percent: int
    correct_count: int
    total: int
    summary: str
    letter: str
    breakdown: list[BreakdownItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "percent": self.percent,
            "correct_count": self.correct_count,
            "total": self.total,
            "summary": self.summary,
            "letter": self.letter,
            "breakdown": [item.to_dict() for item in self.breakdown],
        }


class GradingBatchError(Exception):
    """A semantic grading batch came back unusable as a whole."""

    def __init__(
        self,
        message: str,
        *,
        router_error: RouterError | None = None,
    ) -> None:
        super().__init__(message)
        self.code = ErrorCode.AI_GRADING_PARSE_ERROR
        self.router_error = router_error
