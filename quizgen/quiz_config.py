"""Quiz configuration schema, defaults and normalisation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, model_validator

QuestionType = Literal["mcq", "typing", "hybrid"]
Coverage = Literal["key_concepts", "broad_sample"]
Difficulty = Literal["low", "medium", "high"]

MIN_QUESTIONS = 1
MAX_QUESTIONS = 10


class QuizInputError(ValueError):
    """Caller-supplied generation input is unusable."""


class QuizConfigError(QuizInputError):
    pass


class QuestionCounts(BaseModel):
    mcq: int = Field(ge=0)
    typing: int = Field(ge=0)


class QuizConfig(BaseModel):
    question_type: QuestionType = "mcq"
    question_count: int = Field(default=8, ge=MIN_QUESTIONS, le=MAX_QUESTIONS)
    coverage: Coverage = "key_concepts"
    difficulty: Difficulty = "medium"
    question_counts: QuestionCounts | None = None

    @model_validator(mode="after")
    def _hybrid_counts_sum(self) -> QuizConfig:
        if self.question_type != "hybrid":
            return self
        if self.question_counts is None:
            raise ValueError("hybrid quizzes need question_counts")
        total = self.question_counts.mcq + self.question_counts.typing
        if total != self.question_count:
            raise ValueError(
                f"question_counts must sum to question_count ({total} != {self.question_count})"
            )
        return self


DEFAULT_QUIZ_CONFIG = QuizConfig()


def normalize_quiz_config(config: QuizConfig | Mapping[str, Any] | None = None) -> QuizConfig:
    """
    Fill defaults and validate.

    ``question_counts`` is only kept for hybrid quizzes.

    Raises:
        QuizConfigError: the config violates the schema.
    """
    if config is None:
        return DEFAULT_QUIZ_CONFIG
    if isinstance(config, QuizConfig):
        data = config.model_dump()
    else:
        data = {key: value for key, value in config.items() if value is not None}

    if data.get("question_type", DEFAULT_QUIZ_CONFIG.question_type) != "hybrid":
        data.pop("question_counts", None)

    try:
        return QuizConfig.model_validate(data)
    except ValidationError as exc:
        raise QuizConfigError(f"Invalid quiz config: {exc}") from exc
