"""Quiz generation: prompt, route, validate the returned quiz."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ai_router.errors import ErrorCode, RouterError, user_message
from ai_router.logs import log_event
from ai_router.orchestrator import AIRouter
from ai_router.schemas import RouterContext, RouterMetrics, RouterRequest

from .prompt_builder import build_quiz_prompt
from .quiz_config import MAX_QUESTIONS, QuizConfig, QuizInputError, normalize_quiz_config

logger = logging.getLogger(__name__)

MIN_NOTES_CHARS = 20
MAX_NOTES_CHARS = 50_000
MAX_PROMPT_CHARS = 180
PROVIDER_MESSAGE_CHARS = 500


class GeneratedMCQ(BaseModel):
    id: str = Field(min_length=1)
    type: Literal["mcq"]
    prompt: str = Field(min_length=1, max_length=MAX_PROMPT_CHARS)
    options: list[str] = Field(min_length=3, max_length=5)
    answer: str

    @model_validator(mode="after")
    def _answer_is_an_option(self) -> GeneratedMCQ:
        if self.answer not in self.options:
            raise ValueError(f"answer {self.answer!r} is not one of the options")
        return self


class GeneratedShort(BaseModel):
    id: str = Field(min_length=1)
    type: Literal["short"]
    prompt: str = Field(min_length=1, max_length=MAX_PROMPT_CHARS)
    answer: str


GeneratedQuestion = Annotated[GeneratedMCQ | GeneratedShort, Field(discriminator="type")]


class GeneratedQuiz(BaseModel):
    questions: list[GeneratedQuestion] = Field(min_length=1, max_length=MAX_QUESTIONS)

    @field_validator("questions")
    @classmethod
    def _ids_unique(cls, v: list[Any]) -> list[Any]:
        ids = [question.id for question in v]
        if len(ids) != len(set(ids)):
            raise ValueError("question ids must be unique")
        return v


@dataclass
class GenerationResult:
    success: bool
    metrics: RouterMetrics
    questions: list[dict[str, Any]] = field(default_factory=list)
    error: RouterError | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "questions": self.questions,
            "metrics": self.metrics.to_dict(),
            "error": self.error.to_dict() if self.error else None,
        }


def validate_notes(notes: str) -> str:
    trimmed = (notes or "").strip()
    if len(trimmed) < MIN_NOTES_CHARS:
        raise QuizInputError(f"Notes text must be at least {MIN_NOTES_CHARS} characters")
    if len(trimmed) > MAX_NOTES_CHARS:
        raise QuizInputError(f"Notes text too long (max {MAX_NOTES_CHARS} characters)")
    return trimmed


class QuizGenerator:
    """
    Turns study notes into a validated quiz.

    Usage:
        generator = QuizGenerator(AIRouter(ModelRouter(settings)))
        result = await generator.generate(notes, {"question_type": "typing"})
    """

    def __init__(self, router: AIRouter | None = None) -> None:
        self.router = router or AIRouter()

    async def generate(
        self,
        notes: str,
        config: QuizConfig | Mapping[str, Any] | None = None,
        *,
        correlation_id: str | None = None,
    ) -> GenerationResult:
        """
        Raises:
            QuizInputError: notes are too short or too long.
            QuizConfigError: config violates the schema.
        """
        text = validate_notes(notes)
        quiz_config = normalize_quiz_config(config)

        request = RouterRequest(
            task="quiz_generation",
            prompt=build_quiz_prompt(quiz_config, text),
            context=RouterContext(
                question_count=quiz_config.question_count,
                question_type=quiz_config.question_type,
                correlation_id=correlation_id,
                quiz_config=quiz_config,
            ),
        )
        result = await self.router.route(request)
        if not result.success:
            return GenerationResult(success=False, metrics=result.metrics, error=result.error)

        try:
            quiz = GeneratedQuiz.model_validate_json(result.content or "")
        except ValidationError as exc:
            log_event(
                logger,
                logging.ERROR,
                "QUIZ_SCHEMA_INVALID",
                correlation_id=result.metrics.correlation_id,
                model_used=result.metrics.model_used,
                error_count=exc.error_count(),
            )
            return GenerationResult(
                success=False,
                metrics=result.metrics,
                error=RouterError(
                    code=ErrorCode.SCHEMA_INVALID,
                    message=user_message(ErrorCode.SCHEMA_INVALID),
                    recoverable=True,
                    provider_message=str(exc)[:PROVIDER_MESSAGE_CHARS],
                ),
            )

        if len(quiz.questions) != quiz_config.question_count:
            logger.warning(
                "Model returned %d questions, %d requested",
                len(quiz.questions),
                quiz_config.question_count,
            )

        return GenerationResult(
            success=True,
            metrics=result.metrics,
            questions=[question.model_dump() for question in quiz.questions],
        )
