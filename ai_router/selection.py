from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .config import RouterSettings, RouterTask
from .model_router import read_field

FALLBACK_REASONS: frozenset[str] = frozenset(
    {"rate_limit", "timeout", "parse_error", "model_error", "unknown"}
)


@dataclass(frozen=True)
class ModelSelection:
    task: RouterTask
    default_model: str
    fallback_model: str
    decision_prefix: str  # "mcq" | "typing" | "grading"

    @property
    def default_reason(self) -> str:
        return f"{self.decision_prefix}_default"

    def fallback_reason(self, reason: str) -> str:
        normalized = reason.strip().lower() if reason else "unknown"
        if normalized not in FALLBACK_REASONS:
            normalized = "unknown"
        return f"{self.decision_prefix}_fallback_{normalized}"


def is_typing_heavy(quiz_config: Any) -> bool:
    """True when free-text questions make up the whole mix or at least half of it."""
    if quiz_config is None:
        return False
    question_type = read_field(quiz_config, "question_type")
    if question_type == "typing":
        return True
    if question_type != "hybrid":
        return False
    counts = read_field(quiz_config, "question_counts")
    if counts is None:
        return False
    typing = int(read_field(counts, "typing", 0) or 0)
    mcq = int(read_field(counts, "mcq", 0) or 0)
    return typing >= mcq


def select_models(
    task: RouterTask,
    settings: RouterSettings,
    quiz_config: Any = None,
) -> ModelSelection:
    if task == "quiz_generation":
        if is_typing_heavy(quiz_config):
            return ModelSelection(
                task=task,
                default_model=settings.openai_model_generate_typing_default,
                fallback_model=settings.openai_model_generate_typing_fallback,
                decision_prefix="typing",
            )
        return ModelSelection(
            task=task,
            default_model=settings.openai_model_generate_default,
            fallback_model=settings.openai_model_generate_fallback,
            decision_prefix="mcq",
        )

    grading_pairs = {
        "grade_mcq": (
            settings.openai_model_grade_default_mcq,
            settings.openai_model_grade_fallback_mcq,
        ),
        "grade_short": (
            settings.openai_model_grade_default_short,
            settings.openai_model_grade_fallback_short,
        ),
        "grade_long": (
            settings.openai_model_grade_default_long,
            settings.openai_model_grade_fallback_long,
        ),
    }
    if task not in grading_pairs:
        raise ValueError(f"Invalid router task: {task}")
    default_model, fallback_model = grading_pairs[task]
    return ModelSelection(
        task=task,
        default_model=default_model,
        fallback_model=fallback_model,
        decision_prefix="grading",
    )
