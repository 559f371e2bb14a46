"""Hybrid answer grading: deterministic gates, batched semantic grading, rubric."""

from .cascade import GradingCascade, aggregate_percent, grade_submission, letter_grade
from .models import (
    AIGradingResult,
    BreakdownItem,
    GradeOutput,
    GradingBatchError,
    LongQuestion,
    MCQQuestion,
    ShortQuestion,
    parse_questions,
)
from .rubric import CriteriaScores, RubricResult, apply_rubric, calculate_rubric_score

__all__ = [
    "AIGradingResult",
    "BreakdownItem",
    "CriteriaScores",
    "GradeOutput",
    "GradingBatchError",
    "GradingCascade",
    "LongQuestion",
    "MCQQuestion",
    "RubricResult",
    "ShortQuestion",
    "aggregate_percent",
    "apply_rubric",
    "calculate_rubric_score",
    "grade_submission",
    "letter_grade",
    "parse_questions",
]
