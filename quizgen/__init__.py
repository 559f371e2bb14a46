"""Quiz generation from study notes."""

from .generator import GenerationResult, QuizGenerator
from .prompt_builder import build_quiz_prompt
from .quiz_config import (
    DEFAULT_QUIZ_CONFIG,
    QuizConfig,
    QuizConfigError,
    QuizInputError,
    normalize_quiz_config,
)

__all__ = [
    "DEFAULT_QUIZ_CONFIG",
    "GenerationResult",
    "QuizConfig",
    "QuizConfigError",
    "QuizGenerator",
    "QuizInputError",
    "build_quiz_prompt",
    "normalize_quiz_config",
]
