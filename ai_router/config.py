"""Router configuration loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

RouterTask = Literal["quiz_generation", "grade_mcq", "grade_short", "grade_long"]
ModelFamily = Literal["reasoning", "standard"]

GRADING_TASKS: frozenset[str] = frozenset({"grade_mcq", "grade_short", "grade_long"})


class RouterSettings(BaseSettings):
    # --- Generation models ---
    openai_model_generate_default: str = "gpt-4o-mini"
    openai_model_generate_fallback: str = "gpt-5-mini"
    # Typing-heavy quizzes prefer the reasoning model first
    openai_model_generate_typing_default: str = "gpt-5-mini"
    openai_model_generate_typing_fallback: str = "gpt-4o-mini"

    # --- Grading models ---
    openai_model_grade_default_mcq: str = "gpt-4o-mini"
    openai_model_grade_fallback_mcq: str = "gpt-5-mini"
    openai_model_grade_default_short: str = "gpt-4o-mini"
    openai_model_grade_fallback_short: str = "gpt-5-mini"
    openai_model_grade_default_long: str = "gpt-5-mini"
    openai_model_grade_fallback_long: str = "gpt-4o-mini"

    # --- Router policy ---
    router_enable_fallback: bool = True
    router_json_strict: bool = True
    router_timeout_ms: int = Field(default=60000, gt=0)
    # Read for parity with deployments; fallback stays flag-gated regardless
    router_max_retries: int = Field(default=1, ge=0)

    # --- Provider ---
    openai_api_key: str = ""
    openai_base_url: str = ""

    log_level: str = "info"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def timeout_seconds(self) -> float:
        return self.router_timeout_ms / 1000


def get_settings() -> RouterSettings:
    """Read settings once; callers pass the instance down explicitly."""
    return RouterSettings()
