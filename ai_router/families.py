"""Model family detection and family-aware call parameters.

Reasoning models (gpt-5*, o-series):
- reject a caller-supplied temperature (only the provider default works)
- take ``max_completion_tokens`` as their token budget

Standard models (gpt-4o, gpt-4o-mini, ...):
- accept temperature
- take ``max_tokens``
"""

from __future__ import annotations

from typing import Any

from .config import GRADING_TASKS, ModelFamily, RouterSettings, RouterTask

REASONING_PREFIXES: tuple[str, ...] = ("gpt-5", "o1", "o3", "o4")

TOKENS_PER_QUESTION = 150
GENERATION_TOKEN_BASE = 500
GENERATION_TOKEN_CAP = 4000
GRADING_TOKEN_LIMIT = 2000
DEFAULT_QUESTION_COUNT = 8

GENERATION_TEMPERATURE = 0.7
GRADING_TEMPERATURE = 0.1

JSON_OBJECT_FORMAT: dict[str, str] = {"type": "json_object"}


def _strip_provider_prefix(model: str) -> str:
    # "openai/gpt-5-mini" -> "gpt-5-mini"
    return model.rsplit("/", 1)[-1]


def classify_model_family(model: str) -> ModelFamily:
    lowered = _strip_provider_prefix(model.strip().lower())
    if lowered.startswith(REASONING_PREFIXES) or "reasoning" in lowered:
        return "reasoning"
    return "standard"


def build_token_params(
    family: ModelFamily,
    token_limit: int,
    temperature: float | None = None,
) -> dict[str, Any]:
    """Return the token-budget (and, for standard models, temperature) kwargs."""
    if family == "reasoning":
        return {"max_completion_tokens": token_limit}

    params: dict[str, Any] = {"max_tokens": token_limit}
    if temperature is not None:
        params["temperature"] = temperature
    return params


def token_limit_for(task: RouterTask, question_count: int | None = None) -> int:
    if task in GRADING_TASKS:
        return GRADING_TOKEN_LIMIT
    count = question_count or DEFAULT_QUESTION_COUNT
    return min(count * TOKENS_PER_QUESTION + GENERATION_TOKEN_BASE, GENERATION_TOKEN_CAP)


def temperature_for(task: RouterTask) -> float:
    return GRADING_TEMPERATURE if task in GRADING_TASKS else GENERATION_TEMPERATURE


def build_call_params(
    model: str,
    task: RouterTask,
    prompt: str,
    *,
    question_count: int | None = None,
    settings: RouterSettings | None = None,
) -> dict[str, Any]:
    """Build the full keyword set for one provider call."""
    family = classify_model_family(model)
    params: dict[str, Any] = {
        "model": model,
        "messages": [{"role": "user", "content": prompt}],
    }
    params.update(
        build_token_params(family, token_limit_for(task, question_count), temperature_for(task))
    )
    if settings is None or settings.router_json_strict:
        params["response_format"] = dict(JSON_OBJECT_FORMAT)
    return params
