"""Configuration-derived status snapshot for the router."""

from __future__ import annotations

from typing import Any

from .config import RouterSettings
from .families import classify_model_family


def _pair(default_model: str, fallback_model: str) -> dict[str, str]:
    return {
        "default_model": default_model,
        "default_family": classify_model_family(default_model),
        "fallback_model": fallback_model,
        "fallback_family": classify_model_family(fallback_model),
    }


def router_health(settings: RouterSettings | None = None) -> dict[str, Any]:
    """Describe which models each task would use. Makes no provider calls."""
    settings = settings or RouterSettings()
    return {
        "status": "ok" if settings.openai_api_key else "degraded",
        "api_key_configured": bool(settings.openai_api_key),
        "fallback_enabled": settings.router_enable_fallback,
        "json_strict": settings.router_json_strict,
        "timeout_ms": settings.router_timeout_ms,
        "generation": {
            "mcq": _pair(
                settings.openai_model_generate_default,
                settings.openai_model_generate_fallback,
            ),
            "typing": _pair(
                settings.openai_model_generate_typing_default,
                settings.openai_model_generate_typing_fallback,
            ),
        },
        "grading": {
            "mcq": _pair(
                settings.openai_model_grade_default_mcq,
                settings.openai_model_grade_fallback_mcq,
            ),
            "short": _pair(
                settings.openai_model_grade_default_short,
                settings.openai_model_grade_fallback_short,
            ),
            "long": _pair(
                settings.openai_model_grade_default_long,
                settings.openai_model_grade_fallback_long,
            ),
        },
    }
