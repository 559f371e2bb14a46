"""Request / result value objects for the AI router."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .config import ModelFamily, RouterTask
from .errors import RouterError


@dataclass
class RouterContext:
    question_count: int | None = None
    question_type: str | None = None  # "mcq" | "short" | "long"
    has_reference: bool | None = None
    correlation_id: str | None = None
    quiz_config: Any = None


@dataclass
class RouterRequest:
    task: RouterTask
    prompt: str
    context: RouterContext = field(default_factory=RouterContext)


@dataclass
class RouterMetrics:
    correlation_id: str
    model_used: str
    model_family: ModelFamily
    fallback_triggered: bool
    model_decision_reason: str
    attempt_count: int
    latency_ms: int
    tokens_prompt: int | None = None
    tokens_completion: int | None = None
    tokens_total: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "correlation_id": self.correlation_id,
            "model_used": self.model_used,
            "model_family": self.model_family,
            "fallback_triggered": self.fallback_triggered,
            "model_decision_reason": self.model_decision_reason,
            "attempt_count": self.attempt_count,
            "latency_ms": self.latency_ms,
            "tokens_prompt": self.tokens_prompt,
            "tokens_completion": self.tokens_completion,
            "tokens_total": self.tokens_total,
        }


@dataclass
class RouterResult:
    success: bool
    metrics: RouterMetrics
    content: str | None = None
    error: RouterError | None = None

    def __post_init__(self) -> None:
        if (self.content is None) == (self.error is None):
            raise ValueError("RouterResult needs exactly one of content or error")
        if self.success != (self.content is not None):
            raise ValueError("RouterResult.success must match the populated field")

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "content": self.content,
            "metrics": self.metrics.to_dict(),
            "error": self.error.to_dict() if self.error else None,
        }
