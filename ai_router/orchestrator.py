"""Fallback orchestrator: primary model, then at most one fallback model."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from enum import StrEnum

from .config import ModelFamily, RouterSettings
from .errors import (
    OUTPUT_SHAPE_STATUS,
    ErrorClassification,
    ProviderCallError,
    RouterError,
    classify_error,
    classify_output_failure,
    fallback_reason,
    provider_message,
    provider_status,
    user_message,
)
from .families import build_call_params, classify_model_family
from .logs import log_event
from .model_router import ModelRouter
from .schemas import RouterMetrics, RouterRequest, RouterResult
from .selection import select_models
from .validation import OutputFailure, validate_response

logger = logging.getLogger(__name__)


class RouteState(StrEnum):
    IDLE = "idle"
    ATTEMPT_PRIMARY = "attempt_primary"
    ATTEMPT_FALLBACK = "attempt_fallback"
    SUCCESS = "success"
    FAILURE = "failure"


TERMINAL_STATES: frozenset[RouteState] = frozenset({RouteState.SUCCESS, RouteState.FAILURE})


def next_state(
    state: RouteState,
    *,
    succeeded: bool = False,
    classification: ErrorClassification | None = None,
    fallback_enabled: bool = True,
    fallback_attempted: bool = False,
) -> RouteState:
    """
    Pure transition function of the routing state machine.

    Fallback is gated on the ``fallback_attempted`` flag rather than on an
    attempt count, so exactly one fallback can ever happen per request.
    """
    if state in TERMINAL_STATES:
        raise ValueError(f"No transition out of terminal state '{state}'")
    if state == RouteState.IDLE:
        return RouteState.ATTEMPT_PRIMARY
    if succeeded:
        return RouteState.SUCCESS
    if (
        fallback_enabled
        and not fallback_attempted
        and classification is not None
        and classification.retryable
    ):
        return RouteState.ATTEMPT_FALLBACK
    return RouteState.FAILURE


@dataclass
class AttemptRecord:
    model: str
    family: ModelFamily
    latency_ms: int
    content: str | None = None
    classification: ErrorClassification | None = None
    provider_status: int | None = None
    provider_message: str | None = None
    usage: dict[str, int] | None = None


class AIRouter:
    """
    Routes generation and grading calls with a single policy-gated fallback.

    Flow:
    1. Resolve default/fallback models for the task
    2. Attempt the default model (call + validate/repair)
    3. On a retryable failure, and only if fallback is enabled, attempt the
       fallback model once
    4. Fold the outcome into a RouterResult; nothing is raised to the caller
    """

    def __init__(
        self,
        client: ModelRouter | None = None,
        settings: RouterSettings | None = None,
    ) -> None:
        self.settings = settings or (client.settings if client else RouterSettings())
        self.client = client or ModelRouter(self.settings)

    async def route(self, request: RouterRequest) -> RouterResult:
        selection = select_models(request.task, self.settings, request.context.quiz_config)
        correlation_id = request.context.correlation_id or str(uuid.uuid4())
        fallback_enabled = self.settings.router_enable_fallback

        state = next_state(RouteState.IDLE)
        fallback_attempted = False
        decision_reason = selection.default_reason
        attempt_count = 0
        total_latency_ms = 0

        while True:
            model = (
                selection.fallback_model
                if state == RouteState.ATTEMPT_FALLBACK
                else selection.default_model
            )
            attempt_count += 1
            attempt = await self._attempt(model, request, correlation_id)
            total_latency_ms += attempt.latency_ms
            metrics = RouterMetrics(
                correlation_id=correlation_id,
                model_used=attempt.model,
                model_family=attempt.family,
                fallback_triggered=fallback_attempted,
                model_decision_reason=decision_reason,
                attempt_count=attempt_count,
                latency_ms=total_latency_ms,
            )

            classification = attempt.classification
            if classification is None:
                usage = attempt.usage or {}
                metrics.tokens_prompt = usage.get("prompt_tokens")
                metrics.tokens_completion = usage.get("completion_tokens")
                metrics.tokens_total = usage.get("total_tokens")
                return RouterResult(success=True, content=attempt.content, metrics=metrics)

            self._log_failed_attempt(state, attempt, classification, correlation_id)
            state = next_state(
                state,
                classification=classification,
                fallback_enabled=fallback_enabled,
                fallback_attempted=fallback_attempted,
            )
            if state == RouteState.FAILURE:
                return RouterResult(
                    success=False,
                    metrics=metrics,
                    error=self._build_error(attempt, classification, fallback_attempted),
                )

            fallback_attempted = True
            decision_reason = selection.fallback_reason(fallback_reason(classification))
            log_event(
                logger,
                logging.WARNING,
                "MODEL_FALLBACK",
                correlation_id=correlation_id,
                task=request.task,
                from_model=selection.default_model,
                to_model=selection.fallback_model,
                reason=classification.reason,
                attempt_count=attempt_count + 1,
            )

    async def _attempt(
        self,
        model: str,
        request: RouterRequest,
        correlation_id: str,
    ) -> AttemptRecord:
        family = classify_model_family(model)
        params = build_call_params(
            model,
            request.task,
            request.prompt,
            question_count=request.context.question_count,
            settings=self.settings,
        )

        try:
            response = await self.client.complete(params)
        except ProviderCallError as exc:
            return AttemptRecord(
                model=model,
                family=family,
                latency_ms=exc.latency_ms,
                classification=classify_error(exc),
                provider_status=provider_status(exc.cause),
                provider_message=provider_message(exc.cause),
            )

        checked = validate_response(
            response.content,
            finish_reason=response.finish_reason,
            model=model,
            correlation_id=correlation_id,
        )
        if isinstance(checked, OutputFailure):
            return AttemptRecord(
                model=model,
                family=family,
                latency_ms=response.latency_ms,
                classification=classify_output_failure(checked.code),
                provider_status=OUTPUT_SHAPE_STATUS,
                provider_message=(
                    f"pattern={checked.pattern} truncation_likely={checked.truncation_likely} "
                    f"finish_reason={checked.finish_reason}"
                ),
                usage=response.usage,
            )

        return AttemptRecord(
            model=model,
            family=family,
            latency_ms=response.latency_ms,
            content=checked.content,
            usage=response.usage,
        )

    @staticmethod
    def _build_error(
        attempt: AttemptRecord,
        classification: ErrorClassification,
        fallback_attempted: bool,
    ) -> RouterError:
        return RouterError(
            code=classification.code,
            message=user_message(classification.code),
            # Only a retryable failure that never got its fallback is worth retrying
            recoverable=classification.retryable and not fallback_attempted,
            provider_status=attempt.provider_status,
            provider_message=attempt.provider_message,
        )

    @staticmethod
    def _log_failed_attempt(
        state: RouteState,
        attempt: AttemptRecord,
        classification: ErrorClassification,
        correlation_id: str,
    ) -> None:
        event = (
            "ROUTER_FALLBACK_ATTEMPT_FAILED"
            if state == RouteState.ATTEMPT_FALLBACK
            else "ROUTER_PRIMARY_ATTEMPT_FAILED"
        )
        log_event(
            logger,
            logging.ERROR,
            event,
            correlation_id=correlation_id,
            model=attempt.model,
            family=attempt.family,
            error_code=classification.code.value,
            error_reason=classification.reason,
            retryable=classification.retryable,
            provider_status=attempt.provider_status,
            provider_message=attempt.provider_message,
            latency_ms=attempt.latency_ms,
        )

