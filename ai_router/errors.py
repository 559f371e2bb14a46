"""Error taxonomy and the pure classifier that decides fallback eligibility."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import httpx
from litellm.exceptions import APIConnectionError, Timeout


class ErrorCode(StrEnum):
    NETWORK_ERROR = "NETWORK_ERROR"
    MODEL_ERROR = "MODEL_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    AUTH_ERROR = "AUTH_ERROR"
    RATE_LIMIT = "RATE_LIMIT"
    SERVER_ERROR = "SERVER_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    MODEL_EMPTY_RESPONSE = "MODEL_EMPTY_RESPONSE"
    MODEL_NON_JSON = "MODEL_NON_JSON"
    AI_GRADING_PARSE_ERROR = "AI_GRADING_PARSE_ERROR"
    SCHEMA_INVALID = "SCHEMA_INVALID"


# Short, generic text shown to end users; diagnostics stay in the logs.
USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.NETWORK_ERROR: "The AI service could not be reached. Please try again.",
    ErrorCode.MODEL_ERROR: "The AI model is temporarily unavailable.",
    ErrorCode.BAD_REQUEST: "The AI service rejected the request.",
    ErrorCode.AUTH_ERROR: "The AI service is misconfigured.",
    ErrorCode.RATE_LIMIT: "The AI service is busy. Please try again shortly.",
    ErrorCode.SERVER_ERROR: "The AI service had a temporary problem.",
    ErrorCode.UNKNOWN_ERROR: "The AI request failed.",
    ErrorCode.MODEL_EMPTY_RESPONSE: "The AI returned an empty response.",
    ErrorCode.MODEL_NON_JSON: "The AI returned an invalid response format.",
    ErrorCode.AI_GRADING_PARSE_ERROR: "Grading could not be completed. Please retry.",
    ErrorCode.SCHEMA_INVALID: "The AI response did not match the expected format.",
}

CONNECTION_ERRORS: tuple[type[BaseException], ...] = (
    httpx.TransportError,
    APIConnectionError,
    Timeout,
    ConnectionError,
    TimeoutError,
)

SERVER_STATUSES: frozenset[int] = frozenset({500, 502, 503})
OUTPUT_SHAPE_STATUS = 502


@dataclass(frozen=True)
class ErrorClassification:
    retryable: bool
    reason: str
    code: ErrorCode


@dataclass
class RouterError:
    code: ErrorCode
    message: str
    recoverable: bool
    provider_status: int | None = None
    provider_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "recoverable": self.recoverable,
            "provider_status": self.provider_status,
            "provider_message": self.provider_message,
        }


class ProviderCallError(Exception):
    """A provider call raised before returning any content."""

    def __init__(self, cause: BaseException, *, model: str, latency_ms: int) -> None:
        super().__init__(str(cause) or type(cause).__name__)
        self.cause = cause
        self.model = model
        self.latency_ms = latency_ms


def provider_status(error: BaseException) -> int | None:
    for attr in ("status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def provider_message(error: BaseException) -> str:
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or type(error).__name__


def _is_model_related(error: BaseException) -> bool:
    if getattr(error, "code", None) == "model_not_found":
        return True
    body = getattr(error, "body", None)
    if isinstance(body, dict) and body.get("code") == "model_not_found":
        return True
    return "model" in provider_message(error).lower()


def classify_error(error: BaseException) -> ErrorClassification:
    """Map a provider-call failure onto {retryable, reason, code}."""
    if isinstance(error, ProviderCallError):
        error = error.cause

    if isinstance(error, CONNECTION_ERRORS):
        return ErrorClassification(True, "network_error", ErrorCode.NETWORK_ERROR)

    status = provider_status(error)
    if status is None:
        return ErrorClassification(False, "unknown_error", ErrorCode.UNKNOWN_ERROR)

    if status == 400:
        if _is_model_related(error):
            return ErrorClassification(True, "model_not_found", ErrorCode.MODEL_ERROR)
        return ErrorClassification(False, "bad_request", ErrorCode.BAD_REQUEST)
    if status in (401, 403):
        # A different model cannot fix credentials
        return ErrorClassification(False, "auth_error", ErrorCode.AUTH_ERROR)
    if status == 429:
        return ErrorClassification(True, "rate_limit", ErrorCode.RATE_LIMIT)
    if status in SERVER_STATUSES:
        return ErrorClassification(True, "server_error", ErrorCode.SERVER_ERROR)
    return ErrorClassification(False, "unknown_error", ErrorCode.UNKNOWN_ERROR)


def classify_output_failure(code: ErrorCode) -> ErrorClassification:
    """Transport succeeded but the content is unusable; another model may do better."""
    return ErrorClassification(True, "parse_error", code)


def fallback_reason(classification: ErrorClassification) -> str:
    """Collapse a classification into the short reason used in decision tags."""
    if classification.code == ErrorCode.RATE_LIMIT:
        return "rate_limit"
    if classification.code in (ErrorCode.SERVER_ERROR, ErrorCode.NETWORK_ERROR):
        return "timeout"
    if classification.code in (ErrorCode.MODEL_NON_JSON, ErrorCode.MODEL_EMPTY_RESPONSE):
        return "parse_error"
    if classification.code == ErrorCode.MODEL_ERROR:
        return "model_error"
    return "unknown"


def user_message(code: ErrorCode) -> str:
    return USER_MESSAGES.get(code, USER_MESSAGES[ErrorCode.UNKNOWN_ERROR])
