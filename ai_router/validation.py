"""Response validation and best-effort JSON repair.

The provider is asked for JSON but regularly answers with fenced blocks,
leading prose ("Sure! Here's the JSON: ...") or truncated objects. This
module turns a raw completion into either valid JSON text or a typed failure
carrying diagnostics. It never retries and never raises.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass

from .errors import ErrorCode
from .logs import log_event

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?([\s\S]*?)\n?```", re.IGNORECASE)
_REFUSAL_RE = re.compile(r"^(I can't|I cannot|I can not|Sorry|As an AI)", re.IGNORECASE)

PREVIEW_CHARS = 300
_OPENERS = "{["
_CLOSERS = "}]"


@dataclass
class ValidatedContent:
    content: str
    repaired: bool = False


@dataclass
class OutputFailure:
    code: ErrorCode
    pattern: str
    truncation_likely: bool
    raw_length: int
    preview: str
    finish_reason: str | None = None


def _parses(text: str) -> bool:
    try:
        json.loads(text)
    except ValueError:
        return False
    return True


def classify_content(raw: str) -> str:
    """Rough shape of a completion, for diagnostics only."""
    trimmed = (raw or "").strip()
    if not trimmed:
        return "empty"
    if trimmed[0] in _OPENERS:
        return "json_like"
    if trimmed.startswith("```"):
        return "markdown_fence"
    if _REFUSAL_RE.match(trimmed):
        return "refusal"
    return "prose"


def _balanced_span(raw: str, start: int) -> str | None:
    """Return raw[start:end] where end closes the bracket opened at start."""
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(raw)):
        char = raw[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
            if depth == 0:
                return raw[start : index + 1]
    return None


def extract_json(raw: str) -> str | None:
    """
    Pull valid JSON out of common wrappers.

    Tries the interior of the first fenced code block, then the first
    balanced ``{...}`` or ``[...]`` span. Returns None when neither parses.
    """
    if not raw:
        return None

    fence = _FENCE_RE.search(raw)
    if fence:
        candidate = fence.group(1).strip()
        if candidate and _parses(candidate):
            return candidate

    starts = [index for index in (raw.find("{"), raw.find("[")) if index != -1]
    if not starts:
        return None

    candidate = _balanced_span(raw, min(starts))
    if candidate is not None and _parses(candidate):
        return candidate
    return None


def is_truncation_likely(raw: str, pattern: str, finish_reason: str | None) -> bool:
    if finish_reason == "length":
        return True
    return pattern == "json_like" and not raw.rstrip().endswith(("}", "]"))


def validate_response(
    raw: str | None,
    *,
    finish_reason: str | None = None,
    model: str | None = None,
    correlation_id: str | None = None,
) -> ValidatedContent | OutputFailure:
    text = raw or ""
    if not text.strip():
        log_event(
            logger,
            logging.ERROR,
            "MODEL_EMPTY_RESPONSE",
            correlation_id=correlation_id,
            model=model,
            finish_reason=finish_reason,
        )
        return OutputFailure(
            code=ErrorCode.MODEL_EMPTY_RESPONSE,
            pattern="empty",
            truncation_likely=finish_reason == "length",
            raw_length=len(text),
            preview="",
            finish_reason=finish_reason,
        )

    if _parses(text):
        return ValidatedContent(content=text)

    extracted = extract_json(text)
    if extracted is not None:
        log_event(
            logger,
            logging.INFO,
            "JSON_REPAIR_SUCCEEDED",
            correlation_id=correlation_id,
            model=model,
            original_pattern=classify_content(text),
            original_length=len(text),
            extracted_length=len(extracted),
        )
        return ValidatedContent(content=extracted, repaired=True)

    pattern = classify_content(text)
    truncation_likely = is_truncation_likely(text, pattern, finish_reason)
    preview = text[:PREVIEW_CHARS]
    log_event(
        logger,
        logging.ERROR,
        "MODEL_NON_JSON",
        correlation_id=correlation_id,
        model=model,
        finish_reason=finish_reason,
        raw_length=len(text),
        raw_preview=preview,
        content_pattern=pattern,
        truncation_likely=truncation_likely,
    )
    return OutputFailure(
        code=ErrorCode.MODEL_NON_JSON,
        pattern=pattern,
        truncation_likely=truncation_likely,
        raw_length=len(text),
        preview=preview,
        finish_reason=finish_reason,
    )
