"""Batched semantic grading through the AI router.

Every item that the cheap gates could not settle goes into ONE model call
per task. The reply must be ``{"results": [...]}``; a reply without a usable
results array fails the whole batch, while individual bad entries are
dropped.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from ai_router.logs import log_event
from ai_router.orchestrator import AIRouter
from ai_router.schemas import RouterContext, RouterRequest

from .models import AIGradingResult, AIRubricVerdict, GradingBatchError

logger = logging.getLogger(__name__)

VerdictT = TypeVar("VerdictT", bound=BaseModel)

SHORT_BATCH_INSTRUCTIONS = """You are grading short answers from a study quiz.
For each item, compare the student's answer with the reference answer (when one is given) and judge whether it shows the same understanding. Accept paraphrases and synonyms; do not reward answers that are off-topic.

Return ONLY a JSON object of this exact shape:
{"results": [{"id": "<item id>", "score": <number 0-1>, "band": "correct" | "mostly_correct" | "partial" | "incorrect", "why": "<one sentence rationale>", "improvements": ["<concrete tip>"], "missing_terms": ["<key term>"], "misconception": "<optional>"}]}

Scoring guide: 0.90-1.00 correct, 0.70-0.89 mostly correct, 0.30-0.69 partial, below 0.30 incorrect.
Return exactly one result per item id.

Items:
"""

LONG_BATCH_INSTRUCTIONS = """You are grading long-form answers from a study quiz with a four-part rubric.
Score each criterion from 0 to 2:
- coverage: did the answer hit the must-know concepts?
- accuracy: are the facts and relationships correct?
- clarity: is it coherent and organized, with appropriate terminology?
- conciseness: is it complete AND succinct?

Return ONLY a JSON object of this exact shape:
{"results": [{"id": "<item id>", "coverage": <0-2>, "accuracy": <0-2>, "clarity": <0-2>, "conciseness": <0-2>, "why": "<one sentence rationale>"}]}

Items:
"""


@dataclass
class SemanticItem:
    id: str
    question: str
    reference: str | None
    answer: str


def build_batch_prompt(instructions: str, items: Sequence[SemanticItem]) -> str:
    payload = [
        {
            "id": item.id,
            "question": item.question,
            "reference": item.reference or "",
            "answer": item.answer,
        }
        for item in items
    ]
    return instructions + json.dumps(payload, ensure_ascii=False)


def parse_batch(content: str, model: type[VerdictT]) -> dict[str, VerdictT]:
    """
    Parse a ``{"results": [...]}`` reply into verdicts keyed by item id.

    Raises:
        GradingBatchError: when the reply is not JSON or has no results array.
    """
    try:
        parsed = json.loads(content)
    except ValueError as exc:
        raise GradingBatchError(f"grading reply is not JSON: {exc}") from exc

    results = parsed.get("results") if isinstance(parsed, dict) else None
    if not isinstance(results, list):
        raise GradingBatchError("grading reply has no results array")

    verdicts: dict[str, VerdictT] = {}
    for entry in results:
        try:
            verdict = model.model_validate(entry)
        except ValidationError as exc:
            logger.warning("Dropping malformed grading entry: %s", exc.errors()[:1])
            continue
        verdicts[verdict.id] = verdict  # type: ignore[attr-defined]
    return verdicts


def _context(
    items: Sequence[SemanticItem],
    question_type: str,
    correlation_id: str | None,
) -> RouterContext:
    return RouterContext(
        question_count=len(items),
        question_type=question_type,
        has_reference=any(item.reference for item in items),
        correlation_id=correlation_id,
    )


async def grade_short_batch(
    router: AIRouter,
    items: Sequence[SemanticItem],
    *,
    correlation_id: str | None = None,
) -> dict[str, AIGradingResult]:
    """
    Grade short answers in one ``grade_short`` call.

    Raises:
        GradingBatchError: the route failed or the reply was unusable.
    """
    if not items:
        return {}

    request = RouterRequest(
        task="grade_short",
        prompt=build_batch_prompt(SHORT_BATCH_INSTRUCTIONS, items),
        context=_context(items, "short", correlation_id),
    )
    result = await router.route(request)
    if result.error is not None:
        raise GradingBatchError(
            f"short-answer grading failed: {result.error.code}",
            router_error=result.error,
        )

    verdicts = parse_batch(result.content or "", AIGradingResult)
    log_event(
        logger,
        logging.INFO,
        "AI_GRADING_BATCH_COMPLETED",
        correlation_id=result.metrics.correlation_id,
        task="grade_short",
        item_count=len(items),
        verdict_count=len(verdicts),
        model_used=result.metrics.model_used,
    )
    return verdicts


async def grade_long_batch(
    router: AIRouter,
    items: Sequence[SemanticItem],
    *,
    correlation_id: str | None = None,
) -> dict[str, AIRubricVerdict] | None:
    """
    Ask the model for rubric criteria on long answers.

    Returns None when the route failed, so callers fall back to the
    heuristic rubric.

    Raises:
        GradingBatchError: the route succeeded but the reply was unusable.
    """
    if not items:
        return {}

    request = RouterRequest(
        task="grade_long",
        prompt=build_batch_prompt(LONG_BATCH_INSTRUCTIONS, items),
        context=_context(items, "long", correlation_id),
    )
    result = await router.route(request)
    if result.error is not None:
        log_event(
            logger,
            logging.WARNING,
            "RUBRIC_HEURISTIC_FALLBACK",
            correlation_id=result.metrics.correlation_id,
            item_count=len(items),
            error=result.error.to_dict(),
        )
        return None

    return parse_batch(result.content or "", AIRubricVerdict)

