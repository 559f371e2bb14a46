"""Hybrid grading cascade.

MCQ answers are checked deterministically against the key. Short answers go
through gates of increasing cost and stop at the first one that settles
them:

1. exact   - normalised equality with the reference (1.0, correct)
2. similar - token-set Jaccard >= 0.6 (0.85, NOT correct)
3. semantic - everything else, batched into one ``grade_short`` call

Long answers get rubric criteria from one ``grade_long`` call, or the
heuristic rubric when that call fails.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ai_router.config import RouterSettings
from ai_router.logs import log_event
from ai_router.orchestrator import AIRouter

from .models import (
    AIGradingResult,
    AIRubricVerdict,
    BreakdownItem,
    GradeOutput,
    LongQuestion,
    MCQQuestion,
    ShortQuestion,
    parse_questions,
)
from .rubric import (
    CriteriaScores,
    RubricResult,
    apply_rubric,
    check_concept_hits,
    extract_expected_concepts,
    score_with_criteria,
)
from .semantic import SemanticItem, grade_long_batch, grade_short_batch
from .text import clamp, jaccard, loose_equals, round_half_up

logger = logging.getLogger(__name__)

EXACT_SCORE = 1.0
SIMILARITY_THRESHOLD = 0.6
SIMILARITY_SCORE = 0.85

LETTER_CUTOFFS: tuple[tuple[int, str], ...] = (
    (97, "A+"),
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
)

BLANK_FEEDBACK = "No answer was given."
BLANK_IMPROVEMENT = "Attempt every question; partial answers can still earn credit."
NO_VERDICT_FEEDBACK = "This answer could not be graded automatically and received no credit."


def letter_grade(percent: float) -> str:
    for cutoff, letter in LETTER_CUTOFFS:
        if percent >= cutoff:
            return letter
    return "F"


def summary_for(percent: float) -> str:
    if percent >= 85:
        return "Great work. Strong grasp overall; skim the few missed concepts."
    if percent >= 70:
        return "Solid base. Focus revisions on the questions you missed."
    return "You're close. Review fundamentals and key terms, then retake a focused quiz."


def aggregate_percent(scores: Sequence[float]) -> int:
    if not scores:
        return 0
    return int(clamp(round_half_up(sum(scores) / len(scores) * 100), 0, 100))


def grade_mcq(question: MCQQuestion, user_answer: str) -> BreakdownItem:
    is_correct = bool(question.answer) and loose_equals(user_answer, question.answer)
    if is_correct:
        feedback = "Correct, matches the key."
    elif question.explanation:
        feedback = f"Incorrect. {question.explanation}"
    else:
        feedback = "Incorrect. Review the concept and why the correct option fits better."
    return BreakdownItem(
        id=question.id,
        type="mcq",
        prompt=question.prompt,
        user_answer=user_answer,
        score=1.0 if is_correct else 0.0,
        feedback=feedback,
        correct_answer=question.answer,
        improvement=None
        if is_correct
        else "Re-read the prompt and eliminate distractors before choosing.",
    )


def apply_cheap_gates(question: ShortQuestion, user_answer: str) -> BreakdownItem | None:
    """Settle a referenced short answer without a model call, if possible."""
    reference = question.reference
    if reference is None:
        return None

    if loose_equals(user_answer, reference):
        return BreakdownItem(
            id=question.id,
            type="short",
            prompt=question.prompt,
            user_answer=user_answer,
            score=EXACT_SCORE,
            feedback="Correct, your answer matches the reference.",
            correct_answer=reference,
        )

    if jaccard(user_answer, reference) >= SIMILARITY_THRESHOLD:
        return BreakdownItem(
            id=question.id,
            type="short",
            prompt=question.prompt,
            user_answer=user_answer,
            score=SIMILARITY_SCORE,
            feedback="Mostly correct, your answer is very close to the reference.",
            correct_answer=reference,
            improvement="Compare your wording with the reference and tighten the key terms.",
        )
    return None


def blank_item(question: ShortQuestion | LongQuestion) -> BreakdownItem:
    return BreakdownItem(
        id=question.id,
        type=question.type,
        prompt=question.prompt,
        user_answer="",
        score=0.0,
        feedback=BLANK_FEEDBACK,
        correct_answer=question.reference,
        improvement=BLANK_IMPROVEMENT,
    )


def item_from_verdict(
    question: ShortQuestion,
    user_answer: str,
    verdict: AIGradingResult | None,
) -> BreakdownItem:
    if verdict is None:
        return BreakdownItem(
            id=question.id,
            type="short",
            prompt=question.prompt,
            user_answer=user_answer,
            score=0.0,
            feedback=NO_VERDICT_FEEDBACK,
            correct_answer=question.reference,
        )

    feedback = verdict.why or "Graded by meaning against the expected answer."
    if verdict.misconception:
        feedback = f"{feedback} Possible misconception: {verdict.misconception}"
    return BreakdownItem(
        id=question.id,
        type="short",
        prompt=question.prompt,
        user_answer=user_answer,
        score=verdict.score,
        feedback=feedback,
        correct_answer=question.reference,
        improvement=" ".join(verdict.improvements) or None,
        missing_terms=list(verdict.missing_terms),
    )


def item_from_rubric(
    question: LongQuestion,
    user_answer: str,
    rubric: RubricResult,
) -> BreakdownItem:
    return BreakdownItem(
        id=question.id,
        type="long",
        prompt=question.prompt,
        user_answer=user_answer,
        score=rubric.score,
        feedback=rubric.feedback,
        correct_answer=question.reference,
        improvement=rubric.improvement,
        missing_terms=rubric.missing_concepts,
        criteria=rubric.criteria.to_dict(),
    )


def rubric_for(
    question: LongQuestion,
    user_answer: str,
    verdict: AIRubricVerdict | None,
) -> RubricResult:
    if verdict is None:
        return apply_rubric(question.prompt, user_answer, question.reference)
    hits = check_concept_hits(
        extract_expected_concepts(question.prompt, question.reference), user_answer
    )
    criteria = CriteriaScores(
        coverage=verdict.coverage,
        accuracy=verdict.accuracy,
        clarity=verdict.clarity,
        conciseness=verdict.conciseness,
    )
    return score_with_criteria(criteria, hits)


class GradingCascade:
    """
    Grades one quiz attempt.

    Usage:
        cascade = GradingCascade(AIRouter(ModelRouter(settings)))
        output = await cascade.grade_submission(questions, {"q1": "Paris"})
    """

    def __init__(self, router: AIRouter | None = None) -> None:
        self.router = router or AIRouter()

    async def grade_submission(
        self,
        questions: Sequence[Any],
        responses: Mapping[str, Any],
        *,
        correlation_id: str | None = None,
    ) -> GradeOutput:
        """
        Grade every question, calling the model only for what the cheap
        gates could not settle.

        Raises:
            GradingBatchError: the semantic short-answer batch failed.
            pydantic.ValidationError: malformed questions or duplicate ids.
        """
        typed = parse_questions(questions)
        items: dict[str, BreakdownItem] = {}
        pending_short: list[tuple[ShortQuestion, str]] = []
        pending_long: list[tuple[LongQuestion, str]] = []

        for question in typed:
            user_answer = str(responses.get(question.id) or "")
            if isinstance(question, MCQQuestion):
                items[question.id] = grade_mcq(question, user_answer)
            elif not user_answer.strip():
                items[question.id] = blank_item(question)
            elif isinstance(question, ShortQuestion):
                gated = apply_cheap_gates(question, user_answer)
                if gated is not None:
                    items[question.id] = gated
                else:
                    pending_short.append((question, user_answer))
            else:
                pending_long.append((question, user_answer))

        gated_count = len(items)

        if pending_short:
            verdicts = await grade_short_batch(
                self.router,
                [self._semantic_item(q, answer) for q, answer in pending_short],
                correlation_id=correlation_id,
            )
            for question, answer in pending_short:
                items[question.id] = item_from_verdict(question, answer, verdicts.get(question.id))

        if pending_long:
            rubric_verdicts = await grade_long_batch(
                self.router,
                [self._semantic_item(q, answer) for q, answer in pending_long],
                correlation_id=correlation_id,
            )
            for question, answer in pending_long:
                verdict = rubric_verdicts.get(question.id) if rubric_verdicts else None
                rubric = rubric_for(question, answer, verdict)
                items[question.id] = item_from_rubric(question, answer, rubric)

        breakdown = [items[question.id] for question in typed]
        percent = aggregate_percent([item.score for item in breakdown])
        output = GradeOutput(
            percent=percent,
            correct_count=sum(1 for item in breakdown if item.correct),
            total=len(breakdown),
            summary=summary_for(percent),
            letter=letter_grade(percent),
            breakdown=breakdown,
        )
        log_event(
            logger,
            logging.INFO,
            "SUBMISSION_GRADED",
            correlation_id=correlation_id,
            total=output.total,
            percent=output.percent,
            correct_count=output.correct_count,
            gated_count=gated_count,
            semantic_short_count=len(pending_short),
            long_count=len(pending_long),
        )
        return output

    @staticmethod
    def _semantic_item(question: ShortQuestion | LongQuestion, answer: str) -> SemanticItem:
        return SemanticItem(
            id=question.id,
            question=question.prompt,
            reference=question.reference,
            answer=answer,
        )


async def grade_submission(
    questions: Sequence[Any],
    responses: Mapping[str, Any],
    *,
    router: AIRouter | None = None,
    settings: RouterSettings | None = None,
    correlation_id: str | None = None,
) -> GradeOutput:
    cascade = GradingCascade(router or AIRouter(settings=settings))
    return await cascade.grade_submission(questions, responses, correlation_id=correlation_id)
