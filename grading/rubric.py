"""Weighted rubric scorer for free-form answers.

Four criteria, each on a 0-2 scale, are normalised and weighted into one
0-1 score. When no model judgment is available the criteria come from
structural heuristics (concept hits and answer length).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

from .text import clamp, normalize, round_half_up

RUBRIC_VERSION = "v1.0"

RUBRIC_WEIGHTS: dict[str, float] = {
    "coverage": 0.40,
    "accuracy": 0.35,
    "clarity": 0.15,
    "conciseness": 0.10,
}

CRITERION_MAX = 2.0
STRENGTH_BAR = 1.5
MAX_LISTED_MISSING = 3
MIN_CONCEPT_LENGTH = 3

CLEAR_ANSWER_MIN_CHARS = 20
CONCISE_ANSWER_MAX_CHARS = 200

STOPWORDS: frozenset[str] = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "is", "are", "was", "were",
        "be", "been", "being", "have", "has", "had", "do", "does", "did",
        "will", "would", "could", "should", "may", "might", "can",
        "what", "which", "who", "when", "where", "why", "how",
        "of", "to", "in", "for", "on", "with", "as", "by", "from", "at",
        "this", "that", "these", "those",
    }
)

_STRENGTH_LABELS: dict[str, str] = {
    "coverage": "strong concept coverage",
    "accuracy": "factually accurate",
    "clarity": "clear and organized",
    "conciseness": "concise",
}

# Conciseness is a bonus; falling short of it is not reported as a gap
_GAP_LABELS: dict[str, str] = {
    "coverage": "concept coverage",
    "accuracy": "factual accuracy",
    "clarity": "clarity and organization",
}


@dataclass
class CriteriaScores:
    coverage: float
    accuracy: float
    clarity: float
    conciseness: float

    def clamped(self) -> CriteriaScores:
        return CriteriaScores(
            coverage=clamp(self.coverage, 0.0, CRITERION_MAX),
            accuracy=clamp(self.accuracy, 0.0, CRITERION_MAX),
            clarity=clamp(self.clarity, 0.0, CRITERION_MAX),
            conciseness=clamp(self.conciseness, 0.0, CRITERION_MAX),
        )

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass
class ConceptHit:
    concept: str
    hit: bool


@dataclass
class RubricResult:
    score: float
    criteria: CriteriaScores
    feedback: str
    improvement: str
    concept_hits: list[ConceptHit] = field(default_factory=list)

    @property
    def missing_concepts(self) -> list[str]:
        return [hit.concept for hit in self.concept_hits if not hit.hit]


def extract_concepts(text: str | None) -> list[str]:
    """Distinct content words of ``text``, in first-seen order."""
    words = (
        word
        for word in normalize(text).split(" ")
        if len(word) >= MIN_CONCEPT_LENGTH and word not in STOPWORDS
    )
    return list(dict.fromkeys(words))


def extract_expected_concepts(prompt: str, reference: str | None = None) -> list[str]:
    return list(dict.fromkeys(extract_concepts(prompt) + extract_concepts(reference)))


def check_concept_hits(expected: list[str], answer: str) -> list[ConceptHit]:
    answered = set(extract_concepts(answer))
    return [ConceptHit(concept=concept, hit=concept in answered) for concept in expected]


def concept_coverage_ratio(hits: list[ConceptHit]) -> float:
    if not hits:
        return 0.0
    return round_half_up(sum(1 for hit in hits if hit.hit) / len(hits), 2)


def calculate_rubric_score(criteria: CriteriaScores) -> float:
    weighted = sum(
        getattr(criteria, name) / CRITERION_MAX * weight for name, weight in RUBRIC_WEIGHTS.items()
    )
    return round_half_up(weighted, 2)


def generate_feedback(criteria: CriteriaScores, hits: list[ConceptHit]) -> tuple[str, str]:
    """Return ``(feedback, improvement)`` text for a scored answer."""
    hit_count = sum(1 for hit in hits if hit.hit)
    missed = [hit.concept for hit in hits if not hit.hit]

    feedback = f"You covered {hit_count}/{len(hits)} key concepts. "

    strengths = [
        label for name, label in _STRENGTH_LABELS.items() if getattr(criteria, name) >= STRENGTH_BAR
    ]
    if strengths:
        feedback += f"Strengths: {', '.join(strengths)}. "

    gaps = [label for name, label in _GAP_LABELS.items() if getattr(criteria, name) < STRENGTH_BAR]
    if gaps:
        feedback += f"Areas to improve: {', '.join(gaps)}."
    else:
        feedback += "Excellent work overall!"

    if missed:
        improvement = (
            "To reach full credit, add these missing concepts: "
            f"{', '.join(missed[:MAX_LISTED_MISSING])}"
        )
        if len(missed) > MAX_LISTED_MISSING:
            improvement += f" (and {len(missed) - MAX_LISTED_MISSING} more)"
        improvement += "."
    else:
        improvement = "You've covered all key concepts. Focus on refining clarity and precision."

    return feedback, improvement


def heuristic_criteria(answer: str, hits: list[ConceptHit]) -> CriteriaScores:
    ratio = concept_coverage_ratio(hits)
    return CriteriaScores(
        coverage=min(CRITERION_MAX, round_half_up(ratio * 2, 1)),
        accuracy=1.0,  # neutral, needs semantic judgment
        clarity=1.5 if len(answer) >= CLEAR_ANSWER_MIN_CHARS else 1.0,
        conciseness=2.0 if len(answer) <= CONCISE_ANSWER_MAX_CHARS else 1.0,
    )


def score_with_criteria(criteria: CriteriaScores, hits: list[ConceptHit]) -> RubricResult:
    """Score model-judged criteria; values outside 0-2 are clamped."""
    criteria = criteria.clamped()
    feedback, improvement = generate_feedback(criteria, hits)
    return RubricResult(
        score=calculate_rubric_score(criteria),
        criteria=criteria,
        feedback=feedback,
        improvement=improvement,
        concept_hits=hits,
    )


def apply_rubric(prompt: str, answer: str, reference: str | None = None) -> RubricResult:
    """Deterministic rubric used when no model judgment is available."""
    hits = check_concept_hits(extract_expected_concepts(prompt, reference), answer)
    return score_with_criteria(heuristic_criteria(answer, hits), hits)
