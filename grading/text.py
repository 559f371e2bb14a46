"""String normalisation and numeric helpers shared by the grading gates."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize(text: str | None) -> str:
    """Case-fold, replace non-alphanumerics with spaces, collapse whitespace."""
    lowered = (text or "").lower()
    return _WHITESPACE_RE.sub(" ", _NON_ALNUM_RE.sub(" ", lowered)).strip()


def token_set(text: str | None) -> set[str]:
    return {token for token in normalize(text).split(" ") if token}


def loose_equals(a: str | None, b: str | None) -> bool:
    return normalize(a) == normalize(b)


def jaccard(a: str | None, b: str | None) -> float:
    """Token-set Jaccard similarity. Two empty inputs count as identical."""
    left = token_set(a)
    right = token_set(b)
    if not left and not right:
        return 1.0
    return len(left & right) / len(left | right)


def round_half_up(value: float, digits: int = 0) -> float:
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
