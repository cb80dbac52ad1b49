"""Numeric and keyword helpers shared by the pillars."""
from typing import Iterable, Optional, Sequence, Tuple

SCORE_MIN: float = 1.0
SCORE_MAX: float = 5.0


def clamp(value: float, min_val: float = SCORE_MIN, max_val: float = SCORE_MAX) -> float:
    """Clamp a value to [min_val, max_val].

    Args:
        value: Value to clamp.
        min_val: Lower bound (default 1.0).
        max_val: Upper bound (default 5.0).

    Returns:
        Clamped float.
    """
    return max(min_val, min(max_val, value))


def weighted_sum(values: Sequence[float], weights: Sequence[float]) -> float:
    """Σ value_i × weight_i.

    Raises:
        ValueError: If lengths differ.
    """
    if len(values) != len(weights):
        raise ValueError("Values and weights must have the same length")
    return sum(v * w for v, w in zip(values, weights))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def fraction(part: int, whole: int) -> float:
    """part / whole with zero-division protection."""
    if whole <= 0:
        return 0.0
    return part / whole


def bracket(
    value: float,
    table: Sequence[Tuple[float, float]],
    default: float,
) -> float:
    """Look up a score in a descending threshold table.

    ``table`` is ``[(threshold, score), ...]`` ordered from the highest
    threshold down; the first threshold that ``value`` reaches wins.

    >>> bracket(7.5, [(10, 5.0), (5, 4.0), (1, 3.0)], 1.0)
    4.0
    """
    for threshold, score in table:
        if value >= threshold:
            return score
    return default


def contains_any(text: Optional[str], keywords: Iterable[str]) -> bool:
    """Case-insensitive substring match of any keyword in ``text``."""
    if not text:
        return False
    lowered = text.lower()
    return any(k in lowered for k in keywords)


def any_contains(texts: Iterable[str], keywords: Iterable[str]) -> bool:
    """True if any of ``texts`` contains any keyword."""
    keywords = list(keywords)
    return any(contains_any(t, keywords) for t in texts)


def count_containing(texts: Iterable[str], keywords: Iterable[str]) -> int:
    keywords = list(keywords)
    return sum(1 for t in texts if contains_any(t, keywords))
