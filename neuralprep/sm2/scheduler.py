"""
Scheduler - SM-2 Algorithm Logic

Pure SM-2 scheduling (no database calls, no clock).

    EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))

where q is the review quality (0-5). Reviews with q < 3 are failures and
reset the repetition count; successes advance it by exactly one.

Persisted state may be corrupt (hand-edited documents, old schema versions),
so previous values are clamped into range instead of being rejected.
"""

from __future__ import annotations
import math
from dataclasses import dataclass

from neuralprep.sm2.constants import (
    QUALITY_MIN,
    QUALITY_MAX,
    PASSING_QUALITY,
    DEFAULT_EASE_FACTOR,
    MIN_EASE_FACTOR,
    MIN_INTERVAL_DAYS,
    MAX_INTERVAL_DAYS,
    FIRST_INTERVAL_DAYS,
    SECOND_INTERVAL_DAYS,
)


@dataclass(frozen=True)
class Sm2Result:
    """Next scheduling state after one review."""
    interval: int
    ef: float
    repetitions: int


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round with halves going up (builtin round() uses banker's rounding).
    """
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def clamp_quality(quality: float) -> int:
    return int(max(QUALITY_MIN, min(QUALITY_MAX, quality)))


def clamp_interval(interval: float) -> int:
    return int(max(MIN_INTERVAL_DAYS, min(MAX_INTERVAL_DAYS, interval)))


def next_ease_factor(prev_ef: float, quality: int) -> float:
    """
    Apply the SM-2 ease-factor update, floored at 1.3 and rounded to 2 decimals.
    """
    miss = QUALITY_MAX - quality
    ef = prev_ef + (0.1 - miss * (0.08 + miss * 0.02))
    ef = max(MIN_EASE_FACTOR, ef)
    return round_half_up(ef, 2)


def compute_sm2(
    quality: float,
    prev_ef: float = DEFAULT_EASE_FACTOR,
    prev_interval: int = 0,
    prev_repetitions: int = 0
) -> Sm2Result:
    """
    Compute SM-2 scheduling after a review.

    Args:
        quality: Response quality (clamped to 0-5)
        prev_ef: Previous ease factor (values below 1.3 are lifted to 1.3)
        prev_interval: Previous interval in days (clamped to 0-365)
        prev_repetitions: Successful repetition count (negative -> 0)

    Returns:
        Sm2Result with interval in [1, 365], ef >= 1.3, and repetitions
    """
    q = clamp_quality(quality)
    prev_ef = max(MIN_EASE_FACTOR, float(prev_ef))
    prev_interval = int(max(0, min(MAX_INTERVAL_DAYS, prev_interval)))
    prev_repetitions = max(0, int(prev_repetitions))

    ef = next_ease_factor(prev_ef, q)

    if q < PASSING_QUALITY:
        # Failed review - reset
        interval = MIN_INTERVAL_DAYS
        repetitions = 0
    else:
        repetitions = prev_repetitions + 1
        if repetitions == 1:
            interval = FIRST_INTERVAL_DAYS
        elif repetitions == 2:
            interval = SECOND_INTERVAL_DAYS
        else:
            interval = int(round_half_up(prev_interval * ef))

    return Sm2Result(
        interval=clamp_interval(interval),
        ef=ef,
        repetitions=repetitions,
    )
