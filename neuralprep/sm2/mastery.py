"""
Mastery Classifier

Discrete mastery level (0-4) from cumulative accuracy, the current
non-guessed correct streak, attempt count and last-answer confidence.

    0 Unseen      never attempted
    1 Struggling  accuracy < 40%
    2 Learning    accuracy < 70%
    3 Proficient  accuracy < 90%, or >= 90% without the streak/confidence gate
    4 Mastered    accuracy >= 90%, streak >= 3, last answer not guessed
"""

from __future__ import annotations
from typing import Optional, Union

from neuralprep.sm2.constants import (
    Confidence,
    MasteryLevel,
    MASTERY_LABELS,
    STRUGGLING_BELOW,
    LEARNING_BELOW,
    PROFICIENT_BELOW,
    MASTERY_MIN_STREAK,
    parse_confidence,
)


def compute_mastery_level(
    accuracy: float,
    streak: int,
    times_asked: int,
    last_confidence: Optional[Union[Confidence, str]] = None
) -> int:
    """
    Classify a question's mastery level.

    Accuracy is computed by the caller from the updated counters.
    """
    if times_asked <= 0:
        return int(MasteryLevel.UNSEEN)
    if accuracy < STRUGGLING_BELOW:
        return int(MasteryLevel.STRUGGLING)
    if accuracy < LEARNING_BELOW:
        return int(MasteryLevel.LEARNING)
    if accuracy < PROFICIENT_BELOW:
        return int(MasteryLevel.PROFICIENT)
    if streak >= MASTERY_MIN_STREAK and parse_confidence(last_confidence) != Confidence.GUESSED:
        return int(MasteryLevel.MASTERED)
    return int(MasteryLevel.PROFICIENT)


def is_near_mastery(
    accuracy: float,
    streak: int,
    times_asked: int,
    last_confidence: Optional[Union[Confidence, str]] = None
) -> bool:
    """
    True when accuracy already clears the mastery bar but the streak or the
    last confidence still holds the level at Proficient.
    """
    return (
        times_asked > 0
        and accuracy >= PROFICIENT_BELOW
        and compute_mastery_level(accuracy, streak, times_asked, last_confidence) != MasteryLevel.MASTERED
    )


def mastery_label(level: int) -> str:
    try:
        return MASTERY_LABELS[MasteryLevel(level)]
    except ValueError:
        return MASTERY_LABELS[MasteryLevel.UNSEEN]
