"""
Constants for analytics dashboards.
"""

from __future__ import annotations

from typing import Final

from neuralprep.sm2.constants import MASTERY_LABELS, MasteryLevel


MASTERY_ORDER: Final[list[str]] = [MASTERY_LABELS[level] for level in MasteryLevel]

PERFORMANCE_COLUMNS: Final[list[str]] = [
    "question_id",
    "subject_id",
    "subject_name",
    "chapter_id",
    "important",
    "times_asked",
    "times_correct",
    "times_wrong",
    "mastery_level",
    "flagged",
]

WEAK_SUBJECT_MIN_ASKED: Final[int] = 5
WEAK_SUBJECT_ACCURACY_BELOW: Final[int] = 50
