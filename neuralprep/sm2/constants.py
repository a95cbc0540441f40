"""
SM-2 Constants and Parameters

All configurable parameters for scheduling, mastery and session building
in one place.
"""

from enum import Enum, IntEnum
from typing import Optional


# ---- Confidence Ratings ----

class Confidence(str, Enum):
    """Self-reported confidence attached to an answer."""
    GUESSED = "guessed"
    UNSURE = "unsure"
    SURE = "sure"


def parse_confidence(value: object) -> Optional[Confidence]:
    """
    Coerce a stored or user-supplied value to a Confidence (None if unset/unknown).
    """
    if value is None or isinstance(value, Confidence):
        return value
    try:
        return Confidence(str(value))
    except ValueError:
        return None


# ---- Review Quality (SM-2 convention) ----

class Quality(IntEnum):
    """Review quality scores produced by the quality mapper."""
    WRONG = 1
    GUESSED = 2   # Correct, but below the passing threshold
    UNSURE = 3
    NO_CONFIDENCE = 4
    SURE = 5


QUALITY_MIN = 0
QUALITY_MAX = 5
PASSING_QUALITY = 3  # q >= 3 counts as a successful review


# ---- Scheduling ----

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MIN_INTERVAL_DAYS = 1
MAX_INTERVAL_DAYS = 365
FIRST_INTERVAL_DAYS = 1   # After the first successful review
SECOND_INTERVAL_DAYS = 6  # After the second successful review


# ---- Mastery ----

class MasteryLevel(IntEnum):
    UNSEEN = 0
    STRUGGLING = 1
    LEARNING = 2
    PROFICIENT = 3
    MASTERED = 4


MASTERY_LABELS = {
    MasteryLevel.UNSEEN: "Unseen",
    MasteryLevel.STRUGGLING: "Struggling",
    MasteryLevel.LEARNING: "Learning",
    MasteryLevel.PROFICIENT: "Proficient",
    MasteryLevel.MASTERED: "Mastered",
}

STRUGGLING_BELOW = 0.40
LEARNING_BELOW = 0.70
PROFICIENT_BELOW = 0.90
MASTERY_MIN_STREAK = 3


# ---- Session Building ----

SMART_IMPORTANT_RATIO = 0.7   # Share of a smart session drawn from important questions
WRONG_WEIGHT = 3              # Weakness score = wrong * 3 - correct * 1
CORRECT_WEIGHT = 1
STALE_DAYS_THRESHOLD = 30


# ---- Session Runtime ----

CHECKPOINT_EVERY = 10          # Persist progress after every Nth answered question
RESUME_WINDOW_HOURS = 24       # In-progress sessions older than this are abandoned
MAX_SESSION_TEMPLATES = 5
