"""
Performance State - per-question records and answer events

Defines the performance record that the ledger maintains for each answered
question, and the answer result event that the session runtime produces.

Key concepts:
- A record exists only after at least one scored answer; no record = unseen
- Counters only ever grow; the streak and repetitions reset on failure
- next_due is anchored to the start of the day the record was updated
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from neuralprep.clock import Clock, ensure_aware, resolve_now
from neuralprep.sm2.constants import (
    Confidence,
    DEFAULT_EASE_FACTOR,
    MIN_EASE_FACTOR,
    MAX_INTERVAL_DAYS,
    MasteryLevel,
    STALE_DAYS_THRESHOLD,
    WRONG_WEIGHT,
    CORRECT_WEIGHT,
    parse_confidence,
)


@dataclass
class PerformanceRecord:
    """
    Performance history for a single question.
    """
    question_id: str

    # Counters
    times_asked: int = 0
    times_correct: int = 0
    times_wrong: int = 0
    streak: int = 0  # Consecutive correct, non-guessed answers

    # SM-2 scheduling state
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval_days: int = 1
    repetitions: int = 0

    # Derived classification
    mastery_level: int = int(MasteryLevel.UNSEEN)

    # User bookmark, independent of correctness
    flagged: bool = False

    last_asked: Optional[datetime] = None
    next_due: Optional[datetime] = None
    last_confidence: Optional[Confidence] = None

    @property
    def accuracy(self) -> float:
        if self.times_asked <= 0:
            return 0.0
        return self.times_correct / self.times_asked

    @property
    def weakness_score(self) -> int:
        return self.times_wrong * WRONG_WEIGHT - self.times_correct * CORRECT_WEIGHT


@dataclass
class AnswerResult:
    """
    Outcome of one question within one session.

    user_answer is None for a skip. flagged is None when the session did not
    touch the bookmark, so the persisted flag is kept.
    """
    question_id: str
    user_answer: Optional[str]
    correct_answer: str
    is_correct: bool
    time_spent: int = 0  # seconds
    confidence: Optional[Confidence] = None
    flagged: Optional[bool] = None
    attempted_at: Optional[datetime] = None
    question_text: str = ""
    option_order: list[str] = field(default_factory=list)
    placeholder: bool = False  # Flag-only entry for a question not yet answered or skipped

    @property
    def is_skip(self) -> bool:
        return self.user_answer is None and not self.placeholder

    def to_dict(self) -> dict:
        confidence = parse_confidence(self.confidence)
        return {
            "question_id": self.question_id,
            "question_text": self.question_text,
            "user_answer": self.user_answer,
            "correct_answer": self.correct_answer,
            "is_correct": self.is_correct,
            "time_spent": self.time_spent,
            "confidence": confidence.value if confidence else None,
            "flagged": self.flagged,
            "attempted_at": self.attempted_at.isoformat() if self.attempted_at else None,
            "option_order": list(self.option_order),
        }


def new_performance_record(question_id: str) -> PerformanceRecord:
    """
    Initialize defaults for a question that has never been answered.
    """
    return PerformanceRecord(question_id=question_id)


def normalize_record(record: PerformanceRecord) -> PerformanceRecord:
    """
    Return a copy of record with out-of-range values pulled back into range.

    Counters below zero become zero, the ease factor is lifted to its floor,
    and the interval is clamped into [1, 365].
    """
    times_correct = max(0, int(record.times_correct or 0))
    times_wrong = max(0, int(record.times_wrong or 0))
    times_asked = max(0, int(record.times_asked or 0), times_correct + times_wrong)

    return replace(
        record,
        times_asked=times_asked,
        times_correct=times_correct,
        times_wrong=times_wrong,
        streak=max(0, int(record.streak or 0)),
        ease_factor=max(MIN_EASE_FACTOR, float(DEFAULT_EASE_FACTOR if record.ease_factor is None else record.ease_factor)),
        interval_days=int(max(1, min(MAX_INTERVAL_DAYS, record.interval_days or 1))),
        repetitions=max(0, int(record.repetitions or 0)),
        mastery_level=int(max(MasteryLevel.UNSEEN, min(MasteryLevel.MASTERED, record.mastery_level or 0))),
        flagged=bool(record.flagged),
        last_asked=ensure_aware(record.last_asked),
        next_due=ensure_aware(record.next_due),
        last_confidence=parse_confidence(record.last_confidence),
    )


def is_unseen(record: Optional[PerformanceRecord]) -> bool:
    return record is None or record.times_asked <= 0


def days_since_last_asked(
    last_asked: Optional[datetime],
    clock: Optional[Clock] = None
) -> Optional[int]:
    """
    Whole days elapsed since last_asked (None if never asked).
    """
    if last_asked is None:
        return None
    delta = resolve_now(clock) - ensure_aware(last_asked)
    return int(delta.total_seconds() // 86400)


def is_stale_question(
    last_asked: Optional[datetime],
    threshold_days: int = STALE_DAYS_THRESHOLD,
    clock: Optional[Clock] = None
) -> bool:
    """
    True if the question was asked before and not within threshold_days.

    Never-asked questions are unseen, not stale.
    """
    if last_asked is None:
        return False
    delta = resolve_now(clock) - ensure_aware(last_asked)
    return delta.total_seconds() >= threshold_days * 86400
