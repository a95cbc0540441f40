"""
Ledger - Performance Record Updates

Pure update of a question's performance record from one answer result
(no database calls).

Workflow per result:
1. Skips (no user answer) are not scored - the record is returned as-is
2. Bump asked/correct/wrong counters
3. Update the streak (guessed-correct leaves it unchanged, wrong resets it)
4. Map outcome + confidence to quality and run SM-2
5. Schedule next_due from the start of today
6. Reclassify mastery from the updated counters
7. Carry the session's flag, or keep the stored one

The caller persists the returned records (see database.upsert_performance_records).
"""

from __future__ import annotations
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Iterable, Mapping, Optional

from neuralprep.clock import Clock, resolve_now, start_of_day
from neuralprep.sm2.constants import Confidence, parse_confidence
from neuralprep.sm2.mastery import compute_mastery_level
from neuralprep.sm2.performance_state import (
    AnswerResult,
    PerformanceRecord,
    new_performance_record,
    normalize_record,
)
from neuralprep.sm2.quality import quality_from_result
from neuralprep.sm2.scheduler import compute_sm2


def next_streak(streak: int, is_correct: bool, confidence: Optional[Confidence]) -> int:
    if not is_correct:
        return 0
    if confidence == Confidence.GUESSED:
        return streak
    return streak + 1


def apply_result(
    existing: Optional[PerformanceRecord],
    result: AnswerResult,
    now: Optional[datetime] = None,
    clock: Optional[Clock] = None
) -> Optional[PerformanceRecord]:
    """
    Produce the updated performance record for one answer result.

    Args:
        existing: Current record, or None if the question was never scored
        result: Answer result from the session
        now: Update instant (defaults to the clock)
        clock: Clock used when now is not given

    Returns:
        A new PerformanceRecord, or existing itself (possibly None) for a skip
    """
    if result.user_answer is None:
        return existing

    if now is None:
        now = resolve_now(clock)

    if existing is None:
        base = new_performance_record(result.question_id)
    else:
        base = normalize_record(existing)

    confidence = parse_confidence(result.confidence)
    is_correct = bool(result.is_correct)

    times_asked = base.times_asked + 1
    times_correct = base.times_correct + (1 if is_correct else 0)
    times_wrong = base.times_wrong + (0 if is_correct else 1)
    streak = next_streak(base.streak, is_correct, confidence)

    quality = quality_from_result(is_correct, confidence)
    sm2 = compute_sm2(quality, base.ease_factor, base.interval_days, base.repetitions)

    next_due = start_of_day(now) + timedelta(days=sm2.interval)

    accuracy = times_correct / times_asked
    mastery_level = compute_mastery_level(accuracy, streak, times_asked, confidence)

    flagged = result.flagged if result.flagged is not None else base.flagged

    return replace(
        base,
        question_id=result.question_id,
        times_asked=times_asked,
        times_correct=times_correct,
        times_wrong=times_wrong,
        streak=streak,
        ease_factor=sm2.ef,
        interval_days=sm2.interval,
        repetitions=sm2.repetitions,
        mastery_level=mastery_level,
        flagged=bool(flagged),
        last_asked=now,
        next_due=next_due,
        last_confidence=confidence,
    )


def apply_results(
    performance: Mapping[str, PerformanceRecord],
    results: Iterable[AnswerResult],
    now: Optional[datetime] = None,
    clock: Optional[Clock] = None
) -> dict[str, PerformanceRecord]:
    """
    Fold a session's results into updated records.

    Each question is updated independently; if a question appears more than
    once the later result builds on the earlier one.

    Returns:
        {question_id: updated record} for every scored question
    """
    if now is None:
        now = resolve_now(clock)

    updated: dict[str, PerformanceRecord] = {}
    for result in results:
        if not result.question_id or result.user_answer is None:
            continue
        existing = updated.get(result.question_id, performance.get(result.question_id))
        record = apply_result(existing, result, now=now)
        if record is not None:
            updated[result.question_id] = record
    return updated
