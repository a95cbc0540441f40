"""
Review Session Builders - performance-driven pools

Builders that select from the performance map (no randomness):
- Wrong: missed at least once and not yet mastered, weakest first
- Due Today: next_due on or before the end of today, most overdue first
- Stale: not asked within the stale threshold, stalest first

These return the full filtered set; callers truncate downstream. Sorting is
stable, so ties keep the pool's original order.
"""

from __future__ import annotations
from typing import Optional, Sequence

from neuralprep.clock import Clock, end_of_day, ensure_aware, resolve_now
from neuralprep.schemas import Question
from neuralprep.session_builders.pool_utils import PerformanceMap
from neuralprep.sm2.constants import MasteryLevel, STALE_DAYS_THRESHOLD
from neuralprep.sm2.performance_state import is_stale_question


def build_wrong_questions(
    questions: Sequence[Question],
    performance: PerformanceMap
) -> list[Question]:
    """
    Questions answered wrong at least once and below Mastered.

    Ordered by weakness score (wrong * 3 - correct), highest first.
    """
    wrong = [
        q for q in questions
        if q.id in performance
        and performance[q.id].times_wrong > 0
        and performance[q.id].mastery_level < MasteryLevel.MASTERED
    ]
    return sorted(wrong, key=lambda q: -performance[q.id].weakness_score)


def build_due_today(
    questions: Sequence[Question],
    performance: PerformanceMap,
    clock: Optional[Clock] = None
) -> list[Question]:
    """
    Questions whose next review falls on or before the end of today.

    Ordered earliest-due first.
    """
    cutoff = end_of_day(resolve_now(clock))

    def _due_at(q: Question):
        return ensure_aware(performance[q.id].next_due)

    due = [
        q for q in questions
        if q.id in performance
        and performance[q.id].next_due is not None
        and _due_at(q) <= cutoff
    ]
    return sorted(due, key=_due_at)


def build_stale_questions(
    questions: Sequence[Question],
    performance: PerformanceMap,
    threshold_days: int = STALE_DAYS_THRESHOLD,
    clock: Optional[Clock] = None
) -> list[Question]:
    """
    Previously asked questions not reviewed for threshold_days or more.

    Used for badges and alerts rather than as a session mode. Ordered
    stalest first.
    """
    def _last_asked(q: Question):
        return ensure_aware(performance[q.id].last_asked)

    stale = [
        q for q in questions
        if q.id in performance
        and is_stale_question(performance[q.id].last_asked, threshold_days, clock)
    ]
    return sorted(stale, key=_last_asked)
