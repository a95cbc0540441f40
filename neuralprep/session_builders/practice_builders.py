"""
Practice Session Builders - coverage, bookmarks and random mix

- Unseen First: never-answered questions (shuffled), then the least-asked
- Flagged: questions the user bookmarked
- Random: a uniformly shuffled slice of the pool
"""

from __future__ import annotations
import random
from typing import Optional, Sequence

from neuralprep.schemas import Question
from neuralprep.session_builders.pool_utils import (
    PerformanceMap,
    shuffled,
    truncate,
)
from neuralprep.sm2.performance_state import is_unseen


def build_unseen_first(
    questions: Sequence[Question],
    performance: PerformanceMap,
    count: Optional[int] = None,
    rng: Optional[random.Random] = None
) -> list[Question]:
    """
    Unseen questions in random order, followed by seen questions by ascending times asked.
    """
    unseen = [q for q in questions if is_unseen(performance.get(q.id))]
    seen = [q for q in questions if not is_unseen(performance.get(q.id))]
    seen.sort(key=lambda q: performance[q.id].times_asked)

    return truncate(shuffled(unseen, rng) + seen, count)


def build_flagged_only(
    questions: Sequence[Question],
    performance: PerformanceMap
) -> list[Question]:
    """
    Bookmarked questions, in pool order.
    """
    return [
        q for q in questions
        if q.id in performance and performance[q.id].flagged
    ]


def build_random(
    questions: Sequence[Question],
    count: Optional[int] = None,
    rng: Optional[random.Random] = None
) -> list[Question]:
    return truncate(shuffled(questions, rng), count)
