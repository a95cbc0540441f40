"""
Smart Session Builder - Important/Normal Mix

Creates a session weighted toward questions marked important:
1. Important pool: ceil(count * 0.7) questions, sampled at random
2. Normal pool: the remainder
3. Top-up: if either pool runs short, the other fills the gap

The two selections are then interleaved probabilistically so important
questions are spread through the session instead of clustered.
"""

from __future__ import annotations
import math
import random
from typing import Optional, Sequence

from neuralprep.schemas import Question
from neuralprep.session_builders.pool_utils import (
    PerformanceMap,
    interleave,
    resolve_rng,
    sample_up_to,
)
from neuralprep.sm2.constants import SMART_IMPORTANT_RATIO


def smart_pool_sizes(
    important_available: int,
    normal_available: int,
    count: int,
    important_ratio: float = SMART_IMPORTANT_RATIO
) -> tuple[int, int]:
    """
    How many important and normal questions a smart session takes.

    Returns:
        (important_count, normal_count), summing to at most count
    """
    if count <= 0:
        return 0, 0

    important_count = min(math.ceil(count * important_ratio), important_available)
    normal_count = min(count - important_count, normal_available)

    shortfall = count - important_count - normal_count
    if shortfall > 0:
        important_count = min(important_available, important_count + shortfall)

    return important_count, normal_count


def build_smart_session(
    questions: Sequence[Question],
    performance: Optional[PerformanceMap] = None,
    count: Optional[int] = None,
    rng: Optional[random.Random] = None,
    important_ratio: float = SMART_IMPORTANT_RATIO
) -> list[Question]:
    """
    Create a smart session.

    Args:
        questions: Full question pool
        performance: Performance map (unused by this mode, accepted for a uniform signature)
        count: Session size (defaults to the whole pool)
        rng: Random source
        important_ratio: Share of the session drawn from important questions

    Returns:
        Ordered list of distinct questions
    """
    rng = resolve_rng(rng)
    if count is None:
        count = len(questions)

    important = [q for q in questions if q.important]
    normal = [q for q in questions if not q.important]

    important_count, normal_count = smart_pool_sizes(
        len(important), len(normal), count, important_ratio
    )

    chosen_important = sample_up_to(important, important_count, rng)
    chosen_normal = sample_up_to(normal, normal_count, rng)

    return interleave(chosen_important, chosen_normal, rng)
