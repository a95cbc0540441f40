"""
Pool utilities for session builders.

These helpers provide shared, minimal primitives for sampling, shuffling
and merging question pools. Randomness always comes from an injectable
random.Random so sessions are reproducible under a seed.
"""

from __future__ import annotations
import random
from typing import Mapping, Optional, Sequence, TypeVar

from neuralprep.schemas import QuestionOption
from neuralprep.sm2.performance_state import PerformanceRecord


T = TypeVar("T")

PerformanceMap = Mapping[str, PerformanceRecord]

_default_rng = random.Random()


def resolve_rng(rng: Optional[random.Random] = None) -> random.Random:
    return rng if rng is not None else _default_rng


def shuffled(items: Sequence[T], rng: Optional[random.Random] = None) -> list[T]:
    """
    Return a shuffled copy of items (the input is left untouched).
    """
    result = list(items)
    resolve_rng(rng).shuffle(result)
    return result


def sample_up_to(items: Sequence[T], count: int, rng: Optional[random.Random] = None) -> list[T]:
    """
    Random sample without replacement, capped at the pool size.
    """
    if count <= 0 or not items:
        return []
    return resolve_rng(rng).sample(list(items), min(count, len(items)))


def truncate(items: list[T], count: Optional[int]) -> list[T]:
    if count is None:
        return items
    return items[:max(0, count)]


def interleave(
    first: Sequence[T],
    second: Sequence[T],
    rng: Optional[random.Random] = None
) -> list[T]:
    """
    Merge two lists so items of first are spread among second.

    At each slot the next item comes from first with probability
    remaining(first) / remaining(total); relative order inside each list is
    preserved.
    """
    rng = resolve_rng(rng)
    merged: list[T] = []
    i = j = 0
    while i < len(first) or j < len(second):
        remaining_first = len(first) - i
        remaining_total = remaining_first + len(second) - j
        if remaining_first and rng.random() < remaining_first / remaining_total:
            merged.append(first[i])
            i += 1
        elif j < len(second):
            merged.append(second[j])
            j += 1
        else:
            merged.append(first[i])
            i += 1
    return merged


def shuffle_options(
    options: Sequence[QuestionOption],
    rng: Optional[random.Random] = None
) -> tuple[list[QuestionOption], list[str]]:
    """
    Shuffle a question's options for presentation.

    Returns:
        (shuffled options, their labels in presentation order)
    """
    order = shuffled(options, rng)
    return order, [option.label for option in order]
