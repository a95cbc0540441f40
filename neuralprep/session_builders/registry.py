"""
Session mode registry.

Maps each selectable practice mode to its label and builder, and gives the
runtime a single entry point for building a session's question order.
"""

from __future__ import annotations
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence, Union

from neuralprep.clock import Clock
from neuralprep.schemas import Question
from neuralprep.session_builders.pool_utils import PerformanceMap, truncate
from neuralprep.session_builders.practice_builders import (
    build_flagged_only,
    build_random,
    build_unseen_first,
)
from neuralprep.session_builders.review_builders import (
    build_due_today,
    build_wrong_questions,
)
from neuralprep.session_builders.smart_builder import build_smart_session


class SessionType(str, Enum):
    """Selectable practice modes."""
    SMART = "smart"
    WRONG = "wrong"
    DUE_TODAY = "due_today"
    UNSEEN = "unseen"
    FLAGGED = "flagged"
    RANDOM = "random"


# Builder signature: (questions, performance, count, rng, clock) -> ordered questions
Builder = Callable[
    [Sequence[Question], PerformanceMap, Optional[int], random.Random, Optional[Clock]],
    list[Question],
]


@dataclass(frozen=True)
class ModeSpec:
    """
    Mode configuration and builder.
    """
    session_type: SessionType
    label: str
    description: str
    build: Builder
    honors_count: bool  # False: builder returns its full set and the registry truncates


MODE_SPECS: dict[SessionType, ModeSpec] = {
    SessionType.SMART: ModeSpec(
        SessionType.SMART,
        "Smart Mode",
        "70% important questions, spread through the session",
        lambda qs, perf, count, rng, clock: build_smart_session(qs, perf, count, rng),
        True,
    ),
    SessionType.WRONG: ModeSpec(
        SessionType.WRONG,
        "Wrong Questions",
        "Previously missed questions, weakest first",
        lambda qs, perf, count, rng, clock: build_wrong_questions(qs, perf),
        False,
    ),
    SessionType.DUE_TODAY: ModeSpec(
        SessionType.DUE_TODAY,
        "Due Today",
        "Spaced-repetition reviews due today, most overdue first",
        lambda qs, perf, count, rng, clock: build_due_today(qs, perf, clock),
        False,
    ),
    SessionType.UNSEEN: ModeSpec(
        SessionType.UNSEEN,
        "Unseen First",
        "Never-attempted questions first, then the least practiced",
        lambda qs, perf, count, rng, clock: build_unseen_first(qs, perf, count, rng),
        True,
    ),
    SessionType.FLAGGED: ModeSpec(
        SessionType.FLAGGED,
        "Flagged Only",
        "Bookmarked questions",
        lambda qs, perf, count, rng, clock: build_flagged_only(qs, perf),
        False,
    ),
    SessionType.RANDOM: ModeSpec(
        SessionType.RANDOM,
        "Random",
        "A random mix from the selected scope",
        lambda qs, perf, count, rng, clock: build_random(qs, count, rng),
        True,
    ),
}


def get_mode_spec(session_type: Union[SessionType, str]) -> ModeSpec:
    try:
        return MODE_SPECS[SessionType(session_type)]
    except ValueError:
        raise ValueError(f"Unknown session type: {session_type}") from None


def build_session_questions(
    session_type: Union[SessionType, str],
    questions: Sequence[Question],
    performance: PerformanceMap,
    count: Optional[int] = None,
    rng: Optional[random.Random] = None,
    clock: Optional[Clock] = None
) -> list[Question]:
    """
    Build the ordered question list for a session of the given mode.

    An empty result is a normal outcome ("nothing to practice").
    """
    spec = get_mode_spec(session_type)
    selection = spec.build(questions, performance, count, rng, clock)
    if not spec.honors_count:
        selection = truncate(selection, count)
    return selection
