"""
Session configuration chosen on the setup screen.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional


class TimerType(str, Enum):
    NONE = "none"
    PER_QUESTION = "per_question"  # timer_value seconds, reset on every question change
    FULL_SESSION = "full_session"  # timer_value minutes shared across the session


DEFAULT_PER_QUESTION_SECONDS = 60
DEFAULT_FULL_SESSION_MINUTES = 30


@dataclass(frozen=True)
class SessionConfig:
    """
    Timer and ordering settings for one session.
    """
    timer_type: TimerType = TimerType.NONE
    timer_value: int = 0
    shuffle_questions: bool = False
    shuffle_options: bool = False
    question_count: Optional[int] = None

    def initial_time_remaining(self) -> int:
        """Seconds on the clock when the session (or a question) starts."""
        if self.timer_type == TimerType.PER_QUESTION:
            return self.timer_value
        if self.timer_type == TimerType.FULL_SESSION:
            return self.timer_value * 60
        return 0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["timer_type"] = self.timer_type.value
        return data


def _parse_timer_type(value: object) -> TimerType:
    try:
        return TimerType(getattr(value, "value", value))
    except ValueError:
        return TimerType.NONE


def normalize_session_config(config: object | None) -> SessionConfig:
    """
    Normalize config objects or dicts to the latest SessionConfig schema.

    Unknown timer types fall back to no timer; a timed session without a
    positive timer value gets the default for its timer type.
    """
    if config is None:
        return SessionConfig()

    def _get(name: str, default=None):
        if isinstance(config, dict):
            return config.get(name, default)
        return getattr(config, name, default)

    timer_type = _parse_timer_type(_get("timer_type", TimerType.NONE))
    try:
        timer_value = int(_get("timer_value", 0) or 0)
    except (TypeError, ValueError):
        timer_value = 0

    if timer_type == TimerType.NONE:
        timer_value = 0
    elif timer_value <= 0:
        timer_value = (
            DEFAULT_PER_QUESTION_SECONDS
            if timer_type == TimerType.PER_QUESTION
            else DEFAULT_FULL_SESSION_MINUTES
        )

    question_count = _get("question_count")
    if question_count is not None:
        question_count = max(0, int(question_count))

    return SessionConfig(
        timer_type=timer_type,
        timer_value=timer_value,
        shuffle_questions=bool(_get("shuffle_questions", False)),
        shuffle_options=bool(_get("shuffle_options", False)),
        question_count=question_count,
    )
