"""
Session state types used by the session runtime.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from neuralprep.errors import PersistenceFailure
from neuralprep.runtime.session_requests import SessionConfig
from neuralprep.schemas import Question
from neuralprep.session_builders.registry import SessionType
from neuralprep.sm2.performance_state import AnswerResult, PerformanceRecord


class SessionStatus(str, Enum):
    CONFIGURING = "configuring"
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


ACTIVE_STATUSES = (SessionStatus.IN_PROGRESS, SessionStatus.PAUSED)


@dataclass
class SessionState:
    """
    In-memory state of one practice session.

    Running totals are derived from answers so they can never drift from
    the recorded results.
    """
    session_id: str
    session_type: SessionType
    config: SessionConfig
    questions: list[Question]
    scope: Optional[dict] = None
    status: SessionStatus = SessionStatus.IN_PROGRESS
    current_index: int = 0
    answers: dict[str, AnswerResult] = field(default_factory=dict)
    option_orders: dict[str, list[str]] = field(default_factory=dict)

    # Timer
    timer_active: bool = False
    time_remaining: int = 0  # seconds
    paused: bool = False

    question_started_at: Optional[datetime] = None
    session_started_at: Optional[datetime] = None

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    @property
    def answered(self) -> int:
        return sum(1 for r in self.answers.values() if r.user_answer is not None)

    @property
    def correct(self) -> int:
        return sum(1 for r in self.answers.values() if r.user_answer is not None and r.is_correct)

    @property
    def wrong(self) -> int:
        return self.answered - self.correct

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.answers.values() if r.is_skip)

    @property
    def time_expired(self) -> bool:
        return self.timer_active and self.time_remaining <= 0

    def is_unanswered(self, question_id: str) -> bool:
        """True if the question has neither an answer nor a skip recorded."""
        result = self.answers.get(question_id)
        return result is None or result.placeholder

    def progress(self) -> dict:
        """Partial-progress snapshot for checkpoints."""
        return {
            "answered": self.answered,
            "correct": self.correct,
            "wrong": self.wrong,
            "skipped": self.skipped,
            "question_results": [r.to_dict() for r in self.answers.values() if not r.placeholder],
        }


def compute_score(correct: int, answered: int) -> int:
    """Percentage of answered questions that were correct, rounded half up."""
    if answered <= 0:
        return 0
    return int(correct * 100 / answered + 0.5)


@dataclass
class SessionSummary:
    """
    Outcome of end_session.

    ledger_error / finalize_error are set when the corresponding write failed;
    pending_records holds the computed ledger updates that still need saving.
    """
    session_id: str
    answered: int
    correct: int
    wrong: int
    skipped: int
    score: int
    results: list[AnswerResult]
    updated_records: list[PerformanceRecord] = field(default_factory=list)
    pending_records: list[PerformanceRecord] = field(default_factory=list)
    ledger_error: Optional[PersistenceFailure] = None
    finalize_error: Optional[PersistenceFailure] = None

    @property
    def fully_persisted(self) -> bool:
        return self.ledger_error is None and self.finalize_error is None

    def to_dict(self) -> dict:
        return {
            "answered": self.answered,
            "correct": self.correct,
            "wrong": self.wrong,
            "skipped": self.skipped,
            "score": self.score,
            "question_results": [r.to_dict() for r in self.results],
        }
