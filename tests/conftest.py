"""
Pytest fixtures for NeuralPrep tests.
"""

import random
from datetime import datetime, timezone
from typing import Iterable, Optional

import pytest

from neuralprep.clock import FixedClock
from neuralprep.errors import PersistenceFailure
from neuralprep.schemas import Question, QuestionOption
from neuralprep.sm2.database import StudyDatabase
from neuralprep.sm2.performance_state import PerformanceRecord


NOW = datetime(2026, 3, 10, 15, 30, tzinfo=timezone.utc)


def make_question(
    question_id: str,
    important: bool = False,
    correct_option: str = "A",
    subject_id: str = "anatomy",
    chapter_id: str = "ch1",
    subject_name: Optional[str] = None,
) -> Question:
    return Question(
        id=question_id,
        text=f"Question {question_id}?",
        options=[QuestionOption(label=label, text=f"Option {label}") for label in "ABCD"],
        correct_option=correct_option,
        explanation="Because.",
        important=important,
        subject_id=subject_id,
        chapter_id=chapter_id,
        subject_name=subject_name or subject_id.title(),
        chapter_name=chapter_id.upper(),
    )


class FakeStore:
    """
    In-memory ReviewStore with switchable failures.
    """

    def __init__(self):
        self.questions: list[Question] = []
        self.performance: dict[str, dict[str, PerformanceRecord]] = {}
        self.created: list[dict] = []
        self.checkpoints: list[tuple[str, dict]] = []
        self.finalized: list[tuple[str, dict]] = []
        self.abandoned: list[str] = []
        self.upsert_calls = 0
        self.fail_upsert = False
        self.fail_create = False
        self.fail_checkpoint = False
        self.fail_finalize = False

    def load_question_pool(self, scope=None) -> list[Question]:
        return list(self.questions)

    def load_performance_map(self, user_id: str) -> dict[str, PerformanceRecord]:
        return dict(self.performance.get(user_id, {}))

    def upsert_performance_records(self, user_id: str, records: Iterable[PerformanceRecord]) -> None:
        self.upsert_calls += 1
        if self.fail_upsert:
            raise PersistenceFailure("performance store unavailable")
        user_map = self.performance.setdefault(user_id, {})
        for record in records:
            user_map[record.question_id] = record

    def create_session(self, user_id, session_type, question_ids, scope=None, config=None, started_at=None) -> str:
        if self.fail_create:
            raise PersistenceFailure("session store unavailable")
        self.created.append({
            "user_id": user_id,
            "session_type": session_type,
            "question_ids": list(question_ids),
            "config": config,
            "started_at": started_at,
        })
        return f"session-{len(self.created)}"

    def persist_session_checkpoint(self, session_id: str, partial: dict) -> None:
        if self.fail_checkpoint:
            raise PersistenceFailure("checkpoint store unavailable")
        self.checkpoints.append((session_id, partial))

    def finalize_session(self, session_id: str, summary: dict) -> None:
        if self.fail_finalize:
            raise PersistenceFailure("session store unavailable")
        self.finalized.append((session_id, summary))

    def abandon_session(self, session_id: str) -> None:
        self.abandoned.append(session_id)


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def database():
    db = StudyDatabase("sqlite://")
    db.init_db()
    yield db
    db.engine.dispose()
