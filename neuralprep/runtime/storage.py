"""
Storage contracts consumed by the session runtime, and the production store.

Any backing implementation must satisfy ReviewStore; the runtime never
talks to a database directly.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol

from pymongo.collection import Collection

from neuralprep import question_repo
from neuralprep.schemas import Question, QuestionScope
from neuralprep.sm2.database import StudyDatabase
from neuralprep.sm2.performance_state import PerformanceRecord


class ReviewStore(Protocol):
    def load_question_pool(self, scope: Optional[QuestionScope]) -> list[Question]:
        ...

    def load_performance_map(self, user_id: str) -> dict[str, PerformanceRecord]:
        ...

    def upsert_performance_records(self, user_id: str, records: Iterable[PerformanceRecord]) -> None:
        """All-or-nothing batch write; raises PersistenceFailure."""
        ...

    def create_session(
        self,
        user_id: str,
        session_type: str,
        question_ids: list[str],
        scope: Optional[dict] = None,
        config: Optional[dict] = None,
        started_at: Optional[datetime] = None
    ) -> str:
        """Store a new in-progress session and return its id."""
        ...

    def persist_session_checkpoint(self, session_id: str, partial: dict) -> None:
        ...

    def finalize_session(self, session_id: str, summary: dict) -> None:
        ...

    def abandon_session(self, session_id: str) -> None:
        ...


class StudyStore:
    """
    ReviewStore backed by MongoDB questions and the SQL study database.
    """

    def __init__(self, database: StudyDatabase, questions: Optional[Collection] = None):
        self.database = database
        self.questions = questions

    def load_question_pool(self, scope: Optional[QuestionScope]) -> list[Question]:
        return question_repo.load_question_pool(scope, collection=self.questions)

    def load_performance_map(self, user_id: str) -> dict[str, PerformanceRecord]:
        return self.database.load_performance_map(user_id)

    def upsert_performance_records(self, user_id: str, records: Iterable[PerformanceRecord]) -> None:
        self.database.upsert_performance_records(user_id, records)

    def create_session(
        self,
        user_id: str,
        session_type: str,
        question_ids: list[str],
        scope: Optional[dict] = None,
        config: Optional[dict] = None,
        started_at: Optional[datetime] = None
    ) -> str:
        return self.database.create_session(
            user_id, session_type, question_ids,
            scope=scope, config=config, started_at=started_at,
        )

    def persist_session_checkpoint(self, session_id: str, partial: dict) -> None:
        self.database.persist_session_checkpoint(session_id, partial)

    def finalize_session(self, session_id: str, summary: dict) -> None:
        self.database.finalize_session(session_id, summary)

    def abandon_session(self, session_id: str) -> None:
        self.database.abandon_session(session_id)
