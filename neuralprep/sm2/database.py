"""
Database - NeuralPrep Database I/O Operations

Handles all SQL operations for performance records, practice sessions and
session templates. Uses SQLAlchemy ORM (Postgres in production, SQLite in
tests).

This module handles ONLY database I/O.
Algorithm logic is handled by the scheduler and ledger modules.
"""

from __future__ import annotations
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from sqlalchemy import create_engine, func, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from neuralprep import settings
from neuralprep.clock import Clock, ensure_aware, resolve_now
from neuralprep.errors import PersistenceFailure
from neuralprep.sm2.constants import MAX_SESSION_TEMPLATES, RESUME_WINDOW_HOURS
from neuralprep.sm2.models import (
    Base,
    PerformanceRecord as PerformanceModel,
    PracticeSession as PracticeSessionModel,
    SessionTemplate as SessionTemplateModel,
)
from neuralprep.sm2.performance_state import PerformanceRecord, normalize_record

logger = logging.getLogger(__name__)

REQUIRED_TABLES = ("performance", "practice_sessions", "session_templates")

# Fields a checkpoint may overwrite on an in-progress session
CHECKPOINT_FIELDS = ("answered", "correct", "wrong", "skipped", "question_results")
FINAL_FIELDS = CHECKPOINT_FIELDS + ("score",)


def create_engine_for_url(db_url: str) -> Engine:
    """
    Get SQLAlchemy engine for database connection.

    In-memory SQLite shares one connection so every session sees the same
    database; server databases use connection pooling.
    """
    if db_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(db_url, echo=False, **kwargs)

    return create_engine(
        db_url,
        pool_size=5,           # Keep 5 connections open
        max_overflow=10,       # Allow up to 10 extra connections
        pool_pre_ping=True,    # Verify connections before use
        echo=False
    )


def _to_utc(moment: Optional[datetime]) -> Optional[datetime]:
    if moment is None:
        return None
    return ensure_aware(moment).astimezone(timezone.utc)


def _record_from_model(row: PerformanceModel) -> PerformanceRecord:
    return normalize_record(PerformanceRecord(
        question_id=row.question_id,
        times_asked=row.times_asked,
        times_correct=row.times_correct,
        times_wrong=row.times_wrong,
        streak=row.streak,
        ease_factor=row.ease_factor,
        interval_days=row.interval_days,
        repetitions=row.repetitions,
        mastery_level=row.mastery_level,
        flagged=row.flagged,
        last_asked=row.last_asked,
        next_due=row.next_due,
        last_confidence=row.last_confidence,
    ))


def _copy_record_to_model(record: PerformanceRecord, row: PerformanceModel) -> None:
    row.times_asked = record.times_asked
    row.times_correct = record.times_correct
    row.times_wrong = record.times_wrong
    row.streak = record.streak
    row.ease_factor = record.ease_factor
    row.interval_days = record.interval_days
    row.repetitions = record.repetitions
    row.mastery_level = record.mastery_level
    row.flagged = record.flagged
    row.last_asked = _to_utc(record.last_asked)
    row.next_due = _to_utc(record.next_due)
    row.last_confidence = record.last_confidence.value if record.last_confidence else None


def _session_to_dict(row: PracticeSessionModel) -> dict:
    return {
        "id": row.id,
        "user_id": row.user_id,
        "status": row.status,
        "session_type": row.session_type,
        "scope": row.scope,
        "config": row.config,
        "question_ids": list(row.question_ids or []),
        "start_time": ensure_aware(row.start_time),
        "end_time": ensure_aware(row.end_time),
        "total_questions": row.total_questions,
        "answered": row.answered,
        "correct": row.correct,
        "wrong": row.wrong,
        "skipped": row.skipped,
        "score": row.score,
        "question_results": list(row.question_results or []),
        "template_id": row.template_id,
    }


class StudyDatabase:
    """
    SQL persistence for performance records, sessions and templates.
    """

    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None):
        if engine is None:
            engine = create_engine_for_url(database_url or settings.get_database_url())
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    def get_session(self) -> Session:
        """Get a SQLAlchemy session for database operations."""
        return self._session_factory()

    # ---- Schema ----

    def init_db(self) -> None:
        """
        Initialize database schema if tables don't exist.

        Safe to call multiple times - only creates tables if they don't exist.
        """
        inspector = inspect(self.engine)
        existing_tables = set(inspector.get_table_names())

        if not set(REQUIRED_TABLES) <= existing_tables:
            Base.metadata.create_all(self.engine)
            return

        perf_columns = {col["name"] for col in inspector.get_columns("performance")}
        if "user_id" not in perf_columns or "updated_at" not in perf_columns:
            raise RuntimeError(
                "Performance schema is out of date. "
                "Please reset or migrate the database to the current schema."
            )

    def reset_db(self) -> None:
        """
        DANGEROUS: Delete all data and recreate tables.

        Only use this for testing or when you want to start fresh.
        All performance history will be lost!
        """
        Base.metadata.drop_all(self.engine)
        logger.warning("All tables dropped")
        self.init_db()

    # ---- Performance ----

    def load_performance_map(self, user_id: str) -> dict[str, PerformanceRecord]:
        """
        Load every performance record for a user.

        Returns:
            {question_id: PerformanceRecord}
        """
        session = self.get_session()
        try:
            rows = session.query(PerformanceModel).filter(
                PerformanceModel.user_id == user_id
            ).all()
            return {row.question_id: _record_from_model(row) for row in rows}
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Could not load performance for {user_id}") from exc
        finally:
            session.close()

    def upsert_performance_records(self, user_id: str, records: Iterable[PerformanceRecord]) -> None:
        """
        Insert or update performance records in a single transaction.

        Either every record is written or none is.
        """
        records = list(records)
        if not records:
            return

        session = self.get_session()
        try:
            for record in records:
                row = session.get(PerformanceModel, (user_id, record.question_id))
                if row is None:
                    row = PerformanceModel(user_id=user_id, question_id=record.question_id)
                    session.add(row)
                _copy_record_to_model(record, row)
            session.commit()
            logger.info("Upserted %d performance records for %s", len(records), user_id)
        except SQLAlchemyError as exc:
            session.rollback()
            raise PersistenceFailure(
                f"Performance batch of {len(records)} records for {user_id} was not written"
            ) from exc
        finally:
            session.close()

    # ---- Sessions ----

    def create_session(
        self,
        user_id: str,
        session_type: str,
        question_ids: list[str],
        scope: Optional[dict] = None,
        config: Optional[dict] = None,
        template_id: Optional[str] = None,
        started_at: Optional[datetime] = None
    ) -> str:
        """
        Create an in-progress session row.

        Returns:
            New session id
        """
        session_id = str(uuid.uuid4())
        row = PracticeSessionModel(
            id=session_id,
            user_id=user_id,
            status="in_progress",
            session_type=session_type,
            scope=scope,
            config=config,
            question_ids=list(question_ids),
            total_questions=len(question_ids),
            question_results=[],
            template_id=template_id,
        )
        if started_at is not None:
            row.start_time = _to_utc(started_at)

        self._write(lambda session: session.add(row), f"create session for {user_id}")
        return session_id

    def persist_session_checkpoint(self, session_id: str, partial: dict) -> None:
        """
        Save partial progress on an in-progress session.
        """
        def _update(session: Session) -> None:
            row = self._require_session(session, session_id)
            for key in CHECKPOINT_FIELDS:
                if key in partial:
                    setattr(row, key, partial[key])

        self._write(_update, f"checkpoint session {session_id}")

    def finalize_session(self, session_id: str, summary: dict) -> None:
        """
        Store final totals and results, and mark the session completed.
        """
        def _update(session: Session) -> None:
            row = self._require_session(session, session_id)
            for key in FINAL_FIELDS:
                if key in summary:
                    setattr(row, key, summary[key])
            row.status = "completed"
            row.end_time = func.now()

        self._write(_update, f"finalize session {session_id}")

    def abandon_session(self, session_id: str) -> None:
        def _update(session: Session) -> None:
            row = self._require_session(session, session_id)
            row.status = "abandoned"
            row.end_time = func.now()

        self._write(_update, f"abandon session {session_id}")

    def get_session_by_id(self, session_id: str) -> Optional[dict]:
        session = self.get_session()
        try:
            row = session.get(PracticeSessionModel, session_id)
            return _session_to_dict(row) if row is not None else None
        finally:
            session.close()

    def get_in_progress_session(self, user_id: str, clock: Optional[Clock] = None) -> Optional[dict]:
        """
        Most recent in-progress session, if it started within the resume window.

        An older in-progress session is marked abandoned and None is returned.
        """
        session = self.get_session()
        try:
            row = session.query(PracticeSessionModel).filter(
                PracticeSessionModel.user_id == user_id,
                PracticeSessionModel.status == "in_progress"
            ).order_by(PracticeSessionModel.start_time.desc()).first()
            found = _session_to_dict(row) if row is not None else None
        finally:
            session.close()

        if found is None:
            return None

        started = found["start_time"]
        if started is not None and resolve_now(clock) - started > timedelta(hours=RESUME_WINDOW_HOURS):
            logger.info("Abandoning stale in-progress session %s", found["id"])
            self.abandon_session(found["id"])
            return None
        return found

    def get_recent_sessions(self, user_id: str, count: int = 5) -> list[dict]:
        """
        Completed sessions, newest first.
        """
        session = self.get_session()
        try:
            rows = session.query(PracticeSessionModel).filter(
                PracticeSessionModel.user_id == user_id,
                PracticeSessionModel.status == "completed"
            ).order_by(PracticeSessionModel.end_time.desc()).limit(count).all()
            return [_session_to_dict(row) for row in rows]
        finally:
            session.close()

    # ---- Templates ----

    def save_template(self, user_id: str, config: dict, name: Optional[str] = None) -> str:
        template_id = str(uuid.uuid4())
        row = SessionTemplateModel(id=template_id, user_id=user_id, name=name, config=config)
        self._write(lambda session: session.add(row), f"save template for {user_id}")
        return template_id

    def get_templates(self, user_id: str) -> list[dict]:
        """
        Newest saved templates (at most MAX_SESSION_TEMPLATES).
        """
        session = self.get_session()
        try:
            rows = session.query(SessionTemplateModel).filter(
                SessionTemplateModel.user_id == user_id
            ).order_by(SessionTemplateModel.created_at.desc()).limit(MAX_SESSION_TEMPLATES).all()
            return [
                {"id": row.id, "name": row.name, "config": row.config, "created_at": ensure_aware(row.created_at)}
                for row in rows
            ]
        finally:
            session.close()

    def delete_template(self, user_id: str, template_id: str) -> None:
        def _delete(session: Session) -> None:
            session.query(SessionTemplateModel).filter(
                SessionTemplateModel.user_id == user_id,
                SessionTemplateModel.id == template_id
            ).delete()

        self._write(_delete, f"delete template {template_id}")

    # ---- Helpers ----

    @staticmethod
    def _require_session(session: Session, session_id: str) -> PracticeSessionModel:
        row = session.get(PracticeSessionModel, session_id)
        if row is None:
            raise PersistenceFailure(f"Unknown session {session_id}")
        return row

    def _write(self, action, description: str) -> None:
        session = self.get_session()
        try:
            action(session)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise PersistenceFailure(f"Could not {description}") from exc
        except PersistenceFailure:
            session.rollback()
            raise
        finally:
            session.close()
