"""
SQLAlchemy ORM Models for the NeuralPrep Database

Defines performance records, practice sessions and saved session templates.
"""

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String, func
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class PerformanceRecord(Base):
    """
    Persistent performance history for one question (user_id + question_id).
    """
    __tablename__ = 'performance'

    user_id = Column(String(255), primary_key=True, nullable=False)
    question_id = Column(String(255), primary_key=True, nullable=False)

    # Counters
    times_asked = Column(Integer, nullable=False, default=0)
    times_correct = Column(Integer, nullable=False, default=0)
    times_wrong = Column(Integer, nullable=False, default=0)
    streak = Column(Integer, nullable=False, default=0)

    # SM-2 state
    ease_factor = Column(Float, nullable=False, default=2.5)
    interval_days = Column(Integer, nullable=False, default=1)
    repetitions = Column(Integer, nullable=False, default=0)

    mastery_level = Column(Integer, nullable=False, default=0)
    flagged = Column(Boolean, nullable=False, default=False)

    last_asked = Column(DateTime(timezone=True), nullable=True)
    next_due = Column(DateTime(timezone=True), nullable=True)
    last_confidence = Column(String(20), nullable=True)  # guessed / unsure / sure

    # Server-assigned write time
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<PerformanceRecord({self.user_id}, {self.question_id}, mastery={self.mastery_level})>"


class PracticeSession(Base):
    """
    One practice session: its selection, running totals and final results.
    """
    __tablename__ = 'practice_sessions'

    id = Column(String(64), primary_key=True)
    user_id = Column(String(255), nullable=False, index=True)

    status = Column(String(20), nullable=False, default="in_progress")  # in_progress / completed / abandoned
    session_type = Column(String(20), nullable=False)
    scope = Column(JSON, nullable=True)
    config = Column(JSON, nullable=True)
    question_ids = Column(JSON, nullable=False, default=list)

    start_time = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    end_time = Column(DateTime(timezone=True), nullable=True)

    total_questions = Column(Integer, nullable=False, default=0)
    answered = Column(Integer, nullable=False, default=0)
    correct = Column(Integer, nullable=False, default=0)
    wrong = Column(Integer, nullable=False, default=0)
    skipped = Column(Integer, nullable=False, default=0)
    score = Column(Integer, nullable=False, default=0)
    question_results = Column(JSON, nullable=False, default=list)

    template_id = Column(String(64), nullable=True)

    def __repr__(self):
        return f"<PracticeSession(id={self.id}, {self.session_type}, status={self.status})>"


class SessionTemplate(Base):
    """
    Saved session configuration a user can relaunch.
    """
    __tablename__ = 'session_templates'

    id = Column(String(64), primary_key=True)
    user_id = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=True)
    config = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<SessionTemplate(id={self.id}, user={self.user_id})>"
