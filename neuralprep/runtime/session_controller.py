"""
Session lifecycle for one practice session.

States: configuring -> in_progress <-> paused -> completed, or
in_progress/paused -> abandoned.

All transitions run synchronously on the caller's event loop; timer ticks
and answers are serialized by the caller, so each handler only needs to
check the current state before acting.
"""

from __future__ import annotations

import logging
import random
import uuid
from datetime import datetime
from typing import Optional, Sequence, Union

from neuralprep.clock import Clock, resolve_now
from neuralprep.errors import PersistenceFailure, SessionStateError
from neuralprep.runtime.session_requests import SessionConfig, TimerType, normalize_session_config
from neuralprep.runtime.session_types import (
    ACTIVE_STATUSES,
    SessionState,
    SessionStatus,
    SessionSummary,
    compute_score,
)
from neuralprep.runtime.storage import ReviewStore
from neuralprep.schemas import Question
from neuralprep.session_builders.pool_utils import resolve_rng, shuffle_options, shuffled
from neuralprep.session_builders.registry import SessionType
from neuralprep.sm2.constants import CHECKPOINT_EVERY, Confidence, parse_confidence
from neuralprep.sm2.ledger import apply_results
from neuralprep.sm2.performance_state import AnswerResult

logger = logging.getLogger(__name__)


class SessionRuntime:
    """
    Drives one session's state and hands its results to the ledger at the end.
    """

    def __init__(
        self,
        store: ReviewStore,
        user_id: str,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None
    ):
        self.store = store
        self.user_id = user_id
        self.clock = clock
        self.rng = resolve_rng(rng)
        self.state: Optional[SessionState] = None

    # ---- Lifecycle ----

    @property
    def status(self) -> SessionStatus:
        if self.state is None:
            return SessionStatus.CONFIGURING
        return self.state.status

    @property
    def current_question(self) -> Optional[Question]:
        if self.state is None:
            return None
        return self.state.current_question

    def init_session(
        self,
        selection: Sequence[Question],
        config: Optional[SessionConfig] = None,
        session_type: Union[SessionType, str] = SessionType.SMART,
        scope: Optional[dict] = None,
        session_id: Optional[str] = None
    ) -> SessionState:
        """
        Start a session over the builder's selection.
        """
        if self.state is not None and self.state.status in ACTIVE_STATUSES:
            raise SessionStateError(f"Session {self.state.session_id} is still {self.state.status.value}")

        config = normalize_session_config(config)
        questions = list(selection)
        if config.shuffle_questions:
            questions = shuffled(questions, self.rng)
        if config.question_count is not None:
            questions = questions[:config.question_count]

        option_orders = {}
        for question in questions:
            if config.shuffle_options:
                _, order = shuffle_options(question.options, self.rng)
            else:
                order = question.option_labels()
            option_orders[question.id] = order

        now = resolve_now(self.clock)
        session_type = SessionType(session_type)
        if session_id is None:
            session_id = self._create_session_record(session_type, questions, scope, config, now)

        self.state = SessionState(
            session_id=session_id,
            session_type=session_type,
            config=config,
            questions=questions,
            scope=scope,
            status=SessionStatus.IN_PROGRESS,
            current_index=0,
            answers={},
            option_orders=option_orders,
            timer_active=config.timer_type != TimerType.NONE,
            time_remaining=config.initial_time_remaining(),
            paused=False,
            question_started_at=now,
            session_started_at=now,
        )
        logger.info(
            "Started %s session %s with %d questions",
            self.state.session_type.value, self.state.session_id, len(questions)
        )
        return self.state

    def pause_session(self) -> None:
        state = self._require_active()
        state.paused = True
        state.status = SessionStatus.PAUSED

    def resume_session(self) -> None:
        state = self._require_active()
        state.paused = False
        state.status = SessionStatus.IN_PROGRESS

    # ---- Answers ----

    def answer_question(
        self,
        question_id: str,
        user_answer: str,
        confidence: Optional[Union[Confidence, str]] = None
    ) -> AnswerResult:
        """
        Record an answer for a question. Does not advance the index.
        """
        state = self._require_active()
        question = self._require_question(question_id)
        answered_before = state.answered

        result = self._build_result(question, user_answer)
        result.confidence = parse_confidence(confidence)
        state.answers[question_id] = result

        answered_after = state.answered
        if answered_after > answered_before and answered_after % CHECKPOINT_EVERY == 0:
            self._checkpoint()
        return result

    def skip_question(self, question_id: str) -> AnswerResult:
        """
        Record a skip. An existing answer is left in place.
        """
        state = self._require_active()
        question = self._require_question(question_id)

        existing = state.answers.get(question_id)
        if existing is not None and not existing.placeholder:
            return existing

        result = self._build_result(question, None)
        state.answers[question_id] = result
        return result

    def set_confidence(self, question_id: str, confidence: Optional[Union[Confidence, str]]) -> AnswerResult:
        """
        Attach confidence to an answer already recorded in this session.
        """
        state = self._require_active()
        result = state.answers.get(question_id)
        if result is None or result.placeholder:
            raise SessionStateError(f"Question {question_id} has not been answered")
        result.confidence = parse_confidence(confidence)
        return result

    def flag_question(self, question_id: str) -> bool:
        """
        Toggle the bookmark on a question, independent of scoring.

        Returns:
            The new flag value
        """
        state = self._require_active()
        question = self._require_question(question_id)

        result = state.answers.get(question_id)
        if result is None:
            result = AnswerResult(
                question_id=question_id,
                user_answer=None,
                correct_answer=question.correct_option,
                is_correct=False,
                time_spent=0,
                attempted_at=resolve_now(self.clock),
                question_text=question.text,
                option_order=list(state.option_orders.get(question_id, [])),
                placeholder=True,
            )
            state.answers[question_id] = result

        result.flagged = not bool(result.flagged)
        return result.flagged

    # ---- Navigation ----

    def next_question(self) -> bool:
        """
        Move to the next question. Returns False on the last question.
        """
        state = self._require_active()
        if state.current_index + 1 >= len(state.questions):
            return False
        self._move_to(state.current_index + 1)
        return True

    def go_to_question(self, index: int) -> None:
        state = self._require_active()
        if not 0 <= index < len(state.questions):
            raise SessionStateError(f"Question index {index} out of range")
        self._move_to(index)

    def tick(self) -> None:
        """
        Advance the timer by one second.

        A per-question timer reaching zero skips the question if it is still
        unanswered and moves on. A full-session timeout only sets
        time_expired; submitting is left to the caller.
        """
        state = self.state
        if state is None or state.status != SessionStatus.IN_PROGRESS:
            return
        if state.paused or not state.timer_active:
            return

        state.time_remaining = max(0, state.time_remaining - 1)
        if state.time_remaining > 0:
            return

        if state.config.timer_type == TimerType.PER_QUESTION:
            question = state.current_question
            if question is not None and state.is_unanswered(question.id):
                self.skip_question(question.id)
            self.next_question()

    # ---- Completion ----

    def end_session(self) -> SessionSummary:
        """
        Complete the session and feed its results to the performance ledger.

        Unanswered questions are skipped first. The session is marked
        completed locally even if persistence fails; failures are logged
        and reported on the summary.
        """
        state = self._require_active()

        for question in state.questions:
            if state.is_unanswered(question.id):
                self.skip_question(question.id)

        state.status = SessionStatus.COMPLETED
        state.paused = False
        state.timer_active = False

        results = [state.answers[q.id] for q in state.questions if q.id in state.answers]
        summary = SessionSummary(
            session_id=state.session_id,
            answered=state.answered,
            correct=state.correct,
            wrong=state.wrong,
            skipped=state.skipped,
            score=compute_score(state.correct, state.answered),
            results=results,
        )

        self._write_ledger(summary)

        try:
            self.store.finalize_session(state.session_id, summary.to_dict())
        except PersistenceFailure as exc:
            logger.error("Finalizing session %s failed: %s", state.session_id, exc)
            summary.finalize_error = exc

        logger.info(
            "Completed session %s: %d/%d correct, score %d",
            state.session_id, summary.correct, summary.answered, summary.score
        )
        return summary

    def retry_ledger(self, summary: SessionSummary) -> SessionSummary:
        """
        Retry writing ledger updates left pending by a failed end_session.
        """
        if not summary.pending_records:
            return summary
        try:
            self.store.upsert_performance_records(self.user_id, summary.pending_records)
        except PersistenceFailure as exc:
            logger.error("Retrying ledger for session %s failed: %s", summary.session_id, exc)
            summary.ledger_error = exc
            return summary

        summary.updated_records = list(summary.pending_records)
        summary.pending_records = []
        summary.ledger_error = None
        return summary

    def abandon_session(self) -> None:
        """
        Quit without finishing. No performance records are written.
        """
        state = self._require_active()
        state.status = SessionStatus.ABANDONED
        state.paused = False
        state.timer_active = False
        try:
            self.store.abandon_session(state.session_id)
        except PersistenceFailure as exc:
            logger.warning("Marking session %s abandoned failed: %s", state.session_id, exc)

    # ---- Helpers ----

    def _require_active(self) -> SessionState:
        if self.state is None:
            raise SessionStateError("No session has been started")
        if self.state.status not in ACTIVE_STATUSES:
            raise SessionStateError(f"Session {self.state.session_id} is {self.state.status.value}")
        return self.state

    def _require_question(self, question_id: str) -> Question:
        for question in self.state.questions:
            if question.id == question_id:
                return question
        raise SessionStateError(f"Question {question_id} is not part of this session")

    def _create_session_record(
        self,
        session_type: SessionType,
        questions: Sequence[Question],
        scope: Optional[dict],
        config: SessionConfig,
        started_at: datetime
    ) -> str:
        """
        Create the stored session row and return its id.

        If the store is unavailable the session still runs under a local id;
        its checkpoints and finalize will then fail and be reported.
        """
        try:
            return self.store.create_session(
                self.user_id,
                session_type.value,
                [q.id for q in questions],
                scope=scope,
                config=config.to_dict(),
                started_at=started_at,
            )
        except PersistenceFailure as exc:
            logger.error("Creating session record for %s failed: %s", self.user_id, exc)
            return str(uuid.uuid4())

    def _build_result(self, question: Question, user_answer: Optional[str]) -> AnswerResult:
        state = self.state
        now = resolve_now(self.clock)
        started = state.question_started_at or now
        existing = state.answers.get(question.id)

        return AnswerResult(
            question_id=question.id,
            user_answer=user_answer,
            correct_answer=question.correct_option,
            is_correct=user_answer is not None and user_answer == question.correct_option,
            time_spent=max(0, int((now - started).total_seconds() + 0.5)),
            confidence=None,
            flagged=existing.flagged if existing is not None else None,
            attempted_at=now,
            question_text=question.text,
            option_order=list(state.option_orders.get(question.id, [])),
        )

    def _move_to(self, index: int) -> None:
        state = self.state
        state.current_index = index
        state.question_started_at = resolve_now(self.clock)
        if state.config.timer_type == TimerType.PER_QUESTION:
            state.time_remaining = state.config.timer_value

    def _checkpoint(self) -> None:
        state = self.state
        try:
            self.store.persist_session_checkpoint(state.session_id, state.progress())
        except Exception as exc:
            logger.warning("Checkpoint save failed for session %s: %s", state.session_id, exc)

    def _write_ledger(self, summary: SessionSummary) -> None:
        updated = []
        try:
            performance = self.store.load_performance_map(self.user_id)
            updated = list(apply_results(performance, summary.results, clock=self.clock).values())
            self.store.upsert_performance_records(self.user_id, updated)
        except PersistenceFailure as exc:
            logger.error("Performance update for session %s failed: %s", summary.session_id, exc)
            summary.ledger_error = exc
            summary.pending_records = updated
            return
        summary.updated_records = updated
