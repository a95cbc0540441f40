"""
Tests for performance record updates.
"""

from datetime import datetime, timedelta, timezone

import pytest

from neuralprep.clock import start_of_day
from neuralprep.sm2 import (
    AnswerResult,
    Confidence,
    MasteryLevel,
    PerformanceRecord,
    apply_result,
    apply_results,
    normalize_record,
)

from conftest import NOW


def answer(question_id="q1", correct=True, confidence=Confidence.SURE, flagged=None):
    return AnswerResult(
        question_id=question_id,
        user_answer="A" if correct else "B",
        correct_answer="A",
        is_correct=correct,
        confidence=confidence,
        flagged=flagged,
    )


def skip(question_id="q1", flagged=None):
    return AnswerResult(question_id=question_id, user_answer=None, correct_answer="A", is_correct=False, flagged=flagged)


def test_first_confident_answer_creates_record():
    record = apply_result(None, answer(), now=NOW)

    assert record.times_asked == 1
    assert record.times_correct == 1
    assert record.times_wrong == 0
    assert record.streak == 1
    assert record.repetitions == 1
    assert record.interval_days == 1
    assert record.ease_factor == pytest.approx(2.6)
    assert record.mastery_level == MasteryLevel.PROFICIENT
    assert record.last_asked == NOW
    assert record.next_due == start_of_day(NOW) + timedelta(days=1)
    assert record.last_confidence == Confidence.SURE


def test_three_confident_answers_reach_mastered():
    record = None
    for _ in range(3):
        record = apply_result(record, answer(), now=NOW)

    assert record.times_asked == 3
    assert record.streak == 3
    assert record.repetitions == 3
    assert record.interval_days == 17
    assert record.mastery_level == MasteryLevel.MASTERED
    assert record.next_due == datetime(2026, 3, 27, tzinfo=timezone.utc)


def test_guessed_correct_keeps_streak_and_resets_repetitions():
    existing = PerformanceRecord(
        question_id="q1", times_asked=4, times_correct=4, streak=4,
        repetitions=3, interval_days=15, ease_factor=2.6,
    )
    record = apply_result(existing, answer(confidence=Confidence.GUESSED), now=NOW)

    assert record.streak == 4
    assert record.times_correct == 5
    assert record.repetitions == 0
    assert record.interval_days == 1
    assert record.mastery_level == MasteryLevel.PROFICIENT


def test_guessed_correct_never_promotes_straight_to_mastered():
    existing = PerformanceRecord(question_id="q1", times_asked=9, times_correct=9, streak=5, mastery_level=3)
    record = apply_result(existing, answer(confidence=Confidence.GUESSED), now=NOW)
    assert record.mastery_level == MasteryLevel.PROFICIENT


def test_wrong_answer_resets_streak():
    existing = PerformanceRecord(question_id="q1", times_asked=5, times_correct=5, streak=5, repetitions=4, interval_days=40)
    record = apply_result(existing, answer(correct=False), now=NOW)

    assert record.streak == 0
    assert record.times_wrong == 1
    assert record.repetitions == 0
    assert record.interval_days == 1


def test_skip_returns_existing_record_untouched():
    existing = PerformanceRecord(question_id="q1", times_asked=2, times_correct=1, times_wrong=1)
    assert apply_result(existing, skip(flagged=True), now=NOW) is existing
    assert apply_result(None, skip(), now=NOW) is None


def test_flag_from_session_overrides_stored_flag():
    existing = PerformanceRecord(question_id="q1", times_asked=1, times_correct=1, flagged=True)

    assert apply_result(existing, answer(), now=NOW).flagged is True
    assert apply_result(existing, answer(flagged=False), now=NOW).flagged is False
    assert apply_result(None, answer(flagged=True), now=NOW).flagged is True


def test_corrupt_record_is_normalized_before_update():
    existing = PerformanceRecord(
        question_id="q1", times_asked=-3, times_correct=2, times_wrong=-1,
        ease_factor=0.4, interval_days=900, streak=-2,
    )
    record = apply_result(existing, answer(correct=False), now=NOW)

    assert record.times_asked == 3
    assert record.times_correct == 2
    assert record.times_wrong == 1
    assert record.ease_factor >= 1.3
    assert 1 <= record.interval_days <= 365


def test_normalize_record_makes_naive_timestamps_utc():
    record = normalize_record(PerformanceRecord(question_id="q1", last_asked=datetime(2026, 1, 1, 9, 0), last_confidence="sure"))
    assert record.last_asked.tzinfo is timezone.utc
    assert record.last_confidence == Confidence.SURE


def test_next_due_uses_start_of_update_day():
    late = NOW.replace(hour=23, minute=59)
    record = apply_result(None, answer(), now=late)
    assert record.next_due == datetime(2026, 3, 11, tzinfo=timezone.utc)


def test_apply_results_skips_unanswered_and_chains_repeats():
    performance = {"q2": PerformanceRecord(question_id="q2", times_asked=1, times_wrong=1)}
    results = [
        answer("q1"),
        skip("q2"),
        answer("q3", correct=False),
        answer("q1"),
    ]
    updated = apply_results(performance, results, now=NOW)

    assert set(updated) == {"q1", "q3"}
    assert updated["q1"].times_asked == 2
    assert updated["q1"].repetitions == 2
    assert performance["q2"].times_asked == 1


def test_answer_result_to_dict_accepts_plain_confidence_strings():
    result = answer(confidence="sure")
    assert result.to_dict()["confidence"] == "sure"
    assert answer(confidence=Confidence.UNSURE).to_dict()["confidence"] == "unsure"
    assert answer(confidence=None).to_dict()["confidence"] is None
