"""
Tests for session builders and the mode registry.
"""

import random
from datetime import timedelta

import pytest

from neuralprep.clock import start_of_day
from neuralprep.session_builders import (
    SessionType,
    build_due_today,
    build_flagged_only,
    build_random,
    build_session_questions,
    build_smart_session,
    build_stale_questions,
    build_unseen_first,
    build_wrong_questions,
    get_mode_spec,
    interleave,
    shuffle_options,
    smart_pool_sizes,
)
from neuralprep.sm2 import PerformanceRecord, days_since_last_asked, is_stale_question

from conftest import NOW, make_question


def ids(questions):
    return [q.id for q in questions]


def pool(important, normal):
    return (
        [make_question(f"imp{i}", important=True) for i in range(important)]
        + [make_question(f"norm{i}") for i in range(normal)]
    )


# ---- Smart ----

def test_smart_session_takes_seventy_percent_important(rng):
    session = build_smart_session(pool(10, 10), count=10, rng=rng)

    assert len(session) == 10
    assert len(set(ids(session))) == 10
    assert sum(q.important for q in session) == 7


def test_smart_session_tops_up_with_normal_questions(rng):
    session = build_smart_session(pool(2, 10), count=10, rng=rng)
    assert sum(q.important for q in session) == 2
    assert len(session) == 10


def test_smart_session_tops_up_with_important_questions(rng):
    session = build_smart_session(pool(10, 1), count=10, rng=rng)
    assert sum(q.important for q in session) == 9
    assert len(session) == 10


def test_smart_session_never_exceeds_pool(rng):
    session = build_smart_session(pool(2, 3), count=20, rng=rng)
    assert sorted(ids(session)) == sorted(ids(pool(2, 3)))


def test_smart_session_defaults_to_whole_pool(rng):
    assert len(build_smart_session(pool(4, 4), rng=rng)) == 8


def test_smart_session_empty_pool(rng):
    assert build_smart_session([], count=10, rng=rng) == []


def test_smart_session_is_reproducible_under_seed():
    questions = pool(10, 10)
    first = build_smart_session(questions, count=10, rng=random.Random(7))
    second = build_smart_session(questions, count=10, rng=random.Random(7))
    assert ids(first) == ids(second)


@pytest.mark.parametrize("available, count, expected", [
    ((10, 10), 10, (7, 3)),
    ((10, 10), 1, (1, 0)),
    ((0, 10), 5, (0, 5)),
    ((3, 0), 5, (3, 0)),
    ((10, 10), 0, (0, 0)),
])
def test_smart_pool_sizes(available, count, expected):
    assert smart_pool_sizes(*available, count) == expected


def test_interleave_keeps_relative_order(rng):
    merged = interleave([1, 2, 3], ["a", "b", "c", "d"], rng)

    assert sorted(merged, key=str) == sorted([1, 2, 3, "a", "b", "c", "d"], key=str)
    assert [x for x in merged if isinstance(x, int)] == [1, 2, 3]
    assert [x for x in merged if isinstance(x, str)] == ["a", "b", "c", "d"]


# ---- Wrong ----

def test_wrong_questions_weakest_first_and_excludes_mastered():
    questions = [make_question(q) for q in ("q1", "q2", "q3", "q4", "q5")]
    performance = {
        "q1": PerformanceRecord("q1", times_asked=3, times_correct=2, times_wrong=1, mastery_level=2),
        "q2": PerformanceRecord("q2", times_asked=3, times_wrong=3, mastery_level=1),
        "q3": PerformanceRecord("q3", times_asked=20, times_correct=19, times_wrong=1, mastery_level=4),
        "q4": PerformanceRecord("q4", times_asked=2, times_correct=2, mastery_level=3),
        "q5": PerformanceRecord("q5", times_asked=3, times_correct=2, times_wrong=1, mastery_level=2),
    }

    assert ids(build_wrong_questions(questions, performance)) == ["q2", "q1", "q5"]


# ---- Due today ----

def test_due_today_orders_most_overdue_first(clock):
    today = start_of_day(NOW)
    questions = [make_question(q) for q in ("today", "two_days", "yesterday", "tonight", "tomorrow", "never")]
    performance = {
        "today": PerformanceRecord("today", times_asked=1, next_due=today),
        "two_days": PerformanceRecord("two_days", times_asked=1, next_due=today - timedelta(days=2)),
        "yesterday": PerformanceRecord("yesterday", times_asked=1, next_due=today - timedelta(days=1)),
        "tonight": PerformanceRecord("tonight", times_asked=1, next_due=today + timedelta(hours=20)),
        "tomorrow": PerformanceRecord("tomorrow", times_asked=1, next_due=today + timedelta(days=1)),
        "never": PerformanceRecord("never", times_asked=1),
    }

    assert ids(build_due_today(questions, performance, clock)) == ["two_days", "yesterday", "today", "tonight"]


# ---- Unseen first ----

def test_unseen_first_puts_unseen_before_least_asked(rng):
    questions = [make_question(q) for q in ("a", "b", "c", "d", "e")]
    performance = {
        "b": PerformanceRecord("b", times_asked=5),
        "d": PerformanceRecord("d", times_asked=1),
        "e": PerformanceRecord("e", times_asked=0),
    }

    session = ids(build_unseen_first(questions, performance, rng=rng))

    assert set(session[:3]) == {"a", "c", "e"}
    assert session[3:] == ["d", "b"]


def test_unseen_first_truncates(rng):
    questions = [make_question(q) for q in ("a", "b", "c")]
    assert len(build_unseen_first(questions, {}, count=2, rng=rng)) == 2


# ---- Flagged / Random ----

def test_flagged_only_keeps_pool_order():
    questions = [make_question(q) for q in ("a", "b", "c")]
    performance = {
        "c": PerformanceRecord("c", times_asked=1, flagged=True),
        "a": PerformanceRecord("a", times_asked=1, flagged=True),
        "b": PerformanceRecord("b", times_asked=1),
    }
    assert ids(build_flagged_only(questions, performance)) == ["a", "c"]


def test_random_is_a_truncated_permutation(rng):
    questions = [make_question(f"q{i}") for i in range(10)]
    session = build_random(questions, count=4, rng=rng)

    assert len(session) == 4
    assert set(ids(session)) <= set(ids(questions))
    assert len(build_random(questions, rng=rng)) == 10


# ---- Stale ----

def test_stale_questions_stalest_first(clock):
    questions = [make_question(q) for q in ("recent", "month", "older", "exact", "never")]
    performance = {
        "recent": PerformanceRecord("recent", times_asked=1, last_asked=NOW - timedelta(days=10)),
        "month": PerformanceRecord("month", times_asked=1, last_asked=NOW - timedelta(days=31)),
        "older": PerformanceRecord("older", times_asked=1, last_asked=NOW - timedelta(days=45)),
        "exact": PerformanceRecord("exact", times_asked=1, last_asked=NOW - timedelta(days=30)),
        "never": PerformanceRecord("never"),
    }

    assert ids(build_stale_questions(questions, performance, clock=clock)) == ["older", "month", "exact"]


def test_stale_helpers(clock):
    assert days_since_last_asked(None, clock) is None
    assert days_since_last_asked(NOW - timedelta(days=3, hours=5), clock) == 3

    assert not is_stale_question(None, clock=clock)
    assert not is_stale_question(NOW - timedelta(days=29, hours=23), clock=clock)
    assert is_stale_question(NOW - timedelta(days=30), clock=clock)
    assert is_stale_question(NOW - timedelta(days=8), threshold_days=7, clock=clock)


# ---- Registry ----

def test_registry_truncates_modes_that_return_full_sets(clock):
    questions = [make_question(f"q{i}") for i in range(5)]
    performance = {
        q.id: PerformanceRecord(q.id, times_asked=2, times_wrong=2, mastery_level=1) for q in questions
    }

    session = build_session_questions("wrong", questions, performance, count=3, clock=clock)
    assert ids(session) == ["q0", "q1", "q2"]


def test_registry_empty_result_is_not_an_error(rng):
    assert build_session_questions(SessionType.FLAGGED, [make_question("a")], {}, rng=rng) == []


def test_unknown_session_type():
    with pytest.raises(ValueError):
        get_mode_spec("cram")


def test_shuffle_options_returns_presented_labels(rng):
    options = make_question("q1").options
    shuffled_options, labels = shuffle_options(options, rng)

    assert labels == [option.label for option in shuffled_options]
    assert sorted(labels) == ["A", "B", "C", "D"]
