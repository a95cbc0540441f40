"""
Tests for the quality mapper and the SM-2 scheduler.
"""

import pytest

from neuralprep.sm2 import Confidence, compute_sm2, quality_from_result
from neuralprep.sm2.scheduler import round_half_up


@pytest.mark.parametrize("confidence, expected", [
    (Confidence.GUESSED, 2),
    (Confidence.UNSURE, 3),
    (Confidence.SURE, 5),
    (None, 4),
    ("sure", 5),
    ("not-a-rating", 4),
])
def test_quality_for_correct_answers(confidence, expected):
    assert quality_from_result(True, confidence) == expected


@pytest.mark.parametrize("confidence", [None, "guessed", "unsure", "sure"])
def test_quality_for_wrong_answer_ignores_confidence(confidence):
    assert quality_from_result(False, confidence) == 1


@pytest.mark.parametrize("quality, expected_ef", [
    (5, 2.6),
    (4, 2.5),
    (3, 2.36),
    (2, 2.18),
    (1, 1.96),
    (0, 1.7),
])
def test_ease_factor_update(quality, expected_ef):
    assert compute_sm2(quality).ef == pytest.approx(expected_ef)


def test_first_three_successes_follow_1_6_then_multiplied():
    first = compute_sm2(5)
    assert (first.interval, first.repetitions) == (1, 1)

    second = compute_sm2(5, first.ef, first.interval, first.repetitions)
    assert (second.interval, second.repetitions) == (6, 2)

    third = compute_sm2(5, second.ef, second.interval, second.repetitions)
    assert third.repetitions == 3
    assert third.ef == pytest.approx(2.8)
    assert third.interval == 17  # round(6 * 2.8)


@pytest.mark.parametrize("quality", [0, 1, 2])
def test_failure_resets_repetitions_and_interval(quality):
    result = compute_sm2(quality, prev_ef=2.8, prev_interval=40, prev_repetitions=6)
    assert result.repetitions == 0
    assert result.interval == 1


@pytest.mark.parametrize("state", [(2.5, 0, 0), (2.5, 1, 1), (2.5, 6, 2), (2.2, 30, 5)])
def test_sure_never_schedules_sooner_than_unsure(state):
    assert compute_sm2(5, *state).interval >= compute_sm2(3, *state).interval


@pytest.mark.parametrize("prev_ef", [1.3, 1.35, 2.0, 2.5, 3.1])
@pytest.mark.parametrize("quality", range(6))
def test_ease_factor_never_drops_below_floor(prev_ef, quality):
    assert compute_sm2(quality, prev_ef, 10, 3).ef >= 1.3


@pytest.mark.parametrize("quality", range(6))
@pytest.mark.parametrize("prev_interval", [0, 1, 6, 200, 365])
@pytest.mark.parametrize("prev_reps", [0, 1, 2, 8])
def test_interval_always_within_bounds(quality, prev_interval, prev_reps):
    result = compute_sm2(quality, 2.5, prev_interval, prev_reps)
    assert 1 <= result.interval <= 365


def test_long_intervals_are_capped_at_a_year():
    assert compute_sm2(5, 2.5, 300, 5).interval == 365


def test_corrupt_previous_state_is_clamped():
    result = compute_sm2(0, prev_ef=0.5, prev_interval=-4, prev_repetitions=-2)
    assert result.ef == pytest.approx(1.3)
    assert result.interval == 1
    assert result.repetitions == 0

    result = compute_sm2(9, prev_ef=2.5, prev_interval=5000, prev_repetitions=4)
    assert result.ef == pytest.approx(2.6)  # quality clamped to 5
    assert result.interval == 365


def test_round_half_up_differs_from_bankers_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.125, 2) == pytest.approx(0.13)
