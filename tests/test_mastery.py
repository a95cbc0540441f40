"""
Tests for mastery classification.
"""

import pytest

from neuralprep.sm2 import Confidence, MasteryLevel, compute_mastery_level, is_near_mastery, mastery_label


def test_never_asked_is_unseen():
    assert compute_mastery_level(0.0, 0, 0) == MasteryLevel.UNSEEN


@pytest.mark.parametrize("accuracy, expected", [
    (0.0, MasteryLevel.STRUGGLING),
    (0.39, MasteryLevel.STRUGGLING),
    (0.4, MasteryLevel.LEARNING),
    (0.69, MasteryLevel.LEARNING),
    (0.7, MasteryLevel.PROFICIENT),
    (0.89, MasteryLevel.PROFICIENT),
])
def test_accuracy_bands(accuracy, expected):
    assert compute_mastery_level(accuracy, 5, 10, Confidence.SURE) == expected


def test_mastered_needs_streak_and_confident_last_answer():
    assert compute_mastery_level(0.95, 3, 20, Confidence.SURE) == MasteryLevel.MASTERED
    assert compute_mastery_level(0.95, 3, 20, None) == MasteryLevel.MASTERED
    assert compute_mastery_level(0.95, 2, 20, Confidence.SURE) == MasteryLevel.PROFICIENT
    assert compute_mastery_level(1.0, 10, 20, Confidence.GUESSED) == MasteryLevel.PROFICIENT


@pytest.mark.parametrize("streak", [0, 3, 6])
@pytest.mark.parametrize("confidence", [None, Confidence.GUESSED, Confidence.UNSURE, Confidence.SURE])
def test_level_never_drops_as_accuracy_rises(streak, confidence):
    accuracies = [i / 20 for i in range(21)]
    levels = [compute_mastery_level(a, streak, 20, confidence) for a in accuracies]
    assert levels == sorted(levels)


def test_near_mastery_marks_the_gated_proficient_case():
    assert is_near_mastery(0.95, 1, 20, Confidence.SURE)
    assert is_near_mastery(1.0, 5, 20, Confidence.GUESSED)
    assert not is_near_mastery(0.95, 3, 20, Confidence.SURE)
    assert not is_near_mastery(0.8, 1, 20, Confidence.SURE)
    assert not is_near_mastery(0.0, 0, 0)


def test_mastery_labels():
    assert mastery_label(0) == "Unseen"
    assert mastery_label(4) == "Mastered"
    assert mastery_label(17) == "Unseen"
