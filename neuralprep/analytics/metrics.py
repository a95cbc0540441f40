"""
Metric computations for analytics dashboards.
"""

from __future__ import annotations

from typing import Mapping, Sequence

import pandas as pd

from neuralprep.analytics.constants import (
    MASTERY_ORDER,
    PERFORMANCE_COLUMNS,
    WEAK_SUBJECT_ACCURACY_BELOW,
    WEAK_SUBJECT_MIN_ASKED,
)
from neuralprep.schemas import Question
from neuralprep.sm2.mastery import mastery_label
from neuralprep.sm2.performance_state import PerformanceRecord


def build_performance_frame(
    questions: Sequence[Question],
    performance: Mapping[str, PerformanceRecord]
) -> pd.DataFrame:
    """
    One row per question in the pool, joined with its performance counters.

    Questions without a record appear with zero counters (Unseen).
    """
    rows = []
    for q in questions:
        record = performance.get(q.id)
        rows.append({
            "question_id": q.id,
            "subject_id": q.subject_id,
            "subject_name": q.subject_name or q.subject_id,
            "chapter_id": q.chapter_id,
            "important": q.important,
            "times_asked": record.times_asked if record else 0,
            "times_correct": record.times_correct if record else 0,
            "times_wrong": record.times_wrong if record else 0,
            "mastery_level": record.mastery_level if record else 0,
            "flagged": record.flagged if record else False,
        })
    return pd.DataFrame(rows, columns=PERFORMANCE_COLUMNS)


def percent(part: float, total: float) -> int:
    if not total:
        return 0
    return int(part * 100 / total + 0.5)


def compute_overall_accuracy(frame: pd.DataFrame) -> int:
    if frame.empty:
        return 0
    return percent(frame["times_correct"].sum(), frame["times_asked"].sum())


def compute_mastery_distribution(frame: pd.DataFrame) -> pd.Series:
    """
    Question count per mastery label, in Unseen..Mastered order.
    """
    if frame.empty:
        return pd.Series(0, index=MASTERY_ORDER, dtype="int64")
    labels = frame["mastery_level"].map(mastery_label)
    return labels.value_counts().reindex(MASTERY_ORDER, fill_value=0).astype("int64")


def compute_subject_stats(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Asked/correct totals and accuracy per subject, most accurate first.

    Subjects with no attempts are left out.
    """
    columns = ["subject_id", "subject_name", "asked", "correct", "accuracy"]
    asked = frame[frame["times_asked"] > 0] if not frame.empty else frame
    if asked.empty:
        return pd.DataFrame(columns=columns)

    stats = asked.groupby(["subject_id", "subject_name"], as_index=False).agg(
        asked=("times_asked", "sum"),
        correct=("times_correct", "sum"),
    )
    stats["accuracy"] = [percent(c, a) for c, a in zip(stats["correct"], stats["asked"])]
    return stats.sort_values("accuracy", ascending=False, kind="stable").reset_index(drop=True)[columns]


def find_weak_subjects(
    subject_stats: pd.DataFrame,
    min_asked: int = WEAK_SUBJECT_MIN_ASKED,
    accuracy_below: int = WEAK_SUBJECT_ACCURACY_BELOW
) -> list[str]:
    """
    Subject ids with enough attempts and low accuracy, weakest first.
    """
    if subject_stats.empty:
        return []
    weak = subject_stats[
        (subject_stats["asked"] >= min_asked)
        & (subject_stats["accuracy"] < accuracy_below)
    ].sort_values("accuracy", kind="stable")
    return weak["subject_id"].tolist()
