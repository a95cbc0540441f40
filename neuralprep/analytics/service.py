"""
Service layer to assemble the analytics dashboard for a question scope.
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from neuralprep.analytics.metrics import (
    build_performance_frame,
    compute_mastery_distribution,
    compute_overall_accuracy,
    compute_subject_stats,
)
from neuralprep.analytics.types import DashboardData
from neuralprep.clock import Clock
from neuralprep.schemas import Question
from neuralprep.session_builders import build_due_today, build_stale_questions
from neuralprep.sm2.performance_state import PerformanceRecord


def build_dashboard(
    questions: Sequence[Question],
    performance: Mapping[str, PerformanceRecord],
    clock: Optional[Clock] = None
) -> DashboardData:
    """
    Build all KPI values and series needed by the analytics page.
    """
    frame = build_performance_frame(questions, performance)

    return DashboardData(
        total_questions=len(frame),
        seen_questions=int((frame["times_asked"] > 0).sum()) if not frame.empty else 0,
        overall_accuracy=compute_overall_accuracy(frame),
        due_today=len(build_due_today(questions, performance, clock=clock)),
        stale=len(build_stale_questions(questions, performance, clock=clock)),
        flagged=int(frame["flagged"].sum()) if not frame.empty else 0,
        mastery_distribution=compute_mastery_distribution(frame),
        subject_stats=compute_subject_stats(frame),
    )
