"""
Types for analytics dashboards.
"""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd


@dataclass(frozen=True)
class DashboardData:
    """
    Precomputed metrics for the question bank in one scope.
    """
    total_questions: int
    seen_questions: int
    overall_accuracy: int  # percent
    due_today: int
    stale: int
    flagged: int
    mastery_distribution: pd.Series  # count per mastery label, Unseen..Mastered
    subject_stats: pd.DataFrame      # subject_id, subject_name, asked, correct, accuracy
