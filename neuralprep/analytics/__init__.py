"""
Analytics package exports.
"""

from neuralprep.analytics.constants import MASTERY_ORDER
from neuralprep.analytics.metrics import find_weak_subjects
from neuralprep.analytics.service import build_dashboard
from neuralprep.analytics.types import DashboardData

__all__ = [
    "MASTERY_ORDER",
    "build_dashboard",
    "find_weak_subjects",
    "DashboardData",
]
