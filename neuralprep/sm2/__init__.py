"""
SM-2 - adaptive review core

Main API for per-question performance tracking:
- Quality mapping from answer outcome + confidence
- SM-2 scheduling (ease factor, interval, repetitions)
- Mastery classification (Unseen .. Mastered)
- Ledger updates turning answer results into new performance records

Quick start:
    from neuralprep import sm2

    record = sm2.apply_result(existing, result, now=clock.now())
    updated = sm2.apply_results(performance_map, session_results)
"""

# Core algorithm API (no database calls)
from neuralprep.sm2.quality import quality_from_result
from neuralprep.sm2.scheduler import Sm2Result, compute_sm2
from neuralprep.sm2.mastery import compute_mastery_level, is_near_mastery, mastery_label
from neuralprep.sm2.ledger import apply_result, apply_results

# State types
from neuralprep.sm2.performance_state import (
    AnswerResult,
    PerformanceRecord,
    days_since_last_asked,
    is_stale_question,
    is_unseen,
    new_performance_record,
    normalize_record,
)

# Constants and parameters
from neuralprep.sm2.constants import (
    Confidence,
    Quality,
    MasteryLevel,
    MASTERY_LABELS,
    DEFAULT_EASE_FACTOR,
    MIN_EASE_FACTOR,
    MAX_INTERVAL_DAYS,
    STALE_DAYS_THRESHOLD,
)


__all__ = [
    # Core algorithm
    "quality_from_result",
    "compute_sm2",
    "Sm2Result",
    "compute_mastery_level",
    "is_near_mastery",
    "mastery_label",
    "apply_result",
    "apply_results",

    # State
    "AnswerResult",
    "PerformanceRecord",
    "new_performance_record",
    "normalize_record",
    "is_unseen",
    "is_stale_question",
    "days_since_last_asked",

    # Enums
    "Confidence",
    "Quality",
    "MasteryLevel",

    # Parameters
    "MASTERY_LABELS",
    "DEFAULT_EASE_FACTOR",
    "MIN_EASE_FACTOR",
    "MAX_INTERVAL_DAYS",
    "STALE_DAYS_THRESHOLD",
]
