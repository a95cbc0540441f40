"""Session runtime: configuration, in-memory state and lifecycle."""

from neuralprep.runtime.session_requests import (
    SessionConfig,
    TimerType,
    normalize_session_config,
)
from neuralprep.runtime.session_types import (
    SessionState,
    SessionStatus,
    SessionSummary,
    compute_score,
)
from neuralprep.runtime.storage import ReviewStore, StudyStore
from neuralprep.runtime.session_controller import SessionRuntime

__all__ = [
    "SessionConfig",
    "TimerType",
    "normalize_session_config",
    "SessionState",
    "SessionStatus",
    "SessionSummary",
    "compute_score",
    "ReviewStore",
    "StudyStore",
    "SessionRuntime",
]
