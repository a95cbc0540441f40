"""Session builder modules for the practice modes."""

from neuralprep.session_builders.smart_builder import build_smart_session, smart_pool_sizes
from neuralprep.session_builders.review_builders import (
    build_wrong_questions,
    build_due_today,
    build_stale_questions,
)
from neuralprep.session_builders.practice_builders import (
    build_unseen_first,
    build_flagged_only,
    build_random,
)
from neuralprep.session_builders.pool_utils import interleave, shuffle_options
from neuralprep.session_builders.registry import (
    SessionType,
    MODE_SPECS,
    get_mode_spec,
    build_session_questions,
)

__all__ = [
    "build_smart_session",
    "smart_pool_sizes",
    "build_wrong_questions",
    "build_due_today",
    "build_stale_questions",
    "build_unseen_first",
    "build_flagged_only",
    "build_random",
    "interleave",
    "shuffle_options",
    "SessionType",
    "MODE_SPECS",
    "get_mode_spec",
    "build_session_questions",
]
