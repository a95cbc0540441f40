"""
Quality Mapper

Maps an answer outcome plus self-reported confidence onto the SM-2 0-5
quality scale.

    Wrong              -> 1
    Correct + guessed  -> 2  (below passing, does not advance repetitions)
    Correct + unsure   -> 3
    Correct + sure     -> 5
    Correct + none     -> 4
"""

from __future__ import annotations
from typing import Optional, Union

from neuralprep.sm2.constants import Confidence, Quality, parse_confidence


_CORRECT_QUALITY = {
    Confidence.GUESSED: Quality.GUESSED,
    Confidence.UNSURE: Quality.UNSURE,
    Confidence.SURE: Quality.SURE,
}


def quality_from_result(
    is_correct: bool,
    confidence: Optional[Union[Confidence, str]] = None
) -> int:
    """
    Compute review quality for one answer.

    Args:
        is_correct: Whether the chosen option was correct
        confidence: guessed / unsure / sure, or None if not given

    Returns:
        Quality score in [0, 5]
    """
    if not is_correct:
        return int(Quality.WRONG)

    parsed = parse_confidence(confidence)
    return int(_CORRECT_QUALITY.get(parsed, Quality.NO_CONFIDENCE))
