"""
Reference-free scoring.
Used when no reference recording exists: the learner profile is judged on
absolute heuristics only, so confidence is reported lower than for comparisons.
"""

import logging

from .base import FeatureProfile, ScoreAnalysis, ScoreResult, OptionsError
from .comparison import round_half_up
from .config import (
    ScoringOptions, DEFAULT_OPTIONS,
    FALLBACK_CONFIDENCE, FALLBACK_DURATION_BANDS, FALLBACK_DURATION_FLOOR,
    FALLBACK_VOLUME_BANDS, FALLBACK_VOLUME_FLOOR,
    SPEECH_ZCR_RANGE, SPEECH_ZCR_SCORE, NON_SPEECH_ZCR_SCORE
)
from .feedback import threshold_feedback
from .rewards import calculate_xp_reward

logger = logging.getLogger(__name__)


def validate_expected_duration(expected_duration_seconds: float) -> None:
    if expected_duration_seconds is None or not expected_duration_seconds > 0:
        raise OptionsError(
            f"expected_duration_seconds must be positive, got {expected_duration_seconds!r}",
            field="expected_duration_seconds"
        )


def fallback_duration_score(duration_seconds: float, expected_duration_seconds: float) -> int:
    ratio = duration_seconds / expected_duration_seconds
    for low, high, score in FALLBACK_DURATION_BANDS:
        if low <= ratio <= high:
            return score
    return FALLBACK_DURATION_FLOOR


def fallback_volume_score(peak_amplitude: float) -> int:
    for minimum, score in FALLBACK_VOLUME_BANDS:
        if peak_amplitude > minimum:
            return score
    return FALLBACK_VOLUME_FLOOR


def speech_plausibility_score(zero_crossing_rate: float) -> int:
    low, high = SPEECH_ZCR_RANGE
    if low < zero_crossing_rate < high:
        return SPEECH_ZCR_SCORE
    return NON_SPEECH_ZCR_SCORE


def score_profile_fallback(profile: FeatureProfile, expected_duration_seconds: float = 1.5,
                           attempt_number: int = 1,
                           options: ScoringOptions = DEFAULT_OPTIONS) -> ScoreResult:
    """
    Score a single profile without a reference.

    Args:
        profile: Profile of the learner recording
        expected_duration_seconds: Expected length of the utterance
        attempt_number: 1-based attempt number
        options: Scoring options (thresholds)

    Returns:
        ScoreResult with confidence fixed at 50
    """
    validate_expected_duration(expected_duration_seconds)

    duration = fallback_duration_score(profile.duration_seconds, expected_duration_seconds)
    volume = fallback_volume_score(profile.peak_amplitude)
    plausibility = speech_plausibility_score(profile.zero_crossing_rate)

    similarity = max(0, min(100, round_half_up((duration + volume + plausibility) / 3)))
    passed = similarity >= options.passing_threshold
    excellent = similarity >= options.excellent_threshold

    logger.info(
        f"Fallback score {similarity} (duration={duration}, volume={volume}, "
        f"speech={plausibility}), attempt {attempt_number}"
    )
    return ScoreResult(
        similarity=similarity,
        confidence=FALLBACK_CONFIDENCE,
        passed=passed,
        excellent=excellent,
        analysis=ScoreAnalysis(
            duration_score=duration,
            energy_score=volume,
            rhythm_score=plausibility,
        ),
        feedback_key=threshold_feedback(similarity, options),
        xp_reward=calculate_xp_reward(similarity, attempt_number, options),
        metadata={"mode": "fallback", "expected_duration_seconds": expected_duration_seconds},
    )
