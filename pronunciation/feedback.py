"""Feedback classification for scored attempts."""

from .base import FeatureProfile, FeedbackKey
from .comparison import duration_ratio
from .config import (
    ScoringOptions, DEFAULT_OPTIONS,
    ALMOST_THERE_THRESHOLD, QUIET_PEAK_RATIO, SLOW_DOWN_RATIO
)


def classify_feedback(similarity: float, user: FeatureProfile, reference: FeatureProfile,
                      options: ScoringOptions = DEFAULT_OPTIONS) -> FeedbackKey:
    """
    Pick the feedback category for an attempt.

    Rules are checked in order and the first match wins, so a duration
    outside the accepted band is reported before loudness or pacing.

    Args:
        similarity: Overall similarity (0-100)
        user: Profile of the learner recording
        reference: Profile of the reference recording
        options: Scoring options

    Returns:
        FeedbackKey
    """
    ratio = duration_ratio(user, reference)

    if similarity >= options.excellent_threshold:
        return FeedbackKey.EXCELLENT
    if similarity >= options.passing_threshold:
        return FeedbackKey.GOOD
    if similarity >= ALMOST_THERE_THRESHOLD:
        return FeedbackKey.ALMOST_THERE
    if ratio < options.min_duration_ratio:
        return FeedbackKey.TOO_SHORT
    if ratio > options.max_duration_ratio:
        return FeedbackKey.TOO_LONG
    if user.peak_amplitude < reference.peak_amplitude * QUIET_PEAK_RATIO:
        return FeedbackKey.TRY_LOUDER
    if ratio > SLOW_DOWN_RATIO:
        return FeedbackKey.TRY_SLOWER
    return FeedbackKey.NEEDS_WORK


def threshold_feedback(similarity: float, options: ScoringOptions = DEFAULT_OPTIONS) -> FeedbackKey:
    """Feedback from the thresholds alone, for scores without a reference."""
    if similarity >= options.excellent_threshold:
        return FeedbackKey.EXCELLENT
    if similarity >= options.passing_threshold:
        return FeedbackKey.GOOD
    return FeedbackKey.NEEDS_WORK
