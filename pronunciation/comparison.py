"""
Profile comparison: aligns two feature profiles and scores their similarity.
"""

import math
import logging
from typing import Tuple

import numpy as np

from .base import FeatureProfile, ComparisonResult
from .config import (
    ScoringOptions, DEFAULT_OPTIONS,
    DURATION_WEIGHT, ENERGY_WEIGHT, RHYTHM_WEIGHT
)

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive scores (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> float:
    return max(0.0, min(100.0, value))


def resample_envelope(envelope: np.ndarray, target_length: int) -> np.ndarray:
    """
    Linearly resample an envelope to `target_length` points.

    Endpoints are kept; intermediate points interpolate between the two
    neighbouring samples at each fractional position.
    """
    envelope = np.asarray(envelope, dtype=np.float64)
    if len(envelope) == target_length:
        return envelope
    if target_length < 1:
        raise ValueError(f"target_length must be >= 1, got {target_length}")
    positions = np.linspace(0, len(envelope) - 1, target_length)
    return np.interp(positions, np.arange(len(envelope)), envelope)


def align_envelopes(first: np.ndarray, second: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Bring two envelopes to the length of the shorter one."""
    target_length = min(len(first), len(second))
    return resample_envelope(first, target_length), resample_envelope(second, target_length)


def envelope_similarity(first: np.ndarray, second: np.ndarray) -> float:
    """
    Pearson correlation of two envelopes mapped from [-1, 1] to [0, 100].

    Returns 0 when either envelope has zero variance.
    """
    first, second = align_envelopes(first, second)
    centered_first = first - first.mean()
    centered_second = second - second.mean()

    denominator = math.sqrt(float(np.dot(centered_first, centered_first)) *
                            float(np.dot(centered_second, centered_second)))
    if denominator == 0:
        return 0.0

    correlation = float(np.dot(centered_first, centered_second)) / denominator
    return clamp_score((correlation + 1) * 50)


def duration_ratio(user: FeatureProfile, reference: FeatureProfile) -> float:
    if reference.duration_seconds <= 0:
        return 0.0
    return user.duration_seconds / reference.duration_seconds


def duration_score(ratio: float, options: ScoringOptions = DEFAULT_OPTIONS) -> float:
    """Penalty curve on the duration ratio, twice as steep outside the accepted band."""
    deviation = abs(1 - ratio)
    if ratio < options.min_duration_ratio or ratio > options.max_duration_ratio:
        return max(0.0, 100 - deviation * 100)
    return 100 - deviation * 50


def rhythm_score(user: FeatureProfile, reference: FeatureProfile) -> float:
    """Closeness of the zero-crossing rates."""
    zcr_ratio = user.zero_crossing_rate / (reference.zero_crossing_rate or 1)
    return 100 - min(100.0, abs(1 - zcr_ratio) * 100)


def compare_profiles(user: FeatureProfile, reference: FeatureProfile,
                     options: ScoringOptions = DEFAULT_OPTIONS) -> ComparisonResult:
    """
    Compare a learner profile against a reference profile.

    Args:
        user: Profile of the learner recording
        reference: Profile of the reference recording
        options: Scoring options (duration band)

    Returns:
        ComparisonResult with the weighted overall similarity (0-100)
    """
    durations = duration_score(duration_ratio(user, reference), options)
    energy = envelope_similarity(user.envelope, reference.envelope)
    rhythm = rhythm_score(user, reference)

    weighted = (durations * DURATION_WEIGHT +
                energy * ENERGY_WEIGHT +
                rhythm * RHYTHM_WEIGHT)
    similarity = int(clamp_score(round_half_up(weighted)))

    logger.debug(
        f"Comparison: duration={durations:.1f} energy={energy:.1f} "
        f"rhythm={rhythm:.1f} -> similarity={similarity}"
    )
    return ComparisonResult(
        similarity=similarity,
        duration_score=durations,
        energy_score=energy,
        rhythm_score=rhythm,
    )
