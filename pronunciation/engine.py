"""
Scoring engine: ties decoding, feature extraction, comparison, feedback
and rewards together into the public scoring calls.
"""

import time
import logging
from typing import Optional

from .base import (
    AudioDecoder, AudioSource, DecodedAudio, FeatureProfile,
    ScoreAnalysis, ScoreResult, CapabilityError
)
from .comparison import compare_profiles, round_half_up
from .config import (
    OptionsLike, ScoringOptions, resolve_options,
    DEFAULT_EXPECTED_DURATION, REFERENCE_PEAK_FLOOR
)
from .decoding import SoundFileDecoder, decode_pair
from .fallback import score_profile_fallback, validate_expected_duration
from .features import extract_features
from .feedback import classify_feedback
from .rewards import calculate_xp_reward, validate_attempt_number

logger = logging.getLogger(__name__)


def comparison_confidence(user: FeatureProfile, reference: FeatureProfile) -> int:
    """Confidence from how loud the attempt is relative to the reference (0-100)."""
    reference_peak = reference.peak_amplitude or REFERENCE_PEAK_FLOOR
    confidence = round_half_up(user.peak_amplitude / reference_peak * 100)
    return max(0, min(100, confidence))


class PronunciationScorer:
    """
    Stateless scoring service.

    Holds only its decoder and default options; every call builds and
    discards its own buffers and profiles, so one instance may serve
    concurrent calls.
    """

    def __init__(self, decoder: Optional[AudioDecoder] = None, options: OptionsLike = None):
        """
        Initialize scorer.

        Args:
            decoder: Decoding facility (SoundFileDecoder if None)
            options: Default options, merged with per-call overrides
        """
        self.decoder = decoder or SoundFileDecoder()
        self.options = resolve_options(options)

    def is_supported(self) -> bool:
        return self.decoder.is_available()

    def _call_options(self, overrides: OptionsLike) -> ScoringOptions:
        return resolve_options(overrides, base=self.options)

    def _ensure_supported(self) -> None:
        if not self.decoder.is_available():
            raise CapabilityError(f"{type(self.decoder).__name__} has no decoding facility on this platform")

    def score(self, user_source: AudioSource, reference_source: AudioSource,
              attempt_number: int = 1, options: OptionsLike = None) -> ScoreResult:
        """
        Score a learner recording against a reference recording.

        Args:
            user_source: Learner recording (path, URL, bytes or stream)
            reference_source: Reference pronunciation
            attempt_number: 1-based attempt number
            options: Per-call option overrides

        Returns:
            ScoreResult

        Raises:
            DecodeError: Either source could not be decoded
            CapabilityError: No decoding facility
            OptionsError: Malformed options or attempt number
        """
        opts = self._call_options(options)
        validate_attempt_number(attempt_number)
        self._ensure_supported()

        start_time = time.time()
        user_audio, reference_audio = decode_pair(self.decoder, user_source, reference_source)
        logger.debug(f"Decoded both sources in {time.time() - start_time:.3f}s")

        return self.score_decoded(user_audio, reference_audio, attempt_number, opts)

    def score_decoded(self, user_audio: DecodedAudio, reference_audio: DecodedAudio,
                      attempt_number: int = 1, options: OptionsLike = None) -> ScoreResult:
        """
        Score already decoded buffers. Pure; performs no I/O.
        """
        opts = self._call_options(options)
        validate_attempt_number(attempt_number)

        user = extract_features(user_audio, opts.analysis_segments)
        reference = extract_features(reference_audio, opts.analysis_segments)
        comparison = compare_profiles(user, reference, opts)

        similarity = comparison.similarity
        result = ScoreResult(
            similarity=similarity,
            confidence=comparison_confidence(user, reference),
            passed=similarity >= opts.passing_threshold,
            excellent=similarity >= opts.excellent_threshold,
            analysis=ScoreAnalysis(
                duration_score=round_half_up(comparison.duration_score),
                energy_score=round_half_up(comparison.energy_score),
                rhythm_score=round_half_up(comparison.rhythm_score),
            ),
            feedback_key=classify_feedback(similarity, user, reference, opts),
            xp_reward=calculate_xp_reward(similarity, attempt_number, opts),
            metadata={
                "mode": "comparison",
                "user_duration_seconds": user.duration_seconds,
                "reference_duration_seconds": reference.duration_seconds,
            },
        )
        logger.info(
            f"Scored attempt {attempt_number}: similarity={result.similarity} "
            f"feedback={result.feedback_key.value} xp={result.xp_reward}"
        )
        return result

    def score_fallback(self, user_source: AudioSource,
                       expected_duration_seconds: float = DEFAULT_EXPECTED_DURATION,
                       attempt_number: int = 1, options: OptionsLike = None) -> ScoreResult:
        """
        Score a learner recording without a reference.

        Args:
            user_source: Learner recording
            expected_duration_seconds: Expected length of the utterance
            attempt_number: 1-based attempt number
            options: Per-call option overrides

        Returns:
            ScoreResult with reduced confidence
        """
        opts = self._call_options(options)
        validate_attempt_number(attempt_number)
        validate_expected_duration(expected_duration_seconds)
        self._ensure_supported()

        user_audio = self.decoder.decode(user_source)
        return self.score_decoded_fallback(user_audio, expected_duration_seconds, attempt_number, opts)

    def score_decoded_fallback(self, user_audio: DecodedAudio,
                               expected_duration_seconds: float = DEFAULT_EXPECTED_DURATION,
                               attempt_number: int = 1, options: OptionsLike = None) -> ScoreResult:
        opts = self._call_options(options)
        profile = extract_features(user_audio, opts.analysis_segments)
        return score_profile_fallback(profile, expected_duration_seconds, attempt_number, opts)


def score_pronunciation(user_source: AudioSource, reference_source: AudioSource,
                        attempt_number: int = 1, options: OptionsLike = None,
                        decoder: Optional[AudioDecoder] = None) -> ScoreResult:
    """Compare a learner recording with a reference recording."""
    return PronunciationScorer(decoder).score(user_source, reference_source, attempt_number, options)


def score_pronunciation_fallback(user_source: AudioSource,
                                 expected_duration_seconds: float = DEFAULT_EXPECTED_DURATION,
                                 attempt_number: int = 1, options: OptionsLike = None,
                                 decoder: Optional[AudioDecoder] = None) -> ScoreResult:
    """Score a learner recording when no reference recording exists."""
    return PronunciationScorer(decoder).score_fallback(
        user_source, expected_duration_seconds, attempt_number, options
    )
