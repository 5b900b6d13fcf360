"""
Attempt tracking for a single practice item.
Wraps a PronunciationScorer and keeps the attempt counter that the
scoring calls expect from their caller.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from .base import AudioSource, ScoreResult, ScoringError
from .config import OptionsLike, DEFAULT_EXPECTED_DURATION
from .engine import PronunciationScorer

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of the scoring session."""
    IDLE = "idle"
    SCORING = "scoring"
    COMPLETE = "complete"
    ERROR = "error"


class ScoringSession:
    """
    Scores successive attempts at one practice item.
    """

    def __init__(self, scorer: Optional[PronunciationScorer] = None,
                 max_attempts: int = 3,
                 expected_duration_seconds: float = DEFAULT_EXPECTED_DURATION,
                 options: OptionsLike = None,
                 on_complete: Optional[Callable[[ScoreResult], None]] = None,
                 on_error: Optional[Callable[[ScoringError], None]] = None):
        """
        Initialize session.

        Args:
            scorer: Scorer used for every attempt (default PronunciationScorer)
            max_attempts: Attempt counter stops increasing at this value
            expected_duration_seconds: Duration hint used when there is no reference
            options: Option overrides passed to every scoring call
            on_complete: Called with each successful result
            on_error: Called with each scoring error before it is re-raised
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

        self.scorer = scorer or PronunciationScorer()
        self.max_attempts = max_attempts
        self.expected_duration_seconds = expected_duration_seconds
        self.options = options
        self.on_complete = on_complete
        self.on_error = on_error

        self.state = SessionState.IDLE
        self.attempt_number = 1
        self.result: Optional[ScoreResult] = None
        self.error: Optional[ScoringError] = None

    @property
    def is_supported(self) -> bool:
        return self.scorer.is_supported()

    def score_recording(self, user_source: AudioSource,
                        reference_source: Optional[AudioSource] = None) -> ScoreResult:
        """
        Score the current attempt.

        Compares against the reference when one is given, otherwise falls
        back to reference-free scoring.

        Args:
            user_source: Learner recording
            reference_source: Reference pronunciation, if any

        Returns:
            ScoreResult of the attempt

        Raises:
            ScoringError: Scoring failed; the session moves to ERROR
        """
        self.state = SessionState.SCORING
        self.error = None

        try:
            if reference_source is not None:
                result = self.scorer.score(user_source, reference_source,
                                           self.attempt_number, self.options)
            else:
                result = self.scorer.score_fallback(user_source, self.expected_duration_seconds,
                                                    self.attempt_number, self.options)
        except ScoringError as e:
            logger.error(f"Attempt {self.attempt_number} failed: {e.message}")
            self.error = e
            self.state = SessionState.ERROR
            if self.on_error:
                self.on_error(e)
            raise

        self.result = result
        self.state = SessionState.COMPLETE
        if self.on_complete:
            self.on_complete(result)
        return result

    def next_attempt(self) -> None:
        """Clear the last outcome and move on to the next attempt."""
        self._clear()
        self.attempt_number = min(self.attempt_number + 1, self.max_attempts)

    def skip(self) -> None:
        """Abandon the item; the attempt counter starts over."""
        self._clear()
        self.attempt_number = 1

    def _clear(self) -> None:
        self.result = None
        self.error = None
        self.state = SessionState.IDLE
